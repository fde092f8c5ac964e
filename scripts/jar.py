#!/usr/bin/env python3
"""
GrumbleJar command line.

Tap irritants, redeem rewards, manage both lists, and browse history.
The undo window only means something inside `shell`, where the
process lives long enough to use it.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from grumblejar.core.config import Config
from grumblejar.core.db import InitializationError
from grumblejar.core.utils import format_points
from grumblejar.ledger.redemption import can_redeem, reward_progress
from grumblejar.service import PointsJar

app = typer.Typer(help="GrumbleJar - turn irritants into rewards")
console = Console()


def open_jar() -> PointsJar:
    """Load config, open the store, run startup housekeeping."""
    load_dotenv()
    config = Config.from_env()
    config.configure_logging()

    try:
        jar = PointsJar.open(config)
    except InitializationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    jar.startup()
    return jar


def print_status(jar: PointsJar) -> None:
    stats = jar.status()
    console.print(Panel(
        f"[bold]{format_points(stats.current_balance)}[/bold]\n"
        f"[dim]Lifetime: {format_points(stats.lifetime_total)}[/dim]",
        title="Balance",
        expand=False,
    ))


def print_irritants(jar: PointsJar) -> None:
    irritants = jar.irritants()
    if not irritants:
        console.print("[yellow]No irritants yet. Add one with add-irritant.[/yellow]")
        return

    table = Table(title="Irritants")
    table.add_column("#", justify="right")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Points", justify="right")

    for index, irritant in enumerate(irritants):
        table.add_row(str(index), str(irritant.id), irritant.name, format_points(irritant.points, signed=True))

    console.print(table)


def print_rewards(jar: PointsJar) -> None:
    rewards = jar.rewards()
    if not rewards:
        console.print("[yellow]No rewards yet. Add one with add-reward.[/yellow]")
        return

    current = jar.status().current_balance

    table = Table(title="Rewards")
    table.add_column("#", justify="right")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Cost", justify="right")
    table.add_column("Progress", justify="right")

    for index, reward in enumerate(rewards):
        progress = reward_progress(current, reward.required_points)
        style = "green" if can_redeem(current, reward) else ""
        table.add_row(
            str(index),
            str(reward.id),
            reward.name,
            format_points(reward.required_points),
            f"[{style}]{int(progress * 100)}%[/{style}]" if style else f"{int(progress * 100)}%",
        )

    console.print(table)


def print_history(jar: PointsJar) -> None:
    groups = jar.history_by_day()
    if not groups:
        console.print("[dim]No history yet.[/dim]")
        return

    for day, entries in groups:
        console.print(f"\n[bold]{day:%Y-%m-%d}[/bold]")
        for entry in entries:
            color = "magenta" if entry.is_redemption else "cyan"
            console.print(
                f"  [dim]#{entry.id:<5}[/dim] {entry.timestamp:%H:%M}  "
                f"{entry.label:<30} [{color}]{format_points(entry.point_delta, signed=True)}[/{color}]"
            )
    console.print()


def celebrate(name: str) -> None:
    console.print(Panel(
        f"[bold]Well earned![/bold]\n\nYou got \"{name}\".",
        border_style="green",
        expand=False,
    ))


@app.command()
def status():
    """Show current and lifetime points."""
    jar = open_jar()
    print_status(jar)
    jar.close()


@app.command()
def irritants():
    """List irritants in display order."""
    jar = open_jar()
    print_irritants(jar)
    jar.close()


@app.command()
def rewards():
    """List rewards with progress."""
    jar = open_jar()
    print_rewards(jar)
    jar.close()


@app.command("add-irritant")
def add_irritant(
    name: str = typer.Argument(..., help="What annoyed you"),
    points: int = typer.Option(10, "--points", "-p", help="Points per tap (1-999999)"),
):
    """Add an irritant at the end of the list."""
    jar = open_jar()
    irritant = jar.add_irritant(name, points)
    if irritant:
        console.print(f"[green]Added {irritant.name} ({format_points(irritant.points)})[/green]")
    else:
        console.print("[yellow]Nothing added. Name must be non-empty and points 1-999999.[/yellow]")
    jar.close()


@app.command("edit-irritant")
def edit_irritant(
    irritant_id: int = typer.Argument(..., help="Irritant ID"),
    name: str = typer.Option(..., "--name", "-n", help="New name"),
    points: int = typer.Option(..., "--points", "-p", help="New points"),
):
    """Rename an irritant or change its points."""
    jar = open_jar()
    if jar.edit_irritant(irritant_id, name, points):
        console.print(f"[green]Irritant #{irritant_id} updated.[/green]")
    else:
        console.print(f"[yellow]Irritant #{irritant_id} not updated.[/yellow]")
    jar.close()


@app.command("delete-irritant")
def delete_irritant(irritant_id: int = typer.Argument(..., help="Irritant ID")):
    """Delete an irritant."""
    jar = open_jar()
    snapshot = jar.delete_irritant(irritant_id)
    if snapshot:
        console.print(f"[green]{snapshot.message}[/green]")
    else:
        console.print(f"[yellow]Irritant #{irritant_id} not found.[/yellow]")
    jar.close()


@app.command("move-irritant")
def move_irritant(
    from_index: int = typer.Argument(..., help="Current position"),
    to_index: int = typer.Argument(..., help="New position"),
):
    """Move an irritant to a new position."""
    jar = open_jar()
    if jar.move_irritant(from_index, to_index):
        print_irritants(jar)
    else:
        console.print("[yellow]Positions out of range.[/yellow]")
    jar.close()


@app.command("add-reward")
def add_reward(
    name: str = typer.Argument(..., help="What you want to treat yourself to"),
    points: int = typer.Option(100, "--points", "-p", help="Points required (1-999999)"),
):
    """Add a reward at the end of the list."""
    jar = open_jar()
    reward = jar.add_reward(name, points)
    if reward:
        console.print(f"[green]Added {reward.name} ({format_points(reward.required_points)})[/green]")
    else:
        console.print("[yellow]Nothing added. Name must be non-empty and points 1-999999.[/yellow]")
    jar.close()


@app.command("edit-reward")
def edit_reward(
    reward_id: int = typer.Argument(..., help="Reward ID"),
    name: str = typer.Option(..., "--name", "-n", help="New name"),
    points: int = typer.Option(..., "--points", "-p", help="New required points"),
):
    """Rename a reward or change its cost."""
    jar = open_jar()
    if jar.edit_reward(reward_id, name, points):
        console.print(f"[green]Reward #{reward_id} updated.[/green]")
    else:
        console.print(f"[yellow]Reward #{reward_id} not updated.[/yellow]")
    jar.close()


@app.command("delete-reward")
def delete_reward(reward_id: int = typer.Argument(..., help="Reward ID")):
    """Delete a reward."""
    jar = open_jar()
    snapshot = jar.delete_reward(reward_id)
    if snapshot:
        console.print(f"[green]{snapshot.message}[/green]")
    else:
        console.print(f"[yellow]Reward #{reward_id} not found.[/yellow]")
    jar.close()


@app.command("move-reward")
def move_reward(
    from_index: int = typer.Argument(..., help="Current position"),
    to_index: int = typer.Argument(..., help="New position"),
):
    """Move a reward to a new position."""
    jar = open_jar()
    if jar.move_reward(from_index, to_index):
        print_rewards(jar)
    else:
        console.print("[yellow]Positions out of range.[/yellow]")
    jar.close()


@app.command()
def tap(irritant_id: int = typer.Argument(..., help="Irritant ID")):
    """Credit the points of an irritant."""
    jar = open_jar()
    snapshot = jar.tap(irritant_id)
    if snapshot:
        console.print(f"[green]{snapshot.message}[/green]")
        print_status(jar)
    else:
        console.print(f"[yellow]Irritant #{irritant_id} not found.[/yellow]")
    jar.close()


@app.command()
def redeem(
    reward_id: int = typer.Argument(..., help="Reward ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Exchange points for a reward."""
    jar = open_jar()

    if not yes and not Confirm.ask(f"Redeem reward #{reward_id}?", console=console):
        jar.close()
        raise typer.Exit(0)

    entry = jar.redeem(reward_id)
    if entry:
        celebrate(entry.label)
        print_status(jar)
    else:
        console.print("[yellow]Not enough points (or no such reward).[/yellow]")
    jar.close()


@app.command()
def history():
    """Show the transaction log grouped by day."""
    jar = open_jar()
    print_history(jar)
    jar.close()


@app.command()
def reverse(entry_id: int = typer.Argument(..., help="Log entry ID")):
    """Reverse a log entry from history."""
    jar = open_jar()
    stats = jar.reverse(entry_id)
    if stats:
        console.print(f"[green]Entry #{entry_id} reversed.[/green]")
        print_status(jar)
    else:
        console.print(f"[yellow]Entry #{entry_id} not found.[/yellow]")
    jar.close()


SHELL_HELP = """Commands:
  t <#>   tap irritant at position
  r <#>   redeem reward at position
  d <#>   delete irritant at position
  x <#>   delete reward at position
  u       undo last tap or deletion
  l       list irritants and rewards
  h       history
  q       quit"""


@app.command()
def shell():
    """
    Interactive session.

    Taps and deletions can be undone for a few seconds.
    """
    jar = open_jar()
    console.print(SHELL_HELP)
    print_status(jar)
    print_irritants(jar)

    while True:
        pending = jar.pending_undo
        if pending:
            console.print(f"[dim]{pending.message} - 'u' to undo[/dim]")

        raw = Prompt.ask("jar", console=console, default="l").strip()
        command, _, arg = raw.partition(" ")
        command = command.lower()

        if command == "q":
            break

        if command == "u":
            undone = jar.undo()
            if undone:
                console.print(f"[green]Undone: {undone.message}[/green]")
            else:
                console.print("[dim]Nothing to undo.[/dim]")
            print_status(jar)
            continue

        if command == "l":
            print_status(jar)
            print_irritants(jar)
            print_rewards(jar)
            continue

        if command == "h":
            print_history(jar)
            continue

        if command not in ("t", "r", "d", "x") or not arg.strip().isdigit():
            console.print(SHELL_HELP)
            continue

        index = int(arg)
        listing = jar.rewards() if command in ("r", "x") else jar.irritants()
        if index >= len(listing):
            console.print("[yellow]No item at that position.[/yellow]")
            continue

        item = listing[index]
        if command == "t":
            snapshot = jar.tap(item.id)
            if snapshot:
                console.print(f"[green]{snapshot.message}[/green]")
        elif command in ("d", "x"):
            delete = jar.delete_irritant if command == "d" else jar.delete_reward
            snapshot = delete(item.id)
            if snapshot:
                console.print(f"[red]{snapshot.message}[/red]")
        else:
            if Confirm.ask(f"Redeem {item.name} for {format_points(item.required_points)}?", console=console):
                if jar.redeem(item.id):
                    celebrate(item.name)
                else:
                    console.print("[yellow]Not enough points.[/yellow]")

        print_status(jar)

    jar.close()


if __name__ == "__main__":
    app()
