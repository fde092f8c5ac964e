#!/usr/bin/env python3
"""
Interactive setup wizard for GrumbleJar.

Writes a .env file, creates the database and records the first irritant.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import os

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from grumblejar.core.config import Config
from grumblejar.core.db import InitializationError
from grumblejar.service import PointsJar

app = typer.Typer(help="Interactive setup wizard")
console = Console()

POINT_PRESETS = ["5", "10", "30", "50"]


@app.command()
def main(
    db_path: str = typer.Option("", "--db", help="Database file path"),
    timezone: str = typer.Option("", "--timezone", help="Timezone for history days"),
):
    """
    Run interactive setup wizard.

    Prompts for configuration if values not provided via CLI.
    """
    console.print(Panel.fit(
        "[bold cyan]GrumbleJar Setup[/bold cyan]\n\n"
        "Save up the small annoyances of your day\n"
        "and turn them into rewards.\n"
        "Press Ctrl+C at any time to cancel.",
        border_style="cyan"
    ))

    rprint("")

    # Storage
    console.print("[bold yellow]Step 1/2: Storage[/bold yellow]\n")

    if not db_path:
        db_path = Prompt.ask("Database path", default="data/grumblejar.db", console=console)

    if not timezone:
        timezone = Prompt.ask("Timezone", default="UTC", console=console)

    if Confirm.ask("Save configuration to .env file?", console=console, default=True):
        env_path = Path(__file__).parent.parent / ".env"

        env_content = f"""# GrumbleJar Configuration
# Generated by setup wizard

GRUMBLEJAR_DB_PATH={db_path}
TIMEZONE={timezone}
UNDO_WINDOW_SECONDS=4
LOG_LEVEL=WARNING
"""

        env_path.write_text(env_content)
        console.print(f"\n[green]✓ Configuration saved to {env_path}[/green]")

    config = Config(database_path=db_path, timezone=timezone)

    try:
        jar = PointsJar.open(config)
    except InitializationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    # First irritant
    console.print("\n")
    console.print("[bold yellow]Step 2/2: Your first irritant[/bold yellow]\n")
    console.print("What annoyed you lately? Leave empty to skip.\n")

    name = Prompt.ask("Irritant", default="", console=console)
    points = ""
    if name.strip():
        points = Prompt.ask(
            "Points per tap",
            default="10",
            choices=POINT_PRESETS + ["custom"],
            console=console,
        )
        if points == "custom":
            points = Prompt.ask("Points (1-999999)", console=console)

    irritant = jar.complete_onboarding(name, points)
    jar.close()

    if irritant:
        console.print(f"\n[green]✓ Added {irritant.name} (+{irritant.points}pt)[/green]")

    console.print("\n")
    console.print(Panel.fit(
        "[bold green]Setup Complete![/bold green]\n\n"
        "Next steps:\n"
        "1. Add a reward:\n"
        "   [dim]python scripts/jar.py add-reward \"Fancy coffee\" --points 100[/dim]\n\n"
        "2. Start a session:\n"
        "   [dim]python scripts/jar.py shell[/dim]",
        border_style="green"
    ))


@app.command()
def validate():
    """Validate existing configuration."""
    load_dotenv()

    console.print("[bold]Validating Configuration...[/bold]\n")

    config = Config.from_env()
    console.print(config.get_summary())

    if config.timezone_is_valid:
        console.print("Timezone: [green]✓ OK[/green]")
    else:
        console.print(f"Timezone: [red]✗ Unknown: {config.timezone}[/red]")

    db_path = Path(os.getenv("GRUMBLEJAR_DB_PATH", "data/grumblejar.db"))
    if db_path.exists():
        console.print("Database: [green]✓ Exists[/green]")
    else:
        console.print("Database: [yellow]Not initialized[/yellow]")
        console.print("  Run: [dim]python scripts/setup.py main[/dim]")


if __name__ == "__main__":
    app()
