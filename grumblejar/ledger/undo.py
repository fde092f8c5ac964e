"""
Single-slot, time-boxed undo.

The most recent tap or item deletion can be reversed for a short window.
After that, or once another action takes the slot, it is permanent.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from grumblejar.core.db import LedgerStore
from grumblejar.core.utils import format_points
from grumblejar.ledger import balance, items, log
from grumblejar.ledger.items import Item, ItemKind

logger = logging.getLogger(__name__)

DEFAULT_UNDO_WINDOW = 4.0


@dataclass(frozen=True)
class CreditUndo:
    """Reverses one irritant tap."""

    points: int
    entry_id: Optional[int]

    is_destructive = False

    @property
    def message(self) -> str:
        return f"{format_points(self.points, signed=True)} added"


@dataclass(frozen=True)
class DeletionUndo:
    """Brings back a deleted irritant or reward as a new item."""

    kind: ItemKind
    name: str
    points: int
    sort_order: Optional[int]

    is_destructive = True

    @classmethod
    def from_item(cls, kind: ItemKind, item: Item) -> "DeletionUndo":
        return cls(
            kind=kind,
            name=item.name,
            points=item.value,
            sort_order=item.sort_order,
        )

    @property
    def message(self) -> str:
        return f'Deleted "{self.name}"'


PendingUndo = Union[CreditUndo, DeletionUndo]


def reverse(store: LedgerStore, snapshot: PendingUndo) -> None:
    """
    Execute the reversal a snapshot describes.

    Credit: take the points back from both totals, then drop the log entry
    if it can still be found. Deletion: insert a fresh copy of the item.
    """
    if isinstance(snapshot, CreditUndo):
        balance.reverse_credit(store, snapshot.points)
        log.remove(store, snapshot.entry_id)
    elif isinstance(snapshot, DeletionUndo):
        items.restore_item(
            store,
            snapshot.kind,
            name=snapshot.name,
            points=snapshot.points,
            sort_order=snapshot.sort_order,
        )
    else:
        raise TypeError(f"Unknown undo snapshot: {snapshot!r}")


class UndoController:
    """
    Holds at most one pending undo.

    Arming starts a single-shot timer; re-arming cancels it and replaces
    the snapshot without reversing the old action. The deadline is also
    checked against a monotonic clock, so a late timer thread never extends
    the window.
    """

    def __init__(
        self,
        window: float = DEFAULT_UNDO_WINDOW,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        """
        Initialize undo controller.

        Args:
            window: Seconds an action stays reversible
            clock: Monotonic time source
            timer_factory: Builds the expiry timer (threading.Timer signature)
        """
        self.window = window
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.Lock()

        self._snapshot: Optional[PendingUndo] = None
        self._deadline: Optional[float] = None
        self._timer = None
        self._generation = 0

    def arm(self, snapshot: PendingUndo) -> None:
        """Make snapshot the only reversible action and restart the window."""
        with self._lock:
            self._cancel_timer()
            if self._snapshot is not None:
                logger.debug(f"Discarding pending undo: {self._snapshot.message}")

            self._generation += 1
            self._snapshot = snapshot
            self._deadline = self._clock() + self.window

            timer = self._timer_factory(self.window, self._expire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer

        timer.start()
        logger.debug(f"Armed undo for {self.window:g}s: {snapshot.message}")

    @property
    def pending(self) -> Optional[PendingUndo]:
        """The live snapshot, or None once the window has closed."""
        with self._lock:
            return self._live_snapshot()

    @property
    def is_armed(self) -> bool:
        return self.pending is not None

    def invoke(self, store: LedgerStore) -> Optional[PendingUndo]:
        """
        Reverse the pending action.

        The slot is cleared only once the reversal has been stored, so a
        failed attempt can be retried while the window is still open.

        Returns:
            The snapshot that was reversed, or None if nothing was pending
        """
        with self._lock:
            snapshot = self._live_snapshot()
            generation = self._generation

        if snapshot is None:
            logger.debug("Undo requested with nothing pending")
            return None

        reverse(store, snapshot)

        with self._lock:
            if generation == self._generation:
                self._clear()

        logger.info(f"Undid: {snapshot.message}")
        return snapshot

    def dismiss(self) -> None:
        """Drop the pending action. It becomes permanent."""
        with self._lock:
            self._clear()

    def _expire(self, generation: int) -> None:
        with self._lock:
            # A cancelled timer can still fire; only the current one may clear
            if generation != self._generation:
                return
            expired = self._snapshot
            self._clear()

        if expired is not None:
            logger.debug(f"Undo window closed: {expired.message}")

    def _live_snapshot(self) -> Optional[PendingUndo]:
        if self._snapshot is None:
            return None
        if self._deadline is not None and self._clock() >= self._deadline:
            self._clear()
            return None
        return self._snapshot

    def _clear(self) -> None:
        self._cancel_timer()
        self._generation += 1
        self._snapshot = None
        self._deadline = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
