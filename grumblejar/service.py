"""
Points jar service.

The single entry point front ends talk to. Wires the ledger store,
balance, log, item lists and undo slot together, and absorbs store
failures so no call raises to the caller.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from grumblejar.core.config import Config
from grumblejar.core.db import LedgerStore, StoreError
from grumblejar.core.models import Balance, Irritant, LedgerEntry, Reward
from grumblejar.ledger import balance, history, items, log, redemption, retention
from grumblejar.ledger.items import Item, ItemKind
from grumblejar.ledger.undo import CreditUndo, DeletionUndo, PendingUndo, UndoController

logger = logging.getLogger(__name__)

DEFAULT_FIRST_POINTS = 10


class PointsJar:
    """
    Ledger operations for one user's store.

    The store is passed in explicitly; there is no global lookup.
    """

    def __init__(
        self,
        store: LedgerStore,
        config: Optional[Config] = None,
        undo: Optional[UndoController] = None,
    ):
        self.store = store
        self.config = config or Config()
        self.undo_slot = undo or UndoController(window=self.config.undo_window_seconds)

    @classmethod
    def open(cls, config: Config) -> "PointsJar":
        """
        Open the store for config and build the service.

        Raises:
            InitializationError: store cannot be opened (fatal)
        """
        return cls(LedgerStore.open(config), config)

    def startup(self) -> int:
        """
        Once-per-process startup: ensure the balance, prune old log entries.

        Returns:
            Number of log entries pruned
        """
        try:
            balance.ensure_balance(self.store)
        except StoreError as e:
            logger.error(f"Failed to initialize balance: {e}")
        return retention.run_startup_retention(self.store)

    def close(self) -> None:
        self.undo_slot.dismiss()
        self.store.close()

    # Balance

    def status(self) -> Balance:
        """Current balance; zeros if the store cannot be read."""
        try:
            return balance.get_balance(self.store)
        except StoreError as e:
            logger.error(f"Failed to read balance: {e}")
            return Balance(lifetime_total=0, current_balance=0)

    # Item lists

    def irritants(self) -> List[Irritant]:
        return self._list(ItemKind.IRRITANT)

    def rewards(self) -> List[Reward]:
        return self._list(ItemKind.REWARD)

    def add_irritant(self, name: str, points: int) -> Optional[Irritant]:
        return self._create(ItemKind.IRRITANT, name, points)

    def add_reward(self, name: str, required_points: int) -> Optional[Reward]:
        return self._create(ItemKind.REWARD, name, required_points)

    def edit_irritant(self, irritant_id: int, name: str, points: int) -> Optional[Irritant]:
        return self._edit(ItemKind.IRRITANT, irritant_id, name, points)

    def edit_reward(self, reward_id: int, name: str, required_points: int) -> Optional[Reward]:
        return self._edit(ItemKind.REWARD, reward_id, name, required_points)

    def delete_irritant(self, irritant_id: int) -> Optional[DeletionUndo]:
        return self._delete(ItemKind.IRRITANT, irritant_id)

    def delete_reward(self, reward_id: int) -> Optional[DeletionUndo]:
        return self._delete(ItemKind.REWARD, reward_id)

    def move_irritant(self, from_index: int, to_index: int) -> bool:
        return self._move(ItemKind.IRRITANT, from_index, to_index)

    def move_reward(self, from_index: int, to_index: int) -> bool:
        return self._move(ItemKind.REWARD, from_index, to_index)

    # Ledger actions

    def tap(self, irritant_id: int) -> Optional[CreditUndo]:
        """
        Credit the points of one irritant and make the tap undoable.

        Returns:
            The armed undo snapshot, or None if nothing was credited
        """
        try:
            irritant = self.store.get(Irritant, irritant_id)
            if irritant is None or not items.is_valid_points(irritant.points):
                logger.debug(f"Ignoring tap on irritant {irritant_id}")
                return None

            balance.credit(self.store, irritant.points)
        except StoreError as e:
            logger.error(f"Failed to credit irritant {irritant_id}: {e}")
            return None

        entry_id = None
        try:
            entry_id = log.append(self.store, irritant.name, irritant.points).id
        except StoreError as e:
            # Balance already moved; undo can still reverse it without the entry
            logger.error(f"Failed to log tap on {irritant.name!r}: {e}")

        snapshot = CreditUndo(points=irritant.points, entry_id=entry_id)
        self.undo_slot.arm(snapshot)
        return snapshot

    def redeem(self, reward_id: int) -> Optional[LedgerEntry]:
        """
        Exchange points for a reward.

        Returns:
            The redemption entry, or None if blocked or failed
        """
        try:
            reward = self.store.get(Reward, reward_id)
            if reward is None:
                return None
            return redemption.redeem(self.store, reward)
        except StoreError as e:
            logger.error(f"Failed to redeem reward {reward_id}: {e}")
            return None

    @property
    def pending_undo(self) -> Optional[PendingUndo]:
        return self.undo_slot.pending

    def undo(self) -> Optional[PendingUndo]:
        """
        Reverse the most recent tap or deletion if still inside the window.
        """
        try:
            return self.undo_slot.invoke(self.store)
        except StoreError as e:
            logger.error(f"Undo failed: {e}")
            return None

    # History

    def history(self, limit: Optional[int] = None) -> List[LedgerEntry]:
        try:
            return log.recent_entries(self.store, limit=limit)
        except StoreError as e:
            logger.error(f"Failed to read history: {e}")
            return []

    def history_by_day(self) -> List[Tuple[date, List[LedgerEntry]]]:
        return log.group_by_day(self.history(), self.config.tz)

    def reverse(self, entry_id: int) -> Optional[Balance]:
        """Reverse a log entry from history. No time limit."""
        try:
            return history.reverse_entry(self.store, entry_id)
        except StoreError as e:
            logger.error(f"Failed to reverse log entry {entry_id}: {e}")
            return None

    # Onboarding

    def complete_onboarding(self, first_name: str, first_points: str = "") -> Optional[Irritant]:
        """
        Create the balance record and, if a name was given, the first irritant.

        first_points is raw user input; anything unparseable falls back to 10.
        """
        try:
            balance.ensure_balance(self.store)
        except StoreError as e:
            logger.error(f"Failed to initialize balance: {e}")

        if items.clean_name(first_name) is None:
            return None

        try:
            points = int(first_points)
        except (TypeError, ValueError):
            points = DEFAULT_FIRST_POINTS

        try:
            return items.create_item(self.store, ItemKind.IRRITANT, first_name, points, sort_order=0)
        except StoreError as e:
            logger.error(f"Failed to create first irritant: {e}")
            return None

    # Shared item plumbing

    def _list(self, kind: ItemKind) -> List[Item]:
        try:
            return items.list_items(self.store, kind)
        except StoreError as e:
            logger.error(f"Failed to list {kind.value}s: {e}")
            return []

    def _create(self, kind: ItemKind, name: str, points: int) -> Optional[Item]:
        try:
            return items.create_item(self.store, kind, name, points)
        except StoreError as e:
            logger.error(f"Failed to create {kind.value} {name!r}: {e}")
            return None

    def _edit(self, kind: ItemKind, item_id: int, name: str, points: int) -> Optional[Item]:
        try:
            return items.edit_item(self.store, kind, item_id, name, points)
        except StoreError as e:
            logger.error(f"Failed to edit {kind.value} {item_id}: {e}")
            return None

    def _delete(self, kind: ItemKind, item_id: int) -> Optional[DeletionUndo]:
        try:
            item = items.delete_item(self.store, kind, item_id)
        except StoreError as e:
            logger.error(f"Failed to delete {kind.value} {item_id}: {e}")
            return None

        if item is None:
            return None

        snapshot = DeletionUndo.from_item(kind, item)
        self.undo_slot.arm(snapshot)
        return snapshot

    def _move(self, kind: ItemKind, from_index: int, to_index: int) -> bool:
        try:
            return items.move(self.store, kind, from_index, to_index)
        except StoreError as e:
            logger.error(f"Failed to move {kind.value}: {e}")
            return False
