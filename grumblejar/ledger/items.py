"""
Irritant and reward catalog.

Create, edit, delete, restore and reorder the user's two lists.
Irritants and rewards share one code path keyed by ItemKind.
"""

import logging
from enum import Enum
from typing import List, Optional, Type, Union

from grumblejar.core.db import LedgerStore
from grumblejar.core.models import MAX_ITEM_POINTS, Irritant, Reward
from grumblejar.ledger.ordering import display_order, move_item, next_sort_order

logger = logging.getLogger(__name__)

Item = Union[Irritant, Reward]


class ItemKind(str, Enum):
    """Which user list an item belongs to."""
    IRRITANT = "irritant"
    REWARD = "reward"

    @property
    def model(self) -> Type[Item]:
        return Irritant if self is ItemKind.IRRITANT else Reward

    @property
    def points_field(self) -> str:
        return "points" if self is ItemKind.IRRITANT else "required_points"


def is_valid_points(points: int) -> bool:
    return isinstance(points, int) and 0 < points <= MAX_ITEM_POINTS


def clean_name(name: Optional[str]) -> Optional[str]:
    """Stripped name, or None if nothing is left."""
    if name is None:
        return None
    name = name.strip()
    return name or None


def list_items(store: LedgerStore, kind: ItemKind) -> List[Item]:
    """All items of one kind in display order."""
    model = kind.model
    return display_order(store.fetch(model, order_by=model.created_at))


def create_item(
    store: LedgerStore,
    kind: ItemKind,
    name: str,
    points: int,
    sort_order: Optional[int] = None,
) -> Optional[Item]:
    """
    Create an item placed after every existing one.

    Returns None if the name is blank or points are out of range.
    """
    name = clean_name(name)
    if name is None or not is_valid_points(points):
        logger.debug(f"Rejected new {kind.value}: name={name!r} points={points!r}")
        return None

    if sort_order is None:
        sort_order = next_sort_order(list_items(store, kind))

    item = kind.model(name=name, sort_order=sort_order, **{kind.points_field: points})
    store.insert(item)

    logger.info(f"Created {item}")
    return item


def restore_item(
    store: LedgerStore,
    kind: ItemKind,
    name: str,
    points: int,
    sort_order: Optional[int],
) -> Item:
    """
    Re-insert a deleted item as a new row.

    The prior sort_order is reused verbatim, including None.
    The deleted item's id is not reused.
    """
    item = kind.model(name=name, sort_order=sort_order, **{kind.points_field: points})
    store.insert(item)

    logger.info(f"Restored {item}")
    return item


def edit_item(
    store: LedgerStore,
    kind: ItemKind,
    item_id: int,
    name: str,
    points: int,
) -> Optional[Item]:
    """
    Rename an item and change its point value.

    Returns None if validation fails or the item does not exist.
    """
    name = clean_name(name)
    if name is None or not is_valid_points(points):
        logger.debug(f"Rejected edit of {kind.value} {item_id}")
        return None

    with store.session_scope() as session:
        item = session.get(kind.model, item_id)
        if item is None:
            return None
        item.name = name
        setattr(item, kind.points_field, points)

    logger.info(f"Updated {item}")
    return item


def delete_item(store: LedgerStore, kind: ItemKind, item_id: int) -> Optional[Item]:
    """
    Delete an item.

    Returns:
        The deleted item (detached, still readable) or None if missing
    """
    with store.session_scope() as session:
        item = session.get(kind.model, item_id)
        if item is None:
            return None
        session.delete(item)

    logger.info(f"Deleted {item}")
    return item


def move(store: LedgerStore, kind: ItemKind, from_index: int, to_index: int) -> bool:
    """
    Reorder the displayed list of one kind and persist the new orders.
    """
    with store.session_scope() as session:
        model = kind.model
        items = display_order(session.query(model).order_by(model.created_at).all())
        moved = move_item(items, from_index, to_index)

    if moved:
        logger.info(f"Moved {kind.value} {from_index} -> {to_index}")
    return moved
