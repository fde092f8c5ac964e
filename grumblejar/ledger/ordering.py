"""
Manual ordering for user-defined lists.

Works on anything with sort_order and created_at (irritants and rewards).
"""

import logging
import math
from typing import List, Sequence, TypeVar

from grumblejar.core.models import OrderableMixin

logger = logging.getLogger(__name__)

O = TypeVar("O", bound=OrderableMixin)


def _sort_key(item: OrderableMixin):
    # Never-ordered items go last
    order = item.sort_order if item.sort_order is not None else math.inf
    return (order, item.created_at)


def display_order(items: Sequence[O]) -> List[O]:
    """
    Sort by sort_order ascending, then created_at ascending.
    """
    return sorted(items, key=_sort_key)


def next_sort_order(items: Sequence[OrderableMixin]) -> int:
    """
    Order value that places a new item last.
    """
    orders = [item.sort_order for item in items if item.sort_order is not None]
    return max(orders, default=-1) + 1


def move_item(items: List[O], from_index: int, to_index: int) -> bool:
    """
    Move one item within the displayed list and renumber everything.

    Mutates the list in place. Every item ends up with sort_order equal
    to its index, so orders stay dense and unique.

    Args:
        items: Items in current display order
        from_index: Position of the item to move
        to_index: Position it should end up at

    Returns:
        False if either index is out of range (nothing changes)
    """
    count = len(items)
    if not (0 <= from_index < count) or not (0 <= to_index < count):
        logger.debug(f"Ignoring move {from_index} -> {to_index} in list of {count}")
        return False

    moved = items.pop(from_index)
    items.insert(to_index, moved)

    for index, item in enumerate(items):
        item.sort_order = index

    return True
