"""
Transaction log.

Append-only record of credits and redemptions, plus
day grouping for the history view.
"""

import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from grumblejar.core.db import LedgerStore, StoreError
from grumblejar.core.models import LedgerEntry
from grumblejar.core.utils import one_month_before, utcnow

logger = logging.getLogger(__name__)


def append(
    store: LedgerStore,
    label: str,
    point_delta: int,
    is_redemption: bool = False,
) -> LedgerEntry:
    """
    Record one point movement with the current timestamp.

    Returns:
        The persisted entry (its id identifies it for undo)
    """
    entry = LedgerEntry(
        label=label,
        point_delta=point_delta,
        is_redemption=is_redemption,
        timestamp=utcnow(),
    )
    store.insert(entry)

    logger.info(f"Logged {entry}")
    return entry


def remove(store: LedgerStore, entry_id: Optional[int]) -> bool:
    """
    Delete one entry.

    A missing entry or a store failure is logged, not raised.
    """
    if entry_id is None:
        return False

    try:
        removed = store.delete(LedgerEntry, entry_id)
    except StoreError as e:
        logger.error(f"Failed to remove log entry {entry_id}: {e}")
        return False

    if not removed:
        logger.warning(f"Log entry {entry_id} not found, nothing removed")
    return removed


def get_entry(store: LedgerStore, entry_id: int) -> Optional[LedgerEntry]:
    return store.get(LedgerEntry, entry_id)


def recent_entries(store: LedgerStore, limit: Optional[int] = None) -> List[LedgerEntry]:
    """
    Get log entries, newest first.
    """
    entries = store.fetch(
        LedgerEntry,
        order_by=[LedgerEntry.timestamp.desc(), LedgerEntry.id.desc()],
    )
    if limit is not None:
        return entries[:limit]
    return entries


def prune_older_than(
    store: LedgerStore,
    horizon: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Delete every entry with timestamp < now - horizon.

    Args:
        store: Ledger store
        horizon: Age limit; None means one calendar month
        now: Reference time (naive UTC), defaults to the current time

    Returns:
        Number of entries deleted (0 on failure)
    """
    now = now or utcnow()
    cutoff = now - horizon if horizon is not None else one_month_before(now)

    try:
        with store.session_scope() as session:
            old_entries = (
                session.query(LedgerEntry)
                .filter(LedgerEntry.timestamp < cutoff)
                .all()
            )
            for entry in old_entries:
                session.delete(entry)
            count = len(old_entries)
    except StoreError as e:
        logger.error(f"Failed to prune old log entries: {e}")
        return 0

    if count:
        logger.info(f"Pruned {count} log entries older than {cutoff:%Y-%m-%d %H:%M}")
    return count


def _local_day(timestamp: datetime, tz: ZoneInfo) -> date:
    return timestamp.replace(tzinfo=timezone.utc).astimezone(tz).date()


def group_by_day(
    entries: List[LedgerEntry],
    tz: Optional[ZoneInfo] = None,
) -> List[Tuple[date, List[LedgerEntry]]]:
    """
    Partition entries by calendar day.

    Partitions are ordered by their most recent timestamp, newest first.
    Inside a partition the input order is kept as-is.
    """
    tz = tz or ZoneInfo("UTC")

    groups: "OrderedDict[date, List[LedgerEntry]]" = OrderedDict()
    for entry in entries:
        groups.setdefault(_local_day(entry.timestamp, tz), []).append(entry)

    return sorted(
        groups.items(),
        key=lambda item: max(e.timestamp for e in item[1]),
        reverse=True,
    )
