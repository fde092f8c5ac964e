"""
History-based reversal.

Any log entry can be reversed from the history view, with no time limit.
"""

import logging
from typing import Optional

from grumblejar.core.db import LedgerStore
from grumblejar.core.models import MAX_INT, Balance, LedgerEntry
from grumblejar.ledger.balance import load_balance

logger = logging.getLogger(__name__)


def _revert(balance: Balance, entry: LedgerEntry) -> None:
    if entry.is_redemption:
        # point_delta is negative, so this gives the points back
        restored = min(balance.current_balance - entry.point_delta, MAX_INT - 1)
        balance.current_balance = max(0, restored)
    else:
        balance.current_balance = max(0, balance.current_balance - entry.point_delta)
        balance.lifetime_total = max(0, balance.lifetime_total - entry.point_delta)


def reverse_entry(store: LedgerStore, entry_id: int) -> Optional[Balance]:
    """
    Undo the effect of one log entry and delete it.

    Redemptions give back current points only; credits take points
    out of both current and lifetime totals.

    Returns:
        Balance after reversal, or None if the entry does not exist
    """
    with store.session_scope() as session:
        entry = session.get(LedgerEntry, entry_id)
        if entry is None:
            logger.warning(f"Log entry {entry_id} not found, nothing to reverse")
            return None

        balance = load_balance(session)
        _revert(balance, entry)
        session.delete(entry)

    logger.info(f"Reversed {entry} -> {balance}")
    return balance
