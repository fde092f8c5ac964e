"""
Log retention.

Entries older than one calendar month are pruned once per process start.
"""

import logging
from datetime import datetime
from typing import Optional

from grumblejar.core.db import LedgerStore
from grumblejar.ledger.log import prune_older_than

logger = logging.getLogger(__name__)

_has_run = False


def run_startup_retention(store: LedgerStore, now: Optional[datetime] = None) -> int:
    """
    Prune the transaction log, at most once per process.

    Never raises; failures are logged inside prune_older_than.

    Returns:
        Number of entries pruned (0 if already run this process)
    """
    global _has_run

    if _has_run:
        logger.debug("Retention already ran in this process")
        return 0

    _has_run = True
    return prune_older_than(store, horizon=None, now=now)


def reset() -> None:
    """Allow the next call to run again."""
    global _has_run
    _has_run = False
