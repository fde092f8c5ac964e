"""
Balance aggregate access.

Loads the single Balance row, creating it on first use,
and applies one mutation per commit.
"""

import logging

from sqlalchemy.orm import Session

from grumblejar.core.db import LedgerStore
from grumblejar.core.models import BALANCE_ID, Balance

logger = logging.getLogger(__name__)


def load_balance(session: Session) -> Balance:
    """
    Get the balance row inside an open session, creating it if missing.

    The fixed primary key keeps the row a singleton.
    """
    balance = session.get(Balance, BALANCE_ID)
    if balance is None:
        balance = Balance(id=BALANCE_ID, lifetime_total=0, current_balance=0)
        session.add(balance)
        session.flush()
        logger.info("Created balance record")
    return balance


def ensure_balance(store: LedgerStore) -> Balance:
    """Make sure the balance record exists and return it."""
    with store.session_scope() as session:
        return load_balance(session)


def get_balance(store: LedgerStore) -> Balance:
    """Current balance snapshot (detached)."""
    return ensure_balance(store)


def credit(store: LedgerStore, points: int) -> Balance:
    """
    Add points to both current and lifetime totals and commit.

    Args:
        store: Ledger store
        points: Amount; non-positive amounts leave the balance untouched

    Returns:
        Balance after the credit
    """
    with store.session_scope() as session:
        balance = load_balance(session)
        balance.credit(points)

    logger.debug(f"Credited {points} -> {balance}")
    return balance


def debit(store: LedgerStore, points: int) -> Balance:
    """Take points from the current total only and commit."""
    with store.session_scope() as session:
        balance = load_balance(session)
        balance.debit(points)

    logger.debug(f"Debited {points} -> {balance}")
    return balance


def reverse_credit(store: LedgerStore, points: int) -> Balance:
    """Take a credit back out of both totals and commit."""
    with store.session_scope() as session:
        balance = load_balance(session)
        balance.reverse_credit(points)

    logger.debug(f"Reversed credit of {points} -> {balance}")
    return balance
