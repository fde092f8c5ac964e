"""
Reward redemption.

Exchanging points for a reward debits the balance and logs a
negative entry. Redemptions are not covered by the undo slot;
they can only be reversed from history.
"""

import logging
from typing import Optional

from grumblejar.core.db import LedgerStore
from grumblejar.core.models import MAX_ITEM_POINTS, LedgerEntry, Reward
from grumblejar.ledger import balance, log

logger = logging.getLogger(__name__)


def can_redeem(current_points: int, reward: Reward) -> bool:
    """
    Check whether a reward is redeemable with the given balance.
    """
    required = reward.required_points
    return 0 < required <= MAX_ITEM_POINTS and current_points >= required


def reward_progress(current_points: int, required_points: int) -> float:
    """
    Fraction of the way to a reward, capped at 1.0.
    """
    if required_points <= 0:
        return 0.0
    return min(max(current_points, 0) / required_points, 1.0)


def redeem(store: LedgerStore, reward: Reward) -> Optional[LedgerEntry]:
    """
    Exchange points for a reward.

    Balance and log are committed separately; a failure between the two
    leaves the debit without its entry.

    Returns:
        The redemption log entry, or None if the reward is not redeemable
    """
    current = balance.get_balance(store).current_balance
    if not can_redeem(current, reward):
        logger.debug(
            f"Redemption of {reward.name!r} blocked: "
            f"{current}/{reward.required_points}pt"
        )
        return None

    balance.debit(store, reward.required_points)
    entry = log.append(store, reward.name, -reward.required_points, is_redemption=True)

    logger.info(f"Redeemed {reward.name!r} for {reward.required_points}pt")
    return entry
