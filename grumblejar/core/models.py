"""
Database models for GrumbleJar.

Models: Irritant, Reward, Balance, LedgerEntry.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from grumblejar.core.utils import utcnow

# Headroom below the 64-bit ceiling; fields past this stop growing
MAX_INT = 2**63 - 1
MAX_SAFE_POINTS = MAX_INT - 1_000_000

# Upper bound for a single irritant value or reward cost
MAX_ITEM_POINTS = 999_999

BALANCE_ID = 1


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class OrderableMixin:
    """
    Columns shared by user-ordered lists.

    sort_order is None for items that were never placed explicitly.
    """

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    sort_order: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class Irritant(OrderableMixin, Base):
    """
    A recurring annoyance worth a fixed number of points.

    Defined once, tapped many times.
    """

    __tablename__ = "irritants"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False)

    @property
    def value(self) -> int:
        return self.points

    def __repr__(self) -> str:
        return f"<Irritant {self.id}: {self.name} +{self.points}pt order={self.sort_order}>"


class Reward(OrderableMixin, Base):
    """
    A goal the user can exchange points for.

    Redeemable once the current balance covers required_points.
    """

    __tablename__ = "rewards"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    required_points: Mapped[int] = mapped_column(Integer, nullable=False)

    @property
    def value(self) -> int:
        return self.required_points

    def __repr__(self) -> str:
        return f"<Reward {self.id}: {self.name} {self.required_points}pt order={self.sort_order}>"


class Balance(Base):
    """
    Current and lifetime point totals.

    Exactly one row exists, always under BALANCE_ID.
    Both fields are clamped at zero and silently stop growing past MAX_SAFE_POINTS.
    """

    __tablename__ = "balance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=BALANCE_ID)
    lifetime_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def credit(self, points: int) -> None:
        if points <= 0:
            return
        # Each field freezes on its own once past the safe ceiling
        if self.lifetime_total <= MAX_SAFE_POINTS:
            self.lifetime_total += points
        if self.current_balance <= MAX_SAFE_POINTS:
            self.current_balance += points

    def debit(self, points: int) -> None:
        if points <= 0:
            return
        self.current_balance = max(0, self.current_balance - points)

    def reverse_credit(self, points: int) -> None:
        if points <= 0:
            return
        self.lifetime_total = max(0, self.lifetime_total - points)
        self.current_balance = max(0, self.current_balance - points)

    def __repr__(self) -> str:
        return f"<Balance current={self.current_balance} lifetime={self.lifetime_total}>"


class LedgerEntry(Base):
    """
    One point movement in the transaction log.

    Positive point_delta for a tap credit, negative for a redemption.
    Rows are never edited, only deleted (undo, history reversal, retention).
    """

    __tablename__ = "ledger_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    point_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    is_redemption: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        kind = "redeem" if self.is_redemption else "credit"
        return f"<LedgerEntry {self.id}: {kind} {self.label} {self.point_delta:+d}>"
