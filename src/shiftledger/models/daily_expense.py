# File: src/shiftledger/models/daily_expense.py
"""Daily expense model."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from shiftledger.core.db import Base
from shiftledger.utils.datetime import now_utc


class DailyExpense(Base):
    """Cash paid out of the drawer.

    Rows with ``is_deficit`` are written only by shift closing, to book an
    unexplained cash shortfall, and are removed again when that shift is
    reopened.
    """

    __tablename__ = "daily_expenses"
    __table_args__ = (CheckConstraint("amount > 0", name="daily_expense_amount_positive"),)

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    notes: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        default=now_utc,
        index=True,
    )

    cashier: Mapped[str] = mapped_column(String(100), nullable=False)

    is_deficit: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)

    @validates("amount")
    def validate_amount(self, key: str, value: Decimal) -> Decimal:
        """Validate that amount is positive."""
        if value is None or value <= 0:
            raise ValueError("Expense amount must be greater than zero")
        return value

    def __repr__(self) -> str:
        return (
            f"<DailyExpense(id={self.id}, amount={self.amount}, "
            f"is_deficit={self.is_deficit})>"
        )
