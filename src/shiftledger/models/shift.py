# File: src/shiftledger/models/shift.py
"""Closed shift model."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.core.db import Base
from shiftledger.models.enums import ReconciliationType
from shiftledger.models.shift_schemas import Reconciliation, ShiftRead, ShiftSummary

SnapshotJSON = JSON().with_variant(JSONB(), "postgresql")


class Shift(Base):
    """Closed accounting period between two drawer reconciliations.

    Rows are inserted once at close time and never updated. Reopening
    deletes them; undoing a reopen inserts them again from ``ShiftRead``.
    """

    __tablename__ = "shifts"

    # SHIFT-<ISO timestamp of the preview>
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    ended_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        index=True,
    )
    ended_by: Mapped[str] = mapped_column(String(100), nullable=False)

    # Snapshots as the operator saw them at close
    sales: Mapped[list[dict[str, Any]]] = mapped_column(SnapshotJSON, nullable=False, default=list)
    returns: Mapped[list[dict[str, Any]]] = mapped_column(SnapshotJSON, nullable=False, default=list)
    expenses: Mapped[list[dict[str, Any]]] = mapped_column(SnapshotJSON, nullable=False, default=list)

    # Summary
    total_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_cash_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_instapay_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_vcash_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_returns_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_daily_expenses: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expected_in_drawer: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Reconciliation
    actual_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expected_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    difference: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    reconciliation_type: Mapped[str] = mapped_column(String(20), nullable=False)

    @property
    def summary(self) -> ShiftSummary:
        return ShiftSummary(
            total_sales=self.total_sales,
            total_cash_sales=self.total_cash_sales,
            total_instapay_sales=self.total_instapay_sales,
            total_vcash_sales=self.total_vcash_sales,
            total_returns_value=self.total_returns_value,
            total_daily_expenses=self.total_daily_expenses,
            expected_in_drawer=self.expected_in_drawer,
        )

    @property
    def reconciliation(self) -> Reconciliation:
        return Reconciliation(
            actual=self.actual_amount,
            expected=self.expected_amount,
            difference=self.difference,
            type=ReconciliationType(self.reconciliation_type),
        )

    @classmethod
    def from_record(cls, record: ShiftRead) -> "Shift":
        """Build a row from a closed-shift record (close and undo-reopen)."""
        dumped = record.model_dump(mode="json", include={"sales", "returns", "expenses"})
        return cls(
            id=record.id,
            started_at=record.started_at,
            ended_at=record.ended_at,
            ended_by=record.ended_by,
            sales=dumped["sales"],
            returns=dumped["returns"],
            expenses=dumped["expenses"],
            total_sales=record.summary.total_sales,
            total_cash_sales=record.summary.total_cash_sales,
            total_instapay_sales=record.summary.total_instapay_sales,
            total_vcash_sales=record.summary.total_vcash_sales,
            total_returns_value=record.summary.total_returns_value,
            total_daily_expenses=record.summary.total_daily_expenses,
            expected_in_drawer=record.summary.expected_in_drawer,
            actual_amount=record.reconciliation.actual,
            expected_amount=record.reconciliation.expected,
            difference=record.reconciliation.difference,
            reconciliation_type=record.reconciliation.type.value,
        )

    def to_record(self) -> ShiftRead:
        return ShiftRead.model_validate(self)

    def __repr__(self) -> str:
        return (
            f"<Shift(id={self.id}, ended_at={self.ended_at}, "
            f"reconciliation_type={self.reconciliation_type})>"
        )
