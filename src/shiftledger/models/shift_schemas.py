# File: src/shiftledger/models/shift_schemas.py
"""Pydantic schemas for shift previews, closed shifts and reopen results."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shiftledger.models.enums import ReconciliationType


class SaleSnapshot(BaseModel):
    """The parts of a sale a shift keeps for its report."""

    id: str
    created_at: datetime
    cashier: str
    payment_method: str
    total_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class ExpenseSnapshot(BaseModel):
    """Full copy of a daily expense, enough to re-create the row."""

    id: str
    amount: Decimal
    notes: str = ""
    date: datetime
    cashier: str
    is_deficit: bool = False

    model_config = ConfigDict(from_attributes=True)

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, v: str | None) -> str:
        return v or ""

    @field_validator("is_deficit", mode="before")
    @classmethod
    def default_is_deficit(cls, v: bool | None) -> bool:
        return bool(v)


class ReturnDetail(BaseModel):
    """One returned line, reconstructed from ``returned_qty`` on a sale item."""

    original_sale_id: str
    returned_at: datetime
    cashier: str
    return_value: Decimal
    product_name: str


class ShiftSummary(BaseModel):
    """Cash-flow totals of a shift window."""

    total_sales: Decimal = Decimal("0.00")
    total_cash_sales: Decimal = Decimal("0.00")
    total_instapay_sales: Decimal = Decimal("0.00")
    total_vcash_sales: Decimal = Decimal("0.00")
    total_returns_value: Decimal = Decimal("0.00")
    total_daily_expenses: Decimal = Decimal("0.00")
    expected_in_drawer: Decimal = Decimal("0.00")


class Reconciliation(BaseModel):
    """Counted cash against expected cash."""

    actual: Decimal
    expected: Decimal
    difference: Decimal
    type: ReconciliationType


class ShiftPreview(BaseModel):
    """Open-window calculation. Never persisted unless it is closed."""

    id: str
    cutoff: datetime | None = Field(None, description="Cutoff the window was selected with")
    started_at: datetime
    sales: list[SaleSnapshot] = Field(default_factory=list)
    returns: list[ReturnDetail] = Field(default_factory=list)
    expenses: list[ExpenseSnapshot] = Field(default_factory=list)
    summary: ShiftSummary
    calculated_at: datetime


class ShiftRead(BaseModel):
    """Closed, immutable shift record."""

    id: str
    started_at: datetime
    ended_at: datetime
    ended_by: str
    sales: list[SaleSnapshot]
    returns: list[ReturnDetail]
    expenses: list[ExpenseSnapshot]
    summary: ShiftSummary
    reconciliation: Reconciliation

    model_config = ConfigDict(from_attributes=True)

    @property
    def deficit_expenses(self) -> list[ExpenseSnapshot]:
        """Synthetic deficit expenses booked when this shift was closed."""
        return [expense for expense in self.expenses if expense.is_deficit]


class ShiftCloseRequest(BaseModel):
    """Operator input for closing the previewed shift."""

    preview_id: str = Field(..., min_length=1, max_length=64)
    actual_amount: Decimal | None = Field(None, description="Counted cash in the drawer")


class ShiftCloseResponse(BaseModel):
    """Closed shift plus the cutoff it advanced to."""

    shift: ShiftRead
    new_cutoff: datetime
    synthetic_expense: ExpenseSnapshot | None = None


class ReopenResponse(BaseModel):
    """What a reopen removed, and how to take it back."""

    removed_shift_ids: list[str]
    removed_deficit_expense_ids: list[str]
    new_cutoff: datetime | None
    undo_token: str
    undo_expires_at: datetime


class UndoReopenRequest(BaseModel):
    undo_token: str = Field(..., min_length=1, max_length=64)

    @field_validator("undo_token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        return v.strip()


class UndoReopenResponse(BaseModel):
    restored_shift_ids: list[str]
    restored_deficit_expense_ids: list[str]
    cutoff: datetime | None
