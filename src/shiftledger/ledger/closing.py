# File: src/shiftledger/ledger/closing.py
"""Turn a preview plus a cash count into a closed shift record."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shiftledger.core.validators import validate_cash_count
from shiftledger.models.enums import ReconciliationType
from shiftledger.models.operator import Operator
from shiftledger.models.shift_schemas import (
    ExpenseSnapshot,
    Reconciliation,
    ShiftPreview,
    ShiftRead,
)


@dataclass(frozen=True)
class ClosedShiftDraft:
    """Everything the close transaction writes."""

    shift: ShiftRead
    new_cutoff: datetime
    synthetic_expense: ExpenseSnapshot | None


def reconcile(expected: Decimal, actual: Decimal) -> Reconciliation:
    difference = actual - expected
    return Reconciliation(
        actual=actual,
        expected=expected,
        difference=difference,
        type=ReconciliationType.SURPLUS if difference >= 0 else ReconciliationType.DEFICIT,
    )


def deficit_expense(shift_id: str, shortfall: Decimal, ended_at: datetime, cashier: str) -> ExpenseSnapshot:
    return ExpenseSnapshot(
        id=str(uuid.uuid4()),
        amount=abs(shortfall),
        notes=f"Deficit from shift {shift_id}",
        date=ended_at,
        cashier=cashier,
        is_deficit=True,
    )


def finalize_shift(
    preview: ShiftPreview,
    actual_amount: Decimal | float | str | None,
    closed_by: Operator,
    ended_at: datetime,
) -> ClosedShiftDraft:
    """Reconcile ``preview`` against the counted cash.

    The summary is left exactly as previewed. A deficit books a synthetic
    expense which is appended to the shift's expenses snapshot but not
    added to ``total_daily_expenses``.

    Raises:
        ValidationError: actual_amount missing, NaN or negative
    """
    actual = validate_cash_count(actual_amount)
    reconciliation = reconcile(preview.summary.expected_in_drawer, actual)

    synthetic = None
    expenses = list(preview.expenses)
    if reconciliation.type == ReconciliationType.DEFICIT:
        synthetic = deficit_expense(preview.id, reconciliation.difference, ended_at, closed_by.username)
        expenses.append(synthetic)

    shift = ShiftRead(
        id=preview.id,
        started_at=preview.started_at,
        ended_at=ended_at,
        ended_by=closed_by.username,
        sales=preview.sales,
        returns=preview.returns,
        expenses=expenses,
        summary=preview.summary,
        reconciliation=reconciliation,
    )
    return ClosedShiftDraft(shift=shift, new_cutoff=ended_at, synthetic_expense=synthetic)
