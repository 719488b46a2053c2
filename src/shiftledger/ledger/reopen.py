# File: src/shiftledger/ledger/reopen.py
"""Plan a cascading reopen over the closed-shift chain."""

from dataclasses import dataclass
from datetime import datetime

from shiftledger.core.errors import NotFoundError
from shiftledger.models.shift_schemas import ExpenseSnapshot, ShiftRead


@dataclass(frozen=True)
class ReopenPlan:
    removed_shifts: list[ShiftRead]
    removed_deficit_expenses: list[ExpenseSnapshot]
    new_cutoff: datetime | None
    previous_cutoff: datetime | None

    @property
    def removed_deficit_expense_ids(self) -> set[str]:
        return {expense.id for expense in self.removed_deficit_expenses}


def order_shifts(shifts: list[ShiftRead]) -> list[ShiftRead]:
    return sorted(shifts, key=lambda shift: (shift.ended_at, shift.id))


def plan_reopen(shift_id: str, shifts: list[ShiftRead]) -> ReopenPlan:
    """Reopening a shift discards it and every shift closed after it.

    Each later shift's window was cut from the reopened one's cutoff, so
    none of them stays valid. Their synthetic deficit expenses go too.

    Raises:
        NotFoundError: shift_id is not in ``shifts``
    """
    ordered = order_shifts(shifts)
    index = next((i for i, shift in enumerate(ordered) if shift.id == shift_id), None)
    if index is None:
        raise NotFoundError("Shift", shift_id)

    kept, removed = ordered[:index], ordered[index:]
    deficits = [expense for shift in removed for expense in shift.deficit_expenses]

    return ReopenPlan(
        removed_shifts=removed,
        removed_deficit_expenses=deficits,
        new_cutoff=kept[-1].ended_at if kept else None,
        previous_cutoff=ordered[-1].ended_at,
    )
