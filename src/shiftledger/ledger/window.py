# File: src/shiftledger/ledger/window.py
"""Split persisted events into the open shift window."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from shiftledger.models.daily_expense import DailyExpense
from shiftledger.models.sale import Sale
from shiftledger.utils.datetime import EPOCH


@dataclass(frozen=True)
class EventWindow:
    """Sales and expenses that happened after the cutoff."""

    sales: list[Sale] = field(default_factory=list)
    expenses: list[DailyExpense] = field(default_factory=list)


def window_start(cutoff: datetime | None) -> datetime:
    """Lower (exclusive) bound of the open window."""
    return cutoff if cutoff is not None else EPOCH


def select_window(
    cutoff: datetime | None,
    sales: Iterable[Sale],
    expenses: Iterable[DailyExpense],
) -> EventWindow:
    """Keep events strictly after ``cutoff``; a None cutoff keeps everything.

    Input order is preserved. Nothing is mutated.
    """
    start = window_start(cutoff)
    return EventWindow(
        sales=[sale for sale in sales if sale.created_at > start],
        expenses=[expense for expense in expenses if expense.date > start],
    )
