"""Tests for selecting the open shift window."""

from datetime import datetime, timedelta

from shiftledger.ledger.window import select_window, window_start
from shiftledger.utils.datetime import EPOCH
from tests.factories import DailyExpenseFactory, SaleFactory

CUTOFF = datetime(2025, 3, 1, 18, 0, 0)


class TestWindowStart:
    def test_none_cutoff_starts_at_epoch(self):
        assert window_start(None) == EPOCH

    def test_cutoff_is_window_start(self):
        assert window_start(CUTOFF) == CUTOFF


class TestSelectWindow:
    """Events are kept only when strictly after the cutoff."""

    def test_none_cutoff_keeps_everything(self):
        sales = [SaleFactory.build(datetime(2024, 1, 1)), SaleFactory.build(datetime(2025, 1, 1))]
        expenses = [DailyExpenseFactory.build(datetime(2024, 6, 1))]

        window = select_window(None, sales, expenses)

        assert window.sales == sales
        assert window.expenses == expenses

    def test_event_exactly_at_cutoff_is_excluded(self):
        at_cutoff = SaleFactory.build(CUTOFF)
        after = SaleFactory.build(CUTOFF + timedelta(microseconds=1))
        expense_at_cutoff = DailyExpenseFactory.build(CUTOFF, is_deficit=True)

        window = select_window(CUTOFF, [at_cutoff, after], [expense_at_cutoff])

        assert window.sales == [after]
        assert window.expenses == []

    def test_earlier_events_are_dropped_and_order_kept(self):
        before = SaleFactory.build(CUTOFF - timedelta(hours=1))
        late = SaleFactory.build(CUTOFF + timedelta(hours=3))
        early = SaleFactory.build(CUTOFF + timedelta(hours=1))

        window = select_window(CUTOFF, [before, late, early], [])

        assert [s.id for s in window.sales] == [late.id, early.id]

    def test_selection_is_repeatable(self):
        sales = [SaleFactory.build(CUTOFF + timedelta(minutes=i)) for i in range(-2, 3)]
        expenses = [DailyExpenseFactory.build(CUTOFF + timedelta(minutes=i)) for i in range(-2, 3)]

        first = select_window(CUTOFF, sales, expenses)
        second = select_window(CUTOFF, sales, expenses)

        assert first == second
        assert len(first.sales) == 2
        assert len(first.expenses) == 2
        # Inputs untouched
        assert len(sales) == 5
        assert len(expenses) == 5
