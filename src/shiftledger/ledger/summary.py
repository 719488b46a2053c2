# File: src/shiftledger/ledger/summary.py
"""Cash-flow summary of a shift window.

Returns are rebuilt from ``returned_qty`` on the items of windowed sales.
A return rung up today against a sale from an earlier shift is therefore
not counted here, while a return against a sale in this window is counted
no matter when it happened. ``returned_at`` falls back to the sale's
``updated_at``/``created_at`` for the same reason. Both are known gaps of
the implicit return ledger and are kept as-is.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable

from shiftledger.ledger.window import select_window, window_start
from shiftledger.models.daily_expense import DailyExpense
from shiftledger.models.enums import PaymentMethod
from shiftledger.models.sale import Sale
from shiftledger.models.shift_schemas import (
    ExpenseSnapshot,
    ReturnDetail,
    SaleSnapshot,
    ShiftPreview,
    ShiftSummary,
)
from shiftledger.utils.datetime import to_iso_z
from shiftledger.utils.money import ZERO, quantize_money

_BUCKETS = {
    PaymentMethod.CASH.value: "total_cash_sales",
    PaymentMethod.INSTAPAY.value: "total_instapay_sales",
    PaymentMethod.VCASH.value: "total_vcash_sales",
}


def shift_id_for(moment: datetime) -> str:
    return f"SHIFT-{to_iso_z(moment)}"


def returned_value(sale: Sale, unit_price: Decimal, returned_qty: int) -> Decimal:
    """Refund owed for ``returned_qty`` units, net of the sale's discount share."""
    item_subtotal = Decimal(unit_price) * returned_qty
    return quantize_money(item_subtotal - item_subtotal * sale.discount_ratio)


def collect_returns(sales: Iterable[Sale]) -> list[ReturnDetail]:
    """One ReturnDetail per item with a positive ``returned_qty``."""
    details: list[ReturnDetail] = []
    for sale in sales:
        for item in sale.items:
            qty = item.returned_qty or 0
            if qty <= 0:
                continue
            details.append(
                ReturnDetail(
                    original_sale_id=sale.id,
                    returned_at=sale.updated_at or sale.created_at,
                    cashier=sale.cashier,
                    return_value=returned_value(sale, item.unit_price, qty),
                    product_name=item.display_name,
                )
            )
    return details


def calculate_summary(
    sales: Iterable[Sale],
    expenses: Iterable[DailyExpense],
    returns: list[ReturnDetail] | None = None,
) -> ShiftSummary:
    """Aggregate windowed events.

    Only cash sales feed the drawer:
    expected_in_drawer = cash sales - returns - daily expenses.
    Returns are not netted against the instaPay/vCash buckets.
    """
    sales = list(sales)
    totals = {
        "total_sales": ZERO,
        "total_cash_sales": ZERO,
        "total_instapay_sales": ZERO,
        "total_vcash_sales": ZERO,
    }
    for sale in sales:
        amount = Decimal(sale.total_amount)
        totals["total_sales"] += amount
        bucket = _BUCKETS.get(sale.payment_method)
        if bucket is not None:
            totals[bucket] += amount

    if returns is None:
        returns = collect_returns(sales)
    total_returns_value = sum((r.return_value for r in returns), ZERO)
    total_daily_expenses = sum((Decimal(e.amount) for e in expenses), ZERO)

    return ShiftSummary(
        total_sales=quantize_money(totals["total_sales"]),
        total_cash_sales=quantize_money(totals["total_cash_sales"]),
        total_instapay_sales=quantize_money(totals["total_instapay_sales"]),
        total_vcash_sales=quantize_money(totals["total_vcash_sales"]),
        total_returns_value=quantize_money(total_returns_value),
        total_daily_expenses=quantize_money(total_daily_expenses),
        expected_in_drawer=quantize_money(
            totals["total_cash_sales"] - total_returns_value - total_daily_expenses
        ),
    )


def build_preview(
    cutoff: datetime | None,
    sales: Iterable[Sale],
    expenses: Iterable[DailyExpense],
    now: datetime,
) -> ShiftPreview:
    """Select the open window and summarize it under a fresh shift id."""
    window = select_window(cutoff, sales, expenses)
    returns = collect_returns(window.sales)
    return ShiftPreview(
        id=shift_id_for(now),
        cutoff=cutoff,
        started_at=window_start(cutoff),
        sales=[SaleSnapshot.model_validate(sale) for sale in window.sales],
        returns=returns,
        expenses=[ExpenseSnapshot.model_validate(expense) for expense in window.expenses],
        summary=calculate_summary(window.sales, window.expenses, returns),
        calculated_at=now,
    )
