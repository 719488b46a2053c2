# File: src/shiftledger/core/returns.py
"""Apply customer returns to a settled sale in place."""

from datetime import datetime
from decimal import Decimal

from shiftledger.core.errors import NotFoundError, ValidationError
from shiftledger.ledger.summary import returned_value
from shiftledger.models.sale import Sale
from shiftledger.models.sale_schemas import ReturnLine
from shiftledger.utils.money import ZERO, quantize_money


def apply_return(
    sale: Sale,
    lines: list[ReturnLine],
    return_delivery_fee: Decimal,
    now: datetime,
) -> Decimal:
    """Raise ``returned_qty`` on the returned items and shrink the sale.

    Per returned unit the sale loses its discounted price from
    ``total_amount``, and its margin net of the discount share from
    ``profit``. A return delivery fee is borne by the shop: it only
    reduces profit. All lines are checked before anything changes.

    Returns:
        Total value refunded across all lines

    Raises:
        NotFoundError: a line names an item not on this sale
        ValidationError: a line would return more than was sold
    """
    items = {item.id: item for item in sale.items}

    requested: dict[str, int] = {}
    for line in lines:
        if line.item_id not in items:
            raise NotFoundError("SaleItem", line.item_id)
        requested[line.item_id] = requested.get(line.item_id, 0) + line.quantity

    for item_id, qty in requested.items():
        item = items[item_id]
        remaining = item.quantity - (item.returned_qty or 0)
        if qty > remaining:
            raise ValidationError(
                f"Cannot return {qty} of {item.display_name}; only {remaining} left on the sale",
                details={"item_id": item_id, "requested": qty, "remaining": remaining},
            )

    ratio = sale.discount_ratio
    refunded = ZERO
    for item_id, qty in requested.items():
        item = items[item_id]
        value = returned_value(sale, item.unit_price, qty)
        item_subtotal = Decimal(item.unit_price) * qty
        lost_profit = (Decimal(item.unit_price) - Decimal(item.purchase_price or 0)) * qty - item_subtotal * ratio

        item.returned_qty = (item.returned_qty or 0) + qty
        sale.total_amount = quantize_money(Decimal(sale.total_amount) - value)
        sale.profit = quantize_money(Decimal(sale.profit or 0) - lost_profit)
        refunded += value

    if return_delivery_fee > 0:
        sale.return_delivery_fee = Decimal(sale.return_delivery_fee or 0) + return_delivery_fee
        sale.profit = quantize_money(Decimal(sale.profit or 0) - return_delivery_fee)

    sale.updated_at = now
    return refunded
