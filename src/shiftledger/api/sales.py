"""Sale intake and customer returns."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.auth import get_current_operator
from shiftledger.core.db import get_db
from shiftledger.core.errors import NotFoundError
from shiftledger.core.logging import get_logger
from shiftledger.core.returns import apply_return
from shiftledger.models import Operator, Sale, SaleCreate, SaleItem, SaleRead, SaleReturnRequest
from shiftledger.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/sales", tags=["sales"])


@router.post("", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
) -> Sale:
    """Record a settled sale rung up by the current operator."""
    gross_margin = sum(
        ((item.unit_price - item.purchase_price) * item.quantity for item in sale_data.items),
        Decimal("0.00"),
    )
    sale = Sale(
        created_at=now_utc(),
        cashier=operator.username,
        payment_method=sale_data.payment_method,
        subtotal=sale_data.subtotal,
        discount_amount=sale_data.discount_amount,
        total_amount=sale_data.total_amount,
        profit=gross_margin - sale_data.discount_amount,
        return_delivery_fee=Decimal("0.00"),
        items=[
            SaleItem(
                position=position,
                product_name=item.product_name,
                color=item.color,
                size=item.size,
                quantity=item.quantity,
                unit_price=item.unit_price,
                purchase_price=item.purchase_price,
                returned_qty=0,
            )
            for position, item in enumerate(sale_data.items)
        ],
    )
    db.add(sale)
    await db.commit()
    await db.refresh(sale, ["items"])

    logger.info(
        "sale.created",
        sale_id=sale.id,
        cashier=sale.cashier,
        payment_method=sale.payment_method,
        total_amount=str(sale.total_amount),
    )
    return sale


@router.get("", response_model=list[SaleRead])
async def list_sales(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> list[Sale]:
    """List sales, most recent first."""
    stmt = select(Sale).order_by(Sale.created_at.desc()).limit(limit).offset(offset)
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.get("/{sale_id}", response_model=SaleRead)
async def get_sale(sale_id: str, db: AsyncSession = Depends(get_db)) -> Sale:
    sale = await db.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


@router.post("/{sale_id}/returns", response_model=SaleRead)
async def return_items(
    sale_id: str,
    return_data: SaleReturnRequest,
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
) -> Sale:
    """Take items back against a sale, mutating the sale in place."""
    sale = await db.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale", sale_id)

    refunded = apply_return(sale, return_data.lines, return_data.return_delivery_fee, now_utc())
    await db.commit()
    await db.refresh(sale, ["items"])

    logger.info(
        "sale.returned",
        sale_id=sale.id,
        processed_by=operator.username,
        refunded=str(refunded),
        return_delivery_fee=str(return_data.return_delivery_fee),
    )
    return sale
