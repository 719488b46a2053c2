"""
CRUD endpoints for daily expenses paid out of the drawer.
Synthetic deficit expenses are owned by shift closing and are read-only here.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.auth import get_current_operator
from shiftledger.core.db import get_db
from shiftledger.core.errors import InvalidStateError, NotFoundError
from shiftledger.core.logging import get_logger
from shiftledger.ledger.window import window_start
from shiftledger.models import (
    AppConfig,
    DailyExpense,
    DailyExpenseCreate,
    DailyExpenseRead,
    DailyExpenseUpdate,
    Operator,
)
from shiftledger.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/daily-expenses", tags=["daily-expenses"])


async def _get_editable_expense(expense_id: str, db: AsyncSession) -> DailyExpense:
    expense = await db.get(DailyExpense, expense_id)
    if expense is None:
        raise NotFoundError("DailyExpense", expense_id)
    if expense.is_deficit:
        raise InvalidStateError(
            "Deficit expenses are managed by shift closing; re-open the shift instead",
            details={"expense_id": expense_id},
        )
    return expense


@router.post("", response_model=DailyExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: DailyExpenseCreate,
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
) -> DailyExpense:
    """Record cash paid out of the drawer now."""
    expense = DailyExpense(
        amount=expense_data.amount,
        notes=expense_data.notes or "",
        date=now_utc(),
        cashier=operator.username,
        is_deficit=False,
    )
    db.add(expense)
    await db.commit()
    await db.refresh(expense)

    logger.info(
        "expense.created",
        expense_id=expense.id,
        amount=str(expense.amount),
        cashier=expense.cashier,
    )
    return expense


@router.get("", response_model=list[DailyExpenseRead])
async def list_expenses(
    db: AsyncSession = Depends(get_db),
    open_shift_only: bool = Query(False, description="Only expenses after the last shift close"),
) -> list[DailyExpense]:
    """List expenses, most recent first."""
    stmt = select(DailyExpense)
    if open_shift_only:
        config = await AppConfig.load(db)
        stmt = stmt.where(DailyExpense.date > window_start(config.last_shift_report_time))
    stmt = stmt.order_by(DailyExpense.date.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.patch("/{expense_id}", response_model=DailyExpenseRead)
async def update_expense(
    expense_id: str,
    expense_data: DailyExpenseUpdate,
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
) -> DailyExpense:
    """Correct amount and/or notes of a manual expense."""
    expense = await _get_editable_expense(expense_id, db)

    update_data = expense_data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if key == "notes":
            value = value or ""
        if value is not None:
            setattr(expense, key, value)

    await db.commit()
    await db.refresh(expense)

    logger.info(
        "expense.updated",
        expense_id=expense.id,
        fields=sorted(update_data),
        updated_by=operator.username,
    )
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
) -> None:
    expense = await _get_editable_expense(expense_id, db)
    await db.delete(expense)
    await db.commit()

    logger.info("expense.deleted", expense_id=expense_id, deleted_by=operator.username)
