"""Shift ledger endpoints: calculate, close, history, reopen and undo."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.auth import get_current_operator
from shiftledger.core.db import get_db
from shiftledger.core.logging import get_logger
from shiftledger.ledger.service import ShiftLedger
from shiftledger.models import Operator, ShiftPreview, ShiftRead
from shiftledger.models.shift_schemas import (
    ReopenResponse,
    ShiftCloseRequest,
    ShiftCloseResponse,
    UndoReopenRequest,
    UndoReopenResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shifts", tags=["shifts"])


async def get_ledger(request: Request, db: AsyncSession = Depends(get_db)) -> ShiftLedger:
    """Ledger bound to this request's session and the app-wide registers."""
    state = request.app.state
    return ShiftLedger(db, previews=state.preview_register, undo=state.undo_register)


@router.post("/calculate", response_model=ShiftPreview)
async def calculate_shift(
    operator: Operator = Depends(get_current_operator),
    ledger: ShiftLedger = Depends(get_ledger),
) -> ShiftPreview:
    """Compute the open shift and hold it as the draft to close."""
    return await ledger.calculate()


@router.get("/current", response_model=ShiftPreview)
async def current_shift(ledger: ShiftLedger = Depends(get_ledger)) -> ShiftPreview:
    """Live view of the open window; does not replace the closable draft."""
    return await ledger.calculate(remember=False)


@router.post("/close", response_model=ShiftCloseResponse)
async def close_shift(
    close_data: ShiftCloseRequest,
    operator: Operator = Depends(get_current_operator),
    ledger: ShiftLedger = Depends(get_ledger),
) -> ShiftCloseResponse:
    """Reconcile the previewed shift against the counted cash and close it."""
    draft = await ledger.close_previewed_shift(
        close_data.preview_id,
        close_data.actual_amount,
        operator,
    )
    return ShiftCloseResponse(
        shift=draft.shift,
        new_cutoff=draft.new_cutoff,
        synthetic_expense=draft.synthetic_expense,
    )


@router.get("", response_model=list[ShiftRead])
async def list_shifts(
    on_date: date | None = Query(None, description="Only shifts that ended on this date (YYYY-MM-DD)"),
    ledger: ShiftLedger = Depends(get_ledger),
) -> list[ShiftRead]:
    """Closed shifts, newest first."""
    return [shift.to_record() for shift in await ledger.list_shifts(on_date)]


@router.get("/{shift_id}", response_model=ShiftRead)
async def get_shift(shift_id: str, ledger: ShiftLedger = Depends(get_ledger)) -> ShiftRead:
    return (await ledger.get_shift(shift_id)).to_record()


@router.post("/{shift_id}/reopen", response_model=ReopenResponse)
async def reopen_shift(
    shift_id: str,
    operator: Operator = Depends(get_current_operator),
    ledger: ShiftLedger = Depends(get_ledger),
) -> ReopenResponse:
    """Re-open a shift, discarding it and every shift closed after it."""
    outcome = await ledger.reopen_shift(shift_id)
    logger.info("shift.reopen_requested", shift_id=shift_id, requested_by=operator.username)
    return ReopenResponse(
        removed_shift_ids=[shift.id for shift in outcome.plan.removed_shifts],
        removed_deficit_expense_ids=sorted(outcome.plan.removed_deficit_expense_ids),
        new_cutoff=outcome.plan.new_cutoff,
        undo_token=outcome.undo.token,
        undo_expires_at=outcome.undo.expires_at,
    )


@router.post("/reopen/undo", response_model=UndoReopenResponse, status_code=status.HTTP_200_OK)
async def undo_reopen(
    undo_data: UndoReopenRequest,
    operator: Operator = Depends(get_current_operator),
    ledger: ShiftLedger = Depends(get_ledger),
) -> UndoReopenResponse:
    """Take back the last re-open while its undo window is still open."""
    plan = await ledger.undo_reopen(undo_data.undo_token)
    logger.info("shift.reopen_undo_requested", requested_by=operator.username)
    return UndoReopenResponse(
        restored_shift_ids=[shift.id for shift in plan.removed_shifts],
        restored_deficit_expense_ids=sorted(plan.removed_deficit_expense_ids),
        cutoff=plan.previous_cutoff,
    )
