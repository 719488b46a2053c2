# File: src/shiftledger/ledger/service.py
"""Shift ledger: calculate, close, reopen and undo against the database.

Every write path here runs as one transaction. On any SQLAlchemy error the
session is rolled back and TransactionError is raised; nothing is retried.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from functools import partial
from typing import Callable

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.core.errors import InvalidStateError, NotFoundError, TransactionError
from shiftledger.core.logging import get_logger
from shiftledger.ledger.closing import ClosedShiftDraft, finalize_shift
from shiftledger.ledger.registers import PendingUndo, PreviewRegister, UndoRegister
from shiftledger.ledger.reopen import ReopenPlan, plan_reopen
from shiftledger.ledger.summary import build_preview
from shiftledger.models.app_config import AppConfig
from shiftledger.models.daily_expense import DailyExpense
from shiftledger.models.operator import Operator
from shiftledger.models.sale import Sale
from shiftledger.models.shift import Shift
from shiftledger.models.shift_schemas import ShiftPreview
from shiftledger.utils.datetime import now_utc

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReopenOutcome:
    plan: ReopenPlan
    undo: PendingUndo


class ShiftLedger:
    """Request-scoped facade over one AsyncSession and the process registers."""

    def __init__(
        self,
        db: AsyncSession,
        previews: PreviewRegister,
        undo: UndoRegister,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.db = db
        self.previews = previews
        self.undo = undo
        self.clock = clock

    async def current_cutoff(self) -> datetime | None:
        return await AppConfig.read_cutoff(self.db)

    async def calculate(self, remember: bool = True) -> ShiftPreview:
        """Preview the open shift; by default keep it as the closable draft."""
        cutoff = await self.current_cutoff()
        sales = (await self.db.execute(select(Sale).order_by(Sale.created_at))).scalars().all()
        expenses = (
            await self.db.execute(select(DailyExpense).order_by(DailyExpense.date))
        ).scalars().all()

        preview = build_preview(cutoff, sales, expenses, self.clock())
        if remember:
            self.previews.remember(preview)

        logger.info(
            "shift.calculated",
            preview_id=preview.id,
            sales=len(preview.sales),
            expenses=len(preview.expenses),
            expected_in_drawer=str(preview.summary.expected_in_drawer),
        )
        return preview

    async def close_previewed_shift(
        self,
        preview_id: str,
        actual_amount: Decimal | float | str | None,
        closed_by: Operator,
    ) -> ClosedShiftDraft:
        preview = self.previews.get(preview_id)
        return await self.close_shift(preview, actual_amount, closed_by)

    async def close_shift(
        self,
        preview: ShiftPreview,
        actual_amount: Decimal | float | str | None,
        closed_by: Operator,
    ) -> ClosedShiftDraft:
        """Reconcile and persist the shift, its deficit expense and the new cutoff.

        Raises:
            ValidationError: bad cash count, nothing written
            InvalidStateError: the preview was computed against an older cutoff
            TransactionError: the write failed and was rolled back
        """
        draft = finalize_shift(preview, actual_amount, closed_by, self.clock())

        config = await AppConfig.load(self.db)
        if config.last_shift_report_time != preview.cutoff:
            raise InvalidStateError(
                "Shift preview is stale; calculate the shift again",
                code="STALE_PREVIEW",
                details={"preview_id": preview.id},
            )
        if preview.cutoff is not None and draft.new_cutoff <= preview.cutoff:
            raise InvalidStateError(
                "Close time is not after the previous shift close",
                details={"previous_cutoff": preview.cutoff.isoformat()},
            )
        unseen = await self._unseen_events(preview, draft.new_cutoff)
        if unseen["sale_ids"] or unseen["expense_ids"]:
            raise InvalidStateError(
                "Sales or expenses were recorded after the shift was calculated; calculate it again",
                code="STALE_PREVIEW",
                details={"preview_id": preview.id, **unseen},
            )

        try:
            if draft.synthetic_expense is not None:
                self.db.add(DailyExpense(**draft.synthetic_expense.model_dump()))
            self.db.add(Shift.from_record(draft.shift))
            config.last_shift_report_time = draft.new_cutoff
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("shift.close_failed", shift_id=preview.id, error=str(exc))
            raise TransactionError(
                "close_shift",
                "Closing the shift failed; nothing was saved",
                details={"shift_id": preview.id},
            ) from exc

        self.previews.discard()

        logger.info(
            "shift.closed",
            shift_id=draft.shift.id,
            ended_by=closed_by.username,
            expected=str(draft.shift.reconciliation.expected),
            actual=str(draft.shift.reconciliation.actual),
            reconciliation_type=draft.shift.reconciliation.type.value,
            synthetic_expense_id=draft.synthetic_expense.id if draft.synthetic_expense else None,
        )
        return draft

    async def _unseen_events(self, preview: ShiftPreview, ended_at: datetime) -> dict[str, list[str]]:
        """Ids inside (cutoff, ended_at] that are missing from the preview."""
        sale_stmt = select(Sale.id).where(
            Sale.created_at <= ended_at,
            Sale.id.not_in([sale.id for sale in preview.sales]),
        )
        expense_stmt = select(DailyExpense.id).where(
            DailyExpense.date <= ended_at,
            DailyExpense.id.not_in([expense.id for expense in preview.expenses]),
        )
        if preview.cutoff is not None:
            sale_stmt = sale_stmt.where(Sale.created_at > preview.cutoff)
            expense_stmt = expense_stmt.where(DailyExpense.date > preview.cutoff)

        return {
            "sale_ids": sorted((await self.db.scalars(sale_stmt)).all()),
            "expense_ids": sorted((await self.db.scalars(expense_stmt)).all()),
        }

    async def list_shifts(self, on_date: date | None = None) -> list[Shift]:
        """Closed shifts, newest first, optionally only those ended on ``on_date``."""
        stmt = select(Shift)
        if on_date is not None:
            day_start = datetime.combine(on_date, time.min)
            stmt = stmt.where(Shift.ended_at >= day_start, Shift.ended_at < day_start + timedelta(days=1))
        stmt = stmt.order_by(Shift.ended_at.desc(), Shift.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_shift(self, shift_id: str) -> Shift:
        shift = await self.db.get(Shift, shift_id)
        if shift is None:
            raise NotFoundError("Shift", shift_id)
        return shift

    async def reopen_shift(self, shift_id: str) -> ReopenOutcome:
        """Delete ``shift_id`` and every later shift, rewinding the cutoff.

        Raises:
            NotFoundError: no such shift
            TransactionError: the write failed and was rolled back
        """
        shifts = [shift.to_record() for shift in await self.list_shifts()]
        plan = plan_reopen(shift_id, shifts)
        removed_ids = [shift.id for shift in plan.removed_shifts]
        deficit_ids = sorted(plan.removed_deficit_expense_ids)

        config = await AppConfig.load(self.db)
        try:
            await self.db.execute(delete(Shift).where(Shift.id.in_(removed_ids)))
            if deficit_ids:
                await self.db.execute(
                    delete(DailyExpense).where(
                        DailyExpense.id.in_(deficit_ids),
                        DailyExpense.is_deficit.is_(True),
                    )
                )
            config.last_shift_report_time = plan.new_cutoff
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("shift.reopen_failed", shift_id=shift_id, error=str(exc))
            raise TransactionError(
                "reopen_shift",
                "Re-opening the shift failed; nothing was changed",
                details={"shift_id": shift_id},
            ) from exc

        # Any draft was cut from the old cutoff
        self.previews.discard()
        pending = self.undo.offer(partial(_restore_reopened, plan), now=self.clock())

        logger.info(
            "shift.reopened",
            shift_id=shift_id,
            removed_shift_ids=removed_ids,
            removed_deficit_expense_ids=deficit_ids,
            new_cutoff=plan.new_cutoff.isoformat() if plan.new_cutoff else None,
        )
        return ReopenOutcome(plan=plan, undo=pending)

    async def undo_reopen(self, token: str) -> ReopenPlan:
        """Run the pending reopen compensation once, if it has not expired.

        Raises:
            InvalidStateError: no live undo for ``token``, or the ledger moved on
            TransactionError: the restore failed; the undo stays available
        """
        pending = self.undo.claim(token, self.clock())
        try:
            plan = await pending.compensation(self.db)
        except TransactionError:
            self.undo.release(pending, self.clock())
            raise

        self.previews.discard()
        logger.info(
            "shift.reopen_undone",
            restored_shift_ids=[shift.id for shift in plan.removed_shifts],
            cutoff=plan.previous_cutoff.isoformat() if plan.previous_cutoff else None,
        )
        return plan


async def _restore_reopened(plan: ReopenPlan, db: AsyncSession) -> ReopenPlan:
    """Compensation for a reopen: put the shifts, deficits and cutoff back."""
    config = await AppConfig.load(db)
    if config.last_shift_report_time != plan.new_cutoff:
        raise InvalidStateError(
            "Shifts were closed after the reopen; it can no longer be undone",
            code="UNDO_EXPIRED",
        )

    try:
        for record in sorted(plan.removed_shifts, key=lambda s: (s.ended_at, s.id)):
            db.add(Shift.from_record(record))
        for expense in plan.removed_deficit_expenses:
            db.add(DailyExpense(**expense.model_dump()))
        config.last_shift_report_time = plan.previous_cutoff
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("shift.reopen_undo_failed", error=str(exc))
        raise TransactionError(
            "undo_reopen",
            "Undoing the re-open failed; nothing was changed",
        ) from exc
    return plan
