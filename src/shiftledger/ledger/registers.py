# File: src/shiftledger/ledger/registers.py
"""In-memory single-slot registers for the open preview and the reopen undo.

Both live on ``app.state`` for the life of the process. There is one
register of authority for the drawer, so one slot each is enough.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.core.errors import InvalidStateError, NotFoundError
from shiftledger.models.shift_schemas import ShiftPreview

Compensation = Callable[[AsyncSession], Awaitable[Any]]


class PreviewRegister:
    """Holds the most recent "calculate" result so it can be closed by id."""

    def __init__(self) -> None:
        self._preview: ShiftPreview | None = None

    def remember(self, preview: ShiftPreview) -> ShiftPreview:
        self._preview = preview
        return preview

    def get(self, preview_id: str) -> ShiftPreview:
        if self._preview is None or self._preview.id != preview_id:
            raise NotFoundError("ShiftPreview", preview_id)
        return self._preview

    def discard(self) -> None:
        self._preview = None


@dataclass(frozen=True)
class PendingUndo:
    token: str
    expires_at: datetime
    compensation: Compensation

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class UndoRegister:
    """One compensating action at a time, usable once, with an expiry.

    Offering a new action drops the previous one.
    """

    def __init__(self, window: timedelta = timedelta(seconds=10)) -> None:
        self.window = window
        self._pending: PendingUndo | None = None

    @property
    def pending(self) -> PendingUndo | None:
        return self._pending

    def offer(self, compensation: Compensation, now: datetime) -> PendingUndo:
        self._pending = PendingUndo(
            token=secrets.token_urlsafe(16),
            expires_at=now + self.window,
            compensation=compensation,
        )
        return self._pending

    def claim(self, token: str, now: datetime) -> PendingUndo:
        """Take the pending action out of the slot.

        Raises:
            InvalidStateError: unknown, already used or expired token
        """
        pending = self._pending
        if pending is None or not secrets.compare_digest(pending.token, token):
            raise InvalidStateError(
                "Nothing to undo",
                code="UNDO_EXPIRED",
                details={"undo_token": token},
            )
        self._pending = None
        if pending.is_expired(now):
            raise InvalidStateError(
                "Undo window has expired",
                code="UNDO_EXPIRED",
                details={"expired_at": pending.expires_at.isoformat()},
            )
        return pending

    def release(self, pending: PendingUndo, now: datetime) -> None:
        """Put a claimed action back after its compensation failed to commit."""
        if self._pending is None and not pending.is_expired(now):
            self._pending = pending

    def clear(self) -> None:
        self._pending = None
