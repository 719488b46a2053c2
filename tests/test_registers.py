"""Tests for the preview and undo single-slot registers."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from shiftledger.core.errors import InvalidStateError, NotFoundError
from shiftledger.ledger.registers import PreviewRegister, UndoRegister
from shiftledger.models.shift_schemas import ShiftPreview, ShiftSummary

NOW = datetime(2025, 3, 1, 18, 0, 0)


async def _noop(db):
    return None


def _preview(preview_id: str) -> ShiftPreview:
    return ShiftPreview(
        id=preview_id,
        cutoff=None,
        started_at=datetime(1970, 1, 1),
        summary=ShiftSummary(expected_in_drawer=Decimal("1.00")),
        calculated_at=NOW,
    )


class TestPreviewRegister:
    def test_get_remembered_preview(self):
        register = PreviewRegister()
        preview = register.remember(_preview("SHIFT-A"))

        assert register.get("SHIFT-A") is preview

    def test_newer_preview_replaces_older(self):
        register = PreviewRegister()
        register.remember(_preview("SHIFT-A"))
        register.remember(_preview("SHIFT-B"))

        with pytest.raises(NotFoundError):
            register.get("SHIFT-A")
        assert register.get("SHIFT-B").id == "SHIFT-B"

    def test_discard_empties_slot(self):
        register = PreviewRegister()
        register.remember(_preview("SHIFT-A"))
        register.discard()

        with pytest.raises(NotFoundError):
            register.get("SHIFT-A")


class TestUndoRegister:
    """One pending compensation, claimable once before it expires."""

    def test_claim_within_window(self):
        register = UndoRegister(window=timedelta(seconds=10))
        pending = register.offer(_noop, NOW)

        assert pending.expires_at == NOW + timedelta(seconds=10)
        assert register.claim(pending.token, NOW + timedelta(seconds=9)) is pending
        assert register.pending is None

    def test_token_is_single_use(self):
        register = UndoRegister()
        pending = register.offer(_noop, NOW)
        register.claim(pending.token, NOW)

        with pytest.raises(InvalidStateError) as exc_info:
            register.claim(pending.token, NOW)

        assert exc_info.value.code == "UNDO_EXPIRED"

    def test_expired_token_rejected_and_dropped(self):
        register = UndoRegister(window=timedelta(seconds=10))
        pending = register.offer(_noop, NOW)

        with pytest.raises(InvalidStateError) as exc_info:
            register.claim(pending.token, NOW + timedelta(seconds=10))

        assert exc_info.value.code == "UNDO_EXPIRED"
        assert register.pending is None

    def test_unknown_token_keeps_pending(self):
        register = UndoRegister()
        pending = register.offer(_noop, NOW)

        with pytest.raises(InvalidStateError):
            register.claim("not-the-token", NOW)

        assert register.pending is pending

    def test_new_offer_replaces_old(self):
        register = UndoRegister()
        first = register.offer(_noop, NOW)
        second = register.offer(_noop, NOW)

        assert first.token != second.token
        with pytest.raises(InvalidStateError):
            register.claim(first.token, NOW)
        assert register.claim(second.token, NOW) is second

    def test_release_restores_unexpired_claim(self):
        register = UndoRegister()
        pending = register.offer(_noop, NOW)
        register.claim(pending.token, NOW)

        register.release(pending, NOW + timedelta(seconds=1))

        assert register.pending is pending

    def test_release_drops_expired_claim(self):
        register = UndoRegister(window=timedelta(seconds=10))
        pending = register.offer(_noop, NOW)
        register.claim(pending.token, NOW)

        register.release(pending, NOW + timedelta(seconds=11))

        assert register.pending is None
