"""Pydantic schemas for DailyExpense API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shiftledger.core.validators import sanitize_text, validate_positive_amount


class DailyExpenseCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    notes: str | None = Field(None, max_length=500)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_positive_amount(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v)


class DailyExpenseUpdate(BaseModel):
    amount: Decimal | None = Field(None, gt=0, decimal_places=2)
    notes: str | None = Field(None, max_length=500)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_positive_amount(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v)


class DailyExpenseRead(BaseModel):
    id: str
    amount: Decimal
    notes: str
    date: datetime
    cashier: str
    is_deficit: bool

    model_config = ConfigDict(from_attributes=True)
