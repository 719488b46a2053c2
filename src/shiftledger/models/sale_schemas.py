"""Pydantic schemas for Sale API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shiftledger.core.validators import validate_currency


class SaleItemCreate(BaseModel):
    """Line item of a new sale."""

    product_name: str = Field(..., min_length=1, max_length=200)
    color: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=50)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)
    purchase_price: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)

    @field_validator("unit_price", "purchase_price")
    @classmethod
    def validate_currency_fields(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class SaleCreate(BaseModel):
    """Schema for recording a settled sale.

    ``subtotal`` defaults to the sum of line totals and ``total_amount`` to
    subtotal minus discount.
    """

    payment_method: str = Field(..., min_length=1, max_length=30)
    discount_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    subtotal: Decimal | None = Field(None, ge=0, decimal_places=2)
    total_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    items: list[SaleItemCreate] = Field(..., min_length=1)

    @field_validator("discount_amount", "subtotal", "total_amount")
    @classmethod
    def validate_currency_fields(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @model_validator(mode="after")
    def fill_totals(self) -> "SaleCreate":
        if self.subtotal is None:
            self.subtotal = sum(
                (item.unit_price * item.quantity for item in self.items), Decimal("0.00")
            )
        if self.discount_amount > self.subtotal:
            raise ValueError("Discount cannot exceed subtotal")
        if self.total_amount is None:
            self.total_amount = self.subtotal - self.discount_amount
        return self


class SaleItemRead(BaseModel):
    id: str
    product_name: str
    color: str | None
    size: str | None
    quantity: int
    unit_price: Decimal
    purchase_price: Decimal
    returned_qty: int

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    """Schema for reading a sale."""

    id: str
    created_at: datetime
    updated_at: datetime | None
    cashier: str
    payment_method: str
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    profit: Decimal
    return_delivery_fee: Decimal
    items: list[SaleItemRead]

    model_config = ConfigDict(from_attributes=True)


class ReturnLine(BaseModel):
    item_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0)


class SaleReturnRequest(BaseModel):
    """Items being brought back against one sale."""

    lines: list[ReturnLine] = Field(default_factory=list)
    return_delivery_fee: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)

    @field_validator("return_delivery_fee")
    @classmethod
    def validate_fee(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @model_validator(mode="after")
    def require_something(self) -> "SaleReturnRequest":
        if not self.lines and self.return_delivery_fee == 0:
            raise ValueError("Nothing to return")
        return self
