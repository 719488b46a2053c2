# File: src/shiftledger/models/sale.py
"""Sale and SaleItem models.

A sale is settled once created; returns mutate it in place by raising
``SaleItem.returned_qty`` and lowering ``total_amount``/``profit``.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from shiftledger.core.db import Base
from shiftledger.utils.datetime import now_utc


def _new_id() -> str:
    return str(uuid.uuid4())


class Sale(Base):
    """Settled sale."""

    __tablename__ = "sales"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        default=now_utc,
        index=True,
    )

    # Stamped when a return touches the sale
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    cashier: Mapped[str] = mapped_column(String(100), nullable=False)

    # Free text on purpose: unknown methods are kept, not rejected
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    return_delivery_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )

    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem",
        back_populates="sale",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="SaleItem.position",
    )

    @property
    def discount_ratio(self) -> Decimal:
        """Share of the subtotal given away as discount; 0 for a zero subtotal."""
        if not self.subtotal or self.subtotal <= 0:
            return Decimal("0")
        return Decimal(self.discount_amount or 0) / Decimal(self.subtotal)

    def __repr__(self) -> str:
        return (
            f"<Sale(id={self.id}, payment_method={self.payment_method}, "
            f"total_amount={self.total_amount})>"
        )


class SaleItem(Base):
    """Line item of a sale."""

    __tablename__ = "sale_items"
    __table_args__ = (
        CheckConstraint("returned_qty >= 0", name="sale_item_returned_qty_non_negative"),
        CheckConstraint("returned_qty <= quantity", name="sale_item_returned_qty_within_quantity"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)

    sale_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    size: Mapped[str | None] = mapped_column(String(50), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    returned_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")

    @validates("returned_qty")
    def validate_returned_qty(self, key: str, value: int) -> int:
        """returned_qty never goes below zero or past the sold quantity."""
        if value < 0:
            raise ValueError("Returned quantity cannot be negative")
        if self.quantity is not None and value > self.quantity:
            raise ValueError("Returned quantity cannot exceed sold quantity")
        return value

    @property
    def display_name(self) -> str:
        """Product name with its variant, e.g. ``Shirt (Blue/M)``."""
        return f"{self.product_name} ({self.color}/{self.size})"

    def __repr__(self) -> str:
        return (
            f"<SaleItem(id={self.id}, product_name={self.product_name}, "
            f"quantity={self.quantity}, returned_qty={self.returned_qty})>"
        )
