"""Goods received note models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeroom.db.base import Base, TimestampMixin


class GoodsReceivedNote(Base, TimestampMixin):
    """Header for a delivery of goods from a supplier."""

    __tablename__ = "goods_received_notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    grn_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    supplier_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("suppliers.id"), nullable=True, index=True
    )
    delivery_note_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    received_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    received_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    supplier: Mapped[Optional["Supplier"]] = relationship("Supplier")
    receiver: Mapped[Optional["User"]] = relationship("User")
    items: Mapped[list["GrnItem"]] = relationship(
        "GrnItem", back_populates="grn", order_by="GrnItem.id"
    )


class GrnItem(Base):
    """One received line of a GRN."""

    __tablename__ = "grn_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_grn_item_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    grn_id: Mapped[int] = mapped_column(
        ForeignKey("goods_received_notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    batch_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    grn: Mapped["GoodsReceivedNote"] = relationship("GoodsReceivedNote", back_populates="items")
    item: Mapped["Item"] = relationship("Item")


# Forward references
from storeroom.models.item import Item
from storeroom.models.supplier import Supplier
from storeroom.models.user import User
