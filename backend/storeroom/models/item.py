"""Item catalogue models: Item, Category and UnitOfMeasure."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeroom.db.base import Base, TimestampMixin


class Category(Base, TimestampMixin):
    """Grouping of items for reporting."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    items: Mapped[list["Item"]] = relationship("Item", back_populates="category")


class UnitOfMeasure(Base, TimestampMixin):
    """Unit an item is counted in (pcs, kg, box...)."""

    __tablename__ = "units_of_measure"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    abbreviation: Mapped[str] = mapped_column(String(20), nullable=False)


class Item(Base, TimestampMixin):
    """A stocked item. Its quantity lives in the 1:1 ``stock`` row."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True)
    item_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    unit_of_measure_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("units_of_measure.id"), nullable=True
    )
    reorder_level: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    has_expiry: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    category: Mapped[Optional["Category"]] = relationship("Category", back_populates="items")
    unit_of_measure: Mapped[Optional["UnitOfMeasure"]] = relationship("UnitOfMeasure")
    stock: Mapped[Optional["Stock"]] = relationship("Stock", back_populates="item", uselist=False)


# Forward references
from storeroom.models.stock import Stock
