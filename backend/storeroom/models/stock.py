"""Stock models: Stock (current balance) and StockMovement (ledger)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, event, func, inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeroom.core.exceptions import ImmutableMovementError
from storeroom.db.base import Base


class MovementType(str, Enum):
    """Direction of a stock movement."""

    IN = "IN"
    OUT = "OUT"


class ReferenceType(str, Enum):
    """Document that caused a movement."""

    GRN = "GRN"
    ISSUE = "ISSUE"


class Stock(Base):
    """Current quantity per item. Written only by the stock ledger."""

    __tablename__ = "stock"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stock_quantity_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item: Mapped["Item"] = relationship("Item", back_populates="stock")


class StockMovement(Base):
    """Append-only ledger of every stock change (single source of truth)."""

    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_movement_quantity_positive"),
        CheckConstraint("balance_after >= 0", name="ck_movement_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    movement_type: Mapped[str] = mapped_column(String(10), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    reference_type: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    performed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    movement_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item: Mapped["Item"] = relationship("Item")

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity if self.movement_type == MovementType.IN.value else -self.quantity


@event.listens_for(StockMovement, "before_update")
def _reject_movement_update(mapper, connection, target):
    state = inspect(target)
    if any(attr.history.has_changes() for attr in state.attrs):
        raise ImmutableMovementError(target.id, "updated")


@event.listens_for(StockMovement, "before_delete")
def _reject_movement_delete(mapper, connection, target):
    raise ImmutableMovementError(target.id, "deleted")


# Forward references
from storeroom.models.item import Item
