"""Stock issue models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeroom.db.base import Base, TimestampMixin


class IssueStatus(str, Enum):
    """Issue lifecycle. Issues are written fully issued; there is no partial state."""

    ISSUED = "issued"


class StockIssue(Base, TimestampMixin):
    """Header for stock handed out to a department."""

    __tablename__ = "stock_issues"

    id: Mapped[int] = mapped_column(primary_key=True)
    issue_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id"), nullable=False, index=True
    )
    issued_to_person: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    issued_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    issue_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    purpose: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=IssueStatus.ISSUED.value, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    department: Mapped["Department"] = relationship("Department")
    issuer: Mapped[Optional["User"]] = relationship("User")
    items: Mapped[list["StockIssueItem"]] = relationship(
        "StockIssueItem", back_populates="issue", order_by="StockIssueItem.id"
    )


class StockIssueItem(Base):
    """One issued line. Requested and issued quantities are always equal."""

    __tablename__ = "stock_issue_items"
    __table_args__ = (
        CheckConstraint("quantity_requested > 0", name="ck_issue_item_requested_positive"),
        CheckConstraint("quantity_issued > 0", name="ck_issue_item_issued_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    issue_id: Mapped[int] = mapped_column(
        ForeignKey("stock_issues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    quantity_requested: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity_issued: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    issue: Mapped["StockIssue"] = relationship("StockIssue", back_populates="items")
    item: Mapped["Item"] = relationship("Item")


# Forward references
from storeroom.models.department import Department
from storeroom.models.item import Item
from storeroom.models.user import User
