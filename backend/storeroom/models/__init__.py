"""SQLAlchemy models."""

from storeroom.models.user import User
from storeroom.models.supplier import Supplier
from storeroom.models.department import Department
from storeroom.models.item import Item, Category, UnitOfMeasure
from storeroom.models.stock import Stock, StockMovement, MovementType, ReferenceType
from storeroom.models.grn import GoodsReceivedNote, GrnItem
from storeroom.models.issue import StockIssue, StockIssueItem, IssueStatus

__all__ = [
    "User",
    "Supplier",
    "Department",
    "Item",
    "Category",
    "UnitOfMeasure",
    "Stock",
    "StockMovement",
    "MovementType",
    "ReferenceType",
    "GoodsReceivedNote",
    "GrnItem",
    "StockIssue",
    "StockIssueItem",
    "IssueStatus",
]
