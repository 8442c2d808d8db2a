"""Typed exceptions for stock mutations.

Every error carries a machine-readable ``code`` and structured attributes so
callers catch by type and render by field, never by parsing messages.

    StockError (base)
    |
    +-- ValidationFailedError     malformed header or lines
    +-- DuplicateNumberError      grn_number / issue_number already used
    +-- ItemNotFoundError         line references an unknown item
    +-- InsufficientStockError    issue would drive quantity below zero
    +-- TransactionAbortedError   store-level failure (deadlock, timeout, lost connection)
    +-- ImmutableMovementError    attempt to update or delete a ledger movement
"""

from decimal import Decimal
from typing import Any, Dict, Optional


class StockError(Exception):
    """Base exception for stock ledger and transaction errors."""

    code: str = "STOCK_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class ValidationFailedError(StockError):
    """Header or lines violate the receipt/issue preconditions."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class DuplicateNumberError(StockError):
    """A GRN or issue with this document number already exists."""

    code: str = "DUPLICATE_NUMBER"

    def __init__(self, document_type: str, number: str):
        self.document_type = document_type
        self.number = number
        super().__init__(f"{document_type} number '{number}' is already in use")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"document_type": self.document_type, "number": self.number})
        return data


class ItemNotFoundError(StockError):
    """A line references an item that does not exist."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["item_id"] = self.item_id
        return data


class InsufficientStockError(StockError):
    """Requested quantity exceeds what is on hand."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, available: Decimal, requested: Decimal):
        self.item_id = item_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for item {item_id}: requested {requested}, available {available}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "item_id": self.item_id,
            "available": str(self.available),
            "requested": str(self.requested),
        })
        return data


class TransactionAbortedError(StockError):
    """The store aborted the transaction; nothing was persisted."""

    code: str = "TRANSACTION_ABORTED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Transaction aborted: {reason}")


class ImmutableMovementError(StockError):
    """Stock movements are append-only."""

    code: str = "IMMUTABLE_MOVEMENT"

    def __init__(self, movement_id: Optional[int], operation: str):
        self.movement_id = movement_id
        self.operation = operation
        super().__init__(f"Stock movement {movement_id} cannot be {operation}")
