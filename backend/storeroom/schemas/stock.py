"""Stock schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class StockLevelResponse(BaseModel):
    """Current stock of one active item."""

    item_id: int
    item_code: str
    item_name: str
    category_name: Optional[str] = None
    unit: Optional[str] = None
    quantity: Decimal
    reorder_level: Decimal
    last_updated: datetime


class StockMovementResponse(BaseModel):
    """Stock movement response schema."""

    id: int
    item_id: int
    movement_type: str
    quantity: Decimal
    balance_after: Decimal
    reference_type: str
    reference_id: int
    performed_by: Optional[int] = None
    reason: Optional[str] = None
    movement_date: date
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceCheckResponse(BaseModel):
    """Stock quantity compared with the signed sum of its movements."""

    item_id: int
    quantity: Decimal
    ledger_total: Decimal
    movement_count: int
    consistent: bool
