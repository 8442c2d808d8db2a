"""Goods received note schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class GrnLineCreate(BaseModel):
    """One line of a receipt request."""

    item_id: int
    quantity: Decimal
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    notes: Optional[str] = None


class GRNHeader(BaseModel):
    """Header fields of a goods received note."""

    grn_number: str
    supplier_id: Optional[int] = None
    delivery_note_number: Optional[str] = None
    received_date: date
    notes: Optional[str] = None


class GRNCreate(GRNHeader):
    """Receipt request: header plus lines."""

    items: List[GrnLineCreate] = []


class GrnItemResponse(BaseModel):
    """GRN line response schema."""

    id: int
    item_id: int
    quantity: Decimal
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class GRNResponse(GRNHeader):
    """GRN header response schema."""

    id: int
    received_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class GRNDetailResponse(GRNResponse):
    """GRN with its lines."""

    supplier_name: Optional[str] = None
    items: List[GrnItemResponse] = []


class GRNSummaryResponse(GRNResponse):
    """GRN row for listings."""

    supplier_name: Optional[str] = None
    received_by_name: Optional[str] = None
    item_count: int = 0
