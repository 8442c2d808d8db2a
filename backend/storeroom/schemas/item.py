"""Item schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ItemBase(BaseModel):
    """Base item schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_of_measure_id: Optional[int] = None
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)
    has_expiry: bool = False


class ItemCreate(ItemBase):
    """Item creation schema."""

    item_code: str = Field(..., min_length=1, max_length=50)


class ItemUpdate(BaseModel):
    """Item update schema. ``item_code`` is the item's identity and cannot change."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_of_measure_id: Optional[int] = None
    reorder_level: Optional[Decimal] = Field(default=None, ge=0)
    has_expiry: Optional[bool] = None
    is_active: Optional[bool] = None


class ItemResponse(ItemBase):
    """Item response schema."""

    id: int
    item_code: str
    is_active: bool
    category_name: Optional[str] = None
    unit_abbr: Optional[str] = None
    current_stock: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime
