"""Stock issue schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class IssueLineCreate(BaseModel):
    """One line of an issue request."""

    item_id: int
    quantity: Decimal


class StockIssueHeader(BaseModel):
    """Header fields of a stock issue."""

    issue_number: str
    department_id: int
    issued_to_person: Optional[str] = None
    issue_date: date
    purpose: Optional[str] = None
    notes: Optional[str] = None


class StockIssueCreate(StockIssueHeader):
    """Issue request: header plus lines."""

    items: List[IssueLineCreate] = []


class StockIssueItemResponse(BaseModel):
    """Issue line response schema."""

    id: int
    item_id: int
    quantity_requested: Decimal
    quantity_issued: Decimal

    model_config = {"from_attributes": True}


class StockIssueResponse(StockIssueHeader):
    """Issue header response schema."""

    id: int
    issued_by: Optional[int] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StockIssueDetailResponse(StockIssueResponse):
    """Issue with its lines."""

    department_name: Optional[str] = None
    items: List[StockIssueItemResponse] = []


class StockIssueSummaryResponse(StockIssueResponse):
    """Issue row for listings."""

    department_name: Optional[str] = None
    issued_by_name: Optional[str] = None
    item_count: int = 0
