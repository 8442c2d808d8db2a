"""Report schemas."""

from decimal import Decimal

from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Headline counts for the dashboard."""

    total_items: int
    low_stock_items: int
    recent_grns: int
    recent_issues: int


class CategoryStockRow(BaseModel):
    category: str
    item_count: int
    total_quantity: Decimal


class DepartmentConsumptionRow(BaseModel):
    department: str
    issue_count: int
    items_issued: Decimal
