"""Report routes: dashboard counts, stock by category, department consumption."""

from datetime import date, timedelta
from decimal import Decimal

from fastapi import APIRouter, Request
from sqlalchemy import and_, func, select

from storeroom.core.config import settings
from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser
from storeroom.db.session import DbSession
from storeroom.models.department import Department
from storeroom.models.grn import GoodsReceivedNote
from storeroom.models.issue import StockIssue, StockIssueItem
from storeroom.models.item import Category, Item
from storeroom.models.stock import Stock
from storeroom.schemas.report import (
    CategoryStockRow,
    DashboardStats,
    DepartmentConsumptionRow,
)

router = APIRouter()


def _recent_cutoff() -> date:
    return date.today() - timedelta(days=settings.recent_activity_days)


@router.get("/dashboard-stats", response_model=DashboardStats)
@limiter.limit("60/minute")
def get_dashboard_stats(request: Request, db: DbSession, current_user: CurrentUser):
    """Active items, low-stock items, and GRNs/issues in the recent window."""
    cutoff = _recent_cutoff()

    total_items = db.scalar(
        select(func.count(Item.id)).where(Item.is_active == True)  # noqa: E712
    )
    low_stock = db.scalar(
        select(func.count(Stock.id))
        .join(Item, Stock.item_id == Item.id)
        .where(Item.is_active == True, Stock.quantity <= Item.reorder_level)  # noqa: E712
    )
    recent_grns = db.scalar(
        select(func.count(GoodsReceivedNote.id)).where(GoodsReceivedNote.received_date >= cutoff)
    )
    recent_issues = db.scalar(
        select(func.count(StockIssue.id)).where(StockIssue.issue_date >= cutoff)
    )

    return DashboardStats(
        total_items=total_items or 0,
        low_stock_items=low_stock or 0,
        recent_grns=recent_grns or 0,
        recent_issues=recent_issues or 0,
    )


@router.get("/stock-by-category", response_model=list[CategoryStockRow])
@limiter.limit("60/minute")
def get_stock_by_category(request: Request, db: DbSession, current_user: CurrentUser):
    """Active item count and total on-hand quantity per active category."""
    rows = db.execute(
        select(
            Category.name,
            func.count(Item.id),
            func.coalesce(func.sum(Stock.quantity), 0),
        )
        .outerjoin(Item, and_(Item.category_id == Category.id, Item.is_active == True))  # noqa: E712
        .outerjoin(Stock, Stock.item_id == Item.id)
        .where(Category.is_active == True)  # noqa: E712
        .group_by(Category.id, Category.name)
        .order_by(Category.name)
    ).all()

    return [
        CategoryStockRow(category=name, item_count=count, total_quantity=Decimal(str(total)))
        for name, count, total in rows
    ]


@router.get("/department-consumption", response_model=list[DepartmentConsumptionRow])
@limiter.limit("60/minute")
def get_department_consumption(request: Request, db: DbSession, current_user: CurrentUser):
    """Issues and quantity issued per active department in the recent window."""
    cutoff = _recent_cutoff()
    issue_count = func.count(func.distinct(StockIssue.id))

    rows = db.execute(
        select(
            Department.name,
            issue_count,
            func.coalesce(func.sum(StockIssueItem.quantity_issued), 0),
        )
        .outerjoin(
            StockIssue,
            and_(StockIssue.department_id == Department.id, StockIssue.issue_date >= cutoff),
        )
        .outerjoin(StockIssueItem, StockIssueItem.issue_id == StockIssue.id)
        .where(Department.is_active == True)  # noqa: E712
        .group_by(Department.id, Department.name)
        .order_by(issue_count.desc(), Department.name)
    ).all()

    return [
        DepartmentConsumptionRow(department=name, issue_count=count, items_issued=Decimal(str(total)))
        for name, count, total in rows
    ]
