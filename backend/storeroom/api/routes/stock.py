"""Stock level, movement history and reconciliation routes.

Read-only: stock changes only through GRNs and issues.
"""

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser, RequireStorekeeper
from storeroom.db.session import DbSession
from storeroom.models.item import Category, Item, UnitOfMeasure
from storeroom.models.stock import Stock, StockMovement
from storeroom.schemas.stock import (
    BalanceCheckResponse,
    StockLevelResponse,
    StockMovementResponse,
)
from storeroom.services.stock_ledger_service import StockLedger

router = APIRouter()

MOVEMENT_HISTORY_LIMIT = 100


def _stock_levels_query():
    return (
        select(
            Stock.item_id,
            Item.item_code,
            Item.name.label("item_name"),
            Category.name.label("category_name"),
            UnitOfMeasure.abbreviation.label("unit"),
            Stock.quantity,
            Item.reorder_level,
            Stock.last_updated,
        )
        .join(Item, Stock.item_id == Item.id)
        .outerjoin(Category, Item.category_id == Category.id)
        .outerjoin(UnitOfMeasure, Item.unit_of_measure_id == UnitOfMeasure.id)
        .where(Item.is_active == True)  # noqa: E712
    )


@router.get("/levels", response_model=list[StockLevelResponse])
@limiter.limit("60/minute")
def get_stock_levels(request: Request, db: DbSession, current_user: CurrentUser):
    """Current stock of every active item."""
    rows = db.execute(_stock_levels_query().order_by(Item.name)).all()
    return [StockLevelResponse(**row._mapping) for row in rows]


@router.get("/low-stock", response_model=list[StockLevelResponse])
@limiter.limit("60/minute")
def get_low_stock(request: Request, db: DbSession, current_user: CurrentUser):
    """Active items at or below their reorder level, most short first."""
    rows = db.execute(
        _stock_levels_query()
        .where(Stock.quantity <= Item.reorder_level)
        .order_by(Stock.quantity - Item.reorder_level, Item.name)
    ).all()
    return [StockLevelResponse(**row._mapping) for row in rows]


@router.get("/movements/{item_id}", response_model=list[StockMovementResponse])
@limiter.limit("60/minute")
def get_stock_movements(request: Request, item_id: int, db: DbSession, current_user: CurrentUser):
    """Latest movements for an item, newest first."""
    if db.get(Item, item_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    movements = db.execute(
        select(StockMovement)
        .where(StockMovement.item_id == item_id)
        .order_by(StockMovement.movement_date.desc(), StockMovement.id.desc())
        .limit(MOVEMENT_HISTORY_LIMIT)
    ).scalars().all()
    return movements


@router.get("/reconcile/{item_id}", response_model=BalanceCheckResponse)
@limiter.limit("30/minute")
def reconcile_stock(request: Request, item_id: int, db: DbSession, current_user: RequireStorekeeper):
    """Compare an item's stock quantity with the sum of its movements."""
    check = StockLedger(db).verify_balance(item_id)
    return BalanceCheckResponse(
        item_id=check.item_id,
        quantity=check.quantity,
        ledger_total=check.ledger_total,
        movement_count=check.movement_count,
        consistent=check.consistent,
    )
