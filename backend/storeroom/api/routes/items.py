"""Item routes. Creating an item opens its stock row at quantity 0."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser, RequireStorekeeper
from storeroom.db.session import DbSession, is_unique_violation, unit_of_work
from storeroom.models.item import Category, Item, UnitOfMeasure
from storeroom.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from storeroom.services.stock_ledger_service import StockLedger

logger = logging.getLogger(__name__)

router = APIRouter()


def _item_to_response(item: Item) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        item_code=item.item_code,
        name=item.name,
        description=item.description,
        category_id=item.category_id,
        unit_of_measure_id=item.unit_of_measure_id,
        reorder_level=item.reorder_level,
        has_expiry=item.has_expiry,
        is_active=item.is_active,
        category_name=item.category.name if item.category else None,
        unit_abbr=item.unit_of_measure.abbreviation if item.unit_of_measure else None,
        current_stock=item.stock.quantity if item.stock else 0,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _check_references(db, category_id: Optional[int], unit_of_measure_id: Optional[int]) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")
    if unit_of_measure_id is not None and db.get(UnitOfMeasure, unit_of_measure_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit of measure not found")


@router.get("", response_model=list[ItemResponse])
@limiter.limit("60/minute")
def list_items(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    category: Optional[int] = None,
    active: Optional[bool] = None,
):
    """List items with their current stock."""
    query = select(Item).options(
        selectinload(Item.category), selectinload(Item.unit_of_measure), selectinload(Item.stock)
    )
    if category is not None:
        query = query.where(Item.category_id == category)
    if active is not None:
        query = query.where(Item.is_active == active)
    items = db.execute(query.order_by(Item.name)).scalars().all()
    return [_item_to_response(i) for i in items]


@router.get("/{item_id}", response_model=ItemResponse)
@limiter.limit("60/minute")
def get_item(request: Request, item_id: int, db: DbSession, current_user: CurrentUser):
    """Get a single item."""
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return _item_to_response(item)


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_item(request: Request, item_data: ItemCreate, db: DbSession, current_user: RequireStorekeeper):
    """Create an item and its zero stock row in one transaction."""
    item_code = item_data.item_code.strip()
    existing = db.execute(select(Item.id).where(Item.item_code == item_code)).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Item code '{item_code}' already exists",
        )
    _check_references(db, item_data.category_id, item_data.unit_of_measure_id)

    with unit_of_work(db):
        item = Item(**item_data.model_dump(exclude={"item_code"}), item_code=item_code, created_by=current_user.id)
        db.add(item)
        try:
            db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same code
            if not is_unique_violation(e, "item_code"):
                raise
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Item code '{item_code}' already exists",
            ) from e
        StockLedger(db).open_stock(item.id)

    logger.info(f"Item {item_code} created by user {current_user.id}")
    db.refresh(item)
    return _item_to_response(item)


@router.put("/{item_id}", response_model=ItemResponse)
@limiter.limit("30/minute")
def update_item(
    request: Request, item_id: int, item_data: ItemUpdate, db: DbSession, current_user: RequireStorekeeper
):
    """Update an item's attributes. Stock is never written here."""
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    update_data = item_data.model_dump(exclude_unset=True)
    _check_references(db, update_data.get("category_id"), update_data.get("unit_of_measure_id"))

    with unit_of_work(db):
        for field, value in update_data.items():
            setattr(item, field, value)

    db.refresh(item)
    return _item_to_response(item)
