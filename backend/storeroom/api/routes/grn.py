"""Goods received note routes."""

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser, RequireStorekeeper
from storeroom.db.session import DbSession
from storeroom.models.grn import GoodsReceivedNote
from storeroom.schemas.grn import (
    GRNCreate,
    GRNDetailResponse,
    GRNResponse,
    GRNSummaryResponse,
)
from storeroom.services.stock_transaction_service import StockTransactionService

router = APIRouter()


@router.get("", response_model=list[GRNSummaryResponse])
@limiter.limit("60/minute")
def list_grns(request: Request, db: DbSession, current_user: CurrentUser):
    """List GRNs, newest first."""
    grns = db.execute(
        select(GoodsReceivedNote)
        .options(
            selectinload(GoodsReceivedNote.supplier),
            selectinload(GoodsReceivedNote.receiver),
            selectinload(GoodsReceivedNote.items),
        )
        .order_by(GoodsReceivedNote.received_date.desc(), GoodsReceivedNote.created_at.desc())
    ).scalars().all()

    return [
        GRNSummaryResponse.model_validate(grn).model_copy(update={
            "supplier_name": grn.supplier.name if grn.supplier else None,
            "received_by_name": grn.receiver.full_name if grn.receiver else None,
            "item_count": len(grn.items),
        })
        for grn in grns
    ]


@router.get("/{grn_id}", response_model=GRNDetailResponse)
@limiter.limit("60/minute")
def get_grn(request: Request, grn_id: int, db: DbSession, current_user: CurrentUser):
    """Get a GRN with its line items."""
    grn = db.get(GoodsReceivedNote, grn_id)
    if not grn:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="GRN not found")

    response = GRNDetailResponse.model_validate(grn)
    response.supplier_name = grn.supplier.name if grn.supplier else None
    return response


@router.post("", response_model=GRNResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_grn(request: Request, grn_data: GRNCreate, db: DbSession, current_user: RequireStorekeeper):
    """Receive goods: the header, every line and every stock increase commit together."""
    service = StockTransactionService(db)
    return service.receive(grn_data, grn_data.items, performed_by=current_user.id)
