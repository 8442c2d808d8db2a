"""Stock issue routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser, RequireStorekeeper
from storeroom.db.session import DbSession
from storeroom.models.issue import StockIssue
from storeroom.schemas.issue import (
    StockIssueCreate,
    StockIssueDetailResponse,
    StockIssueResponse,
    StockIssueSummaryResponse,
)
from storeroom.services.stock_transaction_service import StockTransactionService

router = APIRouter()


@router.get("", response_model=list[StockIssueSummaryResponse])
@limiter.limit("60/minute")
def list_issues(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    department_id: Optional[int] = None,
):
    """List stock issues, newest first."""
    query = select(StockIssue).options(
        selectinload(StockIssue.department),
        selectinload(StockIssue.issuer),
        selectinload(StockIssue.items),
    )
    if department_id is not None:
        query = query.where(StockIssue.department_id == department_id)
    issues = db.execute(
        query.order_by(StockIssue.issue_date.desc(), StockIssue.created_at.desc())
    ).scalars().all()

    return [
        StockIssueSummaryResponse.model_validate(issue).model_copy(update={
            "department_name": issue.department.name if issue.department else None,
            "issued_by_name": issue.issuer.full_name if issue.issuer else None,
            "item_count": len(issue.items),
        })
        for issue in issues
    ]


@router.get("/{issue_id}", response_model=StockIssueDetailResponse)
@limiter.limit("60/minute")
def get_issue(request: Request, issue_id: int, db: DbSession, current_user: CurrentUser):
    """Get a stock issue with its line items."""
    issue = db.get(StockIssue, issue_id)
    if not issue:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")

    response = StockIssueDetailResponse.model_validate(issue)
    response.department_name = issue.department.name if issue.department else None
    return response


@router.post("", response_model=StockIssueResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_issue(
    request: Request, issue_data: StockIssueCreate, db: DbSession, current_user: RequireStorekeeper
):
    """Issue stock to a department. Fails whole if any line is short."""
    service = StockTransactionService(db)
    return service.issue(issue_data, issue_data.items, performed_by=current_user.id)
