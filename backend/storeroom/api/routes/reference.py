"""Reference data routes: categories, units of measure, departments, suppliers."""

from fastapi import APIRouter, Request
from sqlalchemy import select

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser
from storeroom.db.session import DbSession
from storeroom.models.department import Department
from storeroom.models.item import Category, UnitOfMeasure
from storeroom.models.supplier import Supplier
from storeroom.schemas.reference import (
    CategoryResponse,
    DepartmentResponse,
    SupplierResponse,
    UnitOfMeasureResponse,
)

router = APIRouter()


@router.get("/categories", response_model=list[CategoryResponse], tags=["categories"])
@limiter.limit("60/minute")
def list_categories(request: Request, db: DbSession, current_user: CurrentUser):
    """Active categories."""
    return db.execute(
        select(Category).where(Category.is_active == True).order_by(Category.name)  # noqa: E712
    ).scalars().all()


@router.get("/units", response_model=list[UnitOfMeasureResponse], tags=["units"])
@limiter.limit("60/minute")
def list_units(request: Request, db: DbSession, current_user: CurrentUser):
    return db.execute(select(UnitOfMeasure).order_by(UnitOfMeasure.name)).scalars().all()


@router.get("/departments", response_model=list[DepartmentResponse], tags=["departments"])
@limiter.limit("60/minute")
def list_departments(request: Request, db: DbSession, current_user: CurrentUser):
    """Active departments."""
    return db.execute(
        select(Department).where(Department.is_active == True).order_by(Department.name)  # noqa: E712
    ).scalars().all()


@router.get("/suppliers", response_model=list[SupplierResponse], tags=["suppliers"])
@limiter.limit("60/minute")
def list_suppliers(request: Request, db: DbSession, current_user: CurrentUser):
    """Active suppliers."""
    return db.execute(
        select(Supplier).where(Supplier.is_active == True).order_by(Supplier.name)  # noqa: E712
    ).scalars().all()
