"""API routes."""

from fastapi import APIRouter

from storeroom.api.routes import auth, grn, issues, items, reference, reports, stock

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(items.router, prefix="/items", tags=["items"])
api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
api_router.include_router(grn.router, prefix="/grn", tags=["grn"])
api_router.include_router(issues.router, prefix="/issues", tags=["issues"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
# Categories, units, departments and suppliers mount at the API root
api_router.include_router(reference.router)
