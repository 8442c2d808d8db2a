"""Seed reference data for local development.

Creates an admin account, units of measure, categories, departments,
suppliers and a handful of items with their zero stock rows. Safe to run
repeatedly: anything that already exists is left alone.

Usage:
    cd backend
    python seed_data.py
"""

import sys
import os
from decimal import Decimal

# Ensure the backend package is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy import select

from storeroom.core.rbac import UserRole
from storeroom.core.security import get_password_hash
from storeroom.db.base import Base
from storeroom.db.session import SessionLocal, engine, unit_of_work
from storeroom.models import Category, Department, Item, Supplier, UnitOfMeasure, User
from storeroom.services.stock_ledger_service import StockLedger

UNITS = [("Piece", "pcs"), ("Box", "box"), ("Ream", "rm"), ("Litre", "L"), ("Kilogram", "kg")]
CATEGORIES = [
    ("Stationery", "Paper, pens and desk supplies"),
    ("Cleaning", "Detergents and janitorial supplies"),
    ("Electrical", "Bulbs, cables and fittings"),
]
DEPARTMENTS = [("Administration", "ADM"), ("Maintenance", "MNT"), ("Finance", "FIN")]
SUPPLIERS = [("Acme Office Supplies", "R. Roe", "+15550100"), ("CleanCo", "L. Kay", "+15550199")]
ITEMS = [
    ("STN-001", "A4 Paper", "Stationery", "rm", Decimal("10")),
    ("STN-002", "Blue Ballpoint Pens", "Stationery", "box", Decimal("5")),
    ("CLN-001", "Floor Detergent", "Cleaning", "L", Decimal("20")),
    ("ELC-001", "LED Bulb 9W", "Electrical", "pcs", Decimal("12")),
]


def _get_or_add(db, model, lookup: dict, **values):
    existing = db.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if existing is not None:
        return existing, False
    obj = model(**lookup, **values)
    db.add(obj)
    db.flush()
    return obj, True


def seed():
    """Insert reference data and items in one transaction."""
    if engine.url.get_backend_name() == "sqlite":
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        with unit_of_work(db):
            _seed_all(db)
        print("Seed data committed successfully.")
    finally:
        db.close()


def _seed_all(db):
    admin, created = _get_or_add(
        db, User, {"username": "admin"},
        email="admin@storeroom.local",
        full_name="Administrator",
        password_hash=get_password_hash(os.environ.get("SEED_ADMIN_PASSWORD", "admin123")),
        role=UserRole.ADMIN,
    )
    print(f"Admin user {'created' if created else 'exists'}")

    units = {}
    for name, abbreviation in UNITS:
        units[abbreviation], _ = _get_or_add(db, UnitOfMeasure, {"name": name}, abbreviation=abbreviation)

    categories = {}
    for name, description in CATEGORIES:
        categories[name], _ = _get_or_add(db, Category, {"name": name}, description=description)

    for name, code in DEPARTMENTS:
        _get_or_add(db, Department, {"name": name}, code=code)

    for name, person, phone in SUPPLIERS:
        _get_or_add(db, Supplier, {"name": name}, contact_person=person, contact_phone=phone)

    ledger = StockLedger(db)
    for code, name, category, unit, reorder_level in ITEMS:
        item, created = _get_or_add(
            db, Item, {"item_code": code},
            name=name,
            category_id=categories[category].id,
            unit_of_measure_id=units[unit].id,
            reorder_level=reorder_level,
            created_by=admin.id,
        )
        if created:
            ledger.open_stock(item.id)
    print(f"{len(UNITS)} units, {len(CATEGORIES)} categories, {len(DEPARTMENTS)} departments, "
          f"{len(SUPPLIERS)} suppliers, {len(ITEMS)} items ensured.")


if __name__ == "__main__":
    print("=" * 60)
    print("Storeroom - Seed Data")
    print("=" * 60)
    seed()
