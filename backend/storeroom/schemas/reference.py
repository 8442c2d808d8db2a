"""Reference data schemas: categories, units, departments, suppliers."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}


class UnitOfMeasureResponse(BaseModel):
    id: int
    name: str
    abbreviation: str

    model_config = {"from_attributes": True}


class DepartmentResponse(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    head_of_department: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}


class SupplierResponse(BaseModel):
    id: int
    name: str
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    address: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}
