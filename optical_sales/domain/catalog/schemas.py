# optical_sales/domain/catalog/schemas.py
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Optional


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    category_id: Optional[UUID] = None
    annotation: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    specification: Optional[str] = None
    model: Optional[str] = None
    finished_glasses_type: Optional[str] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category_id: Optional[UUID]
    annotation: Optional[str]
    price: Decimal
    specification: Optional[str]
    model: Optional[str]
    finished_glasses_type: Optional[str]
    display_name: str
    spec_display: str
