# optical_sales/domain/inventory/schemas.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Dict, List, Optional


class LensPurchaseRow(BaseModel):
    """One variant line of a purchase lot (a lens power, a frame code, or "—")."""

    degree: str = ""
    quantity: int = Field(ge=0)
    unit_price: float = Field(default=0, ge=0)


class PurchaseOrderCreate(BaseModel):
    product_id: UUID
    rows: List[LensPurchaseRow]
    stock_in: bool = False


class PurchaseOrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_no: str
    product_id: UUID
    product_name: str
    rows: List[LensPurchaseRow]
    stock_in_at: Optional[datetime]
    version: int
    created_at: datetime


class StockIndexOut(BaseModel):
    products: Dict[str, Dict[str, int]]


class FrameVariantsOut(BaseModel):
    product_id: UUID
    variants: List[str]
