# optical_sales/domain/sales/schemas.py
from datetime import date as date_type, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import List, Literal, Optional

from optical_sales.domain.refraction.schemas import RefractionRow


class SaleItem(BaseModel):
    """A line of an in-progress sale.

    ``sales_price`` and ``discount`` are kept mutually derivable from
    ``retail_price`` x ``quantity``; see ``domain.pricing.derivation``.
    """

    product_id: str
    product_name: str
    spec_display: str = ""
    quantity: int = Field(default=1, ge=1)
    retail_price: float = Field(default=0, ge=0)
    discount: float = Field(default=1, ge=0)
    sales_price: float = Field(default=0, ge=0)


class SaleItemDraft(BaseModel):
    product_id: UUID
    refraction_rows: List[RefractionRow] = []
    # lens lines only: one line for both eyes (None), or split per eye
    eye_choice: Optional[Literal["both", "right", "left"]] = None


class SaleItemDraftOut(BaseModel):
    items: List[SaleItem]


class RepriceRequest(BaseModel):
    item: SaleItem
    quantity: Optional[int] = Field(default=None, ge=1)
    discount: Optional[float] = Field(default=None, ge=0, le=1)
    sales_price: Optional[float] = Field(default=None, ge=0)


class RepriceOut(BaseModel):
    item: SaleItem
    discount_preset: Optional[float]
    discount_label: str


class SalesOrderCreate(BaseModel):
    customer_id: str
    customer_name: str = ""
    date: Optional[date_type] = None
    items: List[SaleItem]


class SalesOrderLine(BaseModel):
    product_id: str
    product_name: str
    spec_display: str
    quantity: int
    sales_price: float


class SalesOrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_no: str
    date: date_type
    customer_id: str
    customer_name: str
    items: List[SalesOrderLine]
    total_amount: Decimal
    created_at: datetime


class FulfillmentRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sales_order_id: UUID
    sales_order_no: str
    product_id: str
    product_name: str
    spec_display: str
    quantity: int
    created_at: datetime


class SubmitOrderOut(BaseModel):
    order: SalesOrderOut
    outbound: List[FulfillmentRecordOut]
    custom: List[FulfillmentRecordOut]
