# optical_sales/api/v1/routes_sales.py
from fastapi import APIRouter, Depends
from uuid import UUID
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.core.errors import NotFoundError
from optical_sales.db.base import get_db
from optical_sales.db.repositories.sales_orders import (
    get_sales_order_by_id,
    list_custom_orders,
    list_outbound_records,
    list_sales_orders,
)
from optical_sales.domain.sales.schemas import (
    FulfillmentRecordOut,
    RepriceOut,
    RepriceRequest,
    SaleItemDraft,
    SaleItemDraftOut,
    SalesOrderCreate,
    SalesOrderOut,
    SubmitOrderOut,
)
from optical_sales.domain.sales.service import draft_sale_items, reprice, submit_sales_order


router = APIRouter(prefix="/api/v1", tags=["sales"])


@router.post("/sales/items/draft", response_model=SaleItemDraftOut)
async def draft_items_endpoint(
    payload: SaleItemDraft,
    db: AsyncSession = Depends(get_db),
):
    return SaleItemDraftOut(items=await draft_sale_items(db, payload))

@router.post("/sales/items/reprice", response_model=RepriceOut)
async def reprice_endpoint(payload: RepriceRequest):
    return reprice(payload)

@router.post("/sales-orders", response_model=SubmitOrderOut)
async def submit_sales_order_endpoint(
    payload: SalesOrderCreate,
    db: AsyncSession = Depends(get_db),
):
    result = await submit_sales_order(db, payload)
    return SubmitOrderOut(
        order=SalesOrderOut.model_validate(result.order),
        outbound=[FulfillmentRecordOut.model_validate(r) for r in result.outbound],
        custom=[FulfillmentRecordOut.model_validate(r) for r in result.custom],
    )

@router.get("/sales-orders", response_model=List[SalesOrderOut])
async def list_sales_orders_endpoint(
    customer_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await list_sales_orders(db, customer_id)

@router.get("/sales-orders/{order_id}", response_model=SalesOrderOut)
async def get_sales_order_endpoint(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    order = await get_sales_order_by_id(db, order_id)
    if order is None:
        raise NotFoundError("Sales order not found", order_id=str(order_id))
    return order

@router.get("/sales-outbound", response_model=List[FulfillmentRecordOut])
async def list_outbound_endpoint(
    sales_order_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    return await list_outbound_records(db, sales_order_id)

@router.get("/sales-custom-orders", response_model=List[FulfillmentRecordOut])
async def list_custom_orders_endpoint(
    sales_order_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    return await list_custom_orders(db, sales_order_id)
