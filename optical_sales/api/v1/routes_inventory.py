# optical_sales/api/v1/routes_inventory.py
from fastapi import APIRouter, Depends
from uuid import UUID
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.db.base import get_db
from optical_sales.db.repositories.purchase_orders import list_purchase_orders
from optical_sales.domain.inventory.schemas import (
    FrameVariantsOut,
    PurchaseOrderCreate,
    PurchaseOrderOut,
    StockIndexOut,
)
from optical_sales.domain.inventory.service import (
    create_purchase_order,
    list_frame_variants,
    load_stock_index,
    stock_in,
)


router = APIRouter(prefix="/api/v1", tags=["inventory"])


@router.post("/purchase-orders", response_model=PurchaseOrderOut)
async def create_purchase_order_endpoint(
    payload: PurchaseOrderCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_purchase_order(db, payload)

@router.get("/purchase-orders", response_model=List[PurchaseOrderOut])
async def list_purchase_orders_endpoint(
    product_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    return await list_purchase_orders(db, product_id)

@router.post("/purchase-orders/{order_id}/stock-in", response_model=PurchaseOrderOut)
async def stock_in_endpoint(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await stock_in(db, order_id)

@router.get("/stock", response_model=StockIndexOut)
async def stock_index_endpoint(db: AsyncSession = Depends(get_db)):
    index = await load_stock_index(db)
    return StockIndexOut(products={str(pid): by_degree for pid, by_degree in index.items()})

@router.get("/stock/{product_id}/variants", response_model=FrameVariantsOut)
async def frame_variants_endpoint(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    variants = await list_frame_variants(db, product_id)
    return FrameVariantsOut(product_id=product_id, variants=variants)
