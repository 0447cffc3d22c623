# optical_sales/api/v1/routes_catalog.py
from fastapi import APIRouter, Depends
from uuid import UUID
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.db.base import get_db
from optical_sales.db.repositories.catalog import list_categories, list_products
from optical_sales.domain.catalog.schemas import CategoryCreate, CategoryOut, ProductCreate, ProductOut
from optical_sales.domain.catalog.service import (
    create_category,
    create_product,
    require_product,
    to_product_out,
)


router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.post("/categories", response_model=CategoryOut)
async def create_category_endpoint(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_category(db, payload)

@router.get("/categories", response_model=List[CategoryOut])
async def list_categories_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_categories(db)

@router.post("/products", response_model=ProductOut)
async def create_product_endpoint(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db),
):
    product = await create_product(db, payload)
    return to_product_out(product)

@router.get("/products", response_model=List[ProductOut])
async def list_products_endpoint(
    category_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    return [to_product_out(p) for p in await list_products(db, category_id)]

@router.get("/products/{product_id}", response_model=ProductOut)
async def get_product_endpoint(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return to_product_out(await require_product(db, product_id))
