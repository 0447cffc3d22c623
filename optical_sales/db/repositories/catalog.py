
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from optical_sales.db.models.catalog import Category, Product


async def get_category_by_id(
    db: AsyncSession,
    category_id: UUID
) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id)
    )
    return result.scalar_one_or_none()

async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())

async def get_product_by_id(
    db: AsyncSession,
    product_id: UUID
) -> Optional[Product]:
    result = await db.execute(
        select(Product).where(Product.id == product_id)
    )
    return result.scalar_one_or_none()

async def list_products(
    db: AsyncSession,
    category_id: Optional[UUID] = None
) -> List[Product]:
    stmt = select(Product).order_by(Product.name)
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def category_names_by_product(db: AsyncSession) -> dict[UUID, str]:
    """product id -> category name ("" when the product has no category)."""
    result = await db.execute(
        select(Product.id, Category.name).outerjoin(Category, Category.id == Product.category_id)
    )
    return {pid: (name or "") for pid, name in result.all()}
