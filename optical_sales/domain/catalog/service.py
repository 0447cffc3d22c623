# optical_sales/domain/catalog/service.py
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.core.errors import NotFoundError
from optical_sales.db.models.catalog import Category, Product
from optical_sales.db.repositories.catalog import get_category_by_id, get_product_by_id
from optical_sales.domain.inventory.degree_keys import NO_VARIANT, ProductKind, classify_category
from .schemas import CategoryCreate, ProductCreate, ProductOut


def product_display_name(product: Product) -> str:
    """``名称（标注）`` when the product carries an annotation (full-width brackets)."""
    annotation = (product.annotation or "").strip()
    return f"{product.name}（{annotation}）" if annotation else product.name


def product_spec_display(product: Product) -> str:
    """Parameter text copied onto a sale line for non-refraction products."""
    parts = [
        str(p).strip()
        for p in (product.specification, product.model, product.finished_glasses_type)
        if p and str(p).strip()
    ]
    return " / ".join(parts) if parts else NO_VARIANT


def to_product_out(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        category_id=product.category_id,
        annotation=product.annotation,
        price=product.price,
        specification=product.specification,
        model=product.model,
        finished_glasses_type=product.finished_glasses_type,
        display_name=product_display_name(product),
        spec_display=product_spec_display(product),
    )


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    category = Category(name=data.name.strip())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    if data.category_id is not None and await get_category_by_id(db, data.category_id) is None:
        raise NotFoundError("Category not found", category_id=str(data.category_id))

    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product


async def get_product_kind(db: AsyncSession, product: Product) -> ProductKind:
    category: Optional[Category] = None
    if product.category_id is not None:
        category = await get_category_by_id(db, product.category_id)
    return classify_category(category.name if category else None)


async def require_product(db: AsyncSession, product_id: UUID) -> Product:
    product = await get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError("Product not found", product_id=str(product_id))
    return product
