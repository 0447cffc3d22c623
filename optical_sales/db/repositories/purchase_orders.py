
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from optical_sales.db.models.purchase_orders import PurchaseListOrder


async def get_purchase_order_by_id(
    db: AsyncSession,
    order_id: UUID
) -> Optional[PurchaseListOrder]:
    result = await db.execute(
        select(PurchaseListOrder).where(PurchaseListOrder.id == order_id)
    )
    return result.scalar_one_or_none()

async def list_purchase_orders(
    db: AsyncSession,
    product_id: Optional[UUID] = None,
) -> List[PurchaseListOrder]:
    stmt = select(PurchaseListOrder).order_by(PurchaseListOrder.created_at.desc())
    if product_id is not None:
        stmt = stmt.where(PurchaseListOrder.product_id == product_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def list_stocked_in_orders(
    db: AsyncSession,
    product_id: Optional[UUID] = None,
) -> List[PurchaseListOrder]:
    """Received lots only, oldest stock-in first.

    Rows are always reloaded from the database (``populate_existing``) so a
    caller deciding on stock never works from a stale identity-map copy.
    """
    stmt = (
        select(PurchaseListOrder)
        .where(PurchaseListOrder.stock_in_at.is_not(None))
        .order_by(PurchaseListOrder.stock_in_at, PurchaseListOrder.order_no)
        .execution_options(populate_existing=True)
    )
    if product_id is not None:
        stmt = stmt.where(PurchaseListOrder.product_id == product_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())
