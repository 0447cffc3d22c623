
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from optical_sales.db.models.fulfillment import SalesCustomOrder, SalesOutboundRecord
from optical_sales.db.models.sales_orders import SalesOrder


async def get_sales_order_by_id(
    db: AsyncSession,
    order_id: UUID
) -> Optional[SalesOrder]:
    result = await db.execute(
        select(SalesOrder).where(SalesOrder.id == order_id)
    )
    return result.scalar_one_or_none()

async def list_sales_orders(
    db: AsyncSession,
    customer_id: Optional[str] = None,
) -> List[SalesOrder]:
    """Newest first."""
    stmt = select(SalesOrder).order_by(SalesOrder.created_at.desc(), SalesOrder.order_no.desc())
    if customer_id is not None:
        stmt = stmt.where(SalesOrder.customer_id == customer_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def list_outbound_records(
    db: AsyncSession,
    sales_order_id: Optional[UUID] = None,
) -> List[SalesOutboundRecord]:
    stmt = select(SalesOutboundRecord).order_by(SalesOutboundRecord.created_at)
    if sales_order_id is not None:
        stmt = stmt.where(SalesOutboundRecord.sales_order_id == sales_order_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def list_custom_orders(
    db: AsyncSession,
    sales_order_id: Optional[UUID] = None,
) -> List[SalesCustomOrder]:
    stmt = select(SalesCustomOrder).order_by(SalesCustomOrder.created_at)
    if sales_order_id is not None:
        stmt = stmt.where(SalesCustomOrder.sales_order_id == sales_order_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())
