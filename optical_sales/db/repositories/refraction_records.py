
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from optical_sales.db.models.refraction_records import RefractionRecord


async def list_refraction_records(
    db: AsyncSession,
    customer_id: str
) -> List[RefractionRecord]:
    result = await db.execute(
        select(RefractionRecord)
        .where(RefractionRecord.customer_id == customer_id)
        .order_by(RefractionRecord.created_at.desc())
    )
    return list(result.scalars().all())
