
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from optical_sales.core.clock import today_compact


async def next_document_no(db: AsyncSession, model, prefix: str) -> str:
    """Next ``{prefix}{YYYYMMDD}{NN}`` number for ``model.order_no``.

    The sequence restarts every day at 01 and is at least two digits wide.
    """
    day_prefix = f"{prefix}{today_compact()}"
    result = await db.execute(
        select(model.order_no).where(model.order_no.like(f"{day_prefix}%"))
    )
    seqs = []
    for (order_no,) in result.all():
        tail = order_no[len(day_prefix):]
        if tail.isdigit():
            seqs.append(int(tail))
    return f"{day_prefix}{max(seqs, default=0) + 1:02d}"
