# optical_sales/domain/inventory/service.py
import asyncio
import logging
import weakref
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from optical_sales.core.clock import utcnow
from optical_sales.core.config import settings
from optical_sales.core.errors import BusinessError, NotFoundError, StockConsistencyError
from optical_sales.db.models.purchase_orders import PurchaseListOrder
from optical_sales.db.repositories.catalog import category_names_by_product
from optical_sales.db.repositories.numbering import next_document_no
from optical_sales.db.repositories.purchase_orders import get_purchase_order_by_id, list_stocked_in_orders
from optical_sales.domain.catalog.service import product_display_name, require_product
from .degree_keys import ProductKind, classify_category
from .lots import DeductionPlan, plan_deduction
from .schemas import PurchaseOrderCreate
from .stock_index import StockIndex, build_stock_index, in_stock_variants

log = logging.getLogger(__name__)

# In-process serialization of stock decisions per product. Cross-process
# races are caught by the version check on purchase_list_orders. An entry
# lives only while some task holds or waits on its lock.
_product_locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def product_lock(product_id: UUID) -> asyncio.Lock:
    lock = _product_locks.get(product_id)
    if lock is None:
        lock = asyncio.Lock()
        _product_locks[product_id] = lock
    return lock


async def product_kinds(db: AsyncSession) -> Dict[UUID, ProductKind]:
    names = await category_names_by_product(db)
    return {pid: classify_category(name) for pid, name in names.items()}


async def load_stock_index(db: AsyncSession, product_id: Optional[UUID] = None) -> StockIndex:
    lots = await list_stocked_in_orders(db, product_id)
    return build_stock_index(lots, await product_kinds(db))


async def list_frame_variants(db: AsyncSession, product_id: UUID) -> list[str]:
    await require_product(db, product_id)
    index = await load_stock_index(db, product_id)
    return in_stock_variants(index.get(product_id, {}))


async def create_purchase_order(db: AsyncSession, data: PurchaseOrderCreate) -> PurchaseListOrder:
    product = await require_product(db, data.product_id)
    if not data.rows:
        raise BusinessError("A purchase order needs at least one row")

    order = PurchaseListOrder(
        order_no=await next_document_no(db, PurchaseListOrder, settings.PURCHASE_ORDER_PREFIX),
        product_id=product.id,
        product_name=product_display_name(product),
        rows=[r.model_dump() for r in data.rows],
        stock_in_at=utcnow() if data.stock_in else None,
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    log.info("purchase order %s created for %s (%d rows)", order.order_no, order.product_id, len(order.rows))
    return order


async def stock_in(db: AsyncSession, order_id: UUID) -> PurchaseListOrder:
    order = await get_purchase_order_by_id(db, order_id)
    if order is None:
        raise NotFoundError("Purchase order not found", order_id=str(order_id))
    if order.stock_in_at is not None:
        raise BusinessError("Purchase order already stocked in", order_no=order.order_no)

    order.stock_in_at = utcnow()
    await db.commit()
    await db.refresh(order)
    log.info("purchase order %s stocked in", order.order_no)
    return order


async def deduct(
    db: AsyncSession,
    product_id: UUID,
    degree: str,
    qty: int,
    sales_order_no: Optional[str] = None,
) -> DeductionPlan:
    """Apply a FIFO deduction to the product's lots and flush it.

    The caller owns the transaction (and the product lock). Raises
    ``StockConsistencyError`` when the lots cannot cover ``qty`` or another
    writer updated one of the lots first.
    """
    lots = await list_stocked_in_orders(db, product_id)
    plan = plan_deduction(lots, degree, qty)
    if plan.remaining > 0:
        log.error(
            "lots of %s short by %d for %r (requested %d, order %s)",
            product_id, plan.remaining, degree, qty, sales_order_no,
        )
        raise StockConsistencyError(str(product_id), degree, qty, plan.remaining, sales_order_no)

    for change in plan.changes:
        change.lot.rows = change.rows
    try:
        await db.flush()
    except StaleDataError as exc:
        log.error("concurrent update on lots of %s while deducting %r: %s", product_id, degree, exc)
        raise StockConsistencyError(str(product_id), degree, qty, qty, sales_order_no) from exc

    log.debug(
        "deducted %d x %r from %s across %d lot(s)",
        plan.deducted, degree, product_id, len(plan.changes),
    )
    return plan
