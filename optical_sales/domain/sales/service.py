# optical_sales/domain/sales/service.py
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Mapping, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.core.clock import utcnow
from optical_sales.core.config import settings
from optical_sales.core.errors import BusinessError, StockConsistencyError
from optical_sales.db.models.catalog import Product
from optical_sales.db.models.fulfillment import SalesCustomOrder, SalesOutboundRecord
from optical_sales.db.models.sales_orders import SalesOrder
from optical_sales.db.repositories.catalog import get_product_by_id
from optical_sales.db.repositories.numbering import next_document_no
from optical_sales.db.repositories.purchase_orders import list_stocked_in_orders
from optical_sales.domain.catalog.service import (
    get_product_kind,
    product_display_name,
    product_spec_display,
    require_product,
)
from optical_sales.domain.inventory.degree_keys import ProductKind, is_custom_lens_spec, resolve_stock
from optical_sales.domain.inventory.service import deduct, product_lock
from optical_sales.domain.inventory.stock_index import build_stock_index
from optical_sales.domain.pricing.derivation import PricedLine, apply_edit, discount_display
from optical_sales.domain.refraction.codec import eye_spec, format_for_spec, has_refraction_data
from .schemas import RepriceOut, RepriceRequest, SaleItem, SaleItemDraft, SalesOrderCreate

log = logging.getLogger(__name__)

OUTBOUND = "outbound"
CUSTOM = "custom"


# ---------------------------------------------------------------------------
# Drafting and repricing lines
# ---------------------------------------------------------------------------

def _new_item(product: Product, spec_display: str) -> SaleItem:
    line = PricedLine.new(float(product.price or 0))
    return SaleItem(
        product_id=str(product.id),
        product_name=product_display_name(product),
        spec_display=spec_display,
        quantity=line.quantity,
        retail_price=line.retail_price,
        discount=line.discount,
        sales_price=line.sales_price,
    )


async def draft_sale_items(db: AsyncSession, data: SaleItemDraft) -> List[SaleItem]:
    """Lines for a product just added to the sale.

    A lens with refraction data takes the refraction as its spec: one
    binocular line by default, or one line per eye when ``eye_choice`` asks
    for it. Every other product copies its own parameter text.
    """
    product = await require_product(db, data.product_id)
    kind = await get_product_kind(db, product)
    rows = data.refraction_rows

    if kind is not ProductKind.LENS or not has_refraction_data(rows):
        return [_new_item(product, product_spec_display(product))]

    if data.eye_choice == "right":
        specs = [eye_spec(rows, "right")]
    elif data.eye_choice == "left":
        specs = [eye_spec(rows, "left")]
    elif data.eye_choice == "both":
        specs = [s for s in (eye_spec(rows, "right"), eye_spec(rows, "left")) if s]
    else:
        specs = [format_for_spec(rows)]
    return [_new_item(product, spec) for spec in specs]


def reprice(data: RepriceRequest) -> RepriceOut:
    item = data.item
    line = apply_edit(
        PricedLine(item.quantity, item.retail_price, item.discount, item.sales_price),
        quantity=data.quantity,
        discount=data.discount,
        sales_price=data.sales_price,
    )
    preset, label = discount_display(line.discount)
    return RepriceOut(
        item=item.model_copy(
            update={"quantity": line.quantity, "discount": line.discount, "sales_price": line.sales_price}
        ),
        discount_preset=preset,
        discount_label=label,
    )


# ---------------------------------------------------------------------------
# Fulfillment decision
# ---------------------------------------------------------------------------

@dataclass
class LineDecision:
    kind: str
    reason: str
    degree: Optional[str] = None
    available: int = 0


def precheck_line(product_kind: Optional[ProductKind], spec_display: str) -> Optional[LineDecision]:
    """Lines that go to custom order without looking at stock."""
    if product_kind is None:
        return LineDecision(CUSTOM, "unresolved_product")
    if product_kind is ProductKind.LENS and is_custom_lens_spec(spec_display):
        return LineDecision(CUSTOM, "add_or_prism")
    return None


def decide_line(
    product_kind: Optional[ProductKind],
    by_degree: Optional[Mapping[str, int]],
    spec_display: str,
    quantity: int,
) -> LineDecision:
    """Outbound only when the matched key covers the whole quantity."""
    early = precheck_line(product_kind, spec_display)
    if early is not None:
        return early
    degree, available = resolve_stock(by_degree, product_kind, spec_display)
    if degree is not None and available >= quantity:
        return LineDecision(OUTBOUND, "in_stock", degree, available)
    return LineDecision(CUSTOM, "no_stock", degree, available)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

@dataclass
class SubmitResult:
    order: SalesOrder
    outbound: List[SalesOutboundRecord] = field(default_factory=list)
    custom: List[SalesCustomOrder] = field(default_factory=list)


def _as_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


async def _resolve_product(db: AsyncSession, product_id: str) -> Optional[Product]:
    pid = _as_uuid(product_id)
    return await get_product_by_id(db, pid) if pid is not None else None


def _record_fields(order: SalesOrder, item: SaleItem) -> dict:
    return dict(
        sales_order_id=order.id,
        sales_order_no=order.order_no,
        product_id=item.product_id,
        product_name=item.product_name,
        spec_display=item.spec_display,
        quantity=item.quantity,
    )


async def create_sales_order(db: AsyncSession, data: SalesOrderCreate) -> SalesOrder:
    if not data.customer_id.strip():
        raise BusinessError("Select a customer first")
    if not data.items:
        raise BusinessError("Add at least one item")

    total = sum(it.sales_price for it in data.items)
    order = SalesOrder(
        order_no=await next_document_no(db, SalesOrder, settings.SALES_ORDER_PREFIX),
        date=data.date or utcnow().date(),
        customer_id=data.customer_id,
        customer_name=data.customer_name,
        items=[
            {
                "product_id": it.product_id,
                "product_name": it.product_name,
                "spec_display": it.spec_display,
                "quantity": it.quantity,
                "sales_price": it.sales_price,
            }
            for it in data.items
        ],
        total_amount=Decimal(str(total)).quantize(Decimal("0.01")),
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    return order


async def _fulfill_line(db: AsyncSession, order: SalesOrder, item: SaleItem, result: SubmitResult) -> LineDecision:
    product = await _resolve_product(db, item.product_id)
    kind = await get_product_kind(db, product) if product is not None else None

    decision = precheck_line(kind, item.spec_display)
    if decision is None:
        async with product_lock(product.id):
            lots = await list_stocked_in_orders(db, product.id)
            by_degree = build_stock_index(lots, {product.id: kind}).get(product.id, {})
            decision = decide_line(kind, by_degree, item.spec_display, item.quantity)
            if decision.kind == OUTBOUND:
                try:
                    await deduct(db, product.id, decision.degree, item.quantity, order.order_no)
                except StockConsistencyError:
                    await db.rollback()
                    raise
                record = SalesOutboundRecord(**_record_fields(order, item))
                db.add(record)
                await db.commit()
                result.outbound.append(record)
                return decision

    record = SalesCustomOrder(**_record_fields(order, item))
    db.add(record)
    await db.commit()
    result.custom.append(record)
    return decision


async def submit_sales_order(db: AsyncSession, data: SalesOrderCreate) -> SubmitResult:
    """Create the order, then route every line to outbound or custom order.

    The order header is committed first and each line commits on its own.
    No line is ever split between stock and custom order. If a deduction
    hits a consistency violation, the order and the lines already processed
    stay committed, and the error propagates to the caller.
    """
    order = await create_sales_order(db, data)
    order_no = order.order_no
    result = SubmitResult(order=order)
    log.info("sales order %s created with %d line(s)", order_no, len(data.items))

    for idx, item in enumerate(data.items, start=1):
        try:
            decision = await _fulfill_line(db, order, item, result)
        except StockConsistencyError:
            log.error("sales order %s line %d: stock bookkeeping inconsistent, reconcile manually", order_no, idx)
            raise
        log.info(
            "sales order %s line %d (%s x%d): %s [%s]",
            order_no, idx, item.product_name, item.quantity, decision.kind, decision.reason,
        )
    return result
