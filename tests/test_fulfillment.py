from decimal import Decimal

import pytest

from optical_sales.core.errors import BusinessError, NotFoundError, StockConsistencyError
from optical_sales.db.repositories.purchase_orders import list_stocked_in_orders
from optical_sales.db.repositories.sales_orders import (
    list_custom_orders,
    list_outbound_records,
    list_sales_orders,
)
from optical_sales.domain.inventory.degree_keys import NO_VARIANT, ProductKind
from optical_sales.domain.refraction.schemas import RefractionRow
from optical_sales.domain.sales.schemas import SaleItem, SaleItemDraft, SalesOrderCreate
from optical_sales.domain.sales.service import (
    CUSTOM,
    OUTBOUND,
    decide_line,
    draft_sale_items,
    submit_sales_order,
)

LENS_KEY = "-2.00/+0.00"


def item(product, spec, quantity=1, price=100.0):
    return SaleItem(
        product_id=str(product.id) if not isinstance(product, str) else product,
        product_name=getattr(product, "name", "unknown"),
        spec_display=spec,
        quantity=quantity,
        retail_price=price,
        discount=1.0,
        sales_price=price * quantity,
    )


def order(*items, customer_id="C001"):
    return SalesOrderCreate(customer_id=customer_id, customer_name="张三", items=list(items))


async def lot_rows(session, product_id):
    return [lot.rows for lot in await list_stocked_in_orders(session, product_id)]


# ---------- pure decision ----------

def test_unresolved_product_goes_custom():
    d = decide_line(None, {LENS_KEY: 5}, "右：-2.00", 1)
    assert (d.kind, d.reason) == (CUSTOM, "unresolved_product")


def test_add_or_prism_goes_custom_even_with_stock():
    d = decide_line(ProductKind.LENS, {LENS_KEY: 10}, "右：-2.00 | ADD：+1.00", 1)
    assert (d.kind, d.reason) == (CUSTOM, "add_or_prism")


def test_line_is_never_split():
    d = decide_line(ProductKind.LENS, {LENS_KEY: 3}, "右：-2.00/-0.00", 4)
    assert (d.kind, d.reason, d.degree, d.available) == (CUSTOM, "no_stock", LENS_KEY, 3)

    d = decide_line(ProductKind.LENS, {LENS_KEY: 3}, "右：-2.00/-0.00", 3)
    assert (d.kind, d.degree) == (OUTBOUND, LENS_KEY)


def test_frame_and_other_decisions():
    assert decide_line(ProductKind.FRAME, {"TX-1": 1}, "TX-1", 1).kind == OUTBOUND
    assert decide_line(ProductKind.FRAME, {"TX-1": 1}, "TX-2", 1).kind == CUSTOM
    assert decide_line(ProductKind.FRAME, {"TX-1": 1}, "", 1).kind == CUSTOM
    assert decide_line(ProductKind.OTHER, {NO_VARIANT: 2}, "—", 2).kind == OUTBOUND
    assert decide_line(ProductKind.OTHER, {}, "—", 1).kind == CUSTOM


# ---------- drafting ----------

async def test_draft_lens_line_from_refraction(session, lens):
    rows = [RefractionRow(eye="right", sphere="-2.00"), RefractionRow(eye="left", sphere="-1.50")]

    both = await draft_sale_items(session, SaleItemDraft(product_id=lens.id, refraction_rows=rows))
    assert [i.spec_display for i in both] == ["右：-2.00 ；左：-1.50"]
    assert both[0].sales_price == 300.0

    split = await draft_sale_items(
        session, SaleItemDraft(product_id=lens.id, refraction_rows=rows, eye_choice="both")
    )
    assert [i.spec_display for i in split] == ["右：-2.00", "左：-1.50"]

    left = await draft_sale_items(
        session, SaleItemDraft(product_id=lens.id, refraction_rows=rows, eye_choice="left")
    )
    assert [i.spec_display for i in left] == ["左：-1.50"]


async def test_draft_frame_line_copies_product_spec(session, frame):
    items = await draft_sale_items(session, SaleItemDraft(product_id=frame.id))
    assert items[0].spec_display == "TX-1"
    assert items[0].product_name == "钛架"


async def test_draft_unknown_product(session, lens):
    with pytest.raises(NotFoundError):
        await draft_sale_items(session, SaleItemDraft(product_id=lens.category_id))


# ---------- submission ----------

async def test_submit_requires_customer_and_items(session, lens):
    with pytest.raises(BusinessError):
        await submit_sales_order(session, order(item(lens, "右：-2.00"), customer_id=" "))
    with pytest.raises(BusinessError):
        await submit_sales_order(session, order())
    assert await list_sales_orders(session) == []


async def test_in_stock_line_goes_outbound_and_deducts(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 3}])

    result = await submit_sales_order(session, order(item(lens, "右：-2.00", quantity=2)))

    assert result.order.order_no.startswith("XS")
    assert len(result.outbound) == 1 and result.custom == []
    assert result.outbound[0].sales_order_no == result.order.order_no
    assert await lot_rows(session, lens.id) == [[{"degree": LENS_KEY, "quantity": 1}]]


async def test_short_stock_goes_custom_without_touching_lots(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 3}])

    result = await submit_sales_order(session, order(item(lens, "右：-2.00/-0.00", quantity=4)))

    assert result.outbound == []
    assert [r.quantity for r in result.custom] == [4]
    assert await lot_rows(session, lens.id) == [[{"degree": LENS_KEY, "quantity": 3}]]


async def test_add_power_line_goes_custom(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 3}])

    result = await submit_sales_order(session, order(item(lens, "右：-2.00 | ADD：+2.00")))

    assert result.outbound == [] and len(result.custom) == 1
    assert await lot_rows(session, lens.id) == [[{"degree": LENS_KEY, "quantity": 3}]]


async def test_unresolved_products_go_custom(session, lens):
    result = await submit_sales_order(
        session,
        order(item("not-a-uuid", "右：-2.00"), item(str(lens.category_id), "右：-2.00")),
    )
    assert len(result.custom) == 2
    assert result.outbound == []


async def test_fifo_across_lots(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 5}], days_after=1)
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 5}], days_after=0)

    await submit_sales_order(session, order(item(lens, "右：-2.00", quantity=7)))

    # oldest stock-in first: the day-0 lot is emptied, the day-1 lot keeps 3
    assert await lot_rows(session, lens.id) == [[], [{"degree": LENS_KEY, "quantity": 3}]]


async def test_repeated_product_sees_earlier_lines(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 3}])

    result = await submit_sales_order(
        session,
        order(item(lens, "右：-2.00", quantity=2), item(lens, "左：-2.00", quantity=2)),
    )

    assert [r.spec_display for r in result.outbound] == ["右：-2.00"]
    assert [r.spec_display for r in result.custom] == ["左：-2.00"]
    assert await lot_rows(session, lens.id) == [[{"degree": LENS_KEY, "quantity": 1}]]


async def test_frame_and_other_lines(session, frame, cloth, receive_lot):
    await receive_lot(frame, [{"degree": "TX-1", "quantity": 1}, {"degree": "", "quantity": 2}])
    await receive_lot(cloth, [{"degree": "", "quantity": 10}])

    result = await submit_sales_order(
        session,
        order(item(frame, "TX-1"), item(cloth, "—", quantity=4)),
    )

    assert len(result.outbound) == 2
    assert await lot_rows(session, frame.id) == [[{"degree": "", "quantity": 2}]]
    assert await lot_rows(session, cloth.id) == [[{"degree": "", "quantity": 6}]]


async def test_frame_line_without_variant_goes_custom(session, frame, receive_lot):
    await receive_lot(frame, [{"degree": "", "quantity": 2}, {"degree": "—", "quantity": 1}])

    result = await submit_sales_order(session, order(item(frame, ""), item(frame, "—")))

    assert result.outbound == []
    assert len(result.custom) == 2
    assert await lot_rows(session, frame.id) == [[{"degree": "", "quantity": 2}, {"degree": "—", "quantity": 1}]]



async def test_order_header_and_total(session, frame):
    first = await submit_sales_order(session, order(item(frame, "TX-1", price=500.0), item("gone", "", price=0.5)))
    second = await submit_sales_order(session, order(item(frame, "TX-1")))

    assert first.order.total_amount == Decimal("500.50")
    assert first.order.order_no[-2:] == "01"
    assert second.order.order_no[-2:] == "02"
    assert first.order.items[0]["spec_display"] == "TX-1"


async def test_consistency_violation_keeps_header_and_committed_lines(
    session, lens, receive_lot, monkeypatch
):
    lens_id = lens.id
    await receive_lot(lens, [{"degree": LENS_KEY, "quantity": 3}])
    # a stale index claims more stock than the lots hold
    monkeypatch.setattr(
        "optical_sales.domain.sales.service.build_stock_index",
        lambda lots, kinds: {lens_id: {LENS_KEY: 99}},
    )

    with pytest.raises(StockConsistencyError) as exc_info:
        await submit_sales_order(
            session,
            order(item("gone", "—"), item(lens, "右：-2.00", quantity=5)),
        )

    assert exc_info.value.unfulfilled == 2
    orders = await list_sales_orders(session)
    assert len(orders) == 1
    assert exc_info.value.sales_order_no == orders[0].order_no
    assert len(await list_custom_orders(session, orders[0].id)) == 1
    assert await list_outbound_records(session, orders[0].id) == []
    assert await lot_rows(session, lens_id) == [[{"degree": LENS_KEY, "quantity": 3}]]


async def test_documented_add_power_example_goes_custom(session, lens, receive_lot):
    await receive_lot(lens, [{"degree": "-1.00/-0.50", "quantity": 10}])

    result = await submit_sales_order(session, order(item(lens, "右：-1.00/-0.50×10° | ADD：+2.00")))

    assert [r.spec_display for r in result.custom] == ["右：-1.00/-0.50×10° | ADD：+2.00"]
    assert await lot_rows(session, lens.id) == [[{"degree": "-1.00/-0.50", "quantity": 10}]]
