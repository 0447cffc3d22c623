from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from optical_sales.domain.inventory.degree_keys import NO_VARIANT, ProductKind
from optical_sales.domain.inventory.lots import fifo_order, plan_deduction
from optical_sales.domain.inventory.stock_index import build_stock_index, in_stock_variants

DAY1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def lot(product_id, rows, stock_in_at=DAY1):
    return SimpleNamespace(product_id=product_id, rows=rows, stock_in_at=stock_in_at)


def test_stock_index_sums_received_lots_only():
    lots = [
        lot("lens", [{"degree": "-2.00/+0.00", "quantity": 3}, {"degree": "", "quantity": 9}]),
        lot("lens", [{"degree": "-2.00/+0.00", "quantity": 2}]),
        lot("lens", [{"degree": "-2.00/+0.00", "quantity": 7}], stock_in_at=None),
        lot("frame", [{"degree": "TX-1", "quantity": 2}, {"degree": " ", "quantity": 1}, {"degree": "—", "quantity": 1}]),
        lot("misc", [{"degree": "", "quantity": 4}]),
    ]
    kinds = {"lens": ProductKind.LENS, "frame": ProductKind.FRAME}

    index = build_stock_index(lots, kinds)

    assert index["lens"] == {"-2.00/+0.00": 5}
    assert index["frame"] == {"TX-1": 2}
    assert index["misc"] == {NO_VARIANT: 4}


def test_in_stock_variants_excludes_no_variant_and_empty():
    assert in_stock_variants({"TX-2": 1, "TX-1": 3, NO_VARIANT: 5, "TX-3": 0}) == ["TX-1", "TX-2"]


def test_fifo_order_mixes_naive_and_aware_timestamps():
    older = lot("p", [], stock_in_at=datetime(2024, 1, 1, 8, 0))
    newer = lot("p", [], stock_in_at=DAY1 + timedelta(hours=9))
    pending = lot("p", [], stock_in_at=None)
    assert fifo_order([newer, pending, older]) == [older, newer]


def test_deduction_consumes_oldest_lot_first():
    a = lot("p", [{"degree": "X", "quantity": 5}, {"degree": "Y", "quantity": 1}], DAY1)
    b = lot("p", [{"degree": "X", "quantity": 5}], DAY1 + timedelta(days=1))

    plan = plan_deduction([b, a], "X", 7)

    assert plan.remaining == 0
    assert plan.deducted == 7
    changed = {id(c.lot): c.rows for c in plan.changes}
    assert changed[id(a)] == [{"degree": "Y", "quantity": 1}]
    assert changed[id(b)] == [{"degree": "X", "quantity": 3}]
    # planning never mutates the lots
    assert a.rows[0]["quantity"] == 5
    assert b.rows == [{"degree": "X", "quantity": 5}]


def test_deduction_leaves_untouched_lots_out_of_plan():
    a = lot("p", [{"degree": "X", "quantity": 5}], DAY1)
    b = lot("p", [{"degree": "X", "quantity": 5}], DAY1 + timedelta(days=1))

    plan = plan_deduction([a, b], "X", 3)

    assert [c.lot for c in plan.changes] == [a]
    assert plan.changes[0].rows == [{"degree": "X", "quantity": 2}]


def test_deduction_reports_shortfall():
    a = lot("p", [{"degree": "X", "quantity": 2}], DAY1)
    plan = plan_deduction([a], "X", 5)
    assert plan.remaining == 3
    assert plan.deducted == 2


def test_other_product_blank_rows_deduct_under_single_key():
    a = lot("p", [{"degree": "", "quantity": 2}, {"degree": "—", "quantity": 3}], DAY1)
    plan = plan_deduction([a], NO_VARIANT, 4)
    assert plan.remaining == 0
    assert plan.changes[0].rows == [{"degree": "—", "quantity": 1}]
