# optical_sales/domain/inventory/stock_index.py
"""Sellable stock per product, summed over received purchase lots.

The index is derived on demand and never stored:
``{product_id: {degree_key: quantity}}``. Lots without a stock-in time are
not stock yet and are skipped.
"""
from collections import defaultdict
from typing import Any, Dict, Hashable, Iterable, Mapping

from .degree_keys import NO_VARIANT, ProductKind

StockIndex = Dict[Hashable, Dict[str, int]]


def row_quantity(row: Mapping[str, Any]) -> int:
    return int(row.get("quantity") or 0)


def _index_key(kind: ProductKind, degree: Any) -> str | None:
    d = str(degree or "").strip()
    if kind is ProductKind.LENS:
        # lens rows always carry a power; blank rows are data-entry noise
        return d or None
    if kind is ProductKind.FRAME:
        # a frame sells by model/colour code only
        return None if d in ("", NO_VARIANT) else d
    return d or NO_VARIANT


def build_stock_index(
    lots: Iterable[Any],
    kinds: Mapping[Hashable, ProductKind],
) -> StockIndex:
    """``kinds`` maps product id to kind; unknown products count as OTHER."""
    index: StockIndex = defaultdict(lambda: defaultdict(int))
    for lot in lots:
        if lot.stock_in_at is None:
            continue
        kind = kinds.get(lot.product_id, ProductKind.OTHER)
        by_degree = index[lot.product_id]
        for row in lot.rows or []:
            key = _index_key(kind, row.get("degree"))
            if key is None:
                continue
            by_degree[key] += row_quantity(row)
    return {pid: dict(by_degree) for pid, by_degree in index.items()}


def in_stock_variants(by_degree: Mapping[str, int]) -> list[str]:
    """Frame model/colour codes that can be picked on a sale line."""
    return sorted(k for k, q in by_degree.items() if k != NO_VARIANT and q > 0)
