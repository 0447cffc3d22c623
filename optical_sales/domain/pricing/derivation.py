# optical_sales/domain/pricing/derivation.py
"""Keeps a sale line's quantity, discount and sales price consistent.

Whichever field was edited last is authoritative; the other is recomputed:

* quantity or discount edited -> sales price = retail x quantity x discount
* sales price edited          -> discount = sales price / (retail x quantity)

Retail price is fixed when the line is created.
"""
import math
from dataclasses import dataclass, replace
from typing import Optional

DISCOUNT_PRESETS = (0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)
PRESET_TOLERANCE = 1e-6


@dataclass(frozen=True)
class PricedLine:
    quantity: int
    retail_price: float
    discount: float
    sales_price: float

    @classmethod
    def new(cls, retail_price: float, quantity: int = 1, discount: float = 1.0) -> "PricedLine":
        return cls(quantity, retail_price, discount, retail_price * quantity * discount)


def reprice_quantity(line: PricedLine, quantity: int) -> PricedLine:
    return replace(line, quantity=quantity, sales_price=line.retail_price * quantity * line.discount)


def reprice_discount(line: PricedLine, discount: float) -> PricedLine:
    return replace(line, discount=discount, sales_price=line.retail_price * line.quantity * discount)


def reprice_sales_price(line: PricedLine, sales_price: float) -> PricedLine:
    denom = line.retail_price * line.quantity
    discount = max(0.0, sales_price / denom) if denom > 0 else line.discount
    return replace(line, discount=discount, sales_price=sales_price)


def apply_edit(
    line: PricedLine,
    quantity: Optional[int] = None,
    discount: Optional[float] = None,
    sales_price: Optional[float] = None,
) -> PricedLine:
    """One edit event; a new quantity is applied before a price/discount edit."""
    if quantity is not None:
        line = reprice_quantity(line, quantity)
    if sales_price is not None:
        return reprice_sales_price(line, sales_price)
    if discount is not None:
        return reprice_discount(line, discount)
    return line


def matching_preset(discount: float) -> Optional[float]:
    for preset in DISCOUNT_PRESETS:
        if abs(preset - discount) < PRESET_TOLERANCE:
            return preset
    return None


def discount_label(discount: float) -> str:
    """0.85 -> ``8.5折``, 0.9 -> ``9折`` (tenths of "折", half-up)."""
    tenths = math.floor(discount * 100 + 0.5) / 10
    if tenths == int(tenths):
        return f"{int(tenths)}折"
    return f"{tenths}折"


def discount_display(discount: float) -> tuple[Optional[float], str]:
    """``(preset, label)``; ``preset`` is None when the discount is shown read-only."""
    return matching_preset(discount), discount_label(discount)
