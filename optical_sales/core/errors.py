# optical_sales/core/errors.py
"""Typed errors raised by the service layer.

Routes never catch these; ``main.py`` maps each family to an HTTP status:

    OpticalSalesError
    +-- NotFoundError           404
    +-- BusinessError           400
    +-- StockConsistencyError   409

A parse-miss in the refraction codec is never an error, and neither is a
line without enough stock (it becomes a custom order). Only a deduction
that cannot consume what the matcher already confirmed raises
``StockConsistencyError``.
"""
from typing import Any, Optional


class OpticalSalesError(Exception):
    code = "error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFoundError(OpticalSalesError):
    code = "not_found"


class BusinessError(OpticalSalesError):
    code = "business_rule"


class StockConsistencyError(OpticalSalesError):
    """Lots could not cover a quantity the stock matcher reported available.

    Signals a stale snapshot or a concurrent mutation, i.e. a bookkeeping
    defect. The sales order header and any lines committed before the failing
    one are kept; operators reconcile stock by hand.
    """

    code = "stock_inconsistent"

    def __init__(
        self,
        product_id: str,
        degree: str,
        requested: int,
        unfulfilled: int,
        sales_order_no: Optional[str] = None,
    ):
        super().__init__(
            f"Lots for product {product_id} could not cover {requested} x {degree!r} "
            f"({unfulfilled} left unfulfilled)",
            product_id=product_id,
            degree=degree,
            requested=requested,
            unfulfilled=unfulfilled,
            sales_order_no=sales_order_no,
        )
        self.product_id = product_id
        self.degree = degree
        self.requested = requested
        self.unfulfilled = unfulfilled
        self.sales_order_no = sales_order_no
