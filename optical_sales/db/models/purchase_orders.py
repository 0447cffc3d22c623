# optical_sales/db/models/purchase_orders.py
from sqlalchemy import Column, Index, Integer, String, DateTime, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from optical_sales.core.clock import utcnow
from optical_sales.db.base import Base, JSONType


class PurchaseListOrder(Base):
    __tablename__ = "purchase_list_orders"

    """One purchase batch (lot) of a single product.

    ``rows`` holds ``{"degree", "quantity", "unit_price"}`` dicts, one per
    variant key. A lot only becomes sellable stock once ``stock_in_at`` is
    set; sales then shrink its rows oldest lot first. ``version`` is bumped on
    every update and checked in the UPDATE's WHERE clause, so two writers
    working from the same snapshot cannot both deduct.
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_no = Column(String, nullable=False, unique=True)

    product_id = Column(Uuid, nullable=False, index=True)
    product_name = Column(String, nullable=False)

    rows = Column(JSONType, nullable=False, default=list)

    stock_in_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_purchase_list_orders_product_stock_in", "product_id", "stock_in_at"),
    )
