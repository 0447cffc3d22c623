# optical_sales/db/models/fulfillment.py
from sqlalchemy import Column, ForeignKey, Index, Integer, String, DateTime, Text, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from optical_sales.core.clock import utcnow
from optical_sales.db.base import Base


class _FulfillmentColumns:
    """Shared shape of the two per-line fulfillment records.

    Every sales order line produces exactly one of them; they differ only in
    which table they are written to.
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    sales_order_no = Column(String, nullable=False, index=True)

    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    spec_display = Column(Text, nullable=False, default="")
    quantity = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


class SalesOutboundRecord(_FulfillmentColumns, Base):
    __tablename__ = "sales_outbound"

    """A line shipped from on-hand stock (its lots were deducted)."""

    sales_order_id = Column(Uuid, ForeignKey("sales_orders.id"), nullable=False)

    __table_args__ = (
        Index("ix_sales_outbound_order", "sales_order_id"),
    )


class SalesCustomOrder(_FulfillmentColumns, Base):
    __tablename__ = "sales_custom_orders"

    """A line routed to special order: no stock, unresolved product, or a
    lens with add power / prism."""

    sales_order_id = Column(Uuid, ForeignKey("sales_orders.id"), nullable=False)

    __table_args__ = (
        Index("ix_sales_custom_orders_order", "sales_order_id"),
    )
