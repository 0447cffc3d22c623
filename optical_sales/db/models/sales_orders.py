# optical_sales/db/models/sales_orders.py
from sqlalchemy import Column, Date, String, DateTime, Numeric, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from optical_sales.core.clock import utcnow
from optical_sales.db.base import Base, JSONType


class SalesOrder(Base):
    __tablename__ = "sales_orders"

    """A finalized sale (receipt header plus immutable line snapshots).

    Created once per submission, before any line is fulfilled, so that
    outbound and custom records can reference its id and number. Never
    updated afterwards.
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_no = Column(String, nullable=False, unique=True)
    date = Column(Date, nullable=False)

    customer_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False, default="")

    # [{product_id, product_name, spec_display, quantity, sales_price}]
    items = Column(JSONType, nullable=False, default=list)
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
