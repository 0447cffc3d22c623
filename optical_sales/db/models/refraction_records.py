# optical_sales/db/models/refraction_records.py
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from optical_sales.core.clock import utcnow
from optical_sales.db.base import Base, JSONType


class RefractionRecord(Base):
    __tablename__ = "refraction_records"

    """A persisted refraction snapshot (right + left rows) for a customer.

    Records are append-only: a corrected prescription is a new record.
    Pupillary distances are kept as entered text (mm).
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(String, nullable=False, index=True)

    rows = Column(JSONType, nullable=False)

    pd_right = Column(String, nullable=True)
    pd_left = Column(String, nullable=True)
    pd_both = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
