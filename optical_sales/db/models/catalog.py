# optical_sales/db/models/catalog.py
from sqlalchemy import Column, ForeignKey, Numeric, String, DateTime, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from optical_sales.core.clock import utcnow
from optical_sales.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    """A product category. Its name decides which stock-key rule applies
    (lens / frame / everything else)."""

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String, nullable=False, unique=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


class Product(Base):
    __tablename__ = "products"

    """Represents one sellable product in the optical shop directory.

    The sales core only reads the category, the master retail price and the
    descriptive parts used to build a line's display name and spec text.
    Lens variants (powers) and frame variants (model/colour codes) are not
    products of their own; they live as degree keys on purchase lot rows.
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=True, index=True)

    name = Column(String, nullable=False)
    annotation = Column(String, nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)

    specification = Column(Text, nullable=True)
    model = Column(String, nullable=True)
    finished_glasses_type = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("category_id", "name", "annotation", name="uq_products_category_name"),
    )
