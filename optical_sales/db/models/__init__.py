# Import every model so Base.metadata knows all tables.
from optical_sales.db.models.catalog import Category, Product
from optical_sales.db.models.fulfillment import SalesCustomOrder, SalesOutboundRecord
from optical_sales.db.models.purchase_orders import PurchaseListOrder
from optical_sales.db.models.refraction_records import RefractionRecord
from optical_sales.db.models.sales_orders import SalesOrder

__all__ = [
    "Category",
    "Product",
    "PurchaseListOrder",
    "RefractionRecord",
    "SalesCustomOrder",
    "SalesOrder",
    "SalesOutboundRecord",
]
