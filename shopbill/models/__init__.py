# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    # Enums
    Unit, DeliveryStatus, PaymentStatus,

    # Identity
    Role, User,

    # Catalog
    Product, Supplier,

    # Sales
    Bill, BillItem,

    # Purchasing
    DistributorOrder, DistributorOrderItem,
)

__all__ = [
    "Unit", "DeliveryStatus", "PaymentStatus",
    "Role", "User",
    "Product", "Supplier",
    "Bill", "BillItem",
    "DistributorOrder", "DistributorOrderItem",
]
