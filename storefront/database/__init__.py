"""Database data layer package."""
from .connection import engine, SessionLocal, get_db, Base, init_db
from .product_model import Product
from .order_models import Address, Order, OrderItem
from .snapshot_model import CollectionSnapshot
from .profile_model import Profile

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "init_db",
    "Product",
    "Address",
    "Order",
    "OrderItem",
    "CollectionSnapshot",
    "Profile"
]
