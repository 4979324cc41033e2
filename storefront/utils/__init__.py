"""Utility modules for the storefront."""
from .identity import (
    ANONYMOUS,
    AccountDirectory,
    Anonymous,
    Authenticated,
    IdentityEvent,
    IdentityService,
    MemoryAccountDirectory,
)
from .notifications import Severity, Notification, NotificationSink, ConsoleNotificationSink, BufferedNotificationSink
from .storage import CollectionStore, MemoryCollectionStore, DatabaseCollectionStore
from .cart import CartManager
from .wishlist import WishlistManager
from .reconciliation import StorefrontSession, merge_carts, merge_wishlists

__all__ = [
    "ANONYMOUS",
    "AccountDirectory",
    "Anonymous",
    "Authenticated",
    "IdentityEvent",
    "IdentityService",
    "MemoryAccountDirectory",
    "Severity",
    "Notification",
    "NotificationSink",
    "ConsoleNotificationSink",
    "BufferedNotificationSink",
    "CollectionStore",
    "MemoryCollectionStore",
    "DatabaseCollectionStore",
    "CartManager",
    "WishlistManager",
    "StorefrontSession",
    "merge_carts",
    "merge_wishlists"
]
