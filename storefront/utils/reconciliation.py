"""Sign-in reconciliation of guest and saved carts/wishlists."""
from typing import List, Sequence
from storefront.database.collection_schema import LineItem, WishlistItem
from storefront.utils.cart import CartManager
from storefront.utils.identity import (
    Anonymous,
    Authenticated,
    IdentityEvent,
    IdentityService,
    cart_scope_key,
    wishlist_scope_key,
)
from storefront.utils.notifications import NotificationSink
from storefront.utils.storage import CollectionStore
from storefront.utils.wishlist import WishlistManager


def merge_carts(anonymous: Sequence[LineItem], user: Sequence[LineItem]) -> List[LineItem]:
    """
    Merge a guest cart into a user's saved cart.
    
    The user's line items keep their order. Quantities of products present
    in both carts are added together; guest-only products are appended in
    guest order. Customizations of the saved line item are kept.
    
    Args:
        anonymous: Line items collected before sign-in
        user: Line items saved under the user's scope
        
    Returns:
        New list of merged line items (inputs are not modified)
    """
    merged = [item.model_copy(deep=True) for item in user]
    by_id = {item.id: item for item in merged}
    
    for item in anonymous:
        existing = by_id.get(item.id)
        if existing:
            existing.quantity += item.quantity
        else:
            copy = item.model_copy(deep=True)
            merged.append(copy)
            by_id[copy.id] = copy
    
    return merged


def merge_wishlists(anonymous: Sequence[WishlistItem], user: Sequence[WishlistItem]) -> List[WishlistItem]:
    """Union of both wishlists, user's items first."""
    merged = [item.model_copy(deep=True) for item in user]
    seen = {item.id for item in merged}
    for item in anonymous:
        if item.id not in seen:
            merged.append(item.model_copy(deep=True))
            seen.add(item.id)
    return merged


class StorefrontSession:
    """
    Cart and wishlist of one shopper, kept in step with their identity.
    
    Subscribes to the identity service on construction. On sign-in the
    guest cart and wishlist are merged into the user's saved ones and the
    guest scope is emptied, so a redelivered sign-in event changes nothing.
    On sign-out the cart starts empty in the guest scope while the user's
    saved cart and wishlist stay persisted under the user's scope.
    """
    
    def __init__(
        self,
        identity_service: IdentityService,
        store: CollectionStore,
        notifier: NotificationSink
    ):
        """
        Initialize the session and subscribe to identity transitions.
        
        Args:
            identity_service: Source of identity transitions
            store: Collection store for cart and wishlist snapshots
            notifier: Sink for user-facing messages
        """
        self.identity_service = identity_service
        self.store = store
        self.notifier = notifier
        # Guest scope of this browser session only
        self.guest = identity_service.guest
        self.cart = CartManager(store, notifier, self.guest)
        self.wishlist = WishlistManager(store, notifier, self.guest)
        self._unsubscribe = identity_service.subscribe(self.handle_identity_event)
        
        # Restored session: reconcile as if the sign-in just happened
        current = identity_service.current
        if isinstance(current, Authenticated):
            self.handle_identity_event(IdentityEvent.signed_in(current.user_id))
    
    @property
    def identity(self):
        return self.cart.identity
    
    def handle_identity_event(self, event: IdentityEvent):
        """Apply an identity transition to the cart and wishlist."""
        if event.identity != self.identity_service.current:
            print(f"[RECONCILE] Ignoring stale {event.kind} event")
            return
        
        if event.kind == IdentityEvent.SIGNED_IN:
            self.reconcile(event.identity)
        elif event.kind == IdentityEvent.SIGNED_OUT:
            self.cart.switch_scope(self.guest, [])
            self.wishlist.switch_scope(self.guest)
            print("[RECONCILE] Switched to guest scope")
    
    def reconcile(self, identity: Authenticated):
        """
        Merge the guest scope into ``identity``'s scope and make it active.
        
        Args:
            identity: The identity that just signed in
        """
        guest_cart = self._guest_items(self.cart, cart_scope_key(self.guest), LineItem)
        user_cart = self.store.load(cart_scope_key(identity), LineItem)
        self.cart.switch_scope(identity, merge_carts(guest_cart, user_cart))
        
        guest_wishlist = self._guest_items(self.wishlist, wishlist_scope_key(self.guest), WishlistItem)
        user_wishlist = self.store.load(wishlist_scope_key(identity), WishlistItem)
        self.wishlist.switch_scope(identity, merge_wishlists(guest_wishlist, user_wishlist))
        
        # Guest state now lives in the user's scope
        self.store.save(cart_scope_key(self.guest), [])
        self.store.save(wishlist_scope_key(self.guest), [])
        
        print(
            f"[RECONCILE] {identity.user_id}: merged {len(guest_cart)} guest line item(s) "
            f"into {len(user_cart)} saved; cart now has {len(self.cart.items)}"
        )
    
    def close(self):
        """Stop listening to identity transitions."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
    
    def _guest_items(self, manager, scope_key: str, item_type) -> list:
        # A guest session's in-memory state is the guest scope
        if isinstance(manager.identity, Anonymous):
            return manager.items
        return self.store.load(scope_key, item_type)
