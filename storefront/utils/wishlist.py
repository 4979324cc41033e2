"""Wishlist state management with scoped persistence."""
from typing import Iterable, List, Optional
from storefront.database.collection_schema import ProductRef, ProductSnapshot, WishlistItem
from storefront.utils.identity import ANONYMOUS, Identity, wishlist_scope_key
from storefront.utils.notifications import NotificationSink
from storefront.utils.storage import CollectionStore


class WishlistManager:
    """Manages the set of products a shopper saved for later."""
    
    def __init__(
        self,
        store: CollectionStore,
        notifier: NotificationSink,
        identity: Identity = ANONYMOUS
    ):
        self.store = store
        self.notifier = notifier
        self._identity = identity
        self._items: List[WishlistItem] = store.load(self.scope_key, WishlistItem)
    
    @property
    def identity(self) -> Identity:
        return self._identity
    
    @property
    def scope_key(self) -> str:
        return wishlist_scope_key(self._identity)
    
    @property
    def items(self) -> List[WishlistItem]:
        return list(self._items)
    
    def is_in_wishlist(self, product_id: ProductRef) -> bool:
        return any(item.id == product_id for item in self._items)
    
    def add_to_wishlist(self, item: ProductSnapshot):
        """
        Add a product unless it is already saved.
        
        Args:
            item: Product to save
        """
        if self.is_in_wishlist(item.id):
            self.notifier.info(f"{item.name} is already in your wishlist")
            return
        
        self._items.append(WishlistItem(
            id=item.id,
            name=item.name,
            unit_price=item.unit_price,
            image=item.image
        ))
        self._persist()
        self.notifier.success(f"{item.name} added to wishlist")
    
    def remove_from_wishlist(self, product_id: ProductRef):
        for item in self._items:
            if item.id == product_id:
                self._items.remove(item)
                self._persist()
                self.notifier.info(f"{item.name} removed from wishlist")
                return
    
    def clear_wishlist(self):
        self._items = []
        self._persist()
        self.notifier.info("Wishlist cleared")
    
    def switch_scope(self, identity: Identity, items: Optional[Iterable[WishlistItem]] = None):
        """
        Bind the wishlist to another identity's scope.
        
        Args:
            identity: Identity whose scope becomes active
            items: Items to adopt; when omitted the scope's snapshot is loaded
        """
        self._identity = identity
        if items is None:
            self._items = self.store.load(self.scope_key, WishlistItem)
        else:
            self._items = [item.model_copy(deep=True) for item in items]
        self._persist()
    
    def _persist(self):
        self.store.save(self.scope_key, self._items)
