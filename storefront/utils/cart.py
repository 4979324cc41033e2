"""Cart state management with scoped persistence."""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from storefront.config import settings
from storefront.database.collection_schema import LineItem, ProductRef, ProductSnapshot
from storefront.utils.identity import ANONYMOUS, Identity, cart_scope_key
from storefront.utils.notifications import NotificationSink
from storefront.utils.storage import CollectionStore


class CartManager:
    """
    Manages the shopping cart of one shopper.
    
    Line items keep insertion order and are unique by product id. Every
    mutation is written to the store under the current identity's cart
    scope before the call returns. Totals are derived from the line items on
    every read.
    """
    
    def __init__(
        self,
        store: CollectionStore,
        notifier: NotificationSink,
        identity: Identity = ANONYMOUS
    ):
        """
        Initialize the cart from the snapshot persisted for ``identity``.
        
        Args:
            store: Collection store holding cart snapshots
            notifier: Sink for user-facing messages
            identity: Identity whose cart scope is active
        """
        self.store = store
        self.notifier = notifier
        self._identity = identity
        self._items: List[LineItem] = store.load(self.scope_key, LineItem)
    
    @property
    def identity(self) -> Identity:
        return self._identity
    
    @property
    def scope_key(self) -> str:
        return cart_scope_key(self._identity)
    
    @property
    def items(self) -> List[LineItem]:
        return list(self._items)
    
    @property
    def is_empty(self) -> bool:
        return not self._items
    
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)
    
    @property
    def subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self._items), Decimal("0"))
    
    def get_line_item(self, product_id: ProductRef) -> Optional[LineItem]:
        for item in self._items:
            if item.id == product_id:
                return item
        return None
    
    def add_to_cart(
        self,
        item: ProductSnapshot,
        quantity: int = 1,
        customizations: Optional[Dict[str, Any]] = None
    ):
        """
        Add a product to the cart.
        
        An existing line item has its quantity increased and its
        customizations replaced by the new ones; otherwise a line item is
        appended.
        
        Args:
            item: Product to add
            quantity: Units to add (values below 1 are ignored)
            customizations: Shopper-selected options for the product
        """
        if quantity < 1:
            return
        
        customizations = dict(customizations or {})
        existing = self.get_line_item(item.id)
        if existing:
            existing.quantity += quantity
            existing.customizations = customizations
        else:
            self._items.append(LineItem(
                id=item.id,
                name=item.name,
                unit_price=item.unit_price,
                image=item.image,
                quantity=quantity,
                customizations=customizations
            ))
        
        self._persist()
        self.notifier.success(f"{item.name} added to cart")
    
    def remove_from_cart(self, product_id: ProductRef):
        """
        Remove a line item. Unknown ids are ignored.
        
        Args:
            product_id: Product id of the line item
        """
        existing = self.get_line_item(product_id)
        if not existing:
            return
        
        self._items = [item for item in self._items if item.id != product_id]
        self._persist()
        self.notifier.info(f"{existing.name} removed from cart")
    
    def update_quantity(self, product_id: ProductRef, quantity: int):
        """
        Set the quantity of a line item.
        
        Quantities below 1 are ignored; removal only happens through
        remove_from_cart.
        
        Args:
            product_id: Product id of the line item
            quantity: New quantity
        """
        if quantity < 1:
            return
        
        existing = self.get_line_item(product_id)
        if not existing:
            return
        
        existing.quantity = quantity
        self._persist()
    
    def clear_cart(self):
        """Remove all line items."""
        self._items = []
        self._persist()
        self.notifier.info("Cart cleared")
    
    def switch_scope(self, identity: Identity, items: Optional[Iterable[LineItem]] = None):
        """
        Bind the cart to another identity's scope.
        
        Args:
            identity: Identity whose scope becomes active
            items: Line items to adopt; when omitted the scope's snapshot is loaded
        """
        self._identity = identity
        if items is None:
            self._items = self.store.load(self.scope_key, LineItem)
        else:
            self._items = [item.model_copy(deep=True) for item in items]
        self._persist()
    
    def get_cart_summary(self) -> Dict[str, Any]:
        """
        Get formatted cart summary.
        
        Returns:
            Dictionary with cart summary
        """
        subtotal = self.subtotal
        
        items = [
            {
                "id": item.id,
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": float(item.unit_price),
                "subtotal": float(item.subtotal),
                "image": item.image,
                "customizations": item.customizations
            }
            for item in self._items
        ]
        
        return {
            "items": items,
            "item_count": len(self._items),
            "total_items": self.total_items,
            "subtotal": float(subtotal),
            "subtotal_formatted": f"{settings.currency_symbol}{subtotal:.2f}"
        }
    
    def _persist(self):
        self.store.save(self.scope_key, self._items)
