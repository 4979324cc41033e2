"""Schemas of the items held in carts and wishlists."""
from pydantic import BaseModel, Field
from typing import Any, Dict, Union
from decimal import Decimal

# Products are referenced by catalog id, or by an external string id
ProductRef = Union[int, str]


class ProductSnapshot(BaseModel):
    """Product details copied into a collection at the time it was added."""
    id: ProductRef = Field(..., description="Product reference")
    name: str = Field(..., min_length=1, description="Product name")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit")
    image: str = Field("", description="Product image URL")


class WishlistItem(ProductSnapshot):
    """A product saved to the wishlist."""
    pass


class LineItem(ProductSnapshot):
    """One product entry in a cart."""
    quantity: int = Field(1, ge=1, description="Number of units")
    customizations: Dict[str, Any] = Field(default_factory=dict, description="Shopper-selected options")
    
    @property
    def subtotal(self) -> Decimal:
        """Calculate subtotal for this line item."""
        return self.unit_price * self.quantity
