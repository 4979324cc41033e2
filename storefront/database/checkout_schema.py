"""Checkout and order schemas for API validation."""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime


class AddressInput(BaseModel):
    """Address captured on the checkout form."""
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    address_line1: str = Field(..., min_length=1, max_length=500, description="Street address")
    address_line2: Optional[str] = Field(None, max_length=500, description="Apartment, suite, etc.")
    city: str = Field(..., min_length=1, max_length=100, description="City name")
    state: str = Field(..., min_length=1, max_length=100, description="State name")
    postal_code: str = Field(..., min_length=6, max_length=20, description="Postal code")
    phone: str = Field(..., min_length=10, max_length=20, description="Contact phone number")
    email: str = Field(..., max_length=255, description="Contact email address")
    
    @field_validator('first_name', 'last_name', 'address_line1', 'city', 'state', 'postal_code')
    @classmethod
    def validate_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()
    
    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        local, _, domain = v.strip().partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v.strip()


class CheckoutRequest(BaseModel):
    """Checkout form submission."""
    shipping_address: AddressInput
    billing_address: Optional[AddressInput] = None
    same_as_shipping: bool = True
    payment_method: Literal["card", "upi", "cod"] = "card"
    save_address_for_later: bool = False
    
    @model_validator(mode='after')
    def validate_billing(self):
        if self.same_as_shipping:
            self.billing_address = self.shipping_address
        elif self.billing_address is None:
            raise ValueError("Billing address is required when it differs from shipping")
        return self


class OrderTotals(BaseModel):
    """Amounts charged for an order."""
    subtotal: float
    shipping_amount: float
    tax_amount: float
    total_amount: float


class OrderItemResponse(BaseModel):
    """Order item response model."""
    id: int
    product_id: Optional[str] = None
    product_name: str
    quantity: int
    unit_price: float
    subtotal: float
    
    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response model."""
    id: int
    user_id: Optional[str] = None
    order_status: str
    payment_status: str
    payment_method: Optional[str] = None
    subtotal: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    transaction_id: Optional[str] = None
    created_at: datetime
    items: List[OrderItemResponse]
    
    class Config:
        from_attributes = True
