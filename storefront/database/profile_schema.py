"""Profile schemas for API validation."""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from storefront.database.checkout_schema import OrderResponse


class ProfileUpdate(BaseModel):
    """Schema for updating a profile (all fields optional)."""
    first_name: Optional[str] = Field(None, max_length=100, description="First name")
    last_name: Optional[str] = Field(None, max_length=100, description="Last name")
    phone: Optional[str] = Field(None, max_length=20, description="Contact phone number")
    
    @field_validator('first_name', 'last_name', 'phone')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if v is not None else v


class ProfileResponse(BaseModel):
    """Schema for profile response."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    
    class Config:
        from_attributes = True


class ProfileOverviewResponse(BaseModel):
    """Profile with the most recent orders."""
    profile: ProfileResponse
    recent_orders: List[OrderResponse]
