"""Product schemas for API validation."""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from decimal import Decimal
from datetime import datetime


class ProductBase(BaseModel):
    """Base product schema with common fields."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    slug: str = Field(..., min_length=1, max_length=255, description="URL-friendly unique identifier")
    description: str = Field(..., min_length=1, description="Product description")
    price: Decimal = Field(..., gt=0, description="Regular product price")
    sale_price: Optional[Decimal] = Field(None, gt=0, description="Discounted price")
    stock_quantity: int = Field(0, ge=0, description="Available stock quantity")
    category: Optional[str] = Field(None, max_length=100, description="Product category")
    material: Optional[str] = Field(None, max_length=100, description="Primary material")
    image: Optional[str] = Field(None, max_length=500, description="Primary product image URL")
    featured: bool = Field(False, description="Whether product is featured")
    is_active: bool = Field(True, description="Whether product is active/available")
    
    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        if v != v.strip().lower() or " " in v:
            raise ValueError("Slug must be lowercase without spaces")
        return v
    
    @model_validator(mode='after')
    def validate_sale_price(self):
        if self.sale_price is not None and self.sale_price >= self.price:
            raise ValueError("Sale price must be lower than the regular price")
        return self


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, gt=0)
    sale_price: Optional[Decimal] = Field(None, gt=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    featured: Optional[bool] = None
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    """Schema for product response."""
    id: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True
