"""Product model for the storefront catalog."""
from sqlalchemy import Column, Integer, String, Numeric, Text, Boolean, DateTime
from sqlalchemy.sql import func
from storefront.database.connection import Base


class Product(Base):
    """Product model representing items in the store."""
    
    __tablename__ = "products"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    
    # Pricing
    price = Column(Numeric(10, 2), nullable=False)
    sale_price = Column(Numeric(10, 2), nullable=True)  # Discounted price, when on sale
    
    # Inventory
    stock_quantity = Column(Integer, default=0, nullable=False)
    
    category = Column(String(100), nullable=True, index=True)
    material = Column(String(100), nullable=True, index=True)
    image = Column(String(500), nullable=True)
    featured = Column(Boolean, default=False, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    @property
    def effective_price(self):
        """Price a shopper pays right now."""
        return self.sale_price if self.sale_price is not None else self.price
    
    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', slug='{self.slug}')>"
