"""Persisted cart and wishlist snapshots."""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from storefront.database.connection import Base


class CollectionSnapshot(Base):
    """Serialized collection stored under a scope key such as ``cart:anonymous``."""
    
    __tablename__ = "collection_snapshots"
    
    scope_key = Column(String(200), primary_key=True)
    payload = Column(Text, nullable=False)  # JSON array of items
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<CollectionSnapshot(scope_key='{self.scope_key}')>"
