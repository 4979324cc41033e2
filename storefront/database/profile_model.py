"""User profile model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from storefront.database.connection import Base


class Profile(Base):
    """Account of a registered shopper, keyed by the identity's user id."""
    
    __tablename__ = "profiles"
    
    id = Column(String(100), primary_key=True, index=True)
    email = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Profile(id='{self.id}', first_name='{self.first_name}', last_name='{self.last_name}')>"
