"""Store model - the tenant; every client, sale and payment belongs to one."""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crediario.database import Base, BigIntPK


class Store(Base):
    """Store model - each business using the platform."""

    __tablename__ = 'store'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    slug = Column(String(80), nullable=False, unique=True)  # URL-safe identifier
    name = Column(String(200), nullable=False)  # Display name
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    members = relationship('StoreMember', back_populates='store')

    def __repr__(self):
        return f"<Store(id={self.id}, slug='{self.slug}', name='{self.name}')>"

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'slug': self.slug,
            'name': self.name,
            'active': self.active,
        }
