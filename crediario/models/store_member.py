"""StoreMember model - links users to stores with a role."""
import enum
from sqlalchemy import Column, BigInteger, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crediario.database import Base, BigIntPK


class UserRole(enum.Enum):
    """User roles within a store."""
    OWNER = 'OWNER'
    MANAGER = 'MANAGER'
    SELLER = 'SELLER'


# Roles allowed to edit existing ledger records
ELEVATED_ROLES = (UserRole.OWNER.value, UserRole.MANAGER.value)


class StoreMember(Base):
    """StoreMember model - many-to-many between users and stores with roles."""

    __tablename__ = 'store_member'
    __table_args__ = (
        UniqueConstraint('user_id', 'store_id', name='uq_store_member_user_store'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey('app_user.id'), nullable=False)
    store_id = Column(BigInteger, ForeignKey('store.id'), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.SELLER.value)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship('AppUser', back_populates='memberships')
    store = relationship('Store', back_populates='members')

    def __repr__(self):
        return f"<StoreMember(user_id={self.user_id}, store_id={self.store_id}, role='{self.role}')>"

    def is_owner(self):
        """Check if user is owner of the store."""
        return self.role == UserRole.OWNER.value

    def is_elevated(self):
        """Check if user is owner or manager."""
        return self.role in ELEVATED_ROLES
