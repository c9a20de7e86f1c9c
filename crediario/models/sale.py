"""Sale model."""
from decimal import Decimal
from sqlalchemy import Column, BigInteger, String, Numeric, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crediario.database import Base, BigIntPK
from crediario.utils.formatters import to_number, iso_date, iso_datetime


class Sale(Base):
    """Sale on store credit."""

    __tablename__ = 'sale'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    store_id = Column(BigInteger, ForeignKey('store.id'), nullable=False, index=True)
    client_id = Column(BigInteger, ForeignKey('client.id'), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey('app_user.id'), nullable=False)

    value = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=False, default='')
    is_paid = Column(Boolean, nullable=False, default=False)
    due_date = Column(Date, nullable=False)
    sale_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    store = relationship('Store')
    client = relationship('Client', back_populates='sales')
    user = relationship('AppUser')
    payments = relationship(
        'Payment',
        back_populates='sale',
        cascade='all, delete-orphan',
        order_by='(Payment.pay_date.desc(), Payment.id.desc())',
    )

    @property
    def total_paid(self):
        """Sum of recorded payments."""
        return sum((Decimal(str(p.value)) for p in self.payments), Decimal('0'))

    @property
    def amount_due(self):
        """Amount still owed: value - total_paid."""
        return Decimal(str(self.value or 0)) - self.total_paid

    def to_dict(self, include_relations=True):
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'value': to_number(self.value),
            'description': self.description,
            'isPaid': self.is_paid,
            'dueDate': iso_date(self.due_date),
            'saleDate': iso_datetime(self.sale_date),
            'storeId': self.store_id,
            'clientId': self.client_id,
            'userId': self.user_id,
            'createdAt': iso_datetime(self.created_at),
            'updatedAt': iso_datetime(self.updated_at),
        }
        if include_relations:
            data['client'] = self.client.to_dict() if self.client else None
            data['user'] = self.user.to_summary() if self.user else None
            data['payments'] = [p.to_dict() for p in self.payments]
        return data

    def __repr__(self):
        return f"<Sale(id={self.id}, value={self.value}, is_paid={self.is_paid})>"
