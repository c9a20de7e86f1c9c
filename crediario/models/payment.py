"""Payment model - an amount applied against a sale."""
from sqlalchemy import Column, BigInteger, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crediario.database import Base, BigIntPK
from crediario.utils.formatters import to_number, iso_datetime


class Payment(Base):
    """
    Payment - Individual payment for a sale.

    Created automatically for sales marked as paid at creation, or later
    through the payment recording flow. Several payments can settle one sale.
    """

    __tablename__ = 'payment'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    sale_id = Column(BigInteger, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    value = Column(Numeric(12, 2), nullable=False)
    pay_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    sale = relationship('Sale', back_populates='payments')

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'value': to_number(self.value),
            'payDate': iso_datetime(self.pay_date),
            'createdAt': iso_datetime(self.created_at),
        }

    def __repr__(self):
        return f"<Payment(id={self.id}, sale_id={self.sale_id}, value={self.value})>"
