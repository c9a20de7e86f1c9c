"""Client model."""
from sqlalchemy import Column, BigInteger, String, Text, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crediario.database import Base, BigIntPK
from crediario.utils.formatters import to_number, iso_date, iso_datetime


class Client(Base):
    """Client (customer buying on store credit)."""

    __tablename__ = 'client'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    store_id = Column(BigInteger, ForeignKey('store.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False)
    birth_date = Column(Date, nullable=True)
    observations = Column(Text, nullable=True)

    # Running total of unpaid sale value. Only the ledger services write it,
    # always through SQL-level increments.
    debit_balance = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    store = relationship('Store')
    sales = relationship('Sale', back_populates='client')

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'birthDate': iso_date(self.birth_date),
            'observations': self.observations,
            'debitBalance': to_number(self.debit_balance),
            'storeId': self.store_id,
            'createdAt': iso_datetime(self.created_at),
            'updatedAt': iso_datetime(self.updated_at),
        }

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', debit_balance={self.debit_balance})>"
