"""Customer model."""
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class Customer(Base):
    """Customer record owned by a business."""

    __tablename__ = 'customer'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    sales = relationship('Sale', back_populates='customer')
    quotes = relationship('Quote', back_populates='customer')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'notes': self.notes,
        }

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"
