"""Sale model - a recorded sale with its line items stored as JSON."""
import enum
from sqlalchemy import Column, BigInteger, String, Numeric, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class SaleStatus(enum.Enum):
    """Sale status enum."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Sale(Base):
    """
    Sale.

    `items` holds the ordered LineItem list; `amount` is the sum of the
    line totals and is rewritten by the service on every save.
    """

    __tablename__ = 'sale'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    customer_id = Column(BigInteger, ForeignKey('customer.id'), nullable=True)
    customer_name = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(14, 4), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=SaleStatus.PENDING.value)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    items = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship('Customer', back_populates='sales')

    def __repr__(self):
        return f"<Sale(id={self.id}, customer='{self.customer_name}', amount={self.amount}, status='{self.status}')>"
