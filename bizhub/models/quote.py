"""Quote model."""
import enum
from sqlalchemy import Column, BigInteger, String, Numeric, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class QuoteStatus(enum.Enum):
    """Quote status enum."""
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Quote(Base):
    """
    Quote sent to a client.

    The tax rate is not stored: it is derived from `subtotal` and `vat`
    when the quote is reloaded.
    """

    __tablename__ = 'quote'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    customer_id = Column(BigInteger, ForeignKey('customer.id'), nullable=True)
    title = Column(String(255), nullable=False)
    client_name = Column(String(200), nullable=False)
    client_email = Column(String(255), nullable=True)
    items = Column(JSON, nullable=False, default=list)
    subtotal = Column(Numeric(14, 4), nullable=False, default=0)
    vat = Column(Numeric(14, 4), nullable=False, default=0)
    total = Column(Numeric(14, 4), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=QuoteStatus.DRAFT.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship('Customer', back_populates='quotes')

    def __repr__(self):
        return f"<Quote(id={self.id}, title='{self.title}', status='{self.status}', total={self.total})>"
