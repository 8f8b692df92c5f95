"""BusinessTypeChangeRequest model - owner asks to move to another business type."""
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class BusinessTypeChangeRequest(Base):
    """Pending request to change a business profile's type (reviewed by support)."""

    __tablename__ = 'business_type_change_request'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    current_type = Column(String(50), nullable=False)
    requested_type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'business_id': self.business_id,
            'current_type': self.current_type,
            'requested_type': self.requested_type,
            'status': self.status,
        }
