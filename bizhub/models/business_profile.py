"""BusinessProfile model - each business created through onboarding."""
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class BusinessProfile(Base):
    """
    Business profile.

    Every customer, lead, sale, quote, task and compliance document belongs
    to exactly one business profile through `business_id`.
    """

    __tablename__ = 'business_profile'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    owner_id = Column(BigInteger, ForeignKey('app_user.id'), nullable=False)
    business_name = Column(String(200), nullable=False)
    business_type = Column(String(50), nullable=False, default='default')
    address = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    logo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship('AppUser', back_populates='businesses')

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'business_name': self.business_name,
            'business_type': self.business_type,
            'address': self.address,
            'email': self.email,
            'phone': self.phone,
            'logo_url': self.logo_url,
        }

    def contact_info(self):
        """Business identity block used by the quote PDF."""
        return {
            'name': self.business_name,
            'address': self.address,
            'phone': self.phone,
            'email': self.email,
        }

    def __repr__(self):
        return f"<BusinessProfile(id={self.id}, name='{self.business_name}', type='{self.business_type}')>"
