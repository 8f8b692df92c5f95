"""WebsiteData model - content of the business landing page."""
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class WebsiteData(Base):
    """Landing page content edited in the website editor (one row per business)."""

    __tablename__ = 'website_data'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False, unique=True)
    template_id = Column(String(80), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    primary_color = Column(String(20), nullable=True)
    secondary_color = Column(String(20), nullable=True)
    font_family = Column(String(80), nullable=True)
    hero_image_url = Column(String(500), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    services = Column(JSON, nullable=True)
    testimonials = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    EDITABLE_FIELDS = (
        'template_id', 'title', 'description', 'primary_color', 'secondary_color',
        'font_family', 'hero_image_url', 'contact_email', 'contact_phone', 'address',
        'services', 'testimonials',
    )

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data['id'] = self.id
        data['business_id'] = self.business_id
        return data
