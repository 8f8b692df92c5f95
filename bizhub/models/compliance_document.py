"""ComplianceDocument model - metadata for one required-document slot."""
from sqlalchemy import Column, BigInteger, String, Text, Boolean, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class ComplianceDocument(Base):
    """
    Compliance document slot for a business.

    Whether a file exists is read from object storage, not from this row.
    The row keeps the expiry date supplied at upload time and `status`,
    which is only a display cache rewritten on every load.
    """

    __tablename__ = 'compliance_document'
    __table_args__ = (
        UniqueConstraint('business_id', 'document_key', name='uq_compliance_document_business_key'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    document_key = Column(String(80), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)
    required = Column(Boolean, nullable=False, default=True)
    expiry_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default='missing')
    uploaded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<ComplianceDocument(business_id={self.business_id}, key='{self.document_key}', status='{self.status}')>"
