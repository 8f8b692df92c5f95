"""Task model."""
import enum
from sqlalchemy import Column, BigInteger, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from bizhub.database import Base, BigIntPK


class TaskPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Task(Base):
    """To-do item, optionally linked to another record (lead, customer, quote...)."""

    __tablename__ = 'task'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    business_id = Column(BigInteger, ForeignKey('business_profile.id'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    priority = Column(String(10), nullable=False, default=TaskPriority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=TaskStatus.PENDING.value)
    related_to = Column(String(50), nullable=True)
    related_id = Column(String(64), nullable=True)
    assigned_to = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'priority': self.priority,
            'status': self.status,
            'related_to': self.related_to,
            'related_id': self.related_id,
            'assigned_to': self.assigned_to,
        }

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
