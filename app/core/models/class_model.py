"""Classes (e.g. Nursery, 1st, 10th). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from app.core.timeutils import utcnow
from app.db.session import Base


class SchoolClass(Base):
    __tablename__ = "classes"
    __table_args__ = {"schema": "core"}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False, unique=True)
    grade_level = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
