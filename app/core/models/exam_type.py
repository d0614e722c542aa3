import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.core.timeutils import utcnow
from app.db.session import Base


class ExamType(Base):
    """Assessment category (Midterm, Final). weightage is the exam's share in cross-exam aggregation."""

    __tablename__ = "exam_types"
    __table_args__ = {"schema": "core"}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True)  # stored upper-case
    description = Column(Text, nullable=True)
    weightage = Column(Integer, nullable=False, default=100)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
