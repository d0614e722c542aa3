import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from app.core.timeutils import utcnow
from app.db.session import Base


class AcademicSession(Base):
    """
    School session (e.g. "2025-2026"). Results, deadlines and report cards are scoped to one session.
    Attendance for a report card is taken from start_date..end_date.
    """

    __tablename__ = "academic_sessions"
    __table_args__ = {"schema": "core"}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False, unique=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
