"""Daily student attendance. status and attendance_type are independent (a present half-day is valid)."""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text, Time, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.session import Base


class AttendanceRecord(Base):
    """One row per (student, date)."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
        {"schema": "school"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("school.students.id", ondelete="CASCADE"), nullable=False)
    section_id = Column(UUID(as_uuid=True), ForeignKey("core.sections.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)  # present, absent, late, excused
    attendance_type = Column(String(20), nullable=False, default="full_day")  # full_day, half_day, absent
    left_early = Column(Boolean, nullable=False, default=False)
    left_at = Column(Time, nullable=True)
    remarks = Column(Text, nullable=True)
    marked_by = Column(UUID(as_uuid=True), ForeignKey("auth.users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("Student", lazy="joined")
