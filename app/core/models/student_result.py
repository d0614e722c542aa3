import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.session import Base

# Columns of uq_student_result_natural_key; upserts resolve conflicts on exactly these.
RESULT_NATURAL_KEY = ("student_id", "session_id", "exam_type_id", "subject_id")


class StudentResult(Base):
    """
    Marks for one (student, session, exam type, subject).
    is_absent rows count zero in every aggregate whatever obtained_marks holds.
    is_locked rows reject single-row writes until unlocked.
    """

    __tablename__ = "student_results"
    __table_args__ = (
        UniqueConstraint(*RESULT_NATURAL_KEY, name="uq_student_result_natural_key"),
        {"schema": "school"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("school.students.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(
        UUID(as_uuid=True),
        ForeignKey("core.academic_sessions.id", ondelete="RESTRICT"),
        nullable=False,
    )
    exam_type_id = Column(UUID(as_uuid=True), ForeignKey("core.exam_types.id"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("core.subjects.id"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("core.classes.id"), nullable=False, index=True)
    section_id = Column(UUID(as_uuid=True), ForeignKey("core.sections.id"), nullable=False)
    total_marks = Column(Integer, nullable=False)
    obtained_marks = Column(Integer, nullable=False, default=0)
    grade = Column(String(5), nullable=True)  # A+..F, or AB when absent
    remarks = Column(Text, nullable=True)
    is_absent = Column(Boolean, nullable=False, default=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    submitted_by = Column(UUID(as_uuid=True), ForeignKey("auth.users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("Student", lazy="joined")
    exam_type = relationship("ExamType", lazy="joined")
    subject = relationship("Subject", lazy="joined")
