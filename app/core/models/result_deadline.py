"""Result submission windows. class_id / subject_id NULL means the window covers every class / subject."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.session import Base


class ResultDeadline(Base):
    """
    One window per (session, exam type, class, subject). NULLs compare equal in the unique
    constraint so there is at most one general (class_id NULL) window per session/exam type.
    Rows are toggled open/closed, never deleted.
    """

    __tablename__ = "result_deadlines"
    __table_args__ = (
        UniqueConstraint(
            "session_id", "exam_type_id", "class_id", "subject_id",
            name="uq_result_deadline_scope",
            postgresql_nulls_not_distinct=True,
        ),
        {"schema": "school"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        UUID(as_uuid=True),
        ForeignKey("core.academic_sessions.id", ondelete="RESTRICT"),
        nullable=False,
    )
    exam_type_id = Column(UUID(as_uuid=True), ForeignKey("core.exam_types.id"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("core.classes.id"), nullable=True)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("core.subjects.id"), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_open = Column(Boolean, nullable=False, default=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("auth.users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    session = relationship("AcademicSession", lazy="joined")
    exam_type = relationship("ExamType", lazy="joined")
    school_class = relationship("SchoolClass", lazy="joined")
    subject = relationship("Subject", lazy="joined")
