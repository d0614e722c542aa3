import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.session import Base


class Student(Base):
    """Enrolled student. Owned by the student admin screens; read here for reports."""

    __tablename__ = "students"
    __table_args__ = {"schema": "school"}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    registration_no = Column(String(50), nullable=False, unique=True)
    father_name = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("core.classes.id"), nullable=False)
    section_id = Column(UUID(as_uuid=True), ForeignKey("core.sections.id"), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active | left | graduated
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id], lazy="joined")
    section = relationship("Section", foreign_keys=[section_id], lazy="joined")
