from app.core.models.academic_session import AcademicSession
from app.core.models.attendance_record import AttendanceRecord
from app.core.models.class_model import SchoolClass
from app.core.models.exam_type import ExamType
from app.core.models.result_deadline import ResultDeadline
from app.core.models.section_model import Section
from app.core.models.student import Student
from app.core.models.student_result import RESULT_NATURAL_KEY, StudentResult
from app.core.models.subject import Subject

__all__ = [
    "AcademicSession",
    "AttendanceRecord",
    "ExamType",
    "RESULT_NATURAL_KEY",
    "ResultDeadline",
    "SchoolClass",
    "Section",
    "Student",
    "StudentResult",
    "Subject",
]
