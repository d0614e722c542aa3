from enum import Enum


class Grade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


# Stored in place of a letter grade when the student was absent.
ABSENT_GRADE = "AB"


class AttendanceStatus(str, Enum):
    present = "present"
    absent = "absent"
    late = "late"
    excused = "excused"


class AttendanceType(str, Enum):
    full_day = "full_day"
    half_day = "half_day"
    absent = "absent"


class BulkLockedPolicy(str, Enum):
    SKIP = "skip"
    OVERWRITE = "overwrite"
