"""Letter grades and percentage rounding shared by results, attendance and report cards."""

import math
from typing import Tuple, Union

from app.core.enums import Grade
from app.core.exceptions import InvalidMarksConfiguration

Number = Union[int, float]

# Inclusive lower bounds, best grade first.
GRADE_THRESHOLDS: Tuple[Tuple[int, Grade], ...] = (
    (90, Grade.A_PLUS),
    (80, Grade.A),
    (70, Grade.B),
    (60, Grade.C),
    (50, Grade.D),
)


def round_half_up(value: float) -> int:
    """Round .5 towards +infinity. Report and attendance percentages must match this exactly."""
    return int(math.floor(value + 0.5))


def percentage_of(part: Number, whole: Number) -> int:
    """Rounded percentage; 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def calculate_grade(obtained: Number, total: Number) -> Grade:
    """
    Map marks to a letter grade. total must be positive; absent results never reach here
    (callers store ABSENT_GRADE instead).
    """
    if total <= 0:
        raise InvalidMarksConfiguration(total)
    percentage = obtained / total * 100
    for lower_bound, grade in GRADE_THRESHOLDS:
        if percentage >= lower_bound:
            return grade
    return Grade.F
