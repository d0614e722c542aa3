"""Attendance counts and the weighted attendance percentage."""

from typing import Iterable

from app.core.enums import AttendanceStatus, AttendanceType
from app.core.grading import percentage_of

from .schemas import AttendanceSummary

HALF_DAY_WEIGHT = 0.5


def summarize(records: Iterable) -> AttendanceSummary:
    """
    Summarize records carrying .status and .attendance_type.

    present/absent/late partition by status; half_day/full_day count attendance_type, which is an
    independent axis, so a present half-day is counted under both present and half_day.
    Late counts as a full day and a half-day as half of one in the percentage.
    """
    summary = AttendanceSummary()
    for record in records:
        summary.total += 1
        if record.status == AttendanceStatus.present:
            summary.present += 1
        elif record.status == AttendanceStatus.absent:
            summary.absent += 1
        elif record.status == AttendanceStatus.late:
            summary.late += 1
        if record.attendance_type == AttendanceType.half_day:
            summary.half_day += 1
        elif record.attendance_type == AttendanceType.full_day:
            summary.full_day += 1

    attended = summary.present + summary.late + summary.half_day * HALF_DAY_WEIGHT
    summary.percentage = percentage_of(attended, summary.total)
    return summary
