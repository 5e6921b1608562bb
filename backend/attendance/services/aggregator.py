"""
Attendance Aggregator Service
Reduces one employee's attendance records for a pay period into payable hours.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
import logging

from attendance.models import AttendanceRecord

logger = logging.getLogger('attendance')


@dataclass(frozen=True)
class AttendanceCoverage:
    """How many of a period's working days have an attendance record."""
    recorded_days: int
    expected_days: int

    @property
    def is_complete(self) -> bool:
        return self.recorded_days >= self.expected_days

    @property
    def missing_days(self) -> int:
        return max(self.expected_days - self.recorded_days, 0)


def regular_hours(records: Iterable[AttendanceRecord], period) -> Decimal:
    """
    Sum hours worked on days the employee was present or late.

    Records outside the period (inclusive on both ends) are ignored, as are
    absent and leave days.
    """
    total = Decimal('0')
    for record in records:
        if not period.contains(record.date):
            continue
        if record.status not in AttendanceRecord.PAID_STATUSES:
            continue
        total += Decimal(str(record.hours_worked or 0))

    logger.debug(f"Regular hours for {period}: {total}")
    return total


def attendance_coverage(records: Iterable[AttendanceRecord], period, holidays=()) -> AttendanceCoverage:
    """
    Compare distinct recorded dates against the period's expected working days.

    Any status counts as recorded: an absence that was captured is still complete data.
    """
    recorded = {record.date for record in records if period.contains(record.date)}
    expected = len(period.working_days(holidays))
    return AttendanceCoverage(recorded_days=len(recorded), expected_days=expected)
