"""
Tests for attendance aggregation and working-day coverage.
"""
import datetime
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from attendance.models import AttendanceRecord, PublicHoliday
from attendance.services.aggregator import attendance_coverage, regular_hours
from core.periods import PayPeriod
from employees.models import User

# Monday 5 Oct 2026 to Sunday 11 Oct 2026
WEEK = PayPeriod(datetime.date(2026, 10, 5), datetime.date(2026, 10, 11))


def record(day, hours, status=AttendanceRecord.Status.PRESENT):
    return AttendanceRecord(date=day, hours_worked=Decimal(hours), status=status)


class RegularHoursTests(SimpleTestCase):
    """Tests for regular_hours."""

    def test_sums_present_and_late_days(self):
        records = [
            record(datetime.date(2026, 10, 5), '8'),
            record(datetime.date(2026, 10, 6), '7.5', AttendanceRecord.Status.LATE),
            record(datetime.date(2026, 10, 7), '8.25'),
        ]
        self.assertEqual(regular_hours(records, WEEK), Decimal('23.75'))

    def test_absent_and_leave_days_are_not_paid(self):
        records = [
            record(datetime.date(2026, 10, 5), '8'),
            record(datetime.date(2026, 10, 6), '8', AttendanceRecord.Status.ABSENT),
            record(datetime.date(2026, 10, 7), '8', AttendanceRecord.Status.LEAVE),
        ]
        self.assertEqual(regular_hours(records, WEEK), Decimal('8'))

    def test_period_bounds_are_inclusive(self):
        records = [
            record(datetime.date(2026, 10, 4), '8'),   # day before
            record(datetime.date(2026, 10, 5), '6'),   # first day
            record(datetime.date(2026, 10, 11), '4'),  # last day
            record(datetime.date(2026, 10, 12), '8'),  # day after
        ]
        self.assertEqual(regular_hours(records, WEEK), Decimal('10'))

    def test_no_records(self):
        self.assertEqual(regular_hours([], WEEK), Decimal('0'))


class AttendanceCoverageTests(SimpleTestCase):
    """Tests for attendance_coverage."""

    def weekdays(self, status=AttendanceRecord.Status.PRESENT):
        return [record(day, '8', status) for day in WEEK.working_days()]

    def test_full_week_is_complete(self):
        coverage = attendance_coverage(self.weekdays(), WEEK)
        self.assertEqual(coverage.expected_days, 5)
        self.assertEqual(coverage.recorded_days, 5)
        self.assertTrue(coverage.is_complete)
        self.assertEqual(coverage.missing_days, 0)

    def test_missing_day_is_incomplete(self):
        coverage = attendance_coverage(self.weekdays()[:4], WEEK)
        self.assertFalse(coverage.is_complete)
        self.assertEqual(coverage.missing_days, 1)

    def test_recorded_absences_count_as_recorded(self):
        coverage = attendance_coverage(self.weekdays(AttendanceRecord.Status.ABSENT), WEEK)
        self.assertTrue(coverage.is_complete)

    def test_holidays_reduce_expected_days(self):
        holiday = datetime.date(2026, 10, 6)
        records = [r for r in self.weekdays() if r.date != holiday]
        coverage = attendance_coverage(records, WEEK, holidays={holiday})
        self.assertEqual(coverage.expected_days, 4)
        self.assertTrue(coverage.is_complete)

    def test_weekend_records_count_as_recorded_days(self):
        records = self.weekdays()[:4] + [record(datetime.date(2026, 10, 10), '5')]
        coverage = attendance_coverage(records, WEEK)
        self.assertEqual(coverage.recorded_days, 5)
        self.assertTrue(coverage.is_complete)

    def test_records_outside_period_are_ignored(self):
        records = self.weekdays()[:4] + [record(datetime.date(2026, 10, 12), '8')]
        coverage = attendance_coverage(records, WEEK)
        self.assertEqual(coverage.recorded_days, 4)


class AttendanceRecordTests(TestCase):
    """Tests for hours derived from clock-in/out."""

    def setUp(self):
        self.employee = User.objects.create_user(
            email='wanjiku@example.com',
            first_name='Wanjiku',
            last_name='Kamau',
        )

    def test_hours_derived_from_clock_times(self):
        clock_in = timezone.make_aware(datetime.datetime(2026, 10, 5, 8, 0))
        attendance = AttendanceRecord.objects.create(
            employee=self.employee,
            date=datetime.date(2026, 10, 5),
            clock_in=clock_in,
            clock_out=clock_in + datetime.timedelta(hours=9, minutes=20),
        )
        attendance.refresh_from_db()
        self.assertEqual(attendance.hours_worked, Decimal('9.33'))

    def test_hours_kept_without_clock_out(self):
        attendance = AttendanceRecord.objects.create(
            employee=self.employee,
            date=datetime.date(2026, 10, 6),
            clock_in=timezone.make_aware(datetime.datetime(2026, 10, 6, 8, 0)),
            hours_worked=Decimal('6'),
        )
        self.assertEqual(attendance.hours_worked, Decimal('6'))

    def test_clock_out_before_clock_in_is_zero_hours(self):
        clock_in = timezone.make_aware(datetime.datetime(2026, 10, 7, 17, 0))
        attendance = AttendanceRecord(
            employee=self.employee,
            date=datetime.date(2026, 10, 7),
            clock_in=clock_in,
            clock_out=clock_in - datetime.timedelta(hours=1),
        )
        self.assertEqual(attendance.compute_hours_worked(), Decimal('0'))


class PublicHolidayTests(TestCase):
    """Tests for PublicHoliday.dates_in."""

    def test_fixed_and_recurring_holidays(self):
        PublicHoliday.objects.create(name='Mashujaa Day', date=datetime.date(2025, 10, 20), is_recurring=True)
        PublicHoliday.objects.create(name='Company Day', date=datetime.date(2026, 10, 22))
        PublicHoliday.objects.create(name='Outside', date=datetime.date(2026, 10, 30))

        period = PayPeriod(datetime.date(2026, 10, 19), datetime.date(2026, 10, 25))
        self.assertEqual(
            PublicHoliday.dates_in(period),
            {datetime.date(2026, 10, 20), datetime.date(2026, 10, 22)}
        )
        self.assertEqual(len(period.working_days(PublicHoliday.dates_in(period))), 3)
