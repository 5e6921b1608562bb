"""
Attendance models for PayCycle - Payroll Calculation Engine
Daily attendance is captured upstream (clock-in/out); payroll only reads it.
"""
from decimal import Decimal, ROUND_HALF_UP
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from core.models import BaseModel


class AttendanceRecord(BaseModel):
    """
    One employee's attendance for one day.
    """

    class Status(models.TextChoices):
        PRESENT = 'present', 'Present'
        LATE = 'late', 'Late'
        ABSENT = 'absent', 'Absent'
        LEAVE = 'leave', 'On Leave'

    # Statuses whose hours count towards pay
    PAID_STATUSES = (Status.PRESENT, Status.LATE)

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='attendance_records'
    )
    date = models.DateField()
    clock_in = models.DateTimeField(null=True, blank=True)
    clock_out = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PRESENT
    )
    hours_worked = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        help_text='Derived from clock-in/out when both are recorded'
    )
    notes = models.TextField(blank=True)

    class Meta:
        unique_together = ['employee', 'date']
        ordering = ['employee', 'date']

    def __str__(self):
        return f"{self.employee.get_full_name()} - {self.date} ({self.status})"

    def compute_hours_worked(self):
        """Hours between clock-in and clock-out, rounded to 2 decimal places."""
        if not self.clock_in or not self.clock_out:
            return self.hours_worked
        seconds = Decimal(str((self.clock_out - self.clock_in).total_seconds()))
        hours = (seconds / Decimal('3600')).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        return max(hours, Decimal('0'))

    def save(self, *args, **kwargs):
        self.hours_worked = self.compute_hours_worked()
        super().save(*args, **kwargs)


class PublicHoliday(BaseModel):
    """
    Public holidays - excluded from the expected working days of a pay period.
    """

    name = models.CharField(max_length=100)
    date = models.DateField(unique=True)
    is_recurring = models.BooleanField(
        default=False,
        help_text='Repeats every year on same date'
    )

    class Meta:
        ordering = ['date']

    def __str__(self):
        return f"{self.name} ({self.date})"

    @classmethod
    def dates_in(cls, period):
        """All holiday dates falling inside the period, recurring ones included."""
        dates = set(
            cls.objects.filter(
                is_recurring=False,
                date__range=(period.start_date, period.end_date)
            ).values_list('date', flat=True)
        )
        recurring = {(d.month, d.day) for d in cls.objects.filter(is_recurring=True).values_list('date', flat=True)}
        if recurring:
            dates.update(day for day in period.days() if (day.month, day.day) in recurring)
        return dates
