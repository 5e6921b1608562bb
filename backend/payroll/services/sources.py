"""
Payroll Data Sources
Read access to employees, attendance, EWA advances and recurring deductions.
"""
from decimal import Decimal
from typing import List, Optional
import datetime
import logging

from django.db import models
from django.utils import timezone

from attendance.models import AttendanceRecord, PublicHoliday
from employees.models import EmployeeDeduction, User
from ewa.models import EwaAdvance
from payroll.models import PayrollPeriod, TaxTable

logger = logging.getLogger('payroll')

ZERO = Decimal('0')


class PayrollDataSource:
    """
    Everything a batch run reads. Implementations must not write.
    """

    def get_employees(self, employee_ids=None) -> List:
        raise NotImplementedError

    def get_attendance(self, employee, period) -> List:
        raise NotImplementedError

    def get_holidays(self, period) -> set:
        return set()

    def get_ewa_advances(self, employee, period) -> List:
        raise NotImplementedError

    def get_loan_deductions(self, employee, period) -> Decimal:
        return ZERO

    def get_other_deductions(self, employee, period) -> Decimal:
        return ZERO

    def get_previous_net_total(self, period) -> Optional[Decimal]:
        return None

    def get_tax_config(self, period) -> Optional[dict]:
        return None


class DatabaseSource(PayrollDataSource):
    """Data source backed by the Django ORM."""

    def get_employees(self, employee_ids=None) -> List[User]:
        """Get active employees for payroll, optionally restricted to some ids."""
        employees = User.objects.payable()
        if employee_ids is not None:
            employees = employees.filter(id__in=list(employee_ids))
        return list(employees)

    def get_attendance(self, employee, period) -> List[AttendanceRecord]:
        return list(
            AttendanceRecord.objects.filter(
                employee=employee,
                date__range=(period.start_date, period.end_date)
            )
        )

    def get_holidays(self, period) -> set:
        return PublicHoliday.dates_in(period)

    def get_ewa_advances(self, employee, period) -> List[EwaAdvance]:
        """
        Disbursed advances paid out around the period.

        The query window is a day wider than the period on each side.
        EwaAdvance.counts_towards applies the exact local-date check.
        """
        window_start = timezone.make_aware(
            datetime.datetime.combine(period.start_date - datetime.timedelta(days=1), datetime.time.min)
        )
        window_end = timezone.make_aware(
            datetime.datetime.combine(period.end_date + datetime.timedelta(days=2), datetime.time.min)
        )
        return list(
            EwaAdvance.objects.filter(
                employee=employee,
                status=EwaAdvance.Status.DISBURSED,
                disbursed_at__gte=window_start,
                disbursed_at__lt=window_end
            )
        )

    def _active_deductions(self, employee, period):
        """Recurring deductions in effect at any point of the period."""
        return EmployeeDeduction.objects.filter(
            employee=employee,
            effective_from__lte=period.end_date
        ).filter(
            models.Q(effective_to__isnull=True) | models.Q(effective_to__gte=period.start_date)
        )

    def get_loan_deductions(self, employee, period) -> Decimal:
        deductions = self._active_deductions(employee, period).filter(
            deduction_type__in=EmployeeDeduction.LOAN_TYPES
        )
        return sum((d.period_amount() for d in deductions), ZERO)

    def get_other_deductions(self, employee, period) -> Decimal:
        deductions = self._active_deductions(employee, period).exclude(
            deduction_type__in=EmployeeDeduction.LOAN_TYPES
        )
        return sum((d.amount for d in deductions), ZERO)

    def get_previous_net_total(self, period) -> Optional[Decimal]:
        previous = PayrollPeriod.previous_finalized(period.start_date)
        return previous.total_net if previous else None

    def get_tax_config(self, period) -> Optional[dict]:
        """Configuration from the tax table active at the end of the period."""
        tax_table = TaxTable.get_active(period.end_date)
        if tax_table:
            logger.info(f"Using {tax_table} for {period}")
            return tax_table.as_config()
        return None
