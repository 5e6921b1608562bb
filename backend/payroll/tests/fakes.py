"""
In-memory payroll inputs for tests that should not touch the database.
"""
import datetime
import threading
from decimal import Decimal

from attendance.models import AttendanceRecord
from core.periods import PayPeriod
from employees.models import Department, User
from payroll.services.sources import PayrollDataSource

# Monday 5 Oct 2026 to Sunday 11 Oct 2026: five working days
WEEK = PayPeriod(datetime.date(2026, 10, 5), datetime.date(2026, 10, 11))

FINANCE = Department(name='Finance', code='FIN')
OPERATIONS = Department(name='Operations', code='OPS')


def make_employee(first_name, last_name, hourly_rate='500', department=FINANCE, number=None):
    return User(
        email=f"{first_name.lower()}.{last_name.lower()}@example.com",
        first_name=first_name,
        last_name=last_name,
        employee_number=number or f"EMP-{first_name[:3].upper()}",
        position='Clerk',
        hourly_rate=Decimal(hourly_rate) if hourly_rate is not None else None,
        department=department,
    )


def full_week(hours='8', period=WEEK):
    return [
        AttendanceRecord(date=day, hours_worked=Decimal(hours), status=AttendanceRecord.Status.PRESENT)
        for day in period.working_days()
    ]


class FakeSource(PayrollDataSource):
    """
    Serves employees and their inputs from dicts keyed by employee id.
    Employees without attendance get a full 8-hour week.
    """

    def __init__(self, employees, attendance=None, advances=None, loans=None,
                 other=None, holidays=None, previous_net_total=None, tax_config=None):
        self.employees = list(employees)
        self.attendance = attendance or {}
        self.advances = advances or {}
        self.loans = loans or {}
        self.other = other or {}
        self.holidays = holidays or set()
        self.previous_net_total = previous_net_total
        self.tax_config = tax_config
        self.calculated = []

    def get_employees(self, employee_ids=None):
        if employee_ids is None:
            return list(self.employees)
        wanted = {str(i) for i in employee_ids}
        return [e for e in self.employees if str(e.id) in wanted]

    def get_attendance(self, employee, period):
        return self.attendance.get(employee.id, full_week())

    def get_holidays(self, period):
        return set(self.holidays)

    def get_ewa_advances(self, employee, period):
        self.calculated.append(employee.id)
        return self.advances.get(employee.id, [])

    def get_loan_deductions(self, employee, period):
        return self.loans.get(employee.id, Decimal('0'))

    def get_other_deductions(self, employee, period):
        return self.other.get(employee.id, Decimal('0'))

    def get_previous_net_total(self, period):
        return self.previous_net_total

    def get_tax_config(self, period):
        return self.tax_config


class BlockingSource(FakeSource):
    """Pauses while reading each employee's EWA advances until released."""

    def __init__(self, employees, **kwargs):
        super().__init__(employees, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def get_ewa_advances(self, employee, period):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().get_ewa_advances(employee, period)
