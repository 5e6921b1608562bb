"""
Result types produced by a payroll batch run.
"""
import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from core.periods import PayPeriod

ZERO = Decimal('0')


class CalculationStatus:
    """
    Classification of a calculation. One of CompleteStatus, WarningStatus or ErrorStatus.
    """
    value = ''
    reason = ''

    @property
    def is_complete(self):
        return self.value == 'complete'

    @property
    def is_error(self):
        return self.value == 'error'


@dataclass(frozen=True)
class CompleteStatus(CalculationStatus):
    value = 'complete'


@dataclass(frozen=True)
class WarningStatus(CalculationStatus):
    reason: str
    value = 'warning'

    def __post_init__(self):
        if not self.reason:
            raise ValueError('A warning needs a reason')


@dataclass(frozen=True)
class ErrorStatus(CalculationStatus):
    reason: str
    value = 'error'

    def __post_init__(self):
        if not self.reason:
            raise ValueError('An error needs a reason')


@dataclass
class PayrollCalculation:
    """Payroll for one employee in one batch run."""
    # Identity
    employee_id: object
    employee_number: str
    name: str
    department: str
    position: str

    # Inputs
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    hourly_rate: Decimal = ZERO

    # Earnings and statutory deductions
    gross_pay: Decimal = ZERO
    taxable_income: Decimal = ZERO
    paye: Decimal = ZERO
    nssf: Decimal = ZERO
    shif: Decimal = ZERO
    housing_levy: Decimal = ZERO

    # Variable deductions
    ewa_deductions: Decimal = ZERO
    loan_deductions: Decimal = ZERO
    other_deductions: Decimal = ZERO

    # Totals
    total_deductions: Decimal = ZERO
    net_pay: Decimal = ZERO

    status: CalculationStatus = field(default_factory=CompleteStatus)

    # Audit
    is_edited: bool = False
    original_net_pay: Optional[Decimal] = None

    @classmethod
    def failed(cls, employee, reason: str) -> 'PayrollCalculation':
        """Minimal error record for an employee whose calculation raised."""
        return cls(
            employee_id=employee.id,
            employee_number=getattr(employee, 'employee_number', '') or '',
            name=employee.get_full_name(),
            department=getattr(employee, 'department_name', '') or '',
            position=getattr(employee, 'position', '') or '',
            status=ErrorStatus(reason),
        )

    @property
    def status_reason(self) -> str:
        return self.status.reason

    @property
    def statutory_total(self) -> Decimal:
        return self.paye + self.nssf + self.shif + self.housing_levy

    @property
    def variable_total(self) -> Decimal:
        return self.ewa_deductions + self.loan_deductions + self.other_deductions

    def has_consistent_totals(self) -> bool:
        return (
            self.total_deductions == self.statutory_total + self.variable_total
            and self.net_pay == self.gross_pay - self.total_deductions
        )


@dataclass(frozen=True)
class DepartmentSummary:
    department: str
    employee_count: int
    total_amount: Decimal
    percentage_of_total: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    total_gross_pay: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    total_ewa_deductions: Decimal
    employee_count: int
    department_summary: List[DepartmentSummary]
    period_comparison: Optional[Decimal] = None


@dataclass(frozen=True)
class ValidationIssue:
    employee_id: object
    employee_name: str
    issue: str

    def __str__(self):
        return f"{self.employee_name}: {self.issue}"


@dataclass
class BatchResult:
    run_id: str
    request: object
    calculations: List[PayrollCalculation]
    summary: PayrollSummary
    started_at: datetime.datetime
    finished_at: datetime.datetime
    previous_net_total: Optional[Decimal] = None

    @property
    def period(self) -> PayPeriod:
        return self.request.period
