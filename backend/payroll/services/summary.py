"""
Payroll summary: totals, department breakdown and comparison with the previous period.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .results import DepartmentSummary, PayrollCalculation, PayrollSummary

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return (part / whole * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def build_summary(calculations: Iterable[PayrollCalculation],
                  previous_net_total: Optional[Decimal] = None) -> PayrollSummary:
    """
    Recalculate totals from all calculations.

    Departments keep the order they first appear in. A department's share is
    its net pay over total net pay; an empty or zero-net run yields 0%.
    """
    calculations = list(calculations)

    total_gross = sum((c.gross_pay for c in calculations), ZERO)
    total_deductions = sum((c.total_deductions for c in calculations), ZERO)
    total_net = sum((c.net_pay for c in calculations), ZERO)
    total_ewa = sum((c.ewa_deductions for c in calculations), ZERO)

    departments = {}
    for calc in calculations:
        count, amount = departments.get(calc.department, (0, ZERO))
        departments[calc.department] = (count + 1, amount + calc.net_pay)

    department_summary = [
        DepartmentSummary(
            department=name,
            employee_count=count,
            total_amount=amount,
            percentage_of_total=_percentage(amount, total_net),
        )
        for name, (count, amount) in departments.items()
    ]

    period_comparison = None
    if previous_net_total:
        period_comparison = _percentage(total_net - previous_net_total, previous_net_total)

    return PayrollSummary(
        total_gross_pay=total_gross,
        total_deductions=total_deductions,
        total_net_pay=total_net,
        total_ewa_deductions=total_ewa,
        employee_count=len(calculations),
        department_summary=department_summary,
        period_comparison=period_comparison,
    )
