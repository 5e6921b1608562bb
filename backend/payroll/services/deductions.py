"""
Deduction Aggregator Service
Merges statutory and variable deductions into net pay and classifies the result.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
import logging

from .calculator import StatutoryDeductions
from .results import CalculationStatus, CompleteStatus, ErrorStatus, WarningStatus

logger = logging.getLogger('payroll')

ZERO = Decimal('0')

DEFAULT_EWA_WARNING_RATIO = Decimal('0.50')
DEFAULT_DEDUCTION_WARNING_RATIO = Decimal('0.70')


@dataclass(frozen=True)
class DeductionTotals:
    total_deductions: Decimal
    net_pay: Decimal


def total_ewa_deductions(advances: Iterable, period) -> Decimal:
    """Sum of EWA advances disbursed inside the period."""
    total = ZERO
    for advance in advances:
        if advance.counts_towards(period):
            total += Decimal(str(advance.amount))
    return total


def _percent(ratio: Decimal) -> str:
    return f"{(Decimal(str(ratio)) * 100).normalize():f}"


class DeductionAggregator:
    """
    Combines the seven deduction components and applies the status rules:

    1. Net pay below zero is an error.
    2. EWA deductions above the EWA ratio of gross pay is a warning.
    3. Total deductions above the deduction ratio of gross pay is a warning.

    Errors win over warnings and only the first matching warning is kept.
    """

    def __init__(self, ewa_warning_ratio=DEFAULT_EWA_WARNING_RATIO,
                 deduction_warning_ratio=DEFAULT_DEDUCTION_WARNING_RATIO):
        self.ewa_warning_ratio = Decimal(str(ewa_warning_ratio))
        self.deduction_warning_ratio = Decimal(str(deduction_warning_ratio))

    def aggregate(self, gross_pay: Decimal, statutory: StatutoryDeductions,
                  ewa_deductions: Decimal = ZERO, loan_deductions: Decimal = ZERO,
                  other_deductions: Decimal = ZERO) -> DeductionTotals:
        total = (
            statutory.paye +
            statutory.nssf +
            statutory.shif +
            statutory.housing_levy +
            ewa_deductions +
            loan_deductions +
            other_deductions
        )
        return DeductionTotals(total_deductions=total, net_pay=gross_pay - total)

    def classify(self, gross_pay: Decimal, total_deductions: Decimal, net_pay: Decimal,
                 ewa_deductions: Decimal) -> CalculationStatus:
        if net_pay < 0:
            return ErrorStatus('Net pay is negative')
        if ewa_deductions > gross_pay * self.ewa_warning_ratio:
            return WarningStatus(
                f"EWA deductions exceed {_percent(self.ewa_warning_ratio)}% of gross pay"
            )
        if total_deductions > gross_pay * self.deduction_warning_ratio:
            return WarningStatus(
                f"Total deductions exceed {_percent(self.deduction_warning_ratio)}% of gross pay"
            )
        return CompleteStatus()

    def classify_calculation(self, calculation) -> CalculationStatus:
        return self.classify(
            calculation.gross_pay,
            calculation.total_deductions,
            calculation.net_pay,
            calculation.ewa_deductions,
        )
