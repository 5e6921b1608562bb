"""
Payroll Review Service
Manual adjustments to a completed batch, exclusion, recalculation and finalization.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple
import datetime
import logging

from django.db import transaction
from django.utils import timezone

from core.models import AuditLog
from payroll.exceptions import (
    AdjustmentError,
    FinalizationBlocked,
    ReviewSessionClosed,
)
from payroll.models import PayrollEntry, PayrollPeriod
from .deductions import DeductionAggregator
from .results import BatchResult, PayrollCalculation, PayrollSummary
from .summary import build_summary

logger = logging.getLogger('payroll')

ZERO = Decimal('0')
CENT = Decimal('0.01')

ADJUSTABLE_FIELDS = ('gross_pay', 'hours_worked', 'overtime_hours', 'ewa_deductions', 'net_pay')


@dataclass(frozen=True)
class AdjustmentRecord:
    """Audit trail entry for one manual adjustment."""
    employee_id: object
    employee_name: str
    changes: Dict[str, Tuple[str, str]]
    reason: str
    adjusted_by: object
    adjusted_at: datetime.datetime
    net_pay_reconciliation: Decimal = ZERO


@dataclass(frozen=True)
class ExclusionRecord:
    employee_id: object
    employee_name: str
    reason: str
    excluded_by: object
    excluded_at: datetime.datetime


class ManualAdjustmentManager:
    """
    Applies reviewer overrides to a single PayrollCalculation.

    - The first edit stores the pre-edit net pay in original_net_pay; later
      edits leave it alone.
    - PAYE, NSSF, SHIF and Housing Levy are never recomputed, even when gross
      pay changes.
    - Total deductions are re-derived from their components after every edit.
      A net pay supplied by the reviewer is reconciled through
      other_deductions, so net pay always equals gross pay less deductions.
    """

    def __init__(self, aggregator: Optional[DeductionAggregator] = None):
        self.aggregator = aggregator or DeductionAggregator()

    def _clean(self, overrides: dict) -> Dict[str, Decimal]:
        unknown = set(overrides) - set(ADJUSTABLE_FIELDS)
        if unknown:
            raise AdjustmentError(f"Cannot adjust {', '.join(sorted(unknown))}")
        if not overrides:
            raise AdjustmentError('No fields to adjust')

        values = {}
        for name, value in overrides.items():
            try:
                amount = Decimal(str(value))
            except InvalidOperation:
                raise AdjustmentError(f"{name} must be a number, got {value!r}") from None
            if not amount.is_finite():
                raise AdjustmentError(f"{name} must be a finite number")
            if name != 'net_pay' and amount < 0:
                raise AdjustmentError(f"{name} cannot be negative")
            values[name] = amount.quantize(CENT, rounding=ROUND_HALF_UP)
        return values

    def apply(self, calculation: PayrollCalculation, reason: str,
              adjusted_by=None, **overrides) -> AdjustmentRecord:
        """
        Apply overrides to the calculation in place.

        Raises:
            AdjustmentError: no reason given, unknown field or bad value
        """
        if not reason or not reason.strip():
            raise AdjustmentError('An adjustment reason is required for the audit trail')
        values = self._clean(overrides)

        before = {name: getattr(calculation, name) for name in values}
        pre_edit_net = calculation.net_pay

        for name in ('gross_pay', 'hours_worked', 'overtime_hours', 'ewa_deductions'):
            if name in values:
                setattr(calculation, name, values[name])

        if not calculation.is_edited:
            calculation.original_net_pay = pre_edit_net
            calculation.is_edited = True

        calculation.total_deductions = calculation.statutory_total + calculation.variable_total

        reconciliation = ZERO
        if 'net_pay' in values:
            reconciliation = (calculation.gross_pay - calculation.total_deductions) - values['net_pay']
            calculation.other_deductions += reconciliation
            calculation.total_deductions += reconciliation

        calculation.net_pay = calculation.gross_pay - calculation.total_deductions
        calculation.status = self.aggregator.classify_calculation(calculation)

        changes = {name: (str(before[name]), str(getattr(calculation, name))) for name in values}
        if reconciliation:
            changes['other_deductions'] = (
                str(calculation.other_deductions - reconciliation),
                str(calculation.other_deductions),
            )

        logger.info(
            f"Manual adjustment for {calculation.name}: {changes} "
            f"(original net pay {calculation.original_net_pay}) - {reason}"
        )

        return AdjustmentRecord(
            employee_id=calculation.employee_id,
            employee_name=calculation.name,
            changes=changes,
            reason=reason.strip(),
            adjusted_by=adjusted_by,
            adjusted_at=timezone.now(),
            net_pay_reconciliation=reconciliation,
        )


class ReviewSession:
    """
    Sole owner of a batch result while it is under review.

    The session is closed by finalize() or recalculate(); any later use
    raises ReviewSessionClosed.
    """

    def __init__(self, result: BatchResult, processor=None):
        self.result = result
        self.processor = processor
        aggregator = processor.aggregator if processor is not None else None
        self.manager = ManualAdjustmentManager(aggregator)
        self._calculations = list(result.calculations)
        self._summary = result.summary
        self._adjustments: List[AdjustmentRecord] = []
        self._exclusions: List[ExclusionRecord] = []
        self._closed = False

    @classmethod
    def start(cls, processor, request, on_progress=None) -> 'ReviewSession':
        """Run the batch on the calling thread and open a session on its result."""
        return cls(processor.process(request, on_progress=on_progress), processor)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self):
        if self._closed:
            raise ReviewSessionClosed(f"Review session for run {self.result.run_id[:8]} is closed")

    @property
    def period(self):
        return self.result.period

    @property
    def calculations(self) -> Tuple[PayrollCalculation, ...]:
        return tuple(self._calculations)

    @property
    def summary(self) -> PayrollSummary:
        return self._summary

    @property
    def adjustments(self) -> Tuple[AdjustmentRecord, ...]:
        return tuple(self._adjustments)

    @property
    def exclusions(self) -> Tuple[ExclusionRecord, ...]:
        return tuple(self._exclusions)

    def get(self, employee_id) -> PayrollCalculation:
        for calculation in self._calculations:
            if str(calculation.employee_id) == str(employee_id):
                return calculation
        raise KeyError(f"No calculation for employee {employee_id} in this run")

    def _refresh_summary(self):
        self._summary = build_summary(self._calculations, self.result.previous_net_total)

    def adjust(self, employee_id, reason: str, adjusted_by=None,
               **overrides) -> Tuple[PayrollCalculation, PayrollSummary]:
        """
        Override fields on one employee's calculation.

        Returns:
            The updated calculation and the recomputed summary
        """
        self._ensure_open()
        calculation = self.get(employee_id)
        record = self.manager.apply(calculation, reason, adjusted_by=adjusted_by, **overrides)
        self._adjustments.append(record)
        self._refresh_summary()
        return calculation, self._summary

    def exclude(self, employee_id, reason: str, excluded_by=None) -> PayrollSummary:
        """Drop one employee from this run, e.g. an error row that cannot be corrected."""
        self._ensure_open()
        if not reason or not reason.strip():
            raise AdjustmentError('An exclusion reason is required for the audit trail')
        calculation = self.get(employee_id)
        self._calculations.remove(calculation)
        self._exclusions.append(ExclusionRecord(
            employee_id=calculation.employee_id,
            employee_name=calculation.name,
            reason=reason.strip(),
            excluded_by=excluded_by,
            excluded_at=timezone.now(),
        ))
        logger.info(f"Excluded {calculation.name} from payroll for {self.period}: {reason}")
        self._refresh_summary()
        return self._summary

    def recalculate(self, on_progress=None) -> 'ReviewSession':
        """Discard this result set and rerun the batch for the same request."""
        self._ensure_open()
        if self.processor is None:
            raise ReviewSessionClosed('Session has no processor to recalculate with')
        self._closed = True
        logger.info(f"Recalculating payroll for {self.period}; run {self.result.run_id[:8]} discarded")
        return ReviewSession.start(self.processor, self.result.request, on_progress=on_progress)

    @transaction.atomic
    def finalize(self, note: str = '', finalized_by=None) -> PayrollPeriod:
        """
        Persist the reviewed calculations as the period's payroll of record.

        Raises:
            FinalizationBlocked: error rows remain
            ValueError: the period was already finalized
        """
        self._ensure_open()

        blocked = [c for c in self._calculations if c.status.is_error]
        if blocked:
            raise FinalizationBlocked(blocked)

        period = self.period
        payroll_period, _ = PayrollPeriod.objects.get_or_create(
            start_date=period.start_date,
            end_date=period.end_date,
        )
        if payroll_period.is_finalized:
            raise ValueError(f"Payroll for {payroll_period} is already finalized")

        for calc in self._calculations:
            PayrollEntry.objects.update_or_create(
                payroll_period=payroll_period,
                employee_id=calc.employee_id,
                defaults={
                    'employee_number': calc.employee_number,
                    'department': calc.department,
                    'position': calc.position,
                    'hours_worked': calc.hours_worked,
                    'overtime_hours': calc.overtime_hours,
                    'hourly_rate': calc.hourly_rate or ZERO,
                    'gross_pay': calc.gross_pay,
                    'taxable_income': calc.taxable_income,
                    'paye': calc.paye,
                    'nssf': calc.nssf,
                    'shif': calc.shif,
                    'housing_levy': calc.housing_levy,
                    'ewa_deductions': calc.ewa_deductions,
                    'loan_deductions': calc.loan_deductions,
                    'other_deductions': calc.other_deductions,
                    'total_deductions': calc.total_deductions,
                    'net_pay': calc.net_pay,
                    'status': calc.status.value,
                    'status_reason': calc.status_reason,
                    'is_edited': calc.is_edited,
                    'original_net_pay': calc.original_net_pay,
                }
            )

        payroll_period.status = PayrollPeriod.Status.FINALIZED
        payroll_period.finalized_by = finalized_by
        payroll_period.finalized_at = timezone.now()
        payroll_period.note = note
        payroll_period.calculate_totals()

        for adjustment in self._adjustments:
            AuditLog.log(
                user=adjustment.adjusted_by,
                action=AuditLog.ActionType.ADJUST,
                model_name='PayrollEntry',
                object_id=adjustment.employee_id,
                object_repr=f"{adjustment.employee_name} - {payroll_period}",
                changes={name: list(values) for name, values in adjustment.changes.items()},
                reason=adjustment.reason,
            )
        for exclusion in self._exclusions:
            AuditLog.log(
                user=exclusion.excluded_by,
                action=AuditLog.ActionType.EXCLUDE,
                model_name='PayrollEntry',
                object_id=exclusion.employee_id,
                object_repr=f"{exclusion.employee_name} - {payroll_period}",
                reason=exclusion.reason,
            )
        AuditLog.log(
            user=finalized_by,
            action=AuditLog.ActionType.FINALIZE,
            model_name='PayrollPeriod',
            object_id=payroll_period.id,
            object_repr=str(payroll_period),
            changes={
                'employee_count': payroll_period.employee_count,
                'total_net': str(payroll_period.total_net),
            },
            reason=note,
        )

        self._closed = True
        logger.info(
            f"Payroll for {payroll_period} finalized. "
            f"Employees: {payroll_period.employee_count}, "
            f"Total Net: {payroll_period.total_net}"
        )
        return payroll_period
