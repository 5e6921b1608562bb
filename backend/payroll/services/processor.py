"""
Batch Payroll Processor Service
Runs payroll for a set of employees over one pay period, either inline or on
a dedicated background thread that reports progress over a message queue.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Mapping, Optional
import logging
import queue
import threading
import uuid

from django.conf import settings
from django.db import connection
from django.utils import timezone

from attendance.services.aggregator import attendance_coverage, regular_hours
from core.periods import PayPeriod
from payroll.exceptions import (
    BatchCancelled,
    PayrollBatchError,
    PayrollError,
    PayrollValidationError,
)
from .calculator import StatutoryDeductionCalculator
from .deductions import DeductionAggregator, total_ewa_deductions
from .earnings import gross_pay
from .results import BatchResult, PayrollCalculation, ValidationIssue
from .sources import DatabaseSource, PayrollDataSource
from .summary import build_summary

logger = logging.getLogger('payroll')

ZERO = Decimal('0')

ENGINE_DEFAULTS = {
    'overtime_multiplier': Decimal('1.5'),
    'ewa_warning_ratio': Decimal('0.50'),
    'deduction_warning_ratio': Decimal('0.70'),
    'progress_batch_size': 10,
    'require_complete_attendance': True,
}


def get_engine_config(overrides: Optional[dict] = None) -> dict:
    """ENGINE_DEFAULTS, then settings.PAYROLL_ENGINE, then explicit overrides."""
    return {
        **ENGINE_DEFAULTS,
        **getattr(settings, 'PAYROLL_ENGINE', {}),
        **(overrides or {}),
    }


@dataclass
class CalculateRequest:
    """
    A request to calculate payroll for one period.

    employee_ids limits the run to those employees (None means every payable
    employee). Overtime is supplied by the caller per employee id; it is not
    derived from attendance.
    """
    period: PayPeriod
    employee_ids: Optional[List] = None
    excluded_ids: List = field(default_factory=list)
    overtime_hours: Mapping = field(default_factory=dict)
    requested_by: object = None

    def is_excluded(self, employee_id) -> bool:
        return str(employee_id) in {str(i) for i in self.excluded_ids}

    def overtime_for(self, employee_id) -> Decimal:
        hours = self.overtime_hours.get(employee_id, self.overtime_hours.get(str(employee_id), 0))
        return Decimal(str(hours or 0))


@dataclass(frozen=True)
class EmployeeInputs:
    """One employee's source data for a period, read before any calculation."""
    attendance: List
    ewa_advances: List
    loan_deductions: Decimal = ZERO
    other_deductions: Decimal = ZERO


# --- Messages sent by a background run ---

@dataclass(frozen=True)
class ProgressMessage:
    run_id: str
    percent: int
    is_final = False


@dataclass(frozen=True)
class ResultMessage:
    run_id: str
    result: BatchResult
    is_final = True


@dataclass(frozen=True)
class ValidationFailedMessage:
    run_id: str
    issues: List[ValidationIssue]
    is_final = True


@dataclass(frozen=True)
class ErrorMessage:
    run_id: str
    message: str
    is_final = True


@dataclass(frozen=True)
class CancelledMessage:
    run_id: str
    is_final = True


class ProgressTracker:
    """
    Emits whole-number percentages every batch_size employees and on the last one.

    Values only ever go up, stay at 99 or below until the last employee is
    done, and end at exactly 100.
    """

    def __init__(self, total: int, emit: Callable[[int], None], batch_size: int = 10):
        self.total = total
        self.emit = emit
        self.batch_size = max(int(batch_size), 1)
        self.last = -1

    def advance(self, done: int):
        if done != self.total and done % self.batch_size:
            return
        if done >= self.total:
            percent = 100
        else:
            percent = min(done * 100 // self.total, 99)
        self._send(percent)

    def finish(self):
        self._send(100)

    def _send(self, percent: int):
        if percent > self.last:
            self.last = percent
            self.emit(percent)


class BatchPayrollProcessor:
    """
    Processes payroll for employees in a given period.

    Employees are handled one at a time in the order the data source returns
    them. A calculation that raises becomes an error row for that employee.
    Any failure to read inputs, for one employee or for the run, fails the
    whole run with no partial results.
    """

    def __init__(self, source: Optional[PayrollDataSource] = None,
                 config: Optional[dict] = None,
                 calculator: Optional[StatutoryDeductionCalculator] = None):
        """
        Args:
            source: Where employees, attendance and deductions come from. Defaults to the ORM.
            config: Overrides for ENGINE_DEFAULTS
            calculator: Fixed statutory calculator. By default one is built per run from the active tax table.
        """
        self.source = source or DatabaseSource()
        self.config = get_engine_config(config)
        self.calculator = calculator
        self.aggregator = DeductionAggregator(
            ewa_warning_ratio=self.config['ewa_warning_ratio'],
            deduction_warning_ratio=self.config['deduction_warning_ratio'],
        )
        self._lock = threading.Lock()
        self._current_run = None

    def _get_calculator(self, period: PayPeriod) -> StatutoryDeductionCalculator:
        """Get calculator with the tax table configuration for the period."""
        if self.calculator is not None:
            return self.calculator
        return StatutoryDeductionCalculator(self.source.get_tax_config(period))

    def load_employees(self, request: CalculateRequest) -> List:
        employees = self.source.get_employees(request.employee_ids)
        return [e for e in employees if not request.is_excluded(e.id)]

    def _hourly_rate_issue(self, rate) -> Optional[str]:
        if rate is None or rate == '':
            return 'Missing hourly rate'
        try:
            if Decimal(str(rate)) <= 0:
                return 'Invalid hourly rate'
        except InvalidOperation:
            return 'Invalid hourly rate'
        return None

    def validate(self, employees: List, period: PayPeriod) -> List[ValidationIssue]:
        """
        Pre-flight checks for every employee in the run.

        Returns:
            Issues found; an empty list means the run may proceed
        """
        issues = []
        holidays = self.source.get_holidays(period)

        for employee in employees:
            name = employee.get_full_name()

            rate_issue = self._hourly_rate_issue(employee.hourly_rate)
            if rate_issue:
                issues.append(ValidationIssue(employee.id, name, rate_issue))

            if self.config['require_complete_attendance']:
                records = self.source.get_attendance(employee, period)
                coverage = attendance_coverage(records, period, holidays)
                if not coverage.is_complete:
                    issues.append(ValidationIssue(
                        employee.id,
                        name,
                        f"Incomplete attendance records "
                        f"({coverage.recorded_days} of {coverage.expected_days} working days recorded)"
                    ))

        return issues

    def read_inputs(self, employee, period: PayPeriod) -> EmployeeInputs:
        """Everything the data source holds for one employee in the period."""
        return EmployeeInputs(
            attendance=list(self.source.get_attendance(employee, period)),
            ewa_advances=list(self.source.get_ewa_advances(employee, period)),
            loan_deductions=self.source.get_loan_deductions(employee, period),
            other_deductions=self.source.get_other_deductions(employee, period),
        )

    def calculate_employee(self, employee, period: PayPeriod,
                           calculator: Optional[StatutoryDeductionCalculator] = None,
                           overtime_hours: Decimal = ZERO,
                           inputs: Optional[EmployeeInputs] = None) -> PayrollCalculation:
        """
        Calculate payroll for a single employee.

        Args:
            employee: The employee to process
            period: Pay period
            calculator: Statutory calculator for the period
            overtime_hours: Approved overtime supplied by the caller
            inputs: Data already read for the employee. Read from the source when omitted.

        Returns:
            PayrollCalculation with status set
        """
        calculator = calculator or self._get_calculator(period)
        if inputs is None:
            inputs = self.read_inputs(employee, period)

        hours = regular_hours(inputs.attendance, period)
        hourly_rate = Decimal(str(employee.hourly_rate)) if employee.hourly_rate is not None else None
        gross = gross_pay(hours, hourly_rate, overtime_hours, self.config['overtime_multiplier'])

        statutory = calculator.calculate(gross)

        ewa = total_ewa_deductions(inputs.ewa_advances, period)
        loans = Decimal(str(inputs.loan_deductions))
        other = Decimal(str(inputs.other_deductions))

        totals = self.aggregator.aggregate(gross, statutory, ewa, loans, other)
        status = self.aggregator.classify(gross, totals.total_deductions, totals.net_pay, ewa)

        logger.info(f"Payroll for {employee.get_full_name()}: Gross = {gross}, Net Pay = {totals.net_pay} ({status.value})")

        return PayrollCalculation(
            employee_id=employee.id,
            employee_number=employee.employee_number or '',
            name=employee.get_full_name(),
            department=employee.department_name,
            position=employee.position or '',
            hours_worked=hours,
            overtime_hours=overtime_hours,
            hourly_rate=hourly_rate,
            gross_pay=gross,
            taxable_income=statutory.taxable_income,
            paye=statutory.paye,
            nssf=statutory.nssf,
            shif=statutory.shif,
            housing_levy=statutory.housing_levy,
            ewa_deductions=ewa,
            loan_deductions=loans,
            other_deductions=other,
            total_deductions=totals.total_deductions,
            net_pay=totals.net_pay,
            status=status,
        )

    def process(self, request: CalculateRequest,
                on_progress: Optional[Callable[[int], None]] = None,
                cancel_event: Optional[threading.Event] = None) -> BatchResult:
        """
        Process payroll for every eligible employee on the calling thread.

        Raises:
            PayrollBatchError: inputs could not be read
            PayrollValidationError: pre-flight issues; nothing was calculated
            BatchCancelled: cancel_event was set during the run
        """
        return self._execute(uuid.uuid4().hex, request, on_progress or (lambda percent: None), cancel_event)

    def start(self, request: CalculateRequest) -> 'BatchRun':
        """
        Process payroll on a background thread.

        A run still in flight on this processor is cancelled first; its
        caller should discard anything it still sends.
        """
        with self._lock:
            previous = self._current_run
            if previous is not None and not previous.done:
                logger.info(f"Payroll run {previous.run_id[:8]} superseded by a new request")
                previous.cancel()
            run = BatchRun(self, request)
            self._current_run = run
        run.start()
        return run

    def _execute(self, run_id: str, request: CalculateRequest,
                 emit: Callable[[int], None],
                 cancel_event: Optional[threading.Event]) -> BatchResult:
        started_at = timezone.now()
        period = request.period
        logger.info(f"Payroll run {run_id[:8]} for {period} started")

        try:
            employees = self.load_employees(request)
            calculator = self._get_calculator(period)
            previous_net_total = self.source.get_previous_net_total(period)
            issues = self.validate(employees, period)
        except PayrollError:
            raise
        except Exception as e:
            logger.error(f"Payroll run {run_id[:8]} could not read its inputs: {e}")
            raise PayrollBatchError(f"Could not read payroll inputs: {e}") from e

        if issues:
            logger.warning(f"Payroll run {run_id[:8]} blocked by {len(issues)} validation issue(s)")
            raise PayrollValidationError(issues)

        total = len(employees)
        logger.info(f"Processing payroll for {total} employees")
        tracker = ProgressTracker(total, emit, self.config['progress_batch_size'])
        calculations = []

        for index, employee in enumerate(employees, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Payroll run {run_id[:8]} cancelled after {index - 1} of {total} employees")
                raise BatchCancelled(f"Payroll run {run_id} was cancelled")

            try:
                inputs = self.read_inputs(employee, period)
            except Exception as e:
                logger.error(
                    f"Payroll run {run_id[:8]} could not read inputs for {employee.get_full_name()}: {e}"
                )
                raise PayrollBatchError(
                    f"Could not read payroll inputs for {employee.get_full_name()}: {e}"
                ) from e

            try:
                calculation = self.calculate_employee(
                    employee, period, calculator, request.overtime_for(employee.id), inputs
                )
            except Exception as e:
                logger.exception(f"Error processing payroll for {employee.get_full_name()}: {e}")
                calculation = PayrollCalculation.failed(employee, f"Calculation failed: {e}")

            calculations.append(calculation)
            tracker.advance(index)

        tracker.finish()
        summary = build_summary(calculations, previous_net_total)

        logger.info(
            f"Payroll run {run_id[:8]} complete. "
            f"Total Gross: {summary.total_gross_pay}, "
            f"Total Net: {summary.total_net_pay}"
        )

        return BatchResult(
            run_id=run_id,
            request=request,
            calculations=calculations,
            summary=summary,
            started_at=started_at,
            finished_at=timezone.now(),
            previous_net_total=previous_net_total,
        )


class BatchRun:
    """
    One payroll run on its own thread.

    Messages arrive in order: progress values first, then exactly one final
    message (result, validation failure, error or cancellation). Nothing
    follows the final message.
    """

    def __init__(self, processor: BatchPayrollProcessor, request: CalculateRequest):
        self.run_id = uuid.uuid4().hex
        self.request = request
        self.outcome = None
        self._processor = processor
        self._queue = queue.Queue()
        self._cancel_event = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"payroll-batch-{self.run_id[:8]}",
            daemon=True,
        )

    def start(self):
        self._thread.start()

    def cancel(self):
        self._cancel_event.set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def _emit_progress(self, percent: int):
        self._queue.put(ProgressMessage(self.run_id, percent))

    def _run(self):
        try:
            result = self._processor._execute(
                self.run_id, self.request, self._emit_progress, self._cancel_event
            )
            final = ResultMessage(self.run_id, result)
        except PayrollValidationError as e:
            final = ValidationFailedMessage(self.run_id, e.issues)
        except BatchCancelled:
            final = CancelledMessage(self.run_id)
        except Exception as e:
            logger.exception(f"Payroll run {self.run_id[:8]} failed: {e}")
            final = ErrorMessage(self.run_id, str(e) or 'An unknown error occurred while processing payroll')
        finally:
            # Worker threads own their DB connection
            connection.close()

        self.outcome = final
        self._queue.put(final)
        self._finished.set()

    def messages(self, timeout: Optional[float] = None):
        """
        Yield messages until the final one.

        Raises:
            TimeoutError: no message arrived within timeout seconds
        """
        while True:
            try:
                message = self._queue.get(timeout=timeout)
            except queue.Empty:
                raise TimeoutError(f"No message from payroll run {self.run_id[:8]} within {timeout}s") from None
            yield message
            if message.is_final:
                return

    def wait(self, timeout: Optional[float] = None):
        """Drain the run's messages and return the final one."""
        message = None
        for message in self.messages(timeout):
            pass
        return message
