"""
Payroll engine exceptions.
"""


class PayrollError(Exception):
    """Base class for payroll engine errors."""


class PayrollValidationError(PayrollError):
    """Pre-flight validation found issues; no employee was calculated."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__(f"{len(self.issues)} validation issue(s) need attention before processing")


class PayrollBatchError(PayrollError):
    """The batch inputs could not be read. No partial results exist."""


class BatchCancelled(PayrollError):
    """The run was cancelled between employees."""


class InvalidHourlyRate(PayrollError, ValueError):
    """Gross pay cannot be computed without a positive hourly rate."""


class AdjustmentError(PayrollError, ValueError):
    """A manual adjustment was rejected."""


class ReviewSessionClosed(PayrollError):
    """The review session was finalized or replaced by a recalculation."""


class FinalizationBlocked(PayrollError):
    """Rows with error status must be corrected or excluded before finalizing."""

    def __init__(self, calculations):
        self.calculations = list(calculations)
        names = ', '.join(calc.name for calc in self.calculations)
        super().__init__(f"Cannot finalize payroll with {len(self.calculations)} error row(s): {names}")
