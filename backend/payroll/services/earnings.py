"""
Gross Pay Calculator Service
Regular hours plus overtime at a premium multiplier.
"""
from decimal import Decimal, ROUND_HALF_UP

from payroll.exceptions import InvalidHourlyRate

DEFAULT_OVERTIME_MULTIPLIER = Decimal('1.5')


def gross_pay(hours_worked, hourly_rate, overtime_hours=Decimal('0'),
              overtime_multiplier=DEFAULT_OVERTIME_MULTIPLIER) -> Decimal:
    """
    Gross Pay = hours x rate + overtime hours x rate x multiplier

    Raises:
        InvalidHourlyRate: rate is missing or not positive. There is no fallback rate.
        ValueError: hours are negative
    """
    if hourly_rate is None or Decimal(str(hourly_rate)) <= 0:
        raise InvalidHourlyRate(f"Missing or invalid hourly rate: {hourly_rate!r}")

    rate = Decimal(str(hourly_rate))
    hours = Decimal(str(hours_worked))
    overtime = Decimal(str(overtime_hours or 0))
    if hours < 0 or overtime < 0:
        raise ValueError(f"Hours cannot be negative (regular={hours}, overtime={overtime})")

    regular_pay = hours * rate
    overtime_pay = overtime * rate * Decimal(str(overtime_multiplier))
    return (regular_pay + overtime_pay).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
