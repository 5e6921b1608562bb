"""
Pay period value type shared by the attendance, ewa and payroll apps.
"""
import calendar
import datetime
from dataclasses import dataclass
from typing import Iterable, Iterator, List


@dataclass(frozen=True)
class PayPeriod:
    """A closed date interval [start_date, end_date]."""
    start_date: datetime.date
    end_date: datetime.date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(
                f"Pay period start {self.start_date} is after its end {self.end_date}"
            )

    def __str__(self):
        return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"

    @classmethod
    def for_month(cls, year: int, month: int) -> 'PayPeriod':
        last_day = calendar.monthrange(year, month)[1]
        return cls(datetime.date(year, month, 1), datetime.date(year, month, last_day))

    def contains(self, day: datetime.date) -> bool:
        if isinstance(day, datetime.datetime):
            day = day.date()
        return self.start_date <= day <= self.end_date

    def days(self) -> Iterator[datetime.date]:
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += datetime.timedelta(days=1)

    def working_days(self, holidays: Iterable[datetime.date] = ()) -> List[datetime.date]:
        """Weekdays in the period, minus public holidays."""
        excluded = set(holidays)
        # Exclude weekends (Saturday=5, Sunday=6)
        return [day for day in self.days() if day.weekday() < 5 and day not in excluded]
