# rocktour/schedule_columns.py
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List

from .config import MONTH_FORMAT


@dataclass(frozen=True)
class DateColumn:
    """One availability column on the Shows sheet.

    month_label is only set on the first column of each month (and on the
    first column of the range); month_span tells how many columns its merged
    header covers. Every other column has an empty label and a span of 0.
    """
    day: date
    day_label: str
    month_label: str = ''
    month_span: int = 0


def availability_columns(start_date: date, end_date: date) -> List[DateColumn]:
    """
    Lays out the availability block for the half-open range [start_date, end_date).

    The reader asserts these labels and the writer emits them, so both walk
    the exact same columns.

    Args:
        start_date (date): First bookable date.
        end_date (date): First date after the range.

    Returns:
        List[DateColumn]: One descriptor per date, in date order.
    """
    columns = []
    current = start_date
    while current < end_date:
        if current == start_date or current.day == 1:
            # Span runs to the first of next month, clipped to the range end
            next_month = (current.replace(day=1) + timedelta(days=32)).replace(day=1)
            span_end = min(next_month, end_date)
            columns.append(DateColumn(current, str(current.day),
                                      current.strftime(MONTH_FORMAT), (span_end - current).days))
        else:
            columns.append(DateColumn(current, str(current.day)))
        current += timedelta(days=1)
    return columns
