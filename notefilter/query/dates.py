"""
Date resolution for '@' filters in the search language.

A date expression is the part of an '@' token after the optional field
prefix. It resolves to an inclusive DateRange in local time:

    today, yesterday, last7d, last30d, thisweek, thismonth
    2026-02-04, 20260204                 a single day
    2026, 2026-02, 202602                a year / a month
    2026-W05, 2026W05                    an ISO week (Monday to Sunday)
    2026-Q2, 2026Q2                      a quarter
    2026-02-04T09:30, 2026-02-04T09:30:15  a minute / a second
    13/02/2026, 02.13.2026, 4-2-2026     separated numeric days
    2026-02-01..2026-02-07               an inclusive range
    ..2026-02-07, 2026-02-01..           open-ended ranges

Every form has a granularity. A range runs from the start of its left
side to the end of its right side; an omitted left side is the earliest
representable instant and an omitted right side is 'now', or the end of
the left side when that is later. Spans that would run past year 9999
end at datetime.max.

Separated numeric dates are ambiguous when both leading numbers are 12 or
less. The caller decides the order by passing a DayOrder strategy, either
day_first, month_first, or one picked from a locale with locale_day_order().
"""

import logging
import re
from dataclasses import dataclass
from datetime import MAXYEAR, date, datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================

class DateField(Enum):
    """Note timestamp a date filter applies to."""
    CREATED = "created"
    MODIFIED = "modified"

    @classmethod
    def from_string(cls, s: str) -> "DateField":
        """Parse a date field from a name or its one-letter prefix."""
        s = s.lower().strip()
        mapping = {
            'c': cls.CREATED,
            'created': cls.CREATED,
            'ctime': cls.CREATED,
            'm': cls.MODIFIED,
            'modified': cls.MODIFIED,
            'mtime': cls.MODIFIED,
        }
        if s in mapping:
            return mapping[s]
        raise ValueError(f"Unknown date field: {s}")


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of local instants."""
    start: datetime
    end: datetime

    def contains(self, value: Optional[datetime]) -> bool:
        """Check if a timestamp falls inside the range (both ends inclusive)."""
        if value is None:
            return False
        value = to_local_naive(value)
        return self.start <= value <= self.end

    def __repr__(self):
        return f"DateRange({self.start.isoformat()} .. {self.end.isoformat()})"


# Resolves the two leading numbers of 'a/b/yyyy' into (day, month)
DayOrder = Callable[[int, int], Tuple[int, int]]


def day_first(first: int, second: int) -> Tuple[int, int]:
    """Read 'a/b/yyyy' as day/month when the order is ambiguous."""
    return first, second


def month_first(first: int, second: int) -> Tuple[int, int]:
    """Read 'a/b/yyyy' as month/day when the order is ambiguous."""
    return second, first


# Locales that write numeric dates month first
MONTH_FIRST_LOCALES = frozenset({
    'en_us', 'en_as', 'en_gu', 'en_mp', 'en_pr', 'en_um', 'en_vi',
    'en_ph', 'fil_ph', 'es_us', 'en_fm', 'en_mh',
})


def locale_day_order(locale: Optional[str]) -> DayOrder:
    """
    Pick the day order strategy for a locale identifier.

    Args:
        locale: Locale such as 'en_US', 'en-GB' or 'de_DE.UTF-8'

    Returns:
        month_first for month-first locales, otherwise day_first
    """
    if not locale:
        return day_first
    name = locale.split('.')[0].split('@')[0].replace('-', '_').lower()
    if name in MONTH_FIRST_LOCALES:
        return month_first
    return day_first


# =============================================================================
# Helpers
# =============================================================================

# Smallest step between two datetimes; end-of-span is next start minus this
EPSILON = timedelta(microseconds=1)

RELATIVE_KEYWORDS = ('today', 'yesterday', 'last7d', 'last30d', 'thisweek', 'thismonth')

_FIELD_PREFIX = re.compile(r'^([cm]):', re.IGNORECASE)

_DATETIME = re.compile(r'^(\d{4})-(\d{2})-(\d{2})t(\d{1,2}):(\d{2})(?::(\d{2}))?$', re.IGNORECASE)
_DAY = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_DAY_COMPACT = re.compile(r'^(\d{4})(\d{2})(\d{2})$')
_YEAR = re.compile(r'^(\d{4})$')
_MONTH = re.compile(r'^(\d{4})-(\d{1,2})$|^(\d{4})(\d{2})$')
_WEEK = re.compile(r'^(\d{4})-?w(\d{1,2})$', re.IGNORECASE)
_QUARTER = re.compile(r'^(\d{4})-?q(\d)$', re.IGNORECASE)
_NUMERIC = re.compile(r'^(\d{1,2})([/.\-])(\d{1,2})\2(\d{4})$')

Span = Tuple[datetime, datetime]


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def start_of_day(d: date) -> datetime:
    """Midnight at the start of a day."""
    return datetime(d.year, d.month, d.day)


def _span(start: datetime, next_start: Optional[datetime]) -> Span:
    # No next start past year 9999: the span runs to datetime.max
    if next_start is None:
        return start, datetime.max
    return start, next_start - EPSILON


def _shift(start: datetime, delta: timedelta) -> Optional[datetime]:
    try:
        return start + delta
    except OverflowError:
        return None


def _day_span(d: date) -> Span:
    start = start_of_day(d)
    return _span(start, _shift(start, timedelta(days=1)))


def _add_months(year: int, month: int, count: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + count
    return index // 12, index % 12 + 1


def _month_start(year: int, month: int) -> Optional[datetime]:
    if year > MAXYEAR:
        return None
    return datetime(year, month, 1)


def _month_span(year: int, month: int, count: int = 1) -> Span:
    return _span(datetime(year, month, 1), _month_start(*_add_months(year, month, count)))


def split_field_prefix(expression: str) -> Tuple[Optional[DateField], str]:
    """
    Split an optional 'c:' / 'm:' field prefix from a date expression.

    Examples:
        split_field_prefix('c:today') -> (DateField.CREATED, 'today')
        split_field_prefix('2026')    -> (None, '2026')
    """
    match = _FIELD_PREFIX.match(expression)
    if match:
        return DateField.from_string(match.group(1)), expression[match.end():]
    return None, expression


def is_partial_keyword(expression: str) -> bool:
    """
    Check if an expression is an unfinished relative keyword.

    True for '' and strict prefixes such as 'to' or 'last3'. These show up
    while the user is still typing an '@' token.
    """
    text = expression.lower()
    return any(k.startswith(text) and k != text for k in RELATIVE_KEYWORDS)


# =============================================================================
# Resolution
# =============================================================================

def _relative_span(keyword: str, now: datetime) -> Optional[Span]:
    today = now.date()

    if keyword == 'today':
        return _day_span(today)
    if keyword == 'yesterday':
        return _day_span(today - timedelta(days=1))
    if keyword == 'last7d':
        return start_of_day(today - timedelta(days=6)), _day_span(today)[1]
    if keyword == 'last30d':
        return start_of_day(today - timedelta(days=29)), _day_span(today)[1]
    if keyword == 'thisweek':
        monday = start_of_day(today - timedelta(days=today.weekday()))
        return _span(monday, _shift(monday, timedelta(days=7)))
    if keyword == 'thismonth':
        return _month_span(today.year, today.month)
    return None


def _single_span(text: str, now: datetime, day_order: DayOrder) -> Optional[Span]:
    """Resolve one side of a range (or a whole non-range expression)."""
    text = text.strip()
    lowered = text.lower()

    if lowered in RELATIVE_KEYWORDS:
        return _relative_span(lowered, now)

    match = _DATETIME.match(text)
    if match:
        year, month, day, hour, minute = (int(g) for g in match.groups()[:5])
        if match.group(6) is not None:
            start = datetime(year, month, day, hour, minute, int(match.group(6)))
            return _span(start, _shift(start, timedelta(seconds=1)))
        start = datetime(year, month, day, hour, minute)
        return _span(start, _shift(start, timedelta(minutes=1)))

    match = _DAY.match(text) or _DAY_COMPACT.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _day_span(date(year, month, day))

    match = _YEAR.match(text)
    if match:
        year = int(match.group(1))
        return _month_span(year, 1, 12)

    match = _MONTH.match(text)
    if match:
        groups = [g for g in match.groups() if g is not None]
        year, month = int(groups[0]), int(groups[1])
        return _month_span(year, month)

    match = _WEEK.match(text)
    if match:
        monday = date.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
        start = start_of_day(monday)
        return _span(start, _shift(start, timedelta(days=7)))

    match = _QUARTER.match(text)
    if match:
        quarter = int(match.group(2))
        if not 1 <= quarter <= 4:
            return None
        year = int(match.group(1))
        first_month = (quarter - 1) * 3 + 1
        return _month_span(year, first_month, 3)

    match = _NUMERIC.match(text)
    if match:
        first, second, year = int(match.group(1)), int(match.group(3)), int(match.group(4))
        if first > 12:
            day, month = first, second
        elif second > 12:
            day, month = second, first
        else:
            day, month = day_order(first, second)
        return _day_span(date(year, month, day))

    return None


def resolve_date(expression: str, now: datetime,
                 day_order: DayOrder = day_first) -> Optional[DateRange]:
    """
    Resolve a date expression into an inclusive range.

    Args:
        expression: Date expression without '@' and without field prefix
        now: Reference time for relative keywords and open range ends
        day_order: Strategy for ambiguous separated numeric dates

    Returns:
        DateRange, or None if the expression is not a valid date
    """
    now = to_local_naive(now)
    text = expression.strip()
    if not text:
        return None

    try:
        if '..' not in text:
            span = _single_span(text, now, day_order)
            return DateRange(*span) if span else None

        left, right = text.split('..', 1)
        if '..' in right or not (left or right):
            return None

        left_span = _single_span(left, now, day_order) if left else None
        right_span = _single_span(right, now, day_order) if right else None
        if (left and left_span is None) or (right and right_span is None):
            return None

        if left_span and right_span and left_span[0] > right_span[1]:
            # Written backwards: 2026-02-07..2026-02-01
            left_span, right_span = right_span, left_span

        start = left_span[0] if left_span else datetime.min
        end = right_span[1] if right_span else max(now, left_span[1])
        return DateRange(start, end)

    except (ValueError, OverflowError) as e:
        logger.debug(f"Invalid date expression {expression!r}: {e}")
        return None
