"""
Date and time normalization for imported logbook cells.

Spreadsheets hand us dates and times in many shapes: regional strings,
Excel serial day numbers, fractions of a day, or datetime objects from
openpyxl. Everything is converted to ISO dates (YYYY-MM-DD) and 24-hour
clock strings (HH:MM).

Nothing here raises on bad input. A value that cannot be understood is
returned unchanged, so the importer can see that the field is not a
valid date/time and decide what to do with the row.
"""

import math
import re
from datetime import date, datetime, time, timedelta

from dateutil import parser as dateutil_parser


# Excel day 1 is 1900-01-01 once the fictitious 1900-02-29 is accounted for
EXCEL_EPOCH = datetime(1899, 12, 30)

# D/M/YYYY or D-M-YYYY (day first, never month first)
DAY_MONTH_YEAR_RE = re.compile(r'^(\d{1,2})([/-])(\d{1,2})\2(\d{4})$')

ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$')

CLOCK_RE = re.compile(r'(\d{1,2}):(\d{2})')

MINUTES_PER_DAY = 24 * 60


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def serial_to_date(serial):
    """Convert an Excel serial day number to a date.

    Args:
        serial: Day count (int or float) from the 1899-12-30 epoch.
            Any fractional (time of day) part is dropped.

    Returns:
        datetime.date
    """
    return (EXCEL_EPOCH + timedelta(days=math.floor(serial))).date()


def normalize_date(value):
    """Normalize a date cell to an ISO ``YYYY-MM-DD`` string.

    Handles: D/M/YYYY and D-M-YYYY (day first), Excel serial numbers,
    datetime/date objects, and anything python-dateutil can parse
    (interpreted day first).

    Args:
        value: Raw cell value (string, number, date, datetime or None).

    Returns:
        ISO date string, '' for None/blank, or the input unchanged when
        it cannot be parsed.
    """
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        try:
            return serial_to_date(value).isoformat()
        except (OverflowError, ValueError):
            return value

    s = str(value).strip()
    if not s:
        return ''

    match = DAY_MONTH_YEAR_RE.match(s)
    if match:
        day, month, year = int(match.group(1)), int(match.group(3)), int(match.group(4))
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return value

    # ISO dates must not go through dayfirst parsing, which swaps month/day
    match = ISO_DATE_RE.match(s)
    if match:
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3))).isoformat()
        except ValueError:
            return value

    try:
        return dateutil_parser.parse(s, dayfirst=True).strftime('%Y-%m-%d')
    except (ValueError, OverflowError):
        return value


def fraction_to_clock(fraction):
    """Convert a fraction of a day (Excel time) to ``HH:MM``.

    Only the fractional part is used, so a full serial date-time works too.
    Minutes are truncated, not rounded.
    """
    fraction = fraction - math.floor(fraction)
    # 1e-6 absorbs float error such as 10:20 stored as 0.430555...
    total = math.floor(fraction * MINUTES_PER_DAY + 1e-6) % MINUTES_PER_DAY
    hours, minutes = divmod(total, 60)
    return f"{hours:02d}:{minutes:02d}"


def normalize_time(value):
    """Normalize a time cell to a 24-hour ``HH:MM`` string.

    Handles: strings containing H:MM or HH:MM (e.g. '9:05', '09:05:00',
    '0930 - 10:15'), Excel day fractions, time/datetime/timedelta objects.

    Args:
        value: Raw cell value.

    Returns:
        ``HH:MM``, '' for None/blank, or the input unchanged when no clock
        time can be found.
    """
    if value is None:
        return ''
    if isinstance(value, (time, datetime)):
        return value.strftime('%H:%M')
    if isinstance(value, timedelta):
        total = int(value.total_seconds() // 60) % MINUTES_PER_DAY
        return f"{total // 60:02d}:{total % 60:02d}"
    if _is_number(value):
        if math.isnan(value) or math.isinf(value):
            return value
        return fraction_to_clock(value)

    s = str(value).strip()
    if not s:
        return ''

    match = CLOCK_RE.search(s)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"
    return value


def parse_iso_date(value):
    """Parse a stored ISO date (or timestamp) string to a date.

    Returns:
        datetime.date, or None when missing or invalid.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    try:
        return datetime.strptime(s[:10], '%Y-%m-%d').date()
    except ValueError:
        return None
