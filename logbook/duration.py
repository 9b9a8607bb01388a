"""
Flight time from chocks-off / chocks-on clock times.
"""

import re
from decimal import Decimal, ROUND_HALF_UP


CLOCK_RE = re.compile(r'^(\d{1,2}):(\d{2})$')

TWO_PLACES = Decimal('0.01')


def clock_to_minutes(clock):
    """Convert ``H:MM`` / ``HH:MM`` to minutes after midnight.

    Returns:
        int, or None if the value is not a valid clock time.
    """
    if not clock:
        return None
    match = CLOCK_RE.match(str(clock).strip())
    if not match:
        return None
    h, m = int(match.group(1)), int(match.group(2))
    if h > 23 or m > 59:
        return None
    return h * 60 + m


def calculate_duration(chocks_off, chocks_on):
    """Elapsed flight time in decimal hours.

    Both times are taken to be on the same day unless chocks-on is earlier
    than chocks-off, in which case it is on the next day. Flights of 24h or
    more cannot be represented.

    Args:
        chocks_off: Departure time, ``HH:MM``.
        chocks_on: Arrival time, ``HH:MM``.

    Returns:
        Hours as a string with two decimals ('2.00', '0.75'), or '' when
        either time is missing or not a clock time.
    """
    off_minutes = clock_to_minutes(chocks_off)
    on_minutes = clock_to_minutes(chocks_on)
    if off_minutes is None or on_minutes is None:
        return ''

    if on_minutes < off_minutes:
        on_minutes += 24 * 60

    hours = Decimal(on_minutes - off_minutes) / Decimal(60)
    return str(hours.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))
