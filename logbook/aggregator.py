"""
Derived logbook statistics.

Pure functions over lists of FlightRecord / DocumentRecord: hour totals by
sortie type, recent flights, search, the flight-log table with its totals
row, and document expiry status. Nothing here reads or writes the store.
"""

import math
from collections import namedtuple
from datetime import date, datetime

from .models import DocumentType, SortieType
from .temporal import parse_iso_date


EXPIRED = 'expired'
EXPIRING = 'expiring'
VALID = 'valid'
NOT_SET = 'not set'

# Documents expiring within this many days are flagged
EXPIRY_WARNING_DAYS = 30

RECENT_FLIGHTS = 5

SECONDS_PER_DAY = 24 * 60 * 60


HoursSummary = namedtuple('HoursSummary', ['total', 'dual', 'solo'])
ExpiryStatus = namedtuple('ExpiryStatus', ['status', 'days_delta'])
FlightLog = namedtuple('FlightLog', ['flights', 'totals'])


def aggregate_hours(flights):
    """Sum flight durations, split by sortie type.

    Empty or non-numeric durations count as 0. Flights with no sortie type
    are included in the total only.

    Returns:
        HoursSummary(total, dual, solo) as floats.
    """
    # fsum is exact, so the result does not depend on flight order
    total = math.fsum(f.hours for f in flights)
    dual = math.fsum(f.hours for f in flights if f.sortie_type == SortieType.DUAL)
    solo = math.fsum(f.hours for f in flights if f.sortie_type == SortieType.SOLO)
    return HoursSummary(total=total, dual=dual, solo=solo)


def _date_key(flight):
    return parse_iso_date(flight.date) or date.min


def recent_flights(flights, n=RECENT_FLIGHTS):
    """The ``n`` most recent flights, newest first."""
    return sorted(flights, key=_date_key, reverse=True)[:n]


def search_flights(flights, term):
    """Flights whose aircraft, flight number, airfields or notes contain
    ``term`` (case-insensitive). An empty term matches everything."""
    needle = (term or '').strip().lower()
    if not needle:
        return list(flights)
    return [
        f for f in flights
        if any(needle in (value or '').lower() for value in (
            f.aircraft, f.flight_number, f.origin, f.destination, f.notes))
    ]


def flight_log(flights):
    """Flight-log table: flights oldest first plus the totals row."""
    ordered = sorted(flights, key=_date_key)
    return FlightLog(flights=ordered, totals=aggregate_hours(ordered))


def _as_datetime(value):
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).replace(tzinfo=None)
        except ValueError:
            pass
        parsed = parse_iso_date(value)
        if parsed is None:
            raise ValueError(f"Not an ISO date: {value!r}")
        return datetime(parsed.year, parsed.month, parsed.day)
    raise TypeError(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


def classify_expiry(expiry_date, now=None, warning_days=EXPIRY_WARNING_DAYS):
    """Expiry status of a document.

    Days are the signed day difference rounded up (ceil), so an expiry
    half a day ago reports 0 days and 1.5 days ago reports 1.

    Args:
        expiry_date: ISO date string (or date), may be empty.
        now: Reference date/datetime or ISO string (default: now).
        warning_days: Window for the 'expiring' status.

    Returns:
        ExpiryStatus(status, days_delta). Status is 'expired' (days since
        expiry), 'expiring' or 'valid' (days until expiry), or 'not set'
        with days_delta None when there is no usable expiry date.
    """
    expiry = parse_iso_date(expiry_date)
    if expiry is None:
        return ExpiryStatus(NOT_SET, None)

    delta = _as_datetime(expiry) - _as_datetime(now)
    days = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    if delta.total_seconds() < 0:
        return ExpiryStatus(EXPIRED, abs(days))
    if days <= warning_days:
        return ExpiryStatus(EXPIRING, days)
    return ExpiryStatus(VALID, days)


def _issue_key(document):
    return parse_iso_date(document.issue_date) or date.min


def document_badges(documents, now=None, warning_days=EXPIRY_WARNING_DAYS):
    """Documents newest-issued first, each paired with its ExpiryStatus."""
    ordered = sorted(documents, key=_issue_key, reverse=True)
    return [(d, classify_expiry(d.expiry_date, now, warning_days)) for d in ordered]


def medical_validity(documents, now=None, warning_days=EXPIRY_WARNING_DAYS):
    """Expiry status of the first medical certificate.

    Returns:
        Dict with status, days and date, or None when there is no medical
        certificate or it has no expiry date.
    """
    medical = next((d for d in documents if d.doc_type == DocumentType.MEDICAL), None)
    if medical is None or not medical.expiry_date:
        return None
    status = classify_expiry(medical.expiry_date, now, warning_days)
    if status.status == NOT_SET:
        return None
    return {'status': status.status, 'days': status.days_delta, 'date': medical.expiry_date}


def dashboard_stats(flights, documents, now=None, recent_count=RECENT_FLIGHTS,
                    warning_days=EXPIRY_WARNING_DAYS):
    """Everything the dashboard shows, in one dict."""
    hours = aggregate_hours(flights)
    return {
        'totalFlights': len(flights),
        'totalHours': round(hours.total, 1),
        'dualHours': round(hours.dual, 1),
        'soloHours': round(hours.solo, 1),
        'recentFlights': recent_flights(flights, recent_count),
        'medicalValidity': medical_validity(documents, now, warning_days),
    }
