"""
Header alias table and field resolution for imported logbook rows.

Training logbooks come from club spreadsheets, school exports and hand-made
sheets, each with its own header spelling. Every logical field we need has
an ordered list of known header aliases; the first alias present in a row
with a value wins.

Supports:
- Exact alias lookup (first pass)
- Case/punctuation-insensitive alias lookup (second pass)
- Explicit mapping via INI config file, tried before the aliases
"""

import configparser
import logging
import re

from .errors import ConfigurationError


logger = logging.getLogger(__name__)


# ============ Header Alias Database ============
# Logical field -> known header aliases, in priority order.
# More specific aliases should come before generic ones.

FIELD_ALIASES = {
    'date': [
        'Date of Flight', 'Date', 'date', 'DATE',
        'Flight Date', 'Date of flight',
    ],
    'chocks_off': [
        'Chocks Off', 'Departure Time', 'Dep Time', 'chocks_off',
        'Chocks off', 'CHOCKS OFF', 'Off Blocks', 'Time Off',
    ],
    'chocks_on': [
        'Chocks On', 'Arrival Time', 'Arr Time', 'chocks_on',
        'Chocks on', 'CHOCKS ON', 'On Blocks', 'Time On',
    ],
    'aircraft': [
        'Aircraft', 'aircraft', 'AIRCRAFT', 'Aircraft Registration',
        'Registration', 'A/C', 'Aircraft Type',
    ],
    'flight_number': [
        'Flight Number', 'Flight No', 'flightNumber', 'Callsign',
    ],
    'from': [
        'From', 'FROM', 'from', 'Departure', 'Dep',
    ],
    'to': [
        'To', 'TO', 'to', 'Arrival', 'Arr', 'Destination',
    ],
    'co_pilot': [
        'Co-pilot / Student', 'Co-Pilot / Student', 'Co-pilot/Student',
        'Co-pilot', 'Copilot', 'Student', 'Trainee',
    ],
    'pilot_in_command': [
        'Pilot in Command', 'Pilot-in-Command', 'PIC', 'Captain',
        'Instructor',
    ],
    'exercise': [
        'Exercise', 'exercise', 'EXERCISE', 'Exercise / Remarks',
        'Remarks', 'Details',
    ],
}

# A row without these is not a flight record
REQUIRED_FIELDS = ('date', 'aircraft')

# Useful but optional: duration and crew default to empty without them
RECOMMENDED_FIELDS = ('chocks_off', 'chocks_on', 'pilot_in_command', 'exercise')

# Human-readable names (for reports and mapping files)
FIELD_NAMES = {
    'date': 'Date',
    'chocks_off': 'Chocks Off',
    'chocks_on': 'Chocks On',
    'aircraft': 'Aircraft',
    'flight_number': 'Flight Number',
    'from': 'From',
    'to': 'To',
    'co_pilot': 'Co-pilot / Student',
    'pilot_in_command': 'Pilot in Command',
    'exercise': 'Exercise',
}


def _normalize_header(header):
    """Normalize a header string for loose matching.

    Strips whitespace, lowercases, replaces punctuation with spaces.
    """
    if not header:
        return ''
    h = str(header).strip().lower()
    h = re.sub(r'[^\w\s]', ' ', h)
    h = re.sub(r'[\s_]+', ' ', h).strip()
    return h


def field_candidates(field, column_mapping=None):
    """Ordered header names to try for a logical field.

    Args:
        field: Logical field name (key of FIELD_ALIASES).
        column_mapping: Optional dict of field -> header from a mapping file.

    Returns:
        List of header names, explicit mapping first.
    """
    candidates = []
    if column_mapping and column_mapping.get(field):
        candidates.append(column_mapping[field])
    candidates.extend(FIELD_ALIASES.get(field, []))
    return candidates


def resolve_field(row, field, column_mapping=None):
    """Look up a logical field in one row.

    The first candidate header present in the row with a non-None value
    wins. If no header matches exactly, headers are compared again after
    normalization ('date of flight ' matches 'Date of Flight').

    Args:
        row: Dict of header -> cell value.
        field: Logical field name.
        column_mapping: Optional explicit field -> header mapping.

    Returns:
        The raw cell value, or None when no candidate is present.
    """
    candidates = field_candidates(field, column_mapping)

    for key in candidates:
        if key in row and row[key] is not None:
            return row[key]

    normalized_row = {}
    for key, value in row.items():
        if value is None:
            continue
        normalized_row.setdefault(_normalize_header(key), value)

    for key in candidates:
        norm = _normalize_header(key)
        if norm and norm in normalized_row:
            return normalized_row[norm]

    return None


def detect_fields(headers, column_mapping=None):
    """Work out which source header each logical field will be read from.

    Args:
        headers: List of header strings from the source file.
        column_mapping: Optional explicit field -> header mapping.

    Returns:
        Dict of logical field -> source header (only detected fields).
    """
    detected = {}
    probe = {h: h for h in headers if h}
    for field in FIELD_ALIASES:
        header = resolve_field(probe, field, column_mapping)
        if header is not None:
            detected[field] = header
    return detected


def load_column_mapping(mapping_file):
    """Load an explicit column mapping from an INI file.

    Format:
        [columns]
        date = Flight Date
        aircraft = A/C Reg
        Pilot in Command = Captain

    Keys may be logical field names or their display names.

    Args:
        mapping_file: Path to the mapping INI file.

    Returns:
        Dict of logical field -> source header name.

    Raises:
        ConfigurationError: If the file has no [columns] section.
    """
    parser = configparser.ConfigParser()
    parser.optionxform = str
    parser.read(mapping_file, encoding='utf-8')

    if not parser.has_section('columns'):
        raise ConfigurationError('import.column_mapping',
                                 f"{mapping_file} must have a [columns] section")

    name_to_field = {}
    for field, name in FIELD_NAMES.items():
        name_to_field[_normalize_header(field)] = field
        name_to_field[_normalize_header(name)] = field

    mapping = {}
    for our_name, source_header in parser.items('columns'):
        field = name_to_field.get(_normalize_header(our_name))
        if field is None:
            logger.warning("Unknown field name in column mapping: '%s'", our_name)
            continue
        mapping[field] = source_header.strip()

    return mapping


def validate_fields(detected):
    """Check detected fields against required/recommended sets.

    Returns:
        Tuple of (errors: list[str], warnings: list[str]).
    """
    errors = []
    warnings = []

    for field in REQUIRED_FIELDS:
        if field not in detected:
            errors.append(f"Required column missing: {FIELD_NAMES[field]}")

    for field in RECOMMENDED_FIELDS:
        if field not in detected:
            warnings.append(f"Recommended column missing: {FIELD_NAMES[field]} (will be left empty)")

    return errors, warnings


def print_mapping_report(detected, headers):
    """Print a human-readable report of the detected columns."""
    print("\n" + "=" * 70)
    print("COLUMN MAPPING REPORT")
    print("=" * 70)

    print(f"\n  Detected {len(detected)} of {len(FIELD_ALIASES)} fields:")
    for field in FIELD_ALIASES:
        if field not in detected:
            continue
        required = '*' if field in REQUIRED_FIELDS else ' '
        print(f"  {required} {FIELD_NAMES[field]:<22} <- '{detected[field]}'")

    errors, warnings = validate_fields(detected)
    if errors:
        print(f"\n  MISSING REQUIRED COLUMNS ({len(errors)}):")
        for err in errors:
            print(f"    ! {err}")

    if warnings:
        print(f"\n  Missing optional columns ({len(warnings)}):")
        for warn in warnings:
            print(f"    - {warn}")

    used = set(detected.values())
    unmapped = [h for h in headers if h and h not in used]
    if unmapped:
        print(f"\n  Unmapped source columns ({len(unmapped)}):")
        for header in unmapped[:20]:
            print(f"    ? '{header}'")
        if len(unmapped) > 20:
            print(f"    ... and {len(unmapped) - 20} more")

    print()
