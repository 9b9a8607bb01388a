"""
Tabular flight importer.

Reads flight rows from a spreadsheet (Excel .xlsx) or delimited text file
(CSV, TSV) and converts each row to a canonical FlightRecord:

- header aliases resolve each logical field (see column_detector)
- dates and chocks times are normalized (see temporal)
- duration comes from the chocks times (see duration)
- flight type and crew roles come from the exercise/crew columns
  (see classifier)

Rows without a date or aircraft are rejected and counted; a row that blows
up during conversion is also counted and skipped. Only an unreadable file,
or a file where no row could be imported, fails the whole import, and in
that case nothing is written to the store.

Usage:
    python -m logbook.importer --input flights.xlsx --data-dir ./data
    python -m logbook.importer --input flights.csv --mapping my_mapping.ini --user u1
"""

import argparse
import csv
import io
import logging
import os
import re
import uuid
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .classifier import classify_crew, classify_exercise
from .column_detector import detect_fields, load_column_mapping, resolve_field
from .duration import calculate_duration
from .errors import ImportFailedError, UnsupportedFormatError
from .models import FlightRecord
from .temporal import normalize_date, normalize_time


logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xlsm')

# Preferred sheet when a workbook has several
FLIGHT_SHEET = 'Flight Log'

NUMBER_RE = re.compile(r'^\d+$')
DECIMAL_RE = re.compile(r'^\d*\.\d+$')


@dataclass
class ImportResult:
    """Outcome of converting a batch of rows."""
    records: List[FlightRecord] = field(default_factory=list)
    success_count: int = 0
    error_count: int = 0

    @property
    def total_rows(self):
        return self.success_count + self.error_count

    @property
    def failed(self):
        """Rows were supplied but none became a flight record"""
        return self.total_rows > 0 and self.success_count == 0

    def to_dict(self):
        return {
            'successCount': self.success_count,
            'errorCount': self.error_count,
            'records': [r.to_dict() for r in self.records],
        }


# ============ Reading ============

def detect_format(file_path):
    """Detect the tabular format from the file extension.

    ``.txt`` files are sniffed: a tab in the header line means TSV.

    Args:
        file_path: Path (or file name) of the input.

    Returns:
        Format string: 'excel', 'csv' or 'tsv'.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
    """
    ext = os.path.splitext(str(file_path))[1].lower()

    if ext in EXCEL_EXTENSIONS:
        return 'excel'
    elif ext == '.csv':
        return 'csv'
    elif ext == '.tsv':
        return 'tsv'
    elif ext == '.txt':
        try:
            with open(file_path, 'r', encoding='utf-8-sig') as f:
                header = f.readline()
        except OSError:
            return 'csv'
        return 'tsv' if '\t' in header else 'csv'
    raise UnsupportedFormatError(file_path, ext)


def _rows_to_dicts(all_rows):
    """Turn raw row lists (header first) into header -> value dicts.

    Blank rows are skipped. With duplicate headers the first column wins.
    """
    if not all_rows:
        return [], []

    headers = [str(cell).strip() if cell is not None else '' for cell in all_rows[0]]

    rows = []
    for raw in all_rows[1:]:
        if all(cell is None or str(cell).strip() == '' for cell in raw):
            continue
        row = {}
        for header, cell in zip(headers, raw):
            if header and header not in row:
                row[header] = cell
        rows.append(row)

    return headers, rows


def _read_excel(source):
    """Read header and data rows from an Excel workbook.

    Uses the 'Flight Log' sheet if present, otherwise the active sheet.
    """
    wb = load_workbook(source, read_only=True, data_only=True)
    try:
        ws = wb[FLIGHT_SHEET] if FLIGHT_SHEET in wb.sheetnames else wb.active
        all_rows = [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    return _rows_to_dicts(all_rows)


def _read_delimited(text, delimiter):
    """Read header and data rows from CSV/TSV text."""
    reader = csv.reader(io.StringIO(text, newline=''), delimiter=delimiter)
    return _rows_to_dicts([row for row in reader])


def read_rows(file_path, fmt='auto'):
    """Read a tabular file into header -> value row dicts.

    Args:
        file_path: Path to the source file.
        fmt: 'auto', 'excel', 'csv' or 'tsv'.

    Returns:
        Tuple of (headers: list[str], rows: list[dict]).

    Raises:
        ImportFailedError: If the file is missing, unreadable or not a
            recognized tabular format.
    """
    if fmt == 'auto':
        fmt = detect_format(file_path)

    if not os.path.exists(file_path):
        raise ImportFailedError(f"Input file not found: {file_path}",
                                details={'file': str(file_path)})

    try:
        if fmt == 'excel':
            headers, rows = _read_excel(file_path)
        elif fmt in ('csv', 'tsv'):
            with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
                text = f.read()
            headers, rows = _read_delimited(text, '\t' if fmt == 'tsv' else ',')
        else:
            raise ImportFailedError(f"Unsupported format: {fmt}")
    except ImportFailedError:
        raise
    except (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError,
            csv.Error, OSError, KeyError, ValueError) as e:
        raise ImportFailedError(
            f"Could not read {os.path.basename(str(file_path))} as {fmt}: {e}",
            details={'file': str(file_path), 'format': fmt},
        ) from e

    logger.info("Read %s: %d rows, %d columns", fmt, len(rows), len(headers))
    return headers, rows


def read_rows_from_bytes(content, filename):
    """Read an uploaded file held in memory.

    The format comes from ``filename``'s extension; ``.txt`` uploads are
    sniffed the same way as files on disk.

    Returns:
        Tuple of (headers, rows) as in read_rows.
    """
    ext = os.path.splitext(filename or '')[1].lower()

    try:
        if ext in EXCEL_EXTENSIONS:
            fmt = 'excel'
            headers, rows = _read_excel(io.BytesIO(content))
        elif ext in ('.csv', '.tsv', '.txt'):
            text = content.decode('utf-8-sig')
            if ext == '.txt':
                first_line = text.split('\n', 1)[0]
                fmt = 'tsv' if '\t' in first_line else 'csv'
            else:
                fmt = ext[1:]
            headers, rows = _read_delimited(text, '\t' if fmt == 'tsv' else ',')
        else:
            raise UnsupportedFormatError(filename, ext)
    except ImportFailedError:
        raise
    except (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError,
            csv.Error, OSError, KeyError, ValueError) as e:
        raise ImportFailedError(
            f"Could not read {filename}: {e}", details={'file': filename},
        ) from e

    logger.info("Read uploaded %s: %d rows, %d columns", fmt, len(rows), len(headers))
    return headers, rows


# ============ Conversion ============

def _cell_text(value):
    """Cell value as stripped text. Whole floats lose their '.0'."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _numeric_cell(value, whole_numbers=True):
    """Turn purely numeric text into a number, as a spreadsheet would.

    CSV and TSV cells always arrive as text, so an Excel serial date
    ('45000') or day-fraction time ('0.4375') would otherwise miss the
    numeric handling in normalize_date/normalize_time. With
    ``whole_numbers=False`` only decimal text is converted, so clock
    strings like '0930' stay as they are.
    """
    if not isinstance(value, str):
        return value
    s = value.strip()
    if NUMBER_RE.match(s):
        return int(s) if whole_numbers else value
    if DECIMAL_RE.match(s):
        return float(s)
    return value


def convert_row(row, user_id=None, now=None, column_mapping=None):
    """Convert one imported row to a FlightRecord.

    Args:
        row: Dict of header -> cell value.
        user_id: Owner to stamp on the record (None = shared).
        now: ISO timestamp for createdAt.
        column_mapping: Optional explicit field -> header mapping.

    Returns:
        FlightRecord, or None if the row has no date or no aircraft.
    """
    def get(field_name):
        return resolve_field(row, field_name, column_mapping)

    raw_date = _numeric_cell(get('date'))
    aircraft = _cell_text(get('aircraft'))
    if raw_date is None or _cell_text(raw_date) == '' or not aircraft:
        return None

    chocks_off = _cell_text(normalize_time(_numeric_cell(get('chocks_off'), whole_numbers=False)))
    chocks_on = _cell_text(normalize_time(_numeric_cell(get('chocks_on'), whole_numbers=False)))
    exercise = _cell_text(get('exercise'))
    crew = classify_crew(get('co_pilot'), get('pilot_in_command'))

    return FlightRecord(
        id=uuid.uuid4().hex,
        user_id=user_id,
        date=_cell_text(normalize_date(raw_date)),
        aircraft=aircraft,
        flight_number=_cell_text(get('flight_number')),
        chocks_off=chocks_off,
        chocks_on=chocks_on,
        origin=_cell_text(get('from')),
        destination=_cell_text(get('to')),
        trainee=crew.trainee,
        instructor=crew.instructor,
        type_of_flight=classify_exercise(exercise),
        sortie_type=crew.sortie_type,
        duration=calculate_duration(chocks_off, chocks_on),
        exercise=exercise,
        created_at=now,
        imported=True,
    )


def import_rows(rows, user_id=None, now=None, column_mapping=None):
    """Convert a batch of rows, tallying successes and failures.

    Output records keep the input row order. A rejected row, or one whose
    conversion raises, is counted in ``error_count`` and the batch goes on.

    Args:
        rows: Iterable of header -> value dicts.
        user_id: Owner to stamp on every record.
        now: Import timestamp (default: current UTC time).
        column_mapping: Optional explicit field -> header mapping.

    Returns:
        ImportResult.
    """
    if now is None:
        now = datetime.now(timezone.utc).isoformat()

    result = ImportResult()
    for row_num, row in enumerate(rows, 1):
        try:
            record = convert_row(row, user_id=user_id, now=now,
                                 column_mapping=column_mapping)
        except Exception as e:
            logger.warning("Row %d: conversion failed (%s: %s)",
                           row_num, type(e).__name__, e)
            result.error_count += 1
            continue

        if record is None:
            logger.warning("Row %d: skipped, missing date or aircraft", row_num)
            result.error_count += 1
            continue

        result.records.append(record)
        result.success_count += 1

    logger.info("Converted %d rows: %d imported, %d skipped",
                result.total_rows, result.success_count, result.error_count)
    return result


def _commit(store, result, source_name):
    """Append a finished batch to the store, or fail on a zero-success batch."""
    if result.failed:
        raise ImportFailedError(
            f"No flights could be imported from {source_name}: "
            f"all {result.error_count} rows were rejected",
            result=result,
        )
    if result.records:
        store.append_flights(result.records)
    return result


def import_file(store, file_path, user_id=None, fmt='auto', column_mapping=None):
    """Import a flight file into the store.

    Args:
        store: RecordStore to append to.
        file_path: Path to an Excel, CSV or TSV file.
        user_id: Owner for the imported records.
        fmt: 'auto', 'excel', 'csv' or 'tsv'.
        column_mapping: Optional path to a mapping INI file, or a dict.

    Returns:
        ImportResult.

    Raises:
        ImportFailedError: File unreadable, or no row could be imported.
            The store is left unchanged.
    """
    if isinstance(column_mapping, str):
        column_mapping = load_column_mapping(column_mapping) if column_mapping else None

    headers, rows = read_rows(file_path, fmt)
    result = import_rows(rows, user_id=user_id, column_mapping=column_mapping)
    return _commit(store, result, os.path.basename(str(file_path)))


def import_bytes(store, content, filename, user_id=None, column_mapping=None):
    """Import an uploaded file (bytes) into the store. See import_file."""
    headers, rows = read_rows_from_bytes(content, filename)
    result = import_rows(rows, user_id=user_id, column_mapping=column_mapping)
    return _commit(store, result, filename)


def preview_columns(file_path, fmt='auto', column_mapping=None):
    """Headers of a file and the field each will feed, without importing.

    Returns:
        Tuple of (headers, detected field -> header dict).
    """
    if isinstance(column_mapping, str):
        column_mapping = load_column_mapping(column_mapping) if column_mapping else None
    headers, _ = read_rows(file_path, fmt)
    return headers, detect_fields(headers, column_mapping)


if __name__ == '__main__':
    from .store import JsonFileBlobStore, RecordStore

    parser = argparse.ArgumentParser(
        description='Import a flight spreadsheet into the logbook')
    parser.add_argument('--input', '-i', required=True,
                        help='Source file (Excel, CSV or TSV)')
    parser.add_argument('--data-dir', '-d', default='./data',
                        help='Logbook data directory (default: ./data)')
    parser.add_argument('--format', '-f', default='auto',
                        choices=['auto', 'excel', 'csv', 'tsv'],
                        help='Source format (default: auto-detect)')
    parser.add_argument('--mapping', '-m', default=None,
                        help='Column mapping INI file')
    parser.add_argument('--user', '-u', default=None,
                        help='Owner user id for imported flights')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    result = import_file(RecordStore(JsonFileBlobStore(args.data_dir)), args.input,
                         user_id=args.user, fmt=args.format, column_mapping=args.mapping)
    print(f"Imported {result.success_count} flights, {result.error_count} rows skipped")
