#!/usr/bin/env python3
"""
Flight logbook command-line runner.

Imports flight spreadsheets into the logbook and prints the derived views:
dashboard statistics, the flight log with its totals row, and document
expiry status.

Usage:
    python run.py import --input flights.xlsx             # Excel logbook
    python run.py import --input flights.csv --mapping columns.ini
    python run.py stats                                   # Dashboard numbers
    python run.py log                                     # Flight log table
    python run.py export --output Flight_Log.xlsx         # Flight log to Excel
    python run.py documents                               # Expiry badges
    python run.py add-document --name "Class 2" --type Medical --expiry 2026-05-01
"""

import argparse
import logging
import os
import sys

from logbook.aggregator import (
    NOT_SET, dashboard_stats, document_badges, flight_log, search_flights,
)
from logbook.column_detector import print_mapping_report, validate_fields
from logbook.config import Config
from logbook.errors import LogbookError
from logbook.export import export_flight_log
from logbook.importer import import_file, preview_columns
from logbook.models import DocumentRecord, DocumentType
from logbook.store import JsonFileBlobStore, RecordStore


STEPS = ['import', 'stats', 'log', 'export', 'documents', 'add-document']


def banner(title):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def run_import(config, store, args):
    """Import a spreadsheet into the flights collection.

    Prints the column mapping report first so a bad header layout is
    visible before anything is written.
    """
    config.validate('import')
    banner("Importing flight data")
    print(f"  Source: {config.input_file}")
    print(f"  Format: {config.input_format}")

    headers, detected = preview_columns(
        config.input_file, config.input_format, config.column_mapping or None)
    print_mapping_report(detected, headers)
    errors, _ = validate_fields(detected)
    if errors:
        print(f"  WARNING: {len(errors)} required columns not detected.")
        print(f"  Rows without a date or aircraft will be skipped.")
        print(f"  Consider providing a column mapping file (--mapping).\n")

    result = import_file(
        store, config.input_file,
        user_id=config.owner,
        fmt=config.input_format,
        column_mapping=config.column_mapping or None,
    )
    print(f"  Imported: {result.success_count}")
    if result.error_count:
        print(f"  Rows skipped: {result.error_count}")


def run_stats(config, store, args):
    """Print dashboard statistics."""
    stats = dashboard_stats(
        store.list_flights(config.owner),
        store.list_documents(config.owner),
        recent_count=config.recent_count,
        warning_days=config.expiry_warning_days,
    )
    banner("Dashboard")
    print(f"  Total flights: {stats['totalFlights']}")
    print(f"  Total hours:   {stats['totalHours']:.1f}h")
    print(f"  Dual hours:    {stats['dualHours']:.1f}h")
    print(f"  Solo hours:    {stats['soloHours']:.1f}h")

    medical = stats['medicalValidity']
    if medical is None:
        print("  Medical:       not set")
    elif medical['status'] == 'expired':
        print(f"  Medical:       EXPIRED {medical['days']} days ago ({medical['date']})")
    else:
        print(f"  Medical:       {medical['status']}, {medical['days']} days left ({medical['date']})")

    if stats['recentFlights']:
        print(f"\n  Recent flights:")
        for f in stats['recentFlights']:
            print(f"    {f.date}  {f.aircraft:<10} {f.duration or '-':>6}h  "
                  f"{f.sortie_type.value if f.sortie_type else '-'}")


def run_log(config, store, args):
    """Print the flight log with its totals row."""
    flights = store.list_flights(config.owner)
    if args.search:
        flights = search_flights(flights, args.search)
    log = flight_log(flights)

    banner("Flight Log")
    print(f"  {'Date':<11}{'Aircraft':<11}{'From':<7}{'To':<7}{'Off':<7}{'On':<7}"
          f"{'Type':<18}{'Sortie':<7}{'Hours':>6}")
    for f in log.flights:
        print(f"  {f.date:<11}{f.aircraft[:10]:<11}{f.origin[:6]:<7}{f.destination[:6]:<7}"
              f"{f.chocks_off or '-':<7}{f.chocks_on or '-':<7}"
              f"{f.type_of_flight.value if f.type_of_flight else '-':<18}"
              f"{f.sortie_type.value if f.sortie_type else '-':<7}"
              f"{f.duration or '-':>6}")
    totals = log.totals
    print("  " + "-" * 75)
    print(f"  TOTAL {totals.total:.1f}h  (Dual: {totals.dual:.1f}h | Solo: {totals.solo:.1f}h)")


def run_export(config, store, args):
    """Write the flight log to Excel."""
    banner("Exporting flight log")
    stats = export_flight_log(store.list_flights(config.owner), config.export_output)
    print(f"  Flights: {stats['flights']}")
    print(f"  Total time: {stats['total_hours']:.1f} hrs")
    print(f"  Output: {config.export_output}")


def run_documents(config, store, args):
    """Print documents with their expiry status."""
    banner("Documents & Licenses")
    badges = document_badges(store.list_documents(config.owner),
                             warning_days=config.expiry_warning_days)
    if not badges:
        print("  No documents recorded")
    for doc, expiry in badges:
        if expiry.status == NOT_SET:
            status = 'no expiry'
        elif expiry.status == 'expired':
            status = f"EXPIRED ({expiry.days_delta} days ago)"
        else:
            status = f"{expiry.status} ({expiry.days_delta} days)"
        print(f"  {doc.doc_type.value:<8} {doc.name:<30} {doc.expiry_date or '-':<11} {status}")


def run_add_document(config, store, args):
    """Add a licence/certificate."""
    if not args.name:
        raise LogbookError("--name is required for add-document", code="VALIDATION_ERROR")
    doc = store.add_document(DocumentRecord(
        name=args.name,
        doc_type=DocumentType.from_string(args.type),
        issue_date=args.issued or '',
        expiry_date=args.expiry or '',
        number=args.number or '',
        issuer=args.issuer or '',
    ), user_id=config.owner)
    print(f"Added {doc.doc_type.value} document '{doc.name}' ({doc.id})")


STEP_FUNCTIONS = {
    'import': run_import,
    'stats': run_stats,
    'log': run_log,
    'export': run_export,
    'documents': run_documents,
    'add-document': run_add_document,
}


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Personal flight logbook',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Steps:
  import         Import flights from a spreadsheet (Excel, CSV, TSV)
  stats          Dashboard: total/dual/solo hours, recent flights, medical
  log            Flight log table with totals row
  export         Flight log to a styled Excel workbook
  documents      Documents with expiry status
  add-document   Record a licence or certificate

Examples:
  python run.py import --input my_logbook.xlsx
  python run.py import --input flights.csv --mapping columns.ini
  python run.py log --search G-ABCD
  python run.py --user u1 stats
        """,
    )
    parser.add_argument('step', choices=STEPS, help='What to do')
    parser.add_argument('--config', '-c', default='config.ini',
                        help='Config file path (default: config.ini)')
    parser.add_argument('--user', '-u', default=None,
                        help='Override user id')
    parser.add_argument('--data-dir', '-d', default=None,
                        help='Override logbook data directory')
    parser.add_argument('--input', '-i', default=None,
                        help='Input file for import')
    parser.add_argument('--format', '-f', default=None,
                        choices=['auto', 'excel', 'csv', 'tsv'],
                        help='Input format (default: auto-detect)')
    parser.add_argument('--mapping', '-m', default=None,
                        help='Column mapping INI file')
    parser.add_argument('--output', '-o', default=None,
                        help='Excel output path for export')
    parser.add_argument('--search', default=None,
                        help='Filter the flight log by aircraft, airfield or notes')
    parser.add_argument('--name', default=None, help='Document name')
    parser.add_argument('--type', default='Others',
                        choices=[t.value for t in DocumentType], help='Document type')
    parser.add_argument('--issued', default=None, help='Document issue date (YYYY-MM-DD)')
    parser.add_argument('--expiry', default=None, help='Document expiry date (YYYY-MM-DD)')
    parser.add_argument('--number', default=None, help='Document number')
    parser.add_argument('--issuer', default=None, help='Issuing authority')

    args = parser.parse_args(argv)

    try:
        config = Config.from_file(args.config)
    except LogbookError as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1

    config.override(
        user_id=args.user,
        data_dir=args.data_dir,
        input_file=args.input,
        input_format=args.format,
        column_mapping=args.mapping,
        export_output=args.output,
    )

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(levelname)s %(name)s: %(message)s',
    )

    print("Flight Logbook")
    print("=" * 70)
    print(f"Config: {os.path.abspath(args.config)}")
    print(f"User: {config.user_id or '(shared)'}")
    print(f"Data: {config.data_dir}")

    store = RecordStore(JsonFileBlobStore(config.data_dir))

    try:
        STEP_FUNCTIONS[args.step](config, store, args)
    except (FileNotFoundError, LogbookError) as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
