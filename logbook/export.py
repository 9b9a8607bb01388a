"""
Write the flight log to a styled Excel workbook.

Sheet "Flight Log": one row per flight, oldest first, solo sorties shaded,
followed by a totals row (total, dual and solo hours).

Usage:
    python -m logbook.export --data-dir ./data --output Flight_Log.xlsx
"""

import argparse

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .aggregator import flight_log
from .models import SortieType


# ============ Styles ============

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=10)
HEADER_FILL = PatternFill(start_color='1F4E79', end_color='1F4E79', fill_type='solid')
DATA_FONT = Font(name='Calibri', size=9)
TOTAL_FONT = Font(name='Calibri', bold=True, size=10)
SOLO_FILL = PatternFill(start_color='E2EFDA', end_color='E2EFDA', fill_type='solid')
TOTAL_FILL = PatternFill(start_color='DDEBF7', end_color='DDEBF7', fill_type='solid')
THIN_BORDER = Border(
    left=Side(style='thin', color='B4C6E7'),
    right=Side(style='thin', color='B4C6E7'),
    top=Side(style='thin', color='B4C6E7'),
    bottom=Side(style='thin', color='B4C6E7')
)
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')

# Column definitions: (name, width)
LOG_COLUMNS = [
    ("No.", 5), ("Date", 11), ("Aircraft", 12), ("Flight No.", 10),
    ("From", 8), ("To", 8), ("Chocks Off", 10), ("Chocks On", 10),
    ("Trainee", 18), ("Instructor", 18), ("Type of Flight", 16),
    ("Sortie", 8), ("Duration", 9),
]

COL_DURATION = len(LOG_COLUMNS)


def _row_values(index, flight):
    return [
        index,
        flight.date,
        flight.aircraft,
        flight.flight_number,
        flight.origin,
        flight.destination,
        flight.chocks_off,
        flight.chocks_on,
        flight.trainee,
        flight.instructor,
        flight.type_of_flight.value if flight.type_of_flight else '',
        flight.sortie_type.value if flight.sortie_type else '',
        flight.hours if flight.duration else None,
    ]


def export_flight_log(flights, output_file):
    """Write flights to an Excel flight log with a totals row.

    Args:
        flights: List of FlightRecord.
        output_file: Path for the .xlsx file.

    Returns:
        Dict with flights written and total hours.
    """
    log = flight_log(flights)

    wb = Workbook()
    ws = wb.active
    ws.title = "Flight Log"

    for col_idx, (col_name, col_width) in enumerate(LOG_COLUMNS, 1):
        cell = ws.cell(row=1, column=col_idx, value=col_name)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col_idx)].width = col_width

    ws.freeze_panes = 'A2'

    for i, flight in enumerate(log.flights, 1):
        sheet_row = i + 1
        solo = flight.sortie_type == SortieType.SOLO
        for col_idx, value in enumerate(_row_values(i, flight), 1):
            cell = ws.cell(row=sheet_row, column=col_idx, value=value)
            cell.font = DATA_FONT
            cell.border = THIN_BORDER
            cell.alignment = CENTER_ALIGN
            if solo:
                cell.fill = SOLO_FILL
            if col_idx == COL_DURATION and value is not None:
                cell.number_format = '0.00'

    # Totals row
    totals_row = len(log.flights) + 2
    totals = log.totals
    label = f"TOTAL  (Dual: {totals.dual:.1f}h | Solo: {totals.solo:.1f}h)"
    ws.merge_cells(start_row=totals_row, start_column=1,
                   end_row=totals_row, end_column=COL_DURATION - 1)
    label_cell = ws.cell(row=totals_row, column=1, value=label)
    label_cell.alignment = Alignment(horizontal='right', vertical='center')
    total_cell = ws.cell(row=totals_row, column=COL_DURATION, value=round(totals.total, 2))
    total_cell.number_format = '0.00'
    total_cell.alignment = CENTER_ALIGN
    for col_idx in range(1, COL_DURATION + 1):
        cell = ws.cell(row=totals_row, column=col_idx)
        cell.font = TOTAL_FONT
        cell.fill = TOTAL_FILL
        cell.border = THIN_BORDER

    wb.save(output_file)

    return {
        'flights': len(log.flights),
        'total_hours': totals.total,
        'dual_hours': totals.dual,
        'solo_hours': totals.solo,
    }


if __name__ == '__main__':
    from .store import JsonFileBlobStore, RecordStore

    parser = argparse.ArgumentParser(description='Export the flight log to Excel')
    parser.add_argument('--data-dir', '-d', default='./data',
                        help='Logbook data directory (default: ./data)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output Excel file path')
    parser.add_argument('--user', '-u', default=None,
                        help='User id whose flights to export')
    args = parser.parse_args()

    store = RecordStore(JsonFileBlobStore(args.data_dir))
    stats = export_flight_log(store.list_flights(args.user), args.output)
    print(f"Exported {stats['flights']} flights ({stats['total_hours']:.1f} hrs) to {args.output}")
