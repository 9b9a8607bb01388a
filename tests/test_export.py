from openpyxl import load_workbook

from logbook.export import COL_DURATION, LOG_COLUMNS, export_flight_log
from logbook.models import FlightRecord, SortieType, TypeOfFlight


def test_export_flight_log(tmp_path):
    flights = [
        FlightRecord(id='2', date='2024-03-02', aircraft='G-BBBB', duration='0.75',
                     sortie_type=SortieType.SOLO, type_of_flight=TypeOfFlight.CCTS_AND_LDG),
        FlightRecord(id='1', date='2024-01-10', aircraft='G-AAAA', duration='1.50',
                     sortie_type=SortieType.DUAL, instructor='J. Smith'),
        FlightRecord(id='3', date='2024-02-01', aircraft='G-CCCC', duration=''),
    ]
    output = tmp_path / 'log.xlsx'

    stats = export_flight_log(flights, str(output))

    assert stats['flights'] == 3
    assert abs(stats['total_hours'] - 2.25) < 1e-9

    wb = load_workbook(output)
    ws = wb['Flight Log']
    assert [c.value for c in ws[1]] == [name for name, _ in LOG_COLUMNS]
    assert [ws.cell(row=r, column=3).value for r in (2, 3, 4)] == ['G-AAAA', 'G-CCCC', 'G-BBBB']
    assert ws.cell(row=2, column=COL_DURATION).value == 1.5
    assert ws.cell(row=3, column=COL_DURATION).value is None
    assert ws.cell(row=4, column=12).value == 'Solo'

    assert ws.cell(row=5, column=1).value.startswith('TOTAL')
    assert 'Dual: 1.5h' in ws.cell(row=5, column=1).value
    assert ws.cell(row=5, column=COL_DURATION).value == 2.25


def test_export_empty(tmp_path):
    output = tmp_path / 'empty.xlsx'
    stats = export_flight_log([], str(output))
    assert stats['flights'] == 0
    ws = load_workbook(output)['Flight Log']
    assert ws.cell(row=2, column=COL_DURATION).value == 0
