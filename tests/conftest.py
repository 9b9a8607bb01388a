import pytest
from openpyxl import Workbook

from logbook.store import MemoryBlobStore, RecordStore


HEADERS = ['Date of Flight', 'Aircraft', 'From', 'To', 'Chocks Off', 'Chocks On',
           'Co-pilot / Student', 'PIC', 'Exercise']


@pytest.fixture
def store():
    return RecordStore(MemoryBlobStore())


@pytest.fixture
def make_workbook(tmp_path):
    """Write rows (lists, header first) to an .xlsx file and return its path."""
    def _make(rows, name='flights.xlsx', sheet_title=None):
        wb = Workbook()
        ws = wb.active
        if sheet_title:
            ws.title = sheet_title
        for row in rows:
            ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return str(path)
    return _make


@pytest.fixture
def make_text_file(tmp_path):
    def _make(text, name='flights.csv'):
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return str(path)
    return _make
