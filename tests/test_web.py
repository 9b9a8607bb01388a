import pytest
from fastapi.testclient import TestClient

from logbook.config import Config
from logbook.models import DocumentRecord, DocumentType, FlightRecord
from web.app import create_app


@pytest.fixture
def client(store):
    return TestClient(create_app(store, Config()))


CSV = (
    "Date of Flight,Aircraft,Chocks Off,Chocks On,Co-pilot / Student,PIC,Exercise\n"
    "5/3/2024,G-ABCD,10:00,12:00,A. Lee,J. Smith,Ccts & Ldgs\n"
    "6/3/2024,,10:00,11:00,,A. Lee,General\n"
    "7/3/2024,G-ABCD,09:00,09:45,,A. Lee,General\n"
)


def test_import_upload(client, store):
    response = client.post('/api/import', params={'user_id': 'u1'},
                           files={'file': ('flights.csv', CSV.encode(), 'text/csv')})
    assert response.status_code == 200
    assert response.json() == {'success': True, 'successCount': 2, 'errorCount': 1}
    assert len(store.list_flights('u1')) == 2


def test_import_rejects_unsupported_type(client):
    response = client.post('/api/import', files={'file': ('log.pdf', b'%PDF', 'application/pdf')})
    assert response.status_code == 400


def test_zero_success_import_is_an_error(client, store):
    response = client.post('/api/import',
                           files={'file': ('flights.csv', b'Date,Aircraft\n1/1/2024,\n', 'text/csv')})
    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['code'] == 'IMPORT_FAILED'
    assert store.list_flights() == []


def test_dashboard_and_flight_log(client, store):
    client.post('/api/import', files={'file': ('flights.csv', CSV.encode(), 'text/csv')})

    dashboard = client.get('/api/dashboard').json()
    assert dashboard['totalFlights'] == 2
    assert dashboard['totalHours'] == 2.8
    assert dashboard['dualHours'] == 2.0
    assert dashboard['soloHours'] == 0.8
    assert [f['date'] for f in dashboard['recentFlights']] == ['2024-03-07', '2024-03-05']
    assert dashboard['medicalValidity'] is None

    log = client.get('/api/flight-log').json()
    assert [f['date'] for f in log['flights']] == ['2024-03-05', '2024-03-07']
    assert log['totals'] == {'total': 2.75, 'dual': 2.0, 'solo': 0.75}


def test_flights_and_delete(client, store):
    store.append_flights([
        FlightRecord(id='a', date='2024-01-01', aircraft='G-AAAA'),
        FlightRecord(id='b', date='2024-01-02', aircraft='G-BBBB', user_id='u2'),
    ])
    assert [f['id'] for f in client.get('/api/flights', params={'user_id': 'u2'}).json()] == ['a', 'b']
    assert [f['id'] for f in client.get('/api/flights', params={'search': 'bbbb',
                                                                'user_id': 'u2'}).json()] == ['b']
    assert client.get('/api/flights/a').json()['aircraft'] == 'G-AAAA'

    assert client.delete('/api/flights/a').status_code == 200
    missing = client.delete('/api/flights/a')
    assert missing.status_code == 404
    assert missing.json()['code'] == 'NOT_FOUND'
    assert client.get('/api/flights/a').status_code == 404


def test_documents(client, store):
    store.add_document(DocumentRecord(name='Class 2', doc_type=DocumentType.MEDICAL,
                                      issue_date='2023-01-01', expiry_date='2000-01-01'))
    docs = client.get('/api/documents').json()
    assert len(docs) == 1
    assert docs[0]['type'] == 'Medical'
    assert docs[0]['expiry']['status'] == 'expired'
