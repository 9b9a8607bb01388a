import json

import pytest

from logbook.errors import LogbookError, RecordNotFoundError
from logbook.models import DocumentRecord, DocumentType, FlightRecord, SortieType
from logbook.store import JsonFileBlobStore, MemoryBlobStore, RecordStore


NOW = '2024-06-01T12:00:00+00:00'
LATER = '2024-06-02T08:00:00+00:00'


def test_empty_store(store):
    assert store.list_flights() == []
    assert store.list_documents() == []


def test_ownerless_records_visible_to_everyone(store):
    store.append_flights([
        FlightRecord(id='a', date='2024-01-01', aircraft='G-AAAA', user_id='u1'),
        FlightRecord(id='b', date='2024-01-02', aircraft='G-BBBB', user_id='u2'),
        FlightRecord(id='c', date='2024-01-03', aircraft='G-CCCC'),
    ])
    assert [f.id for f in store.list_flights('u1')] == ['a', 'c']
    assert [f.id for f in store.list_flights('u2')] == ['b', 'c']
    assert [f.id for f in store.list_flights()] == ['c']


def test_insert_assigns_id_and_created_at(store):
    flight = store.upsert_flight({
        'date': '2024-03-05', 'aircraft': 'G-ABCD',
        'chocksOff': '10:00', 'chocksOn': '12:00', 'sortieType': 'Dual',
    }, now=NOW)
    assert flight.id
    assert flight.created_at == NOW
    assert flight.updated_at is None
    assert flight.duration == '2.00'
    assert store.get_flight(flight.id).aircraft == 'G-ABCD'


def test_insert_keeps_unknown_supplied_id(store):
    flight = store.upsert_flight({'id': 'from-client', 'date': '2024-03-05',
                                  'aircraft': 'G-ABCD'}, now=NOW)
    assert flight.id == 'from-client'
    assert flight.created_at == NOW
    assert [f.id for f in store.list_flights()] == ['from-client']


def test_update_merges_fields(store):
    flight = store.upsert_flight({
        'date': '2024-03-05', 'aircraft': 'G-ABCD', 'notes': 'windy',
        'chocksOff': '10:00', 'chocksOn': '12:00',
    }, now=NOW)

    updated = store.upsert_flight({'id': flight.id, 'chocksOn': '11:00'}, now=LATER)

    assert updated.notes == 'windy'
    assert updated.duration == '1.00'
    assert updated.created_at == NOW
    assert updated.updated_at == LATER
    assert len(store.list_flights()) == 1


def test_duration_kept_when_chocks_missing(store):
    flight = store.upsert_flight({'date': '2024-03-05', 'aircraft': 'G-ABCD',
                                  'duration': '1.30'}, now=NOW)
    assert flight.duration == '1.30'
    updated = store.upsert_flight({'id': flight.id, 'notes': 'edited'}, now=LATER)
    assert updated.duration == '1.30'


def test_solo_clears_instructor(store):
    flight = store.upsert_flight({'date': '2024-03-05', 'aircraft': 'G-ABCD',
                                  'sortieType': 'Dual', 'instructor': 'J. Smith'}, now=NOW)
    assert flight.instructor == 'J. Smith'
    updated = store.upsert_flight({'id': flight.id, 'sortieType': 'Solo'}, now=LATER)
    assert updated.sortie_type == SortieType.SOLO
    assert updated.instructor == ''


def test_upsert_record_object(store):
    record = FlightRecord(date='2024-03-05', aircraft='G-ABCD')
    stored = store.upsert_flight(record, now=NOW)
    stored.aircraft = 'G-WXYZ'
    again = store.upsert_flight(stored, now=LATER)
    assert again.id == stored.id
    assert again.created_at == NOW
    assert [f.aircraft for f in store.list_flights()] == ['G-WXYZ']


def test_get_missing_flight(store):
    with pytest.raises(RecordNotFoundError):
        store.get_flight('nope')


def test_delete_flight(store):
    flight = store.upsert_flight({'date': '2024-03-05', 'aircraft': 'G-ABCD'}, now=NOW)
    assert store.delete_flight(flight.id) is True
    assert store.delete_flight(flight.id) is False
    assert store.list_flights() == []


def test_legacy_keys_and_unknown_fields_survive():
    legacy = [{
        'id': '1700000000000', 'date': '2023-11-14', 'aircraft': 'G-OLD1',
        'chocks_off': '09:00', 'chocks_on': '10:00', 'FROM': 'EGKB', 'To': 'EGLL',
        'duration': '1.00', 'sortieType': 'Solo', 'location': 'Biggin Hill',
    }]
    store = RecordStore(MemoryBlobStore({'flights': json.dumps(legacy)}))
    flight = store.list_flights()[0]
    assert flight.chocks_off == '09:00'
    assert flight.origin == 'EGKB'
    assert flight.destination == 'EGLL'

    store.upsert_flight({'id': flight.id, 'notes': 'migrated'}, now=NOW)
    saved = json.loads(store.blobs.load('flights'))[0]
    assert saved['location'] == 'Biggin Hill'
    assert saved['chocksOff'] == '09:00'
    assert saved['from'] == 'EGKB'


def test_corrupt_collection():
    store = RecordStore(MemoryBlobStore({'flights': '{not json'}))
    with pytest.raises(LogbookError):
        store.list_flights()


def test_documents(store):
    spl = store.add_document({'name': 'SPL', 'type': 'SPL', 'issueDate': '2023-01-01'},
                             user_id='u1', now=NOW)
    medical = store.add_document(DocumentRecord(name='Class 2', doc_type=DocumentType.MEDICAL,
                                                expiry_date='2025-01-01'), now=NOW)
    assert spl.user_id == 'u1'
    assert spl.created_at == NOW
    assert [d.id for d in store.list_documents('u1')] == [spl.id, medical.id]
    assert [d.id for d in store.list_documents('u2')] == [medical.id]

    assert store.delete_document(spl.id) is True
    assert store.delete_document(spl.id) is False
    assert [d.id for d in store.list_documents('u1')] == [medical.id]


def test_json_file_blob_store(tmp_path):
    data_dir = tmp_path / 'data'
    store = RecordStore(JsonFileBlobStore(str(data_dir)))
    assert store.list_flights() == []

    store.append_flights([FlightRecord(id='a', date='2024-01-01', aircraft='G-AAAA')])

    assert (data_dir / 'flights.json').exists()
    reopened = RecordStore(JsonFileBlobStore(str(data_dir)))
    assert [f.id for f in reopened.list_flights()] == ['a']
    assert [p.name for p in data_dir.iterdir()] == ['flights.json']
