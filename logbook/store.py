"""
Record store for the flights and documents collections.

Each collection is a JSON array kept under one key of a blob store. Every
write reads the whole collection, changes it in memory and writes the whole
collection back.

Known limitation: two writers working from the same snapshot (two browser
tabs, two CLI runs) will overwrite each other's changes. There is no
locking or version check.
"""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone

from .duration import calculate_duration
from .errors import LogbookError, RecordNotFoundError
from .models import DocumentRecord, FlightRecord, SortieType


logger = logging.getLogger(__name__)

FLIGHTS = 'flights'
DOCUMENTS = 'documents'


def _utc_now():
    return datetime.now(timezone.utc).isoformat()


def _new_id():
    return uuid.uuid4().hex


# ============ Blob stores ============

class MemoryBlobStore:
    """Blob store held in a dict. Used by tests and throwaway sessions."""

    def __init__(self, initial=None):
        self._blobs = dict(initial or {})

    def load(self, key):
        return self._blobs.get(key)

    def save(self, key, text):
        self._blobs[key] = text


class JsonFileBlobStore:
    """Blob store with one ``<key>.json`` file per key in a directory.

    Files are replaced atomically (write to a temp file, then rename).
    """

    def __init__(self, directory):
        self.directory = directory

    def _path(self, key):
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def save(self, key, text):
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{key}.", dir=self.directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


# ============ Record store ============

class RecordStore:
    """Read/write access to the flights and documents collections.

    Args:
        blobs: Any object with ``load(key) -> str | None`` and
            ``save(key, text)``.
    """

    def __init__(self, blobs):
        self.blobs = blobs

    # ---- raw collection access ----

    def _load(self, key):
        text = self.blobs.load(key)
        if not text:
            return []
        try:
            data = json.loads(text)
        except ValueError as e:
            raise LogbookError(f"Stored '{key}' collection is not valid JSON: {e}",
                               code="STORAGE_ERROR") from e
        if not isinstance(data, list):
            raise LogbookError(f"Stored '{key}' collection is not a list",
                               code="STORAGE_ERROR")
        return data

    def _save(self, key, items):
        self.blobs.save(key, json.dumps(items, ensure_ascii=False, indent=2))

    def _load_flights(self):
        return [FlightRecord.from_dict(d) for d in self._load(FLIGHTS)]

    def _save_flights(self, flights):
        self._save(FLIGHTS, [f.to_dict() for f in flights])

    # ---- flights ----

    def list_flights(self, user_id=None):
        """Flights owned by ``user_id`` plus ownerless flights.

        Ownerless records (no userId) are shown to every user. This keeps
        data from before per-user storage visible.
        """
        return [f for f in self._load_flights() if f.is_visible_to(user_id)]

    def get_flight(self, flight_id):
        """Return one flight by id.

        Raises:
            RecordNotFoundError: If no flight has this id.
        """
        for flight in self._load_flights():
            if flight.id == flight_id:
                return flight
        raise RecordNotFoundError(FLIGHTS, flight_id)

    def upsert_flight(self, record, now=None):
        """Insert a new flight or merge fields into an existing one.

        ``record`` is a FlightRecord or a dict of stored (camelCase) keys.
        A record with an empty id is inserted with a fresh id; one whose id
        is not stored yet is inserted under that id.
        For an existing id the supplied fields replace the stored ones and
        everything else is kept.

        Duration is recomputed whenever both chocks times are present;
        otherwise the supplied or stored duration stays. Solo flights never
        keep an instructor.

        Returns:
            The stored FlightRecord.
        """
        now = now or _utc_now()
        supplied = record.to_dict() if isinstance(record, FlightRecord) else dict(record)
        for key in ('createdAt', 'updatedAt'):
            if supplied.get(key) is None:
                supplied.pop(key, None)

        raw = self._load(FLIGHTS)
        flight_id = supplied.get('id')
        index = next((i for i, d in enumerate(raw) if flight_id and d.get('id') == flight_id), None)

        if index is None:
            merged = dict(supplied)
            merged['id'] = flight_id or _new_id()
            merged['createdAt'] = now
            merged.pop('updatedAt', None)
        else:
            merged = dict(raw[index])
            merged.update(supplied)
            merged['updatedAt'] = now

        flight = FlightRecord.from_dict(merged)
        if flight.chocks_off and flight.chocks_on:
            computed = calculate_duration(flight.chocks_off, flight.chocks_on)
            if computed:
                flight.duration = computed
        if flight.sortie_type == SortieType.SOLO:
            flight.instructor = ''

        if index is None:
            raw.append(flight.to_dict())
            logger.info("Added flight %s (%s %s)", flight.id, flight.date, flight.aircraft)
        else:
            raw[index] = flight.to_dict()
            logger.info("Updated flight %s", flight.id)

        self._save(FLIGHTS, raw)
        return flight

    def delete_flight(self, flight_id):
        """Delete a flight. Returns False if no flight had this id."""
        raw = self._load(FLIGHTS)
        remaining = [d for d in raw if d.get('id') != flight_id]
        if len(remaining) == len(raw):
            return False
        self._save(FLIGHTS, remaining)
        logger.info("Deleted flight %s", flight_id)
        return True

    def append_flights(self, records):
        """Append records after the existing ones in a single write."""
        raw = self._load(FLIGHTS)
        raw.extend(r.to_dict() for r in records)
        self._save(FLIGHTS, raw)
        logger.info("Appended %d flights (collection now %d)", len(records), len(raw))

    # ---- documents ----

    def list_documents(self, user_id=None):
        """Documents owned by ``user_id`` plus ownerless documents."""
        documents = [DocumentRecord.from_dict(d) for d in self._load(DOCUMENTS)]
        return [d for d in documents if d.is_visible_to(user_id)]

    def add_document(self, document, user_id=None, now=None):
        """Store a new document with a fresh id.

        Args:
            document: DocumentRecord or dict of stored keys.
            user_id: Owner (overrides the document's own userId if given).

        Returns:
            The stored DocumentRecord.
        """
        if not isinstance(document, DocumentRecord):
            document = DocumentRecord.from_dict(document)
        document.id = _new_id()
        document.created_at = now or _utc_now()
        if user_id:
            document.user_id = user_id

        raw = self._load(DOCUMENTS)
        raw.append(document.to_dict())
        self._save(DOCUMENTS, raw)
        logger.info("Added %s document %s", document.doc_type.value, document.id)
        return document

    def delete_document(self, document_id):
        """Delete a document. Returns False if no document had this id."""
        raw = self._load(DOCUMENTS)
        remaining = [d for d in raw if d.get('id') != document_id]
        if len(remaining) == len(raw):
            return False
        self._save(DOCUMENTS, remaining)
        logger.info("Deleted document %s", document_id)
        return True
