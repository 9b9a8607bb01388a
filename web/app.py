"""
Web API for the flight logbook.

Upload a flight spreadsheet to import it, then read the derived views
(dashboard, flight log with totals, documents with expiry status).

The user id is a plain query parameter; there is no authentication here.

Usage:
    python -m uvicorn web.app:app --reload
    # Open http://localhost:8000/docs
"""

import os
import sys
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

# Ensure project root is on the path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from logbook.aggregator import dashboard_stats, document_badges, flight_log, search_flights
from logbook.config import Config
from logbook.errors import LogbookError, RecordNotFoundError
from logbook.importer import import_bytes
from logbook.store import JsonFileBlobStore, RecordStore


UPLOAD_EXTENSIONS = ('.xlsx', '.xlsm', '.csv', '.tsv', '.txt')


def _hours_dict(summary):
    return {
        'total': round(summary.total, 2),
        'dual': round(summary.dual, 2),
        'solo': round(summary.solo, 2),
    }


def create_app(store, config=None):
    """Build the FastAPI app around a RecordStore."""
    config = config or Config()
    app = FastAPI(title="Flight Logbook")
    app.state.store = store
    app.state.config = config

    @app.exception_handler(LogbookError)
    async def logbook_error_handler(request: Request, exc: LogbookError):
        status = 404 if isinstance(exc, RecordNotFoundError) else 400
        return JSONResponse(status_code=status, content=exc.to_dict())

    @app.post("/api/import")
    async def import_flights(file: UploadFile = File(...), user_id: Optional[str] = None):
        """Import an uploaded spreadsheet and return the success/error tally."""
        if not file.filename:
            raise HTTPException(400, "No file uploaded")

        ext = os.path.splitext(file.filename)[1].lower()
        if ext not in UPLOAD_EXTENSIONS:
            raise HTTPException(400, f"Unsupported file type: {ext}. Use Excel, CSV or TSV.")

        # The whole upload is read before any row is converted
        content = await file.read()
        result = import_bytes(store, content, file.filename, user_id=user_id)

        return {
            'success': True,
            'successCount': result.success_count,
            'errorCount': result.error_count,
        }

    @app.get("/api/flights")
    async def list_flights(user_id: Optional[str] = None, search: Optional[str] = None):
        flights = store.list_flights(user_id)
        if search:
            flights = search_flights(flights, search)
        return [f.to_dict() for f in flights]

    @app.get("/api/flights/{flight_id}")
    async def get_flight(flight_id: str):
        return store.get_flight(flight_id).to_dict()

    @app.delete("/api/flights/{flight_id}")
    async def delete_flight(flight_id: str):
        if not store.delete_flight(flight_id):
            raise RecordNotFoundError('flights', flight_id)
        return {'success': True}

    @app.get("/api/dashboard")
    async def dashboard(user_id: Optional[str] = None):
        stats = dashboard_stats(
            store.list_flights(user_id),
            store.list_documents(user_id),
            recent_count=config.recent_count,
            warning_days=config.expiry_warning_days,
        )
        stats['recentFlights'] = [f.to_dict() for f in stats['recentFlights']]
        return stats

    @app.get("/api/flight-log")
    async def get_flight_log(user_id: Optional[str] = None):
        log = flight_log(store.list_flights(user_id))
        return {
            'flights': [f.to_dict() for f in log.flights],
            'totals': _hours_dict(log.totals),
        }

    @app.get("/api/documents")
    async def list_documents(user_id: Optional[str] = None):
        badges = document_badges(store.list_documents(user_id),
                                 warning_days=config.expiry_warning_days)
        return [
            dict(doc.to_dict(), expiry={'status': e.status, 'days': e.days_delta})
            for doc, e in badges
        ]

    return app


_config = Config.from_file(os.environ.get('LOGBOOK_CONFIG', str(PROJECT_ROOT / 'config.ini')))
app = create_app(RecordStore(JsonFileBlobStore(_config.data_dir)), _config)
