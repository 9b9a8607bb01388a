"""
Logbook exceptions.

Row-level problems during an import are never raised; they are counted in
the import tally. Only batch-level failures and lookups of missing records
surface as exceptions.
"""


class LogbookError(Exception):
    """Base logbook exception."""

    def __init__(self, message, code="LOGBOOK_ERROR", details=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self):
        """Convert exception to a dict for JSON responses."""
        return {
            'success': False,
            'error': self.message,
            'code': self.code,
            'details': self.details,
        }


class ImportFailedError(LogbookError):
    """The whole import failed and nothing was written.

    Raised when the file cannot be read as a table, or when rows were
    supplied but none of them produced a flight record. In the second
    case ``result`` holds the ImportResult with the error tally.
    """

    def __init__(self, message, result=None, details=None):
        super().__init__(message, code="IMPORT_FAILED", details=details)
        self.result = result


class UnsupportedFormatError(ImportFailedError):
    """File extension is not a recognized tabular format."""

    def __init__(self, file_path, ext):
        super().__init__(
            f"Cannot determine format for '{file_path}' (extension: {ext}). "
            f"Supported formats: .xlsx, .xlsm, .csv, .tsv, .txt",
            details={'file': str(file_path), 'extension': ext},
        )
        self.code = "UNSUPPORTED_FORMAT"


class RecordNotFoundError(LogbookError):
    """No record with the given id in the collection."""

    def __init__(self, collection, record_id):
        super().__init__(
            f"{collection} record not found: {record_id}",
            code="NOT_FOUND",
            details={'collection': collection, 'id': record_id},
        )


class ConfigurationError(LogbookError):
    """Invalid configuration value."""

    def __init__(self, setting, reason=None):
        message = f"Configuration error: {setting}"
        if reason:
            message += f" - {reason}"
        super().__init__(
            message,
            code="CONFIG_ERROR",
            details={'setting': setting, 'reason': reason},
        )
