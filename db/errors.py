# db/errors.py

from __future__ import annotations

from typing import List, Optional


class StudioError(Exception):
    """Base class for every failure the console turns into a notice."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StudioError):
    """Required fields are blank. Raised before any backend call."""

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = list(missing)
        super().__init__(message or "Please fill in: " + ", ".join(self.missing))


class NotFound(StudioError):
    def __init__(self, table: str, item_id: str):
        self.table = table
        self.item_id = item_id
        super().__init__(f"{table} row {item_id} not found")


class BackendError(StudioError):
    """Transport, auth or constraint failure reported by Supabase."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class UploadError(StudioError):
    """The storage bucket rejected a file. Row data was not touched."""

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(f"{filename}: {message}")
