"""
notestore — Note Repository Package
====================================

What: Data-access layer for a note-taking client: authentication, per-user
      note records in a realtime database, and image upload/download.
Who:  Imported by UI code, which only ever talks to `NoteStore`.

Architecture Note:

    ┌─────────────────────────────────────┐
    │             NoteStore               │  ← Result-returning boundary
    ├──────────────────┬──────────────────┤
    │     Backends     │   ImageService   │  ← identity/records, image endpoint
    ├──────────────────┴──────────────────┤
    │       Schemas & Exceptions          │  ← Pydantic models, error hierarchy
    ├─────────────────────────────────────┤
    │     HTTP client / Configuration     │  ← httpx, pydantic-settings
    └─────────────────────────────────────┘

    Everything below NoteStore raises `NoteStoreError` subclasses; NoteStore
    converts them (and any stray transport exception) into `Err` values.
"""

__version__ = "1.0.0"

from notestore.exceptions import (  # noqa: E402
    AuthError,
    AuthErrorReason,
    BackendError,
    DownloadError,
    NoteStoreError,
    NotAuthenticatedError,
    NotFoundError,
    StoreError,
    UploadError,
    ValidationError,
)
from notestore.result import Err, Ok, Result  # noqa: E402
from notestore.schemas.note import Note, NoteDraft  # noqa: E402
from notestore.schemas.session import Session  # noqa: E402
from notestore.services.note_store import NoteStore  # noqa: E402

__all__ = [
    "__version__",
    "AuthError",
    "AuthErrorReason",
    "BackendError",
    "DownloadError",
    "Err",
    "Note",
    "NoteDraft",
    "NoteStore",
    "NoteStoreError",
    "NotAuthenticatedError",
    "NotFoundError",
    "Ok",
    "Result",
    "Session",
    "StoreError",
    "UploadError",
    "ValidationError",
]
