# Backends package init
"""
notestore — Backends
=====================

What:  Implementations of the identity and record storage contracts.

Backend Inventory:
    - IdentityBackend / RecordBackend (abstract): the contracts NoteStore uses
    - FirebaseIdentity: Firebase Auth REST API (email/password)
    - FirebaseRealtimeDatabase: Firebase Realtime Database REST API
    - InMemoryBackend: both contracts in process memory (tests, local dev)
"""

from notestore.backends.base import (
    IdentityBackend,
    RecordBackend,
    note_record_path,
    user_notes_path,
    validate_record_key,
)
from notestore.backends.firebase import FirebaseIdentity, FirebaseRealtimeDatabase
from notestore.backends.memory import InMemoryBackend

__all__ = [
    "FirebaseIdentity",
    "FirebaseRealtimeDatabase",
    "IdentityBackend",
    "InMemoryBackend",
    "RecordBackend",
    "note_record_path",
    "user_notes_path",
    "validate_record_key",
]
