"""
notestore — Abstract Backend Interfaces
========================================

What:  Contracts for the two external collaborators of NoteStore: an identity
       service (email/password sessions) and a key-addressed record store.
How:   Concrete backends inherit from IdentityBackend / RecordBackend and
       raise AuthError / BackendError on failure. NoteStore never sees a
       transport exception from a well-behaved backend.
Who:   Called by NoteStore only.

Record layout:
    users/{userId}/notes/{noteId} → {"id", "title", "content", "imageUrl", "userId"}
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict

from notestore.exceptions import ValidationError
from notestore.schemas.session import Session

# Characters the Realtime Database forbids in keys, plus "/" which would
# address a different node. Control characters are rejected as well.
_INVALID_KEY_CHARS = re.compile(r"[./#$\[\]\x00-\x1f\x7f]")


def validate_record_key(key: str, field: str = "id") -> str:
    """
    Ensure `key` is usable as a single path segment.

    Raises:
        ValidationError for empty keys or keys containing . / # $ [ ]
    """
    if not key or _INVALID_KEY_CHARS.search(key):
        raise ValidationError(
            message=f"'{key}' is not a valid {field}",
            field=field,
            context={"value": key},
        )
    return key


def user_notes_path(user_id: str) -> str:
    """Collection path holding all notes of one user."""
    return f"users/{validate_record_key(user_id, 'user_id')}/notes"


def note_record_path(user_id: str, note_id: str) -> str:
    """Path of one note record."""
    return f"{user_notes_path(user_id)}/{validate_record_key(note_id)}"


class IdentityBackend(ABC):
    """
    Email/password identity service.

    Contract:
        - sign_in / sign_up return a Session for the user
        - refresh returns a new Session with a fresh id token
        - every rejection or transport failure raises AuthError
    """

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Open a session for an existing account."""
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Session:
        """Create an account and open a session for it."""
        ...

    @abstractmethod
    async def refresh(self, session: Session) -> Session:
        """Exchange the session's refresh token for a new id token."""
        ...


class RecordBackend(ABC):
    """
    Key-addressed JSON record store.

    Contract:
        - put writes the whole record at `path`, replacing what was there
        - get_children returns {key: raw value} for every child of `path`
          ({} when the node does not exist); values are NOT validated
        - delete removes `path`; removing a missing path is not an error
        - every failure raises BackendError
    """

    @abstractmethod
    async def put(self, path: str, record: Dict[str, Any], session: Session) -> None:
        ...

    @abstractmethod
    async def get_children(self, path: str, session: Session) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def delete(self, path: str, session: Session) -> None:
        ...
