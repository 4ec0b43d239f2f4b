"""
notestore — NoteStore (Repository Boundary)
============================================

What:  The single object UI code talks to: sign in / sign up, per-user note
       CRUD, and the image upload/download workflow.
How:   Composes an IdentityBackend, a RecordBackend and an ImageService.
       Every public coroutine runs inside `store_operation`, which logs the
       outcome and turns raised NoteStoreErrors (and any stray exception)
       into `Err` values. Callers never need try/except.
Who:   Created once per signed-in context (screen graph, test, CLI script).

Session handling:
    The authenticated session is held on the instance, not in a global, so
    any number of stores (one per test, one per account) can coexist.
    Expired sessions are refreshed transparently before record operations.

Concurrency:
    No locks, no queue. Concurrent save() calls for the same id race at the
    backend and the last write wins. Cancellation is never converted into a
    result; it propagates to the awaiting caller.

Operation Flow (submit_note):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌───────────┐
    │ Session  │───▶│  Validate  │───▶│ Upload image │───▶│   Save    │
    │  check   │    │   draft    │    │  (optional)  │    │  record   │
    └──────────┘    └────────────┘    └──────────────┘    └───────────┘
"""

import functools
import logging
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Type

import httpx
from pydantic import ValidationError as PydanticValidationError

from notestore.backends.base import (
    IdentityBackend,
    RecordBackend,
    note_record_path,
    user_notes_path,
    validate_record_key,
)
from notestore.backends.firebase import FirebaseIdentity, FirebaseRealtimeDatabase
from notestore.config import Settings, settings
from notestore.exceptions import (
    AuthError,
    AuthErrorReason,
    BackendError,
    DownloadError,
    NoteStoreError,
    NotAuthenticatedError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from notestore.http_client import create_http_client, dispose_client
from notestore.instrumentation.logging import operation_scope
from notestore.result import Err, Ok, Result
from notestore.schemas.note import Note, NoteDraft
from notestore.schemas.session import Session
from notestore.services.image_service import ImageService, ImageSource

logger = logging.getLogger(__name__)


def store_operation(
    name: str,
    failure: Type[NoteStoreError],
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Result]]]:
    """
    Wrap a NoteStore coroutine as a Result-returning operation.

    What:    Runs the body in an operation scope (correlation id + summary log)
             and converts its outcome:
               returned value        → Ok(value)
               NoteStoreError raised → Err(error)
               any other Exception   → Err(failure(message=<original message>))
    Args:
        name:    Operation name used in logs
        failure: Error type reported for unexpected exceptions
    """

    def decorator(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Result]]:
        @functools.wraps(fn)
        async def wrapper(self: "NoteStore", *args: Any, **kwargs: Any) -> Result:
            with operation_scope(name) as scope:
                try:
                    value = await fn(self, *args, **kwargs)
                except NoteStoreError as e:
                    scope.fail(e)
                    return Err(e)
                except Exception as e:
                    logger.exception("Unexpected error during %s", name)
                    error = failure(
                        message=str(e) or type(e).__name__,
                        context={"exception": type(e).__name__},
                    )
                    scope.fail(error)
                    return Err(error)
                return Ok(value)

        return wrapper

    return decorator


class NoteStore:
    """
    Repository for one user's notes and images.

    Responsibilities:
        - authenticate() / register() / sign_out(): session lifecycle
        - save() / list_notes() / get_note() / delete_note(): note records
        - upload_image() / download_image(): image transfer
        - submit_note(): validate → upload → save, as an edit screen does it

    Every coroutine returns `Ok(value)` or `Err(NoteStoreError)`.

    Example:
        async with NoteStore.from_settings() as store:
            await store.authenticate("alice@example.com", "secret123")
            result = await store.save(Note(title="Groceries", content="milk, eggs"))
            if result.is_ok():
                print(result.value.id)
    """

    def __init__(
        self,
        identity: IdentityBackend,
        records: RecordBackend,
        images: ImageService,
        session: Optional[Session] = None,
        owned_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            identity: Sign in / sign up / refresh provider
            records: Note record storage
            images: Image endpoint client
            session: Start already signed in (restored session, tests)
            owned_client: HTTP client closed by aclose()
        """
        self._identity = identity
        self._records = records
        self._images = images
        self._session = session
        self._owned_client = owned_client

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "NoteStore":
        """
        Build a store on the Firebase backends and the configured image endpoint.

        When `client` is omitted a new AsyncClient is created and owned by the
        store (closed by aclose()). Raises ValueError when Firebase settings
        are missing.
        """
        config = config or settings
        config.validate_required_for_production()

        owned_client = None
        if client is None:
            client = owned_client = create_http_client(config)

        return cls(
            identity=FirebaseIdentity(
                client,
                api_key=config.firebase_api_key,
                auth_url=config.firebase_auth_url,
                token_url=config.firebase_token_url,
            ),
            records=FirebaseRealtimeDatabase(client, database_url=config.firebase_database_url),
            images=ImageService(
                client,
                upload_url=config.image_upload_url,
                staging_dir=config.staging_dir,
                download_dir=config.download_dir,
                max_file_size=config.max_file_size,
            ),
            owned_client=owned_client,
        )

    async def aclose(self) -> None:
        if self._owned_client is not None:
            await dispose_client(self._owned_client)

    async def __aenter__(self) -> "NoteStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ══════════════════════════════════════════════════════════════════════
    # Session
    # ══════════════════════════════════════════════════════════════════════

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @store_operation("authenticate", AuthError)
    async def authenticate(self, email: str, password: str) -> None:
        """
        Sign in with email and password.

        Returns: Ok(None), or Err(AuthError) with a reason such as
                 invalid_credentials, account_not_found, network.
        Calling again simply replaces the held session.
        """
        logger.debug("Attempting login for %s", email)
        self._session = await self._identity.sign_in(email, password)
        logger.info("Login successful for user %s", self._session.user_id)

    @store_operation("register", AuthError)
    async def register(self, email: str, password: str) -> None:
        """
        Create an account and sign in as it.

        Returns: Ok(None), or Err(AuthError) (account_exists, weak_password,
                 invalid_email, network, ...).
        """
        logger.debug("Attempting register for %s", email)
        self._session = await self._identity.sign_up(email, password)
        logger.info("Register successful for user %s", self._session.user_id)

    def current_user_id(self) -> Optional[str]:
        """User id of the held session, or None when signed out."""
        return self._session.user_id if self._session is not None else None

    def sign_out(self) -> None:
        if self._session is not None:
            logger.info("Signed out user %s", self._session.user_id)
        self._session = None

    @store_operation("refresh_session", AuthError)
    async def refresh_session(self) -> None:
        """Exchange the refresh token for a fresh id token."""
        session = self._session
        if session is None:
            raise NotAuthenticatedError()
        refreshed = await self._identity.refresh(session)
        if self._session is session:
            self._session = refreshed

    async def _active_session(self) -> Session:
        """
        The session to act with, refreshed first when it has expired.

        Raises:
            NotAuthenticatedError: signed out, or the refresh was rejected
            BackendError: the refresh could not reach the identity service
        """
        session = self._session
        if session is None:
            raise NotAuthenticatedError()
        if not session.is_expired():
            return session

        logger.info("Session for user %s expired; refreshing", session.user_id)
        try:
            refreshed = await self._identity.refresh(session)
        except AuthError as e:
            if e.reason is AuthErrorReason.NETWORK:
                raise BackendError(message=e.message, context=e.context)
            if self._session is session:
                self._session = None
            raise NotAuthenticatedError(
                message="Session expired. Please sign in again.",
                context={"reason": e.reason.value},
            )
        if self._session is session:
            self._session = refreshed
        return refreshed

    # ══════════════════════════════════════════════════════════════════════
    # Notes
    # ══════════════════════════════════════════════════════════════════════

    @store_operation("save", BackendError)
    async def save(self, note: Note) -> Note:
        """
        Create or overwrite a note.

        What:    Empty id → a new UUID4 is assigned. user_id is always replaced
                 by the session's user id. The full record is written at
                 users/{userId}/notes/{id}, replacing any existing record.
        Returns: Ok(saved Note, with its id), or Err(NotAuthenticatedError |
                 ValidationError | BackendError)
        """
        session = await self._active_session()
        return await self._persist(session, note)

    @store_operation("list_notes", BackendError)
    async def list_notes(self) -> List[Note]:
        """
        All notes of the signed-in user, in backend order.

        Entries that do not deserialize into a Note are skipped (and logged),
        never reported as errors.
        """
        session = await self._active_session()
        return await self._fetch_notes(session)

    @store_operation("get_note", BackendError)
    async def get_note(self, note_id: str) -> Note:
        """One note by id; Err(NotFoundError) when the user has no such note."""
        session = await self._active_session()
        validate_record_key(note_id)
        for note in await self._fetch_notes(session):
            if note.id == note_id:
                return note
        raise NotFoundError(resource="Note", resource_id=note_id)

    @store_operation("delete_note", BackendError)
    async def delete_note(self, note_id: str) -> None:
        """Remove a note; deleting an id that does not exist also succeeds."""
        session = await self._active_session()
        logger.debug("Deleting note with id %s", note_id)
        await self._records.delete(note_record_path(session.user_id, note_id), session)
        logger.info("Note %s deleted", note_id)

    @store_operation("submit_note", BackendError)
    async def submit_note(
        self,
        title: str,
        content: str,
        *,
        note_id: str = "",
        image_url: Optional[str] = None,
        image: Optional[ImageSource] = None,
    ) -> Note:
        """
        Save a note the way an edit screen does.

        Workflow:
            1. Require a session
            2. Validate title/content (non-blank) and the id
            3. Upload `image` if given; its URL replaces `image_url`
            4. Save the note

        An upload failure is returned as Err(UploadError) and nothing is saved.
        """
        session = await self._active_session()

        try:
            draft = NoteDraft(id=note_id, title=title, content=content, image_url=image_url)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ValidationError(
                message=str(first.get("ctx", {}).get("error", first["msg"])),
                field=".".join(str(part) for part in first["loc"]) or None,
                context={"error_count": e.error_count()},
            )
        if draft.id:
            validate_record_key(draft.id)

        uploaded_url = None
        if image is not None:
            logger.debug("Uploading image for note %s", draft.id or "<new>")
            uploaded_url = await self._images.upload(image)

        return await self._persist(session, draft.to_note(image_url=uploaded_url))

    async def _persist(self, session: Session, note: Note) -> Note:
        note_id = note.id or str(uuid.uuid4())
        saved = note.model_copy(update={"id": note_id, "user_id": session.user_id})
        await self._records.put(
            note_record_path(session.user_id, note_id),
            saved.to_record(),
            session,
        )
        logger.info("Note saved with id %s", note_id)
        return saved

    async def _fetch_notes(self, session: Session) -> List[Note]:
        children = await self._records.get_children(user_notes_path(session.user_id), session)
        notes = []
        for key, raw in children.items():
            note = self._parse_record(key, raw)
            if note is not None:
                notes.append(note)
        logger.debug("Fetched %d notes (%d entries)", len(notes), len(children))
        return notes

    @staticmethod
    def _parse_record(key: str, raw: Any) -> Optional[Note]:
        """Note for a raw child value, or None when the value is malformed."""
        if not isinstance(raw, dict):
            logger.warning(
                "Skipping malformed note %s: expected an object, got %s",
                key,
                type(raw).__name__,
            )
            return None

        data = dict(raw)
        if not data.get("id"):
            data["id"] = key
        try:
            return Note.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed note %s: %d invalid field(s)", key, e.error_count())
            return None

    # ══════════════════════════════════════════════════════════════════════
    # Images
    # ══════════════════════════════════════════════════════════════════════

    @store_operation("upload_image", UploadError)
    async def upload_image(self, source: ImageSource) -> str:
        """
        Upload image bytes and return the URL the server assigned.

        `source` is a path, raw bytes or a binary file object. Returns
        Err(UploadError) carrying the server's error text on success=false.
        """
        return await self._images.upload(source)

    @store_operation("download_image", DownloadError)
    async def download_image(self, url: str) -> Path:
        """Fetch `url` into a new file in the download directory and return its path."""
        return await self._images.download(url)
