"""
notestore — In-Memory Backend
==============================

What:  Process-local IdentityBackend + RecordBackend.
How:   Accounts live in a dict keyed by email; records live in a dict of
       collections keyed by their parent path. The same rules the Firebase
       project enforces are applied here: 6-character minimum passwords,
       unique emails, and writes only below users/{session.user_id}/.
Who:   Tests and local development (no network, no credentials).

Every call is appended to `calls` as (operation, path-or-email) so tests can
assert that an operation did or did not reach the backend.
"""

import copy
import hmac
import uuid
from typing import Any, Dict, List, Tuple

from notestore.backends.base import IdentityBackend, RecordBackend
from notestore.exceptions import AuthError, AuthErrorReason, BackendError
from notestore.schemas.session import Session

MIN_PASSWORD_LENGTH = 6


class InMemoryBackend(IdentityBackend, RecordBackend):
    """Both backend contracts backed by plain dictionaries."""

    def __init__(self) -> None:
        # email → (password, user_id)
        self.accounts: Dict[str, Tuple[str, str]] = {}
        # parent path → {key: raw record}
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str]] = []

    # ── Identity ──────────────────────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> Session:
        self.calls.append(("sign_in", email))
        account = self.accounts.get(email.strip().lower())
        if account is None:
            raise AuthError.for_reason(AuthErrorReason.ACCOUNT_NOT_FOUND)
        stored_password, user_id = account
        if not hmac.compare_digest(stored_password, password):
            raise AuthError.for_reason(AuthErrorReason.INVALID_CREDENTIALS)
        return self._open_session(user_id, email)

    async def sign_up(self, email: str, password: str) -> Session:
        self.calls.append(("sign_up", email))
        key = email.strip().lower()
        if "@" not in key:
            raise AuthError.for_reason(AuthErrorReason.INVALID_EMAIL)
        if key in self.accounts:
            raise AuthError.for_reason(AuthErrorReason.ACCOUNT_EXISTS)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError.for_reason(AuthErrorReason.WEAK_PASSWORD)
        user_id = uuid.uuid4().hex
        self.accounts[key] = (password, user_id)
        return self._open_session(user_id, email)

    async def refresh(self, session: Session) -> Session:
        self.calls.append(("refresh", session.email))
        return self._open_session(session.user_id, session.email)

    @staticmethod
    def _open_session(user_id: str, email: str) -> Session:
        return Session(
            user_id=user_id,
            email=email,
            id_token=f"memory-{uuid.uuid4().hex}",
            refresh_token=f"memory-refresh-{uuid.uuid4().hex}",
        )

    # ── Records ───────────────────────────────────────────────────────────

    async def put(self, path: str, record: Dict[str, Any], session: Session) -> None:
        self.calls.append(("put", path))
        self._authorize(path, session)
        parent, key = self._split(path)
        self.collections.setdefault(parent, {})[key] = copy.deepcopy(record)

    async def get_children(self, path: str, session: Session) -> Dict[str, Any]:
        self.calls.append(("get_children", path))
        self._authorize(path, session)
        return copy.deepcopy(self.collections.get(path.strip("/"), {}))

    async def delete(self, path: str, session: Session) -> None:
        self.calls.append(("delete", path))
        self._authorize(path, session)
        parent, key = self._split(path)
        self.collections.get(parent, {}).pop(key, None)

    @staticmethod
    def _split(path: str) -> Tuple[str, str]:
        parent, _, key = path.strip("/").rpartition("/")
        return parent, key

    @staticmethod
    def _authorize(path: str, session: Session) -> None:
        """Mirrors the rule: users/$uid is readable and writable only by $uid."""
        if not path.strip("/").startswith(f"users/{session.user_id}/"):
            raise BackendError(
                message="Permission denied",
                status_code=401,
                context={"path": path},
            )
