"""
notestore — Firebase Backends
==============================

What:  IdentityBackend and RecordBackend implementations for Firebase, spoken
       over its REST APIs with httpx.
How:   FirebaseIdentity calls the Identity Toolkit (sign in / sign up) and the
       Secure Token service (refresh). FirebaseRealtimeDatabase maps each
       record operation onto PUT / GET / DELETE of `<path>.json`, passing the
       session's id token as `?auth=`.
Who:   Built by NoteStore.from_settings() around the shared AsyncClient.

Endpoints:
    POST {auth_url}/accounts:signInWithPassword?key=API_KEY
    POST {auth_url}/accounts:signUp?key=API_KEY
    POST {token_url}/token?key=API_KEY             (form: grant_type, refresh_token)
    PUT|GET|DELETE {database_url}/{path}.json?auth=ID_TOKEN

Error bodies:
    Identity:  {"error": {"code": 400, "message": "WEAK_PASSWORD : Password should be ..."}}
    Database:  {"error": "Permission denied"}
"""

import logging
from typing import Any, Dict, Optional

import httpx

from notestore.backends.base import IdentityBackend, RecordBackend
from notestore.config import settings
from notestore.exceptions import AuthError, AuthErrorReason, BackendError
from notestore.http_client import json_or_none
from notestore.schemas.session import Session

logger = logging.getLogger(__name__)

# ── Identity Error Codes ──────────────────────────────────────────────────
# Leading token of error.message → reason
ERROR_REASONS = {
    "EMAIL_EXISTS": AuthErrorReason.ACCOUNT_EXISTS,
    "EMAIL_NOT_FOUND": AuthErrorReason.ACCOUNT_NOT_FOUND,
    "USER_NOT_FOUND": AuthErrorReason.ACCOUNT_NOT_FOUND,
    "INVALID_PASSWORD": AuthErrorReason.INVALID_CREDENTIALS,
    "INVALID_LOGIN_CREDENTIALS": AuthErrorReason.INVALID_CREDENTIALS,
    "TOKEN_EXPIRED": AuthErrorReason.INVALID_CREDENTIALS,
    "INVALID_REFRESH_TOKEN": AuthErrorReason.INVALID_CREDENTIALS,
    "WEAK_PASSWORD": AuthErrorReason.WEAK_PASSWORD,
    "INVALID_EMAIL": AuthErrorReason.INVALID_EMAIL,
    "MISSING_PASSWORD": AuthErrorReason.INVALID_CREDENTIALS,
    "USER_DISABLED": AuthErrorReason.ACCOUNT_DISABLED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": AuthErrorReason.TOO_MANY_ATTEMPTS,
}


def auth_error_from_response(status_code: int, payload: Any) -> AuthError:
    """
    Translate an Identity Toolkit error body into an AuthError.

    "WEAK_PASSWORD : Password should be at least 6 characters" keeps the
    server's detail text as the message; other codes use the standard text.
    """
    raw = ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        raw = str(payload["error"].get("message", ""))

    backend_code, _, detail = raw.partition(":")
    backend_code = backend_code.strip()
    reason = ERROR_REASONS.get(backend_code, AuthErrorReason.UNKNOWN)
    context = {"status_code": status_code, "backend_code": backend_code or None}

    if detail.strip():
        return AuthError(message=detail.strip(), reason=reason, context=context)
    if reason is AuthErrorReason.UNKNOWN and raw:
        return AuthError(message=raw, reason=reason, context=context)
    return AuthError.for_reason(reason, context=context)


class FirebaseIdentity(IdentityBackend):
    """
    Email/password authentication against Firebase Auth.

    Sessions returned here carry the id token (valid for one hour) and the
    refresh token used by refresh().
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        auth_url: Optional[str] = None,
        token_url: Optional[str] = None,
    ):
        self.client = client
        self.api_key = api_key if api_key is not None else settings.firebase_api_key
        self.auth_url = (auth_url or settings.firebase_auth_url).rstrip("/")
        self.token_url = (token_url or settings.firebase_token_url).rstrip("/")

    async def sign_in(self, email: str, password: str) -> Session:
        return await self._password_request("accounts:signInWithPassword", email, password)

    async def sign_up(self, email: str, password: str) -> Session:
        return await self._password_request("accounts:signUp", email, password)

    async def refresh(self, session: Session) -> Session:
        if not session.refresh_token:
            raise AuthError.for_reason(AuthErrorReason.INVALID_CREDENTIALS)

        payload = await self._post(
            f"{self.token_url}/token",
            data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
        )
        try:
            return Session(
                user_id=payload.get("user_id") or session.user_id,
                email=session.email,
                id_token=payload["id_token"],
                refresh_token=payload.get("refresh_token") or session.refresh_token,
                expires_at=Session.expiry_from_seconds(payload.get("expires_in")),
            )
        except KeyError as e:
            raise AuthError(
                message="Unexpected response from the token service",
                context={"missing": str(e)},
            )

    async def _password_request(self, endpoint: str, email: str, password: str) -> Session:
        logger.debug("Identity request %s for %s", endpoint, email)
        payload = await self._post(
            f"{self.auth_url}/{endpoint}",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        try:
            return Session(
                user_id=payload["localId"],
                email=payload.get("email") or email,
                id_token=payload["idToken"],
                refresh_token=payload.get("refreshToken", ""),
                expires_at=Session.expiry_from_seconds(payload.get("expiresIn")),
            )
        except KeyError as e:
            raise AuthError(
                message="Unexpected response from the sign-in service",
                context={"missing": str(e)},
            )

    async def _post(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self.client.post(url, params={"key": self.api_key}, **kwargs)
        except httpx.HTTPError as e:
            raise AuthError.for_reason(
                AuthErrorReason.NETWORK,
                context={"error": str(e) or type(e).__name__},
            )

        payload = json_or_none(response)

        if response.is_error:
            raise auth_error_from_response(response.status_code, payload)
        if not isinstance(payload, dict):
            raise AuthError(
                message="Unexpected response from the sign-in service",
                context={"status_code": response.status_code},
            )
        return payload


class FirebaseRealtimeDatabase(RecordBackend):
    """
    Record storage on the Firebase Realtime Database REST API.

    Writes are atomic per record (PUT replaces the node). Reads return the raw
    JSON children; deletes of missing nodes succeed.
    """

    def __init__(self, client: httpx.AsyncClient, database_url: Optional[str] = None):
        self.client = client
        self.database_url = (database_url or settings.firebase_database_url).rstrip("/")

    async def put(self, path: str, record: Dict[str, Any], session: Session) -> None:
        await self._request("PUT", path, session, json=record)

    async def get_children(self, path: str, session: Session) -> Dict[str, Any]:
        data = await self._request("GET", path, session)
        return self._as_children(path, data)

    async def delete(self, path: str, session: Session) -> None:
        await self._request("DELETE", path, session)

    def _url(self, path: str) -> str:
        return f"{self.database_url}/{path.strip('/')}.json"

    @staticmethod
    def _as_children(path: str, data: Any) -> Dict[str, Any]:
        """
        Normalize a GET body into {key: value}.

        null → {} (node absent). Nodes whose keys are all small integers come
        back as JSON arrays with nulls for gaps; those become {"0": ..., "2": ...}.
        """
        if data is None:
            return {}
        if isinstance(data, dict):
            return data
        if isinstance(data, list):
            return {str(i): value for i, value in enumerate(data) if value is not None}
        logger.warning("Node %s holds a scalar value; treating it as empty", path)
        return {}

    async def _request(self, method: str, path: str, session: Session, **kwargs: Any) -> Any:
        params = {"auth": session.id_token} if session.id_token else None
        try:
            response = await self.client.request(method, self._url(path), params=params, **kwargs)
        except httpx.HTTPError as e:
            raise BackendError(
                message="The note database could not be reached. Check your internet connection.",
                context={"path": path, "method": method, "error": str(e) or type(e).__name__},
            )

        if response.is_error:
            body = json_or_none(response)
            detail = body.get("error") if isinstance(body, dict) else None
            raise BackendError(
                message=str(detail) if detail else f"Note database request failed ({response.status_code})",
                status_code=response.status_code,
                context={"path": path, "method": method},
            )

        try:
            return response.json()
        except ValueError:
            raise BackendError(
                message="Malformed response from the note database",
                status_code=response.status_code,
                context={"path": path, "method": method},
            )
