"""
notestore — Exception Hierarchy
================================

What:  Application-specific exceptions for every failure a NoteStore
       operation can report.
How:   Each exception carries a user-facing message, an optional context dict,
       a machine-readable `code` and the log `level` used when it is reported.
       Backends and ImageService raise these; NoteStore catches them at its
       boundary and hands them back inside `Err` results.
Who:   Raised by backends/services; returned (never raised) by NoteStore.

Exception Hierarchy:
    NoteStoreError (base)
    ├── AuthError                  → sign in / sign up / refresh rejected
    ├── ValidationError            → caller input rejected at the edit boundary
    └── StoreError
        ├── NotAuthenticatedError  → no active session
        ├── BackendError           → record storage failure
        ├── UploadError            → image upload failure
        ├── DownloadError          → image download failure
        └── NotFoundError          → requested note does not exist
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional


class NoteStoreError(Exception):
    """
    Base exception for all notestore errors.

    Attributes:
        message:  User-facing error description (safe to display)
        context:  Additional debug info (logged, not meant for display)
    """

    code = "notestore_error"
    level = logging.ERROR

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ══════════════════════════════════════════════════════════════════════════
# Authentication
# ══════════════════════════════════════════════════════════════════════════


class AuthErrorReason(str, Enum):
    """Why the identity service refused a sign in, sign up or refresh."""

    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_EXISTS = "account_exists"
    ACCOUNT_DISABLED = "account_disabled"
    WEAK_PASSWORD = "weak_password"
    INVALID_EMAIL = "invalid_email"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    NETWORK = "network"
    UNKNOWN = "unknown"


AUTH_MESSAGES = {
    AuthErrorReason.INVALID_CREDENTIALS: "The email or password is incorrect.",
    AuthErrorReason.ACCOUNT_NOT_FOUND: "There is no account for this email address.",
    AuthErrorReason.ACCOUNT_EXISTS: "The email address is already in use by another account.",
    AuthErrorReason.ACCOUNT_DISABLED: "This account has been disabled.",
    AuthErrorReason.WEAK_PASSWORD: "Password should be at least 6 characters.",
    AuthErrorReason.INVALID_EMAIL: "The email address is badly formatted.",
    AuthErrorReason.TOO_MANY_ATTEMPTS: "Too many attempts. Please try again later.",
    AuthErrorReason.NETWORK: "Could not reach the sign-in service. Check your internet connection.",
    AuthErrorReason.UNKNOWN: "Authentication failed",
}


class AuthError(NoteStoreError):
    """
    Raised when the identity service rejects a request.

    When:  Wrong password, unknown account, email already registered, weak
           password, unreachable service.
    """

    code = "auth_error"
    level = logging.WARNING

    def __init__(
        self,
        message: str = "Authentication failed",
        reason: AuthErrorReason = AuthErrorReason.UNKNOWN,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason.value
        super().__init__(message=message, context=ctx)
        self.reason = reason

    @classmethod
    def for_reason(
        cls,
        reason: AuthErrorReason,
        context: Optional[Dict[str, Any]] = None,
    ) -> "AuthError":
        """Builds an AuthError with the standard message for `reason`."""
        return cls(message=AUTH_MESSAGES[reason], reason=reason, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Input Validation
# ══════════════════════════════════════════════════════════════════════════


class ValidationError(NoteStoreError):
    """
    Raised when caller input fails validation.

    When:  Blank title or content on submit, note ids that are not valid
           record keys.
    """

    code = "validation_error"
    level = logging.WARNING

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


# ══════════════════════════════════════════════════════════════════════════
# Store Errors
# ══════════════════════════════════════════════════════════════════════════


class StoreError(NoteStoreError):
    """Base for failures of note and image operations."""

    code = "store_error"


class NotAuthenticatedError(StoreError):
    """
    Raised when a record operation is attempted with no active session.

    Nothing is sent to the backend when this is raised.
    """

    code = "not_authenticated"
    level = logging.WARNING

    def __init__(
        self,
        message: str = "User not logged in",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BackendError(StoreError):
    """
    Raised when the record storage backend fails.

    When:  Network failure, permission denied, non-2xx response, bad JSON.
    """

    code = "backend_error"

    def __init__(
        self,
        message: str = "The note database could not be reached. Please try again.",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class UploadError(StoreError):
    """
    Raised when an image could not be uploaded.

    When:  Server answered success=false, HTTP exchange failed, file too large,
           source could not be read.
    """

    code = "upload_error"

    def __init__(
        self,
        message: str = "Failed to upload image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DownloadError(StoreError):
    """Raised when an image could not be fetched or written locally."""

    code = "download_error"

    def __init__(
        self,
        message: str = "Failed to download image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StoreError):
    """Raised when a note id is not present in the user's collection."""

    code = "not_found"
    level = logging.WARNING

    def __init__(
        self,
        resource: str = "Note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
