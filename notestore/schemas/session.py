"""
notestore — Session Schema
===========================

What:  The authenticated-user context returned by sign in / sign up.
Who:   Created by IdentityBackend implementations; held by one NoteStore.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Refresh this long before the token actually expires
EXPIRY_LEEWAY = timedelta(seconds=60)


class Session(BaseModel):
    """
    What:  Identity of the signed-in user plus the tokens to act as them.

    `id_token` and `refresh_token` are secrets: they are excluded from repr
    so they never reach log output.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="Backend user id (Firebase localId)")
    email: str = Field(default="")
    id_token: str = Field(default="", repr=False)
    refresh_token: str = Field(default="", repr=False)
    expires_at: Optional[datetime] = Field(
        default=None,
        description="UTC expiry of id_token; None means the session does not expire",
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at - EXPIRY_LEEWAY

    @staticmethod
    def expiry_from_seconds(expires_in: Optional[str]) -> Optional[datetime]:
        """Converts an "expiresIn" value ("3600") into an absolute UTC time."""
        if not expires_in:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
