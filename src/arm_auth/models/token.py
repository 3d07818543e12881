"""Access token and authentication header models."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class AccessToken(BaseModel):
    """Token returned by an acquirer."""

    token: str = Field(repr=False)
    token_type: str = "Bearer"
    expires_on: datetime
    scopes: list[str] = Field(default_factory=list)
    account: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_msal_result(
        cls,
        result: dict[str, Any],
        now: Optional[datetime] = None,
        expires_on: Optional[datetime] = None,
    ) -> "AccessToken":
        """
        Convert an msal token response.

        Args:
            result: Dictionary returned by an msal acquire_token_* call
            now: Reference time for ``expires_in`` (defaults to current UTC time)
            expires_on: Absolute expiry, when known from the token cache

        Returns:
            AccessToken instance
        """
        if expires_on is None:
            now = now or datetime.now(timezone.utc)
            expires_on = now + timedelta(seconds=int(result.get("expires_in") or 0))
            # expires_in is truncated to whole seconds by msal
            if expires_on.microsecond:
                expires_on = expires_on.replace(microsecond=0) + timedelta(seconds=1)
        claims = result.get("id_token_claims") or {}
        return cls(
            token=result["access_token"],
            token_type=result.get("token_type") or "Bearer",
            expires_on=expires_on,
            scopes=(result.get("scope") or "").split(),
            account=claims.get("preferred_username"),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_on


class AuthenticationHeader(BaseModel):
    """Transport-ready authentication header."""

    authorization: str = Field(repr=False)
    content_type: str = "application/json"
    expires_on: datetime

    model_config = {"frozen": True}

    def as_dict(self) -> dict[str, str]:
        """Header mapping for HTTP clients."""
        return {
            "Authorization": self.authorization,
            "Content-Type": self.content_type,
            "ExpiresOn": self.expires_on.isoformat(),
        }
