"""Test helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from arm_auth.auth.base import TokenAcquirer
from arm_auth.models.token import AccessToken

TENANT_ID = "contoso.onmicrosoft.com"
CUSTOM_CLIENT_ID = "11111111-2222-3333-4444-555555555555"


class FakeAcquirer(TokenAcquirer):
    """Acquirer returning queued tokens or raising queued errors; the last outcome repeats."""

    def __init__(self, *outcomes: Union[AccessToken, Exception]):
        self.outcomes = list(outcomes)
        self.requests = []
        self.cleared = False

    def acquire(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def clear_cache(self) -> None:
        self.cleared = True


def make_token(
    value: str = "eyJ0eXAiOiJKV1QiLCJhbGciOiJSUzI1NiJ9.payload.signature",
    expires_in: int = 3600,
    token_type: str = "Bearer",
) -> AccessToken:
    return AccessToken(
        token=value,
        token_type=token_type,
        expires_on=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        scopes=["https://management.azure.com/.default"],
    )


def token_result(
    access_token: str = "access-token", expires_in: int = 3599, scope: Optional[str] = None
) -> dict:
    result = {"access_token": access_token, "token_type": "Bearer", "expires_in": expires_in}
    if scope is not None:
        result["scope"] = scope
    return result
