"""Bearer authentication header construction."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models.token import AccessToken, AuthenticationHeader
from ..utils.exceptions import HeaderConstructionFailure
from .base import HeaderBuilder

logger = logging.getLogger(__name__)


class BearerHeaderBuilder(HeaderBuilder):
    """Build ``Authorization: Bearer`` headers."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build(self, token: AccessToken) -> AuthenticationHeader:
        if not token.token:
            raise HeaderConstructionFailure("Token has no access token value")
        if token.token_type.lower() != "bearer":
            raise HeaderConstructionFailure(f"Unsupported token type: {token.token_type}")
        if token.is_expired(self._clock()):
            raise HeaderConstructionFailure(
                f"Token expired at {token.expires_on.isoformat()}"
            )

        logger.debug(f"Built authorization header valid until {token.expires_on.isoformat()}")
        return AuthenticationHeader(
            authorization=f"Bearer {token.token}",
            expires_on=token.expires_on,
        )
