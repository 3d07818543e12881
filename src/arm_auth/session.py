"""Authentication session: token lifecycle and header state."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .auth.base import HeaderBuilder, TokenAcquirer
from .auth.certificates import CertificateStore
from .auth.header import BearerHeaderBuilder
from .auth.msal_auth import MsalTokenAcquirer
from .auth.redirect import RuntimeClass, detect_runtime_class, resolve_redirect_uri
from .auth.request_builder import build_token_request
from .auth.token_cache import TokenCacheManager
from .config import AuthSettings, get_settings
from .models.context import AuthContext
from .models.token import AccessToken, AuthenticationHeader
from .utils.exceptions import (
    AcquisitionFailure,
    ArmAuthError,
    HeaderConstructionFailure,
)

logger = logging.getLogger(__name__)


class AuthStage(str, Enum):
    """Stage of an authentication call."""

    CONFIGURATION = "configuration"
    PARAMETERS = "parameter construction"
    ACQUISITION = "acquisition"
    HEADER = "header construction"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an authentication call.

    Either ``header`` is set, or ``error`` and ``stage`` describe the failure.
    """

    header: Optional[AuthenticationHeader] = None
    error: Optional[ArmAuthError] = None
    stage: Optional[AuthStage] = None

    @property
    def ok(self) -> bool:
        return self.header is not None

    @classmethod
    def failure(cls, stage: AuthStage, error: ArmAuthError) -> "AuthResult":
        logger.warning(f"Authentication failed during {stage.value}: {error}")
        return cls(error=error, stage=stage)


class AuthSession:
    """Holds the latest token and header for a caller.

    ``token`` is replaced by every successful acquisition, even when the
    header built from it fails afterwards. ``header`` only changes when a
    header was built, so after a header failure it may belong to an older
    token.
    """

    def __init__(
        self,
        acquirer: Optional[TokenAcquirer] = None,
        header_builder: Optional[HeaderBuilder] = None,
        certificate_store: Optional[CertificateStore] = None,
        settings: Optional[AuthSettings] = None,
        runtime: Optional[RuntimeClass] = None,
    ):
        self.settings = settings or get_settings()
        self.acquirer = acquirer or MsalTokenAcquirer(
            TokenCacheManager(
                cache_location=self.settings.token_cache_path,
                persist=self.settings.token_cache_persist,
                encrypted=self.settings.token_cache_encrypted,
            )
        )
        self.header_builder = header_builder or BearerHeaderBuilder()
        self.certificate_store = certificate_store
        self.runtime = runtime or detect_runtime_class(self.settings.runtime_class)
        self.token: Optional[AccessToken] = None
        self.header: Optional[AuthenticationHeader] = None

    def acquire_authentication(self, context: AuthContext) -> AuthResult:
        """
        Acquire a token for the context and build its authentication header.

        Failures are logged as warnings and returned in the result; nothing
        is raised.

        Args:
            context: Authentication context

        Returns:
            AuthResult with the header on success
        """
        try:
            context.check()
        except ArmAuthError as e:
            return AuthResult.failure(AuthStage.CONFIGURATION, e)

        logger.info(
            f"Authenticating to tenant {context.tenant_id} with {context.mode.value} flow"
            f"{' (refresh)' if context.refresh else ''}"
        )

        try:
            redirect_uri = resolve_redirect_uri(
                context.client_id, context.redirect_uri, self.runtime
            )
            request = build_token_request(
                context, redirect_uri, self.certificate_store, self.settings
            )
        except ArmAuthError as e:
            return AuthResult.failure(AuthStage.PARAMETERS, e)
        except Exception as e:
            return AuthResult.failure(
                AuthStage.PARAMETERS, AcquisitionFailure(f"Could not build token request: {e}")
            )

        try:
            token = self.acquirer.acquire(request)
        except ArmAuthError as e:
            return AuthResult.failure(AuthStage.ACQUISITION, e)
        except Exception as e:
            return AuthResult.failure(AuthStage.ACQUISITION, AcquisitionFailure(str(e)))

        self.token = token

        try:
            header = self.header_builder.build(token)
        except ArmAuthError as e:
            return AuthResult.failure(AuthStage.HEADER, e)
        except Exception as e:
            return AuthResult.failure(AuthStage.HEADER, HeaderConstructionFailure(str(e)))

        self.header = header
        logger.info(f"Authentication header ready, expires {header.expires_on.isoformat()}")
        return AuthResult(header=header)

    def acquire_authentication_from_flags(
        self, tenant_id: Optional[str], **flags: Any
    ) -> AuthResult:
        """
        Select the flow from flag-style inputs and authenticate.

        Accepts the keyword arguments of AuthContext.from_flags. Zero or several
        active modes are reported as a configuration failure.
        """
        try:
            context = AuthContext.from_flags(tenant_id, **flags)
        except ArmAuthError as e:
            return AuthResult.failure(AuthStage.CONFIGURATION, e)
        return self.acquire_authentication(context)

    def clear(self) -> None:
        """Forget the session token and header and clear the token cache."""
        self.token = None
        self.header = None
        self.acquirer.clear_cache()


_default_session: Optional[AuthSession] = None


def get_default_session() -> AuthSession:
    """Process-wide session used by acquire_authentication()."""
    global _default_session

    if _default_session is None:
        _default_session = AuthSession()
    return _default_session


def reset_default_session() -> None:
    global _default_session
    _default_session = None


def acquire_authentication(context: AuthContext) -> Optional[AuthenticationHeader]:
    """
    Acquire an authentication header using the process-wide session.

    Returns:
        Authentication header, or None if any stage failed
    """
    return get_default_session().acquire_authentication(context).header
