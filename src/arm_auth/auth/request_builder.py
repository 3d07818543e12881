"""Token request construction per authentication mode."""

import logging
from typing import Optional

from ..config import AuthSettings, get_settings
from ..models.context import AuthContext, AuthMode
from ..models.request import (
    CertificateTokenRequest,
    DeviceCodeTokenRequest,
    InteractiveTokenRequest,
    TokenRequest,
)
from ..utils.exceptions import ConfigurationError
from .certificates import CertificateStore, DirectoryCertificateStore

logger = logging.getLogger(__name__)


def default_certificate_store(settings: AuthSettings) -> CertificateStore:
    """Certificate store configured by ARM_AUTH_CERTIFICATE_PATH."""
    if settings.certificate_path is None:
        raise ConfigurationError(
            "ARM_AUTH_CERTIFICATE_PATH is required for certificate authentication"
        )
    return DirectoryCertificateStore(
        settings.certificate_path, password=settings.certificate_password
    )


def build_token_request(
    context: AuthContext,
    redirect_uri: str,
    certificate_store: Optional[CertificateStore] = None,
    settings: Optional[AuthSettings] = None,
) -> TokenRequest:
    """
    Build the token request for a context.

    Args:
        context: Authentication context
        redirect_uri: Resolved redirect URI
        certificate_store: Store used to look up the certificate in certificate mode
        settings: Settings providing authority and scopes

    Returns:
        Request variant matching the context mode

    Raises:
        CertificateNotFoundError: If the certificate thumbprint is not in the store
        ConfigurationError: If certificate mode has no usable store
    """
    context.check()
    settings = settings or get_settings()
    common = {
        "tenant_id": context.tenant_id,
        "client_id": context.client_id,
        "redirect_uri": redirect_uri,
        "authority": settings.authority_for(context.tenant_id),
        "scopes": settings.scopes,
    }

    if context.mode is AuthMode.INTERACTIVE:
        if context.refresh:
            return InteractiveTokenRequest(**common, force_refresh=True, silent=True)
        return InteractiveTokenRequest(**common, interactive=context.interactive)

    if context.mode is AuthMode.DEVICE_CODE:
        # Refreshing a device code session goes through the cache, never a new prompt
        if context.refresh:
            return DeviceCodeTokenRequest(**common, force_refresh=True)
        return DeviceCodeTokenRequest(**common, device_code=True)

    store = certificate_store if certificate_store is not None else default_certificate_store(settings)
    certificate = store.find_by_thumbprint(context.certificate_thumbprint)
    logger.debug(f"Using certificate {certificate.thumbprint} ({certificate.subject})")
    return CertificateTokenRequest(**common, client_certificate=certificate)
