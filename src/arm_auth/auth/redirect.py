"""Redirect URI resolution for interactive sign-in."""

import logging
from enum import Enum
from typing import Optional

from ..models.context import DEFAULT_CLIENT_ID

logger = logging.getLogger(__name__)

OUT_OF_BAND_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"
NATIVE_CLIENT_REDIRECT_URI = "https://login.microsoftonline.com/common/oauth2/nativeclient"
LOOPBACK_REDIRECT_URI = "http://localhost"


class RuntimeClass(str, Enum):
    """Host runtime family; native-client reply conventions differ between them."""

    LEGACY = "legacy"
    MODERN = "modern"


def detect_runtime_class(value: Optional[str] = None) -> RuntimeClass:
    """
    Determine the runtime class.

    Args:
        value: Explicit runtime class name; read from settings when omitted

    Returns:
        RuntimeClass, MODERN for unknown values
    """
    if value is None:
        from ..config import get_settings

        value = get_settings().runtime_class

    try:
        return RuntimeClass(value.strip().lower())
    except ValueError:
        logger.warning(f"Unknown runtime class '{value}', assuming modern")
        return RuntimeClass.MODERN


def resolve_redirect_uri(
    client_id: str,
    redirect_uri: Optional[str] = None,
    runtime: Optional[RuntimeClass] = None,
) -> str:
    """
    Resolve the redirect URI for a client application.

    The built-in client only has the out-of-band reply address registered,
    so any override is ignored for it.

    Args:
        client_id: Application (client) identifier
        redirect_uri: Explicit redirect URI override
        runtime: Runtime class used to pick a default for custom clients

    Returns:
        Resolved redirect URI
    """
    if client_id.lower() == DEFAULT_CLIENT_ID:
        resolved = OUT_OF_BAND_REDIRECT_URI
    elif not redirect_uri:
        runtime = runtime or detect_runtime_class()
        if runtime is RuntimeClass.LEGACY:
            resolved = NATIVE_CLIENT_REDIRECT_URI
        else:
            resolved = LOOPBACK_REDIRECT_URI
    else:
        resolved = redirect_uri

    logger.info(f"Using redirect URI {resolved}")
    return resolved
