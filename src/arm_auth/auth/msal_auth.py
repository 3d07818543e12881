"""MSAL-based token acquisition for the Azure management API."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlparse

import msal

from ..models.request import (
    CertificateTokenRequest,
    DeviceCodeTokenRequest,
    InteractiveTokenRequest,
    TokenRequest,
)
from ..models.token import AccessToken
from ..utils.exceptions import AcquisitionFailure
from .base import TokenAcquirer
from .token_cache import TokenCacheManager

logger = logging.getLogger(__name__)


class MsalTokenAcquirer(TokenAcquirer):
    """Acquire tokens with msal public and confidential client applications."""

    def __init__(
        self,
        cache_manager: TokenCacheManager,
        code_prompt: Callable[[str], str] = input,
        display: Callable[[str], None] = print,
    ):
        """
        Initialize the acquirer.

        Args:
            cache_manager: Token cache shared by all client applications
            code_prompt: Reads the reply URL (or code) after out-of-band sign-in
            display: Shows sign-in instructions to the user
        """
        self.cache_manager = cache_manager
        self._code_prompt = code_prompt
        self._display = display
        self._public_apps: dict[tuple[str, str], msal.PublicClientApplication] = {}
        self._confidential_apps: dict[
            tuple[str, str, str], msal.ConfidentialClientApplication
        ] = {}

    def acquire(self, request: TokenRequest) -> AccessToken:
        try:
            if isinstance(request, CertificateTokenRequest):
                result = self._acquire_with_certificate(request)
            elif isinstance(request, DeviceCodeTokenRequest):
                result = self._acquire_device_code(request)
            elif isinstance(request, InteractiveTokenRequest):
                result = self._acquire_interactive(request)
            else:
                raise AcquisitionFailure(f"Unsupported token request: {type(request).__name__}")
        except AcquisitionFailure:
            raise
        except Exception as e:
            raise AcquisitionFailure(f"Token acquisition failed: {e}") from e

        token = AccessToken.from_msal_result(
            result, expires_on=self._cached_expiry(result["access_token"])
        )
        if not token.scopes:
            token = token.model_copy(update={"scopes": list(request.scopes)})
        return token

    def clear_cache(self) -> None:
        """Clear cached tokens and the client applications bound to them."""
        self._public_apps.clear()
        self._confidential_apps.clear()
        self.cache_manager.clear_cache()

    def _cached_expiry(self, access_token: str) -> Optional[datetime]:
        """Absolute expiry recorded in the token cache for an access token."""
        cache = self.cache_manager.get_cache()
        for entry in cache.search(
            msal.TokenCache.CredentialType.ACCESS_TOKEN, query={"secret": access_token}
        ):
            return datetime.fromtimestamp(int(entry["expires_on"]), tz=timezone.utc)
        return None

    def _public_app(self, request: TokenRequest) -> msal.PublicClientApplication:
        key = (request.client_id, request.authority)
        if key not in self._public_apps:
            logger.debug(f"Creating public client application for {request.authority}")
            self._public_apps[key] = msal.PublicClientApplication(
                client_id=request.client_id,
                authority=request.authority,
                token_cache=self.cache_manager.get_cache(),
            )
        return self._public_apps[key]

    def _confidential_app(
        self, request: CertificateTokenRequest
    ) -> msal.ConfidentialClientApplication:
        certificate = request.client_certificate
        key = (request.client_id, request.authority, certificate.thumbprint)
        if key not in self._confidential_apps:
            logger.debug(
                f"Creating confidential client application with certificate {certificate.thumbprint}"
            )
            self._confidential_apps[key] = msal.ConfidentialClientApplication(
                client_id=request.client_id,
                client_credential=certificate.as_msal_credential(),
                authority=request.authority,
                token_cache=self.cache_manager.get_cache(),
            )
        return self._confidential_apps[key]

    def _acquire_interactive(self, request: InteractiveTokenRequest) -> dict[str, Any]:
        app = self._public_app(request)

        if request.silent or request.force_refresh:
            return self._acquire_silent(app, request, force_refresh=request.force_refresh)

        if not request.interactive:
            cached = self._lookup_cache(app, request)
            if cached is not None:
                logger.debug("Token acquired from cache (interactive session)")
                return cached

        logger.info("Starting interactive authentication")
        if is_loopback(request.redirect_uri):
            result = app.acquire_token_interactive(
                scopes=request.scopes,
                prompt="select_account" if request.interactive else None,
                port=urlparse(request.redirect_uri).port,
            )
        else:
            result = self._acquire_by_auth_code(app, request)
        return self._check_result(result, "Interactive authentication")

    def _acquire_by_auth_code(
        self, app: msal.PublicClientApplication, request: InteractiveTokenRequest
    ) -> dict[str, Any]:
        """Authorization code flow for redirect URIs no local listener can serve."""
        flow = app.initiate_auth_code_flow(
            scopes=request.scopes,
            redirect_uri=request.redirect_uri,
            prompt="select_account" if request.interactive else None,
        )
        if "auth_uri" not in flow:
            raise AcquisitionFailure(
                f"Failed to start sign-in: {flow.get('error_description', 'Unknown error')}"
            )

        self._display("\n" + "=" * 70)
        self._display("AUTHENTICATION REQUIRED")
        self._display("=" * 70)
        self._display(f"\nOpen this address in a browser and sign in:\n\n{flow['auth_uri']}\n")
        self._display("=" * 70 + "\n")

        reply = self._code_prompt("Paste the address you were redirected to (or the code): ")
        return app.acquire_token_by_auth_code_flow(flow, parse_auth_response(reply, flow))

    def _acquire_device_code(self, request: DeviceCodeTokenRequest) -> dict[str, Any]:
        app = self._public_app(request)

        if not request.device_code:
            return self._acquire_silent(app, request, force_refresh=request.force_refresh)

        logger.info("Starting device code authentication flow")
        flow = app.initiate_device_flow(scopes=request.scopes)
        if "user_code" not in flow:
            raise AcquisitionFailure(
                f"Failed to create device flow: {flow.get('error_description', 'Unknown error')}"
            )

        self._display("\n" + "=" * 70)
        self._display("AUTHENTICATION REQUIRED")
        self._display("=" * 70)
        self._display(f"\n{flow['message']}\n")
        self._display("=" * 70 + "\n")

        result = app.acquire_token_by_device_flow(flow)
        return self._check_result(result, "Device code authentication")

    def _acquire_with_certificate(self, request: CertificateTokenRequest) -> dict[str, Any]:
        # acquire_token_for_client serves from the cache and renews on expiry by itself
        app = self._confidential_app(request)
        result = app.acquire_token_for_client(scopes=request.scopes)
        return self._check_result(result, "Certificate authentication")

    def _acquire_silent(
        self,
        app: msal.PublicClientApplication,
        request: TokenRequest,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        accounts = app.get_accounts()
        if not accounts:
            raise AcquisitionFailure(
                "No cached session to refresh; sign in without refresh first"
            )

        result = app.acquire_token_silent(
            scopes=request.scopes,
            account=accounts[0],
            force_refresh=force_refresh,
        )
        if result is None:
            raise AcquisitionFailure(
                "Cached session could not be refreshed; sign in without refresh"
            )
        logger.debug(f"Token refreshed silently (force_refresh={force_refresh})")
        return self._check_result(result, "Silent token refresh")

    @staticmethod
    def _lookup_cache(
        app: msal.PublicClientApplication, request: TokenRequest
    ) -> Optional[dict[str, Any]]:
        accounts = app.get_accounts()
        if not accounts:
            return None
        result = app.acquire_token_silent(scopes=request.scopes, account=accounts[0])
        if result and "access_token" in result:
            return result
        return None

    @staticmethod
    def _check_result(result: Optional[dict[str, Any]], flow_name: str) -> dict[str, Any]:
        if result and "access_token" in result:
            return result
        result = result or {}
        error_desc = result.get("error_description") or result.get("error") or "Unknown error"
        raise AcquisitionFailure(f"{flow_name} failed: {error_desc}")


def is_loopback(redirect_uri: str) -> bool:
    """Whether msal can serve the redirect with its local listener."""
    parsed = urlparse(redirect_uri)
    return parsed.scheme == "http" and parsed.hostname in ("localhost", "127.0.0.1")


def parse_auth_response(reply: str, flow: dict[str, Any]) -> dict[str, str]:
    """
    Turn a pasted reply URL, query string or bare code into an auth response.

    Args:
        reply: Text pasted by the user
        flow: Auth code flow started with initiate_auth_code_flow

    Returns:
        Auth response dictionary for acquire_token_by_auth_code_flow
    """
    reply = reply.strip()
    if "code=" not in reply and "error=" not in reply:
        return {"code": reply, "state": flow.get("state", "")}

    query = urlparse(reply).query if "?" in reply else reply.lstrip("?#")
    response = dict(parse_qsl(query))
    response.setdefault("state", flow.get("state", ""))
    return response
