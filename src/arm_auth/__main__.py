"""CLI entry point for ARM authentication."""

import argparse
import json
import sys
from typing import Optional

from .auth.msal_auth import MsalTokenAcquirer
from .auth.token_cache import TokenCacheManager
from .config import AuthSettings, ProfileConfig, get_settings
from .models.context import AuthContext
from .session import AuthSession
from .utils.exceptions import ConfigurationError
from .utils.logging import setup_logging


def _mask(header_value: str) -> str:
    scheme, _, token = header_value.partition(" ")
    if len(token) <= 12:
        return f"{scheme} ****"
    return f"{scheme} {token[:6]}...{token[-6:]}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arm-auth",
        description="Acquire an Azure management API token and print its authentication header",
    )
    parser.add_argument("--tenant", type=str, default=None, help="Tenant ID or domain")
    parser.add_argument(
        "--client-id",
        type=str,
        default=None,
        help="Application (client) ID (default: built-in Azure PowerShell client)",
    )
    parser.add_argument(
        "--redirect-uri",
        type=str,
        default=None,
        help="Redirect URI for custom clients (ignored for the built-in client)",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--interactive", action="store_true", help="Interactive browser sign-in")
    mode.add_argument("--device-code", action="store_true", help="Device code sign-in")
    mode.add_argument(
        "--certificate-thumbprint",
        type=str,
        default=None,
        help="Sign in as the application with the certificate matching this thumbprint",
    )

    parser.add_argument(
        "--prompt",
        action="store_true",
        help="Always show the sign-in prompt instead of reusing a cached session",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Refresh the token from the cached session without prompting",
    )
    parser.add_argument(
        "--profile",
        type=str,
        default=None,
        help="Named profile from auth_profiles.yaml",
    )
    parser.add_argument(
        "--show-token",
        action="store_true",
        help="Print the full header instead of a masked one",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Clear the token cache and exit",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def _build_context(args: argparse.Namespace, settings: AuthSettings) -> AuthContext:
    tenant_id = args.tenant or settings.tenant_id
    client_id = args.client_id or settings.client_id
    redirect_uri = args.redirect_uri or settings.redirect_uri

    if args.profile:
        if args.interactive or args.device_code or args.certificate_thumbprint:
            raise ConfigurationError(
                "--profile selects the mode; it cannot be combined with "
                "--interactive, --device-code or --certificate-thumbprint"
            )
        profiles = ProfileConfig(settings.profiles_file)
        overrides = {
            "tenant_id": args.tenant,
            "client_id": args.client_id,
            "redirect_uri": args.redirect_uri,
        }
        if args.refresh:
            overrides["refresh"] = True
        if args.prompt:
            overrides["interactive"] = True
        return profiles.get_context(args.profile, **overrides)

    return AuthContext.from_flags(
        tenant_id,
        interactive=args.interactive,
        device_code=args.device_code,
        certificate_thumbprint=args.certificate_thumbprint,
        client_id=client_id,
        redirect_uri=redirect_uri,
        refresh=args.refresh,
        prompt=args.prompt,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    log_level = "DEBUG" if args.verbose else settings.log_level
    logger = setup_logging(level=log_level, log_file=settings.log_file)

    cache_manager = TokenCacheManager(
        cache_location=settings.token_cache_path,
        persist=settings.token_cache_persist,
        encrypted=settings.token_cache_encrypted,
    )
    session = AuthSession(acquirer=MsalTokenAcquirer(cache_manager), settings=settings)

    if args.clear_cache:
        session.clear()
        return 0

    try:
        context = _build_context(args, settings)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    result = session.acquire_authentication(context)
    if not result.ok:
        return 1

    header = result.header.as_dict()
    if not args.show_token:
        header["Authorization"] = _mask(header["Authorization"])
    print(json.dumps(header, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
