"""Authentication context model."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..utils.exceptions import ConfigurationError

# Azure PowerShell public client, registered with the out-of-band reply address
DEFAULT_CLIENT_ID = "1950a258-227b-4e31-a9cf-717495945fc2"


class AuthMode(str, Enum):
    """Token acquisition flow."""

    INTERACTIVE = "interactive"
    DEVICE_CODE = "device_code"
    CERTIFICATE = "certificate"


class AuthContext(BaseModel):
    """Caller intent for a single authentication call."""

    tenant_id: Optional[str] = None
    client_id: str = DEFAULT_CLIENT_ID
    redirect_uri: Optional[str] = None
    mode: AuthMode
    refresh: bool = False
    interactive: bool = False  # force a new prompt in interactive mode
    certificate_thumbprint: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("client_id", mode="before")
    @classmethod
    def _default_client_id(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CLIENT_ID
        return value

    @field_validator("redirect_uri", "certificate_thumbprint", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def check(self) -> None:
        """
        Verify the fields the selected mode requires.

        Raises:
            ConfigurationError: If the tenant, or the thumbprint in certificate mode, is missing
        """
        if not self.tenant_id or not self.tenant_id.strip():
            raise ConfigurationError("A tenant identifier is required")
        if self.mode is AuthMode.CERTIFICATE and not self.certificate_thumbprint:
            raise ConfigurationError(
                "A certificate thumbprint is required for certificate authentication"
            )

    @classmethod
    def create(cls, **data: Any) -> "AuthContext":
        """
        Build a context, reporting every validation problem as ConfigurationError.

        Raises:
            ConfigurationError: If the values do not describe a valid context
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid authentication context: {e}") from e

    @classmethod
    def from_flags(
        cls,
        tenant_id: Optional[str],
        *,
        interactive: bool = False,
        device_code: bool = False,
        certificate_thumbprint: Optional[str] = None,
        client_id: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        refresh: bool = False,
        prompt: bool = False,
    ) -> "AuthContext":
        """
        Select the flow from flag-style inputs, as produced by a command line.

        Exactly one of ``interactive``, ``device_code`` or
        ``certificate_thumbprint`` must be set.

        Raises:
            ConfigurationError: If zero or several modes are active
        """
        selected = [
            mode
            for mode, active in (
                (AuthMode.INTERACTIVE, interactive),
                (AuthMode.DEVICE_CODE, device_code),
                (AuthMode.CERTIFICATE, bool(certificate_thumbprint)),
            )
            if active
        ]
        if not selected:
            raise ConfigurationError(
                "No authentication mode selected; choose interactive, device code or certificate"
            )
        if len(selected) > 1:
            names = ", ".join(mode.value for mode in selected)
            raise ConfigurationError(f"Only one authentication mode may be active, got: {names}")

        return cls.create(
            tenant_id=tenant_id,
            client_id=client_id,
            redirect_uri=redirect_uri,
            mode=selected[0],
            refresh=refresh,
            interactive=prompt,
            certificate_thumbprint=certificate_thumbprint,
        )
