"""Configuration management for ARM authentication."""

from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.context import AuthContext, AuthMode
from .utils.exceptions import ConfigurationError

load_dotenv()


class AuthSettings(BaseSettings):
    """Authentication settings."""

    tenant_id: Optional[str] = Field(None, validation_alias="ARM_AUTH_TENANT_ID")
    client_id: Optional[str] = Field(None, validation_alias="ARM_AUTH_CLIENT_ID")
    redirect_uri: Optional[str] = Field(None, validation_alias="ARM_AUTH_REDIRECT_URI")
    authority_host: str = Field(
        default="https://login.microsoftonline.com",
        validation_alias="ARM_AUTH_AUTHORITY_HOST",
    )
    resource: str = Field(
        default="https://management.azure.com", validation_alias="ARM_AUTH_RESOURCE"
    )
    # "legacy" or "modern", see auth.redirect.RuntimeClass
    runtime_class: str = Field(default="modern", validation_alias="ARM_AUTH_RUNTIME_CLASS")

    # Certificate store
    certificate_path: Optional[Path] = Field(
        default=None, validation_alias="ARM_AUTH_CERTIFICATE_PATH"
    )
    certificate_password: Optional[str] = Field(
        default=None, validation_alias="ARM_AUTH_CERTIFICATE_PASSWORD"
    )

    # Token cache
    token_cache_path: Path = Field(
        default=Path(".token_cache"), validation_alias="TOKEN_CACHE_PATH"
    )
    token_cache_persist: bool = Field(default=False, validation_alias="TOKEN_CACHE_PERSIST")
    token_cache_encrypted: bool = Field(
        default=True, validation_alias="TOKEN_CACHE_ENCRYPTED"
    )

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    # Named profiles
    profiles_file: Path = Field(
        default=Path("auth_profiles.yaml"), validation_alias="ARM_AUTH_PROFILES_FILE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    @property
    def scopes(self) -> list[str]:
        """Scopes requested for the management API."""
        return [f"{self.resource.rstrip('/')}/.default"]

    def authority_for(self, tenant_id: str) -> str:
        """Authority URL for a tenant."""
        return f"{self.authority_host.rstrip('/')}/{tenant_id}"


class ProfileConfig:
    """Named authentication profiles loaded from YAML.

    Each profile describes a single AuthContext::

        profiles:
          prod:
            tenant_id: contoso.onmicrosoft.com
            mode: certificate
            client_id: 00000000-0000-0000-0000-000000000000
            certificate_thumbprint: ABC123
    """

    def __init__(self, config_path: Path = Path("auth_profiles.yaml")):
        self.profiles: dict[str, dict[str, Any]] = {}

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

            for name, profile_data in (data.get("profiles") or {}).items():
                self.profiles[name] = dict(profile_data or {})

    def get_context(self, name: str, **overrides: Any) -> AuthContext:
        """
        Build an AuthContext from a named profile.

        Args:
            name: Profile name
            **overrides: Values that take precedence over the profile (None is ignored)

        Returns:
            AuthContext for the profile

        Raises:
            ConfigurationError: If the profile does not exist or is invalid
        """
        if name not in self.profiles:
            raise ConfigurationError(f"Unknown authentication profile: {name}")

        data = dict(self.profiles[name])
        data.update({key: value for key, value in overrides.items() if value is not None})

        mode = data.pop("mode", None)
        if mode is None:
            raise ConfigurationError(f"Profile '{name}' does not define a mode")
        try:
            data["mode"] = AuthMode(str(mode).lower().replace("-", "_"))
        except ValueError as e:
            raise ConfigurationError(
                f"Profile '{name}' has an invalid mode: {mode}"
            ) from e

        return AuthContext.create(**data)


def get_settings() -> AuthSettings:
    """Load settings from the environment and .env file."""
    return AuthSettings()
