"""Custom exceptions for ARM authentication."""


class ArmAuthError(Exception):
    """Base exception for ARM authentication errors."""


class ConfigurationError(ArmAuthError):
    """Raised when the authentication context or settings are invalid."""


class AcquisitionFailure(ArmAuthError):
    """Raised when a token cannot be acquired."""


class HeaderConstructionFailure(ArmAuthError):
    """Raised when an authentication header cannot be built from a token."""


class TokenCacheError(ArmAuthError):
    """Raised when token cache operations fail."""


class CertificateNotFoundError(AcquisitionFailure):
    """Raised when no certificate matches the requested thumbprint."""

    def __init__(self, thumbprint: str):
        super().__init__(f"Certificate with thumbprint {thumbprint} was not found")
        self.thumbprint = thumbprint
