"""Abstract base classes for token acquisition and header construction."""

from abc import ABC, abstractmethod

from ..models.request import TokenRequest
from ..models.token import AccessToken, AuthenticationHeader


class TokenAcquirer(ABC):
    """Abstract base class for token acquirers."""

    @abstractmethod
    def acquire(self, request: TokenRequest) -> AccessToken:
        """
        Acquire a token for a request.

        Args:
            request: Token request for one of the authentication modes

        Returns:
            Access token

        Raises:
            AcquisitionFailure: If the token cannot be acquired
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear cached tokens."""


class HeaderBuilder(ABC):
    """Abstract base class for authentication header builders."""

    @abstractmethod
    def build(self, token: AccessToken) -> AuthenticationHeader:
        """
        Build a header from a token.

        Raises:
            HeaderConstructionFailure: If the token cannot be turned into a header
        """
