"""Token cache management using msal and msal-extensions."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import msal
from msal_extensions import (
    FilePersistence,
    FilePersistenceWithDataProtection,
    KeychainPersistence,
    LibsecretPersistence,
    PersistedTokenCache,
)

from ..utils.exceptions import TokenCacheError

logger = logging.getLogger(__name__)

TokenCache = Union[msal.SerializableTokenCache, PersistedTokenCache]


class TokenCacheManager:
    """Provides the msal token cache shared by every client application.

    The cache lives in memory unless ``persist`` is set, in which case it is
    stored through msal-extensions, encrypted with the platform facility when
    ``encrypted`` is set.
    """

    def __init__(
        self,
        cache_location: Optional[Path] = None,
        cache_name: str = "arm_auth_cache",
        persist: bool = False,
        encrypted: bool = True,
    ):
        self.cache_location = cache_location or Path(".token_cache")
        self.cache_name = cache_name
        self.persist = persist
        self.encrypted = encrypted
        self._cache: Optional[TokenCache] = None

    @property
    def cache_file(self) -> Path:
        suffix = "bin" if self.encrypted else "json"
        return self.cache_location / f"{self.cache_name}.{suffix}"

    def get_cache(self) -> TokenCache:
        """
        Get or create the token cache.

        Raises:
            TokenCacheError: If cache initialization fails
        """
        if self._cache is not None:
            return self._cache

        if not self.persist:
            self._cache = msal.SerializableTokenCache()
            logger.debug("Using in-memory token cache")
            return self._cache

        try:
            self.cache_location.mkdir(parents=True, exist_ok=True)
            self._cache = PersistedTokenCache(self._build_persistence())
            logger.info(f"Token cache initialized at {self.cache_location}")
            return self._cache
        except Exception as e:
            raise TokenCacheError(f"Failed to initialize token cache: {e}") from e

    def _build_persistence(self):
        if not self.encrypted:
            return FilePersistence(str(self.cache_file))

        if sys.platform == "win32":
            return FilePersistenceWithDataProtection(str(self.cache_file))
        if sys.platform == "darwin":
            return KeychainPersistence(str(self.cache_file), "arm_auth", self.cache_name)
        try:
            return LibsecretPersistence(
                str(self.cache_file),
                schema_name="arm_auth",
                attributes={"app": self.cache_name},
            )
        except Exception as e:
            # libsecret needs a desktop keyring, which headless hosts lack
            logger.warning(f"Encrypted token cache unavailable, using plain file: {e}")
            return FilePersistence(str(self.cache_file))

    def clear_cache(self) -> None:
        """Drop cached tokens, including any persisted cache file."""
        self._cache = None
        if self.persist:
            for path in (self.cache_file, self.cache_file.with_name(self.cache_file.name + ".lockfile")):
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    raise TokenCacheError(f"Failed to remove token cache {path}: {e}") from e
        logger.info("Token cache cleared")
