import logging

import pytest

from arm_auth.auth.redirect import (
    LOOPBACK_REDIRECT_URI,
    NATIVE_CLIENT_REDIRECT_URI,
    OUT_OF_BAND_REDIRECT_URI,
    RuntimeClass,
    detect_runtime_class,
    resolve_redirect_uri,
)
from arm_auth.models.context import DEFAULT_CLIENT_ID
from helpers import CUSTOM_CLIENT_ID


class TestResolveRedirectUri:
    @pytest.mark.parametrize("override", [None, "", "http://localhost:8400", "https://example.com/reply"])
    @pytest.mark.parametrize("runtime", list(RuntimeClass))
    def test_default_client_always_uses_out_of_band(self, override, runtime) -> None:
        assert resolve_redirect_uri(DEFAULT_CLIENT_ID, override, runtime) == OUT_OF_BAND_REDIRECT_URI

    def test_default_client_matches_case_insensitively(self) -> None:
        assert (
            resolve_redirect_uri(DEFAULT_CLIENT_ID.upper(), "http://localhost", RuntimeClass.MODERN)
            == OUT_OF_BAND_REDIRECT_URI
        )

    def test_custom_client_legacy_runtime(self) -> None:
        assert (
            resolve_redirect_uri(CUSTOM_CLIENT_ID, None, RuntimeClass.LEGACY)
            == NATIVE_CLIENT_REDIRECT_URI
        )

    def test_custom_client_modern_runtime(self) -> None:
        assert (
            resolve_redirect_uri(CUSTOM_CLIENT_ID, None, RuntimeClass.MODERN)
            == LOOPBACK_REDIRECT_URI
        )

    @pytest.mark.parametrize("runtime", list(RuntimeClass))
    def test_custom_client_override_is_used_verbatim(self, runtime) -> None:
        override = "https://app.contoso.com/auth/Reply?x=1"

        assert resolve_redirect_uri(CUSTOM_CLIENT_ID, override, runtime) == override

    def test_emits_trace(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="arm_auth.auth.redirect"):
            resolve_redirect_uri(CUSTOM_CLIENT_ID, None, RuntimeClass.MODERN)

        assert f"Using redirect URI {LOOPBACK_REDIRECT_URI}" in caplog.text


class TestDetectRuntimeClass:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("legacy", RuntimeClass.LEGACY),
            (" Legacy ", RuntimeClass.LEGACY),
            ("modern", RuntimeClass.MODERN),
            ("something-else", RuntimeClass.MODERN),
        ],
    )
    def test_explicit_value(self, value, expected) -> None:
        assert detect_runtime_class(value) is expected

    def test_reads_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARM_AUTH_RUNTIME_CLASS", "legacy")

        assert detect_runtime_class() is RuntimeClass.LEGACY
