"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from arm_auth.auth.certificates import ClientCertificate
from arm_auth.config import AuthSettings


@pytest.fixture
def settings(tmp_path: Path) -> AuthSettings:
    return AuthSettings.model_construct(
        tenant_id=None,
        client_id=None,
        redirect_uri=None,
        authority_host="https://login.microsoftonline.com",
        resource="https://management.azure.com",
        runtime_class="modern",
        certificate_path=None,
        certificate_password=None,
        token_cache_path=tmp_path / "cache",
        token_cache_persist=False,
        token_cache_encrypted=False,
        log_level="INFO",
        log_file=None,
        profiles_file=tmp_path / "auth_profiles.yaml",
    )


@pytest.fixture(scope="session")
def key_and_certificate():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "arm-auth-test")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return key, certificate


@pytest.fixture(scope="session")
def client_certificate(key_and_certificate) -> ClientCertificate:
    key, certificate = key_and_certificate
    return ClientCertificate.from_key_and_certificate(key, certificate)


@pytest.fixture
def pem_bytes(key_and_certificate) -> bytes:
    key, certificate = key_and_certificate
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ) + certificate.public_bytes(serialization.Encoding.PEM)
