"""Certificate store lookup for certificate-based authentication."""

import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs12
from pydantic import BaseModel, Field

from ..utils.exceptions import CertificateNotFoundError

logger = logging.getLogger(__name__)

CERTIFICATE_SUFFIXES = (".pem", ".pfx", ".p12")


def normalize_thumbprint(thumbprint: str) -> str:
    """Upper-case hex thumbprint without separators."""
    return re.sub(r"[\s:]", "", thumbprint).upper()


class ClientCertificate(BaseModel):
    """Certificate with its private key, as needed by a confidential client."""

    thumbprint: str
    subject: str = ""
    private_key_pem: bytes = Field(repr=False)
    certificate_pem: bytes

    model_config = {"frozen": True}

    def as_msal_credential(self) -> dict[str, str]:
        """Client credential dictionary accepted by msal.ConfidentialClientApplication."""
        return {
            "private_key": self.private_key_pem.decode("utf-8"),
            "thumbprint": self.thumbprint,
            "public_certificate": self.certificate_pem.decode("utf-8"),
        }

    @classmethod
    def from_key_and_certificate(cls, private_key, certificate: x509.Certificate) -> "ClientCertificate":
        # SHA-1 is the thumbprint format Entra ID uses to identify certificates
        fingerprint = certificate.fingerprint(hashes.SHA1())
        return cls(
            thumbprint=fingerprint.hex().upper(),
            subject=certificate.subject.rfc4514_string(),
            private_key_pem=private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            ),
            certificate_pem=certificate.public_bytes(serialization.Encoding.PEM),
        )


class CertificateStore(Protocol):
    """Lookup of client certificates by thumbprint."""

    def find_by_thumbprint(self, thumbprint: str) -> ClientCertificate:
        """
        Find a certificate.

        Raises:
            CertificateNotFoundError: If no certificate matches
        """
        ...


class InMemoryCertificateStore:
    """Certificate store backed by already loaded certificates."""

    def __init__(self, certificates: Optional[list[ClientCertificate]] = None):
        self._certificates: dict[str, ClientCertificate] = {}
        for certificate in certificates or []:
            self.add(certificate)

    def add(self, certificate: ClientCertificate) -> None:
        self._certificates[normalize_thumbprint(certificate.thumbprint)] = certificate

    def find_by_thumbprint(self, thumbprint: str) -> ClientCertificate:
        try:
            return self._certificates[normalize_thumbprint(thumbprint)]
        except KeyError:
            raise CertificateNotFoundError(thumbprint) from None


class DirectoryCertificateStore(InMemoryCertificateStore):
    """Certificate store reading PEM and PKCS#12 files from a directory.

    PEM files must contain both the certificate and its private key. Files
    are read once, on the first lookup.
    """

    def __init__(self, directory: Path, password: Optional[str] = None):
        super().__init__()
        self.directory = directory
        self.password = password.encode() if password else None
        self._loaded = False

    def find_by_thumbprint(self, thumbprint: str) -> ClientCertificate:
        if not self._loaded:
            self.load()
        return super().find_by_thumbprint(thumbprint)

    def load(self) -> None:
        """Read every certificate file in the directory."""
        self._loaded = True
        if not self.directory.is_dir():
            logger.warning(f"Certificate directory {self.directory} does not exist")
            return

        for path in sorted(self.directory.iterdir()):
            if path.suffix.lower() not in CERTIFICATE_SUFFIXES:
                continue
            try:
                certificate = self._load_file(path)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping certificate file {path.name}: {e}")
                continue
            self.add(certificate)
            logger.debug(f"Loaded certificate {certificate.thumbprint} from {path.name}")

        logger.info(f"Loaded {len(self._certificates)} certificate(s) from {self.directory}")

    def _load_file(self, path: Path) -> ClientCertificate:
        data = path.read_bytes()

        if path.suffix.lower() == ".pem":
            private_key = serialization.load_pem_private_key(data, self.password)
            certificate = x509.load_pem_x509_certificate(data)
        else:
            private_key, certificate, _ = pkcs12.load_key_and_certificates(data, self.password)
            if private_key is None:
                raise ValueError("The certificate must include its private key")
            if certificate is None:
                raise ValueError("No certificate found in PKCS#12 file")

        return ClientCertificate.from_key_and_certificate(private_key, certificate)
