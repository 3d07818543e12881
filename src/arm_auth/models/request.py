"""Token request variants, one per authentication mode."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from ..auth.certificates import ClientCertificate


class _BaseTokenRequest(BaseModel):
    tenant_id: str
    client_id: str
    redirect_uri: str
    authority: str
    scopes: list[str]

    model_config = {"frozen": True}

    def to_parameters(self) -> dict[str, Any]:
        """Flat key-value view of the request."""
        return {
            "tenant": self.tenant_id,
            "client": self.client_id,
            "redirect": self.redirect_uri,
        }


class InteractiveTokenRequest(_BaseTokenRequest):
    """Authorization code flow, or a silent refresh of an interactive session."""

    mode: Literal["interactive"] = "interactive"
    force_refresh: bool = False
    silent: bool = False
    interactive: bool = False

    def to_parameters(self) -> dict[str, Any]:
        parameters = super().to_parameters()
        if self.force_refresh:
            parameters["force_refresh"] = True
        if self.silent:
            parameters["silent"] = True
        if self.interactive:
            parameters["interactive"] = True
        return parameters


class DeviceCodeTokenRequest(_BaseTokenRequest):
    """Device code flow, or a cache refresh of a device code session."""

    mode: Literal["device_code"] = "device_code"
    force_refresh: bool = False
    device_code: bool = False

    def to_parameters(self) -> dict[str, Any]:
        parameters = super().to_parameters()
        if self.force_refresh:
            parameters["force_refresh"] = True
        if self.device_code:
            parameters["device_code"] = True
        return parameters


class CertificateTokenRequest(_BaseTokenRequest):
    """Client credentials flow with a certificate."""

    mode: Literal["certificate"] = "certificate"
    client_certificate: ClientCertificate

    def to_parameters(self) -> dict[str, Any]:
        parameters = super().to_parameters()
        parameters["client_certificate"] = self.client_certificate
        return parameters


TokenRequest = Annotated[
    Union[InteractiveTokenRequest, DeviceCodeTokenRequest, CertificateTokenRequest],
    Field(discriminator="mode"),
]
