"""Authentication method selection.

Exactly one method is chosen from a ConnectionConfig, in this order:

0. No tenant configured → Azure CLI (tenant is discovered from the CLI)
1. Client secret (tenant + client id + client secret)
2. Client certificate (tenant + client id + certificate path, optional password)
3. Managed identity (``enable_msi``)
4. Azure CLI

Partially configured methods (e.g. a client id without a secret) are skipped,
never treated as hard errors.

Example:
    ```python
    from azuread_graph_core.auth import resolve_credential
    from azuread_graph_core.config import ConnectionConfig

    descriptor = resolve_credential(ConnectionConfig(tenant_id="t", client_id="c", client_secret="s"))
    assert descriptor.method == "client_secret"
    ```
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

from azuread_graph_core.auth.exceptions import ConfigError
from azuread_graph_core.config import DEFAULT_MSI_ENDPOINT, ConnectionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SecretAuth:
    """Service principal with a client secret."""

    method: ClassVar[str] = "client_secret"

    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)


@dataclass(frozen=True)
class CertificateAuth:
    """Service principal with a client certificate (PEM or PKCS12)."""

    method: ClassVar[str] = "client_certificate"

    tenant_id: str
    client_id: str
    certificate_path: str
    certificate_password: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ManagedIdentityAuth:
    """Managed identity via the instance metadata endpoint."""

    method: ClassVar[str] = "managed_identity"

    endpoint: str = DEFAULT_MSI_ENDPOINT
    tenant_id: str | None = None
    client_id: str | None = None


@dataclass(frozen=True)
class CliDelegateAuth:
    """Token and tenant obtained from a local Azure CLI login."""

    method: ClassVar[str] = "azure_cli"


CredentialDescriptor = SecretAuth | CertificateAuth | ManagedIdentityAuth | CliDelegateAuth


def _require(config: ConnectionConfig, method: str, *names: str) -> None:
    missing = tuple(name for name in names if not getattr(config, name))
    if missing:
        raise ConfigError(f"{method} authentication is not configured", method=method, missing=missing)


def _secret_auth(config: ConnectionConfig) -> SecretAuth:
    _require(config, SecretAuth.method, "tenant_id", "client_id", "client_secret")
    return SecretAuth(
        tenant_id=config.tenant_id,
        client_id=config.client_id,
        client_secret=config.client_secret,
    )


def _certificate_auth(config: ConnectionConfig) -> CertificateAuth:
    _require(config, CertificateAuth.method, "tenant_id", "client_id", "certificate_path")
    return CertificateAuth(
        tenant_id=config.tenant_id,
        client_id=config.client_id,
        certificate_path=config.certificate_path,
        certificate_password=config.certificate_password or None,
    )


def _managed_identity_auth(config: ConnectionConfig) -> ManagedIdentityAuth:
    _require(config, ManagedIdentityAuth.method, "enable_msi")
    return ManagedIdentityAuth(
        endpoint=config.msi_endpoint or DEFAULT_MSI_ENDPOINT,
        tenant_id=config.tenant_id,
        client_id=config.client_id,
    )


_TIERS: tuple[Callable[[ConnectionConfig], CredentialDescriptor], ...] = (
    _secret_auth,
    _certificate_auth,
    _managed_identity_auth,
)


def resolve_credential(config: ConnectionConfig) -> CredentialDescriptor:
    """Select the authentication method for a connection.

    Args:
        config: Merged connection configuration.

    Returns:
        One credential descriptor. Never raises for incomplete configuration;
        the Azure CLI is the last resort.
    """
    if not config.tenant_id:
        logger.debug("No tenant configured, using Azure CLI authentication")
        return CliDelegateAuth()

    for tier in _TIERS:
        try:
            descriptor = tier(config)
        except ConfigError as e:
            logger.debug(f"Skipping {e.method} authentication (missing: {', '.join(e.missing)})")
            continue
        logger.debug(f"Selected {descriptor.method} authentication")
        return descriptor

    logger.debug("No static credentials configured, using Azure CLI authentication")
    return CliDelegateAuth()
