"""Build token credentials from credential descriptors."""

import logging
from typing import Any, assert_never

from azure.identity import CertificateCredential, ClientSecretCredential

from azuread_graph_core.auth.cli import AzureCli, CliToken, CliTokenCredential
from azuread_graph_core.auth.credentials import (
    CertificateAuth,
    CliDelegateAuth,
    CredentialDescriptor,
    ManagedIdentityAuth,
    SecretAuth,
)
from azuread_graph_core.auth.exceptions import AuthError
from azuread_graph_core.auth.managed_identity import ImdsCredential
from azuread_graph_core.config import CloudEnvironment

logger = logging.getLogger(__name__)


def build_credential(
    descriptor: CredentialDescriptor,
    cloud: CloudEnvironment,
    *,
    cli: AzureCli,
    cli_token: CliToken | None = None,
) -> Any:
    """Construct a token credential for the selected method.

    Args:
        descriptor: The selected authentication method.
        cloud: Cloud whose authority host is used for service principals.
        cli: Azure CLI capability, used by the CLI delegate.
        cli_token: Token already obtained from the CLI, if any.

    Returns:
        An object exposing ``get_token(*scopes)``.

    Raises:
        AuthError: If the identity library rejects the configuration
            (unreadable certificate, malformed ids, ...).
    """
    try:
        if isinstance(descriptor, SecretAuth):
            return ClientSecretCredential(
                descriptor.tenant_id,
                descriptor.client_id,
                descriptor.client_secret,
                authority=cloud.authority_host,
            )
        if isinstance(descriptor, CertificateAuth):
            return CertificateCredential(
                descriptor.tenant_id,
                descriptor.client_id,
                descriptor.certificate_path,
                password=descriptor.certificate_password,
                authority=cloud.authority_host,
            )
        if isinstance(descriptor, ManagedIdentityAuth):
            return ImdsCredential(descriptor.endpoint, client_id=descriptor.client_id)
        if isinstance(descriptor, CliDelegateAuth):
            return CliTokenCredential(cli, cli_token)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to create {descriptor.method} credential: {e}")
        raise AuthError(f"error creating credentials: {e}", method=descriptor.method) from e

    assert_never(descriptor)
