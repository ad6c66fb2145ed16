"""Authentication components for Microsoft Graph connections.

This module provides:
- Authentication method selection from connection configuration
- Token credential construction per method
- A restricted-path Azure CLI delegate

Example:
    ```python
    from azuread_graph_core.auth import build_credential, resolve_credential
    from azuread_graph_core.auth.cli import SubprocessAzureCli

    descriptor = resolve_credential(config)
    credential = build_credential(descriptor, config.cloud, cli=SubprocessAzureCli())
    ```
"""

from azuread_graph_core.auth.credentials import (
    CertificateAuth,
    CliDelegateAuth,
    CredentialDescriptor,
    ManagedIdentityAuth,
    SecretAuth,
    resolve_credential,
)
from azuread_graph_core.auth.exceptions import AuthError, ConfigError, CredentialError
from azuread_graph_core.auth.factory import build_credential

__all__ = [
    "AuthError",
    "CertificateAuth",
    "CliDelegateAuth",
    "ConfigError",
    "CredentialDescriptor",
    "CredentialError",
    "ManagedIdentityAuth",
    "SecretAuth",
    "build_credential",
    "resolve_credential",
]
