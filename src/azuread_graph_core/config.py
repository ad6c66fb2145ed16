"""Connection configuration merged from explicit values, environment and .env.

Resolution order for every field (highest to lowest priority):
1. Explicitly provided value (connection config block)
2. Environment variable (``AZURE_`` + upper snake case field name)
3. .env file (python-dotenv, loaded into the environment once)
4. Default value

Example:
    ```python
    from azuread_graph_core.config import ConfigResolver

    resolver = ConfigResolver()
    config = resolver.load({"tenant_id": "contoso.onmicrosoft.com"})

    # client_id, client_secret, ... come from AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, ...
    print(config.cloud.graph_endpoint)
    ```

Security Considerations:
    - Secret values are never logged in full (masked with ***)
    - Secret fields are excluded from ``repr(ConnectionConfig)``
    - Thread-safe dotenv loading with lock
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "AZURE_"

DEFAULT_MSI_ENDPOINT = "http://169.254.169.254/metadata/identity/oauth2/token"

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_SECRET_FIELDS = frozenset(["client_secret", "certificate_password"])


@dataclass(frozen=True)
class CloudEnvironment:
    """Endpoints of one Azure cloud."""

    name: str
    authority_host: str
    graph_endpoint: str

    @property
    def graph_scope(self) -> str:
        return f"{self.graph_endpoint}/.default"


PUBLIC_CLOUD = CloudEnvironment(
    name="AZUREPUBLICCLOUD",
    authority_host="https://login.microsoftonline.com",
    graph_endpoint="https://graph.microsoft.com",
)
CHINA_CLOUD = CloudEnvironment(
    name="AZURECHINACLOUD",
    authority_host="https://login.chinacloudapi.cn",
    graph_endpoint="https://microsoftgraph.chinacloudapi.cn",
)
US_GOVERNMENT_CLOUD = CloudEnvironment(
    name="AZUREUSGOVERNMENTCLOUD",
    authority_host="https://login.microsoftonline.us",
    graph_endpoint="https://graph.microsoft.us",
)
GERMAN_CLOUD = CloudEnvironment(
    name="AZUREGERMANCLOUD",
    authority_host="https://login.microsoftonline.de",
    graph_endpoint="https://graph.microsoft.de",
)

CLOUDS: dict[str, CloudEnvironment] = {
    cloud.name: cloud for cloud in (PUBLIC_CLOUD, CHINA_CLOUD, US_GOVERNMENT_CLOUD, GERMAN_CLOUD)
}


def cloud_for(name: str | None) -> CloudEnvironment:
    """Look up a cloud by name, falling back to the public cloud."""
    if not name:
        return PUBLIC_CLOUD
    return CLOUDS.get(name.strip().upper(), PUBLIC_CLOUD)


@dataclass(frozen=True)
class ConnectionConfig:
    """Immutable merged connection configuration.

    Empty strings and ``None`` are equivalent everywhere downstream: a field is
    "present" only when it is a non-empty string.
    """

    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    certificate_path: str | None = None
    certificate_password: str | None = field(default=None, repr=False)
    environment: str | None = None
    enable_msi: bool = False
    msi_endpoint: str = DEFAULT_MSI_ENDPOINT

    @property
    def cloud(self) -> CloudEnvironment:
        return cloud_for(self.environment)


def env_var_name(field_name: str, prefix: str = ENV_PREFIX) -> str:
    """Environment variable consulted for a config field."""
    return f"{prefix}{field_name.upper()}"


class ConfigResolver:
    """Resolve connection settings from multiple sources with priority ordering.

    Attributes:
        _dotenv_loaded: Whether .env file has been loaded.
        _dotenv_lock: Thread lock for safe dotenv loading.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True, prefix: str = ENV_PREFIX):
        """Initialize config resolver.

        Args:
            dotenv_path: Path to .env file. If None, searches parent directories
                for .env file (default behavior of python-dotenv).
            load_dotenv: Whether to load .env file. Set to False to skip
                .env file loading (useful for testing).
            prefix: Environment variable prefix for every field.
        """
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path
        self._load_dotenv_enabled = load_dotenv
        self.prefix = prefix

        if self._load_dotenv_enabled:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        """Ensure .env file is loaded (thread-safe, only once)."""
        if self._dotenv_loaded:
            return

        with self._dotenv_lock:
            # Double-check pattern for thread safety
            if self._dotenv_loaded:
                return

            try:
                load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for connection config")
            except OSError as e:
                logger.warning(f"Failed to load .env file: {e}")
            self._dotenv_loaded = True

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        mask_in_logs: bool = True,
    ) -> str | None:
        """Resolve a single setting.

        Resolution order (first match wins):
        1. Explicitly provided `value` parameter
        2. Environment variable (if `env_var_name` provided)
        3. Default value

        Returns:
            Resolved value, or None if not found anywhere.
        """
        result = None
        source = None

        if value is not None:
            result = value
            source = "explicit parameter"
        elif env_var_name and env_var_name in os.environ:
            result = os.environ[env_var_name]
            source = f"environment variable '{env_var_name}'"
        elif default is not None:
            result = default
            source = "default value"

        if result is not None:
            shown = "***" if mask_in_logs else result
            logger.debug(f"Resolved setting from {source}: {shown}")

        return result

    def resolve_flag(self, *, value: bool | str | None = None, env_var_name: str | None = None) -> bool:
        """Resolve a boolean setting; strings parse as 1/true/yes/on."""
        if isinstance(value, bool):
            return value
        raw = self.resolve(value=value, env_var_name=env_var_name, mask_in_logs=False)
        if raw is None:
            return False
        return raw.strip().lower() in _TRUE_VALUES

    def load(self, values: Mapping[str, Any] | None = None) -> ConnectionConfig:
        """Build a ConnectionConfig from explicit values plus the environment.

        Args:
            values: Explicit connection settings keyed by field name. Unknown
                keys are ignored.
        """
        values = dict(values or {})
        unknown = set(values) - _FIELD_NAMES
        if unknown:
            logger.debug(f"Ignoring unknown connection settings: {sorted(unknown)}")

        resolved: dict[str, Any] = {}
        for name in _STRING_FIELDS:
            resolved[name] = self.resolve(
                value=values.get(name),
                env_var_name=env_var_name(name, self.prefix),
                mask_in_logs=name in _SECRET_FIELDS,
            ) or None

        resolved["enable_msi"] = self.resolve_flag(
            value=values.get("enable_msi"), env_var_name=env_var_name("enable_msi", self.prefix)
        )
        resolved["msi_endpoint"] = self.resolve(
            value=values.get("msi_endpoint"),
            env_var_name=env_var_name("msi_endpoint", self.prefix),
            default=DEFAULT_MSI_ENDPOINT,
            mask_in_logs=False,
        ) or DEFAULT_MSI_ENDPOINT

        return ConnectionConfig(**resolved)


_STRING_FIELDS = (
    "tenant_id",
    "client_id",
    "client_secret",
    "certificate_path",
    "certificate_password",
    "environment",
)
_FIELD_NAMES = frozenset(_STRING_FIELDS) | {"enable_msi", "msi_endpoint"}
