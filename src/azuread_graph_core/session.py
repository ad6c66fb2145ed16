"""Authenticated sessions and the connection-scoped session/client cache.

The first successful construction wins for the rest of the process: the cache
has no TTL and is never invalidated, and later configuration changes do not
trigger a new method selection. Token refresh is handled inside each
credential.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Protocol, TypeVar

import httpx

from azuread_graph_core.auth.cli import AzureCli, SubprocessAzureCli
from azuread_graph_core.auth.credentials import CliDelegateAuth, CredentialDescriptor, resolve_credential
from azuread_graph_core.auth.factory import build_credential
from azuread_graph_core.client import GraphClient
from azuread_graph_core.config import CloudEnvironment, ConfigResolver, ConnectionConfig

logger = logging.getLogger(__name__)

SESSION_CACHE_KEY = "GetNewSession"
CLIENT_CACHE_KEY = "GetGraphClient"

T = TypeVar("T")


@dataclass(frozen=True)
class Session:
    """Tenant plus the credential that authorizes Graph requests."""

    tenant_id: str
    credential: Any = field(repr=False)
    cloud: CloudEnvironment
    method: str


class CacheStore(Protocol):
    """Named key-value store supplied by the hosting environment."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryCacheStore:
    """Dict-backed CacheStore."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._items.get(key)

    def set(self, key: str, value: Any) -> None:
        self._items[key] = value


class SessionCache:
    """Get-or-create cache over a CacheStore.

    `get_or_create` holds a re-entrant lock for the whole lookup and build, so
    concurrent first callers construct the value exactly once and a factory may
    itself call back into the cache.
    """

    def __init__(self, store: CacheStore | None = None):
        self.store = store if store is not None else InMemoryCacheStore()
        self._lock = RLock()

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        with self._lock:
            cached = self.store.get(key)
            if cached is not None:
                return cached

            logger.debug(f"Cache miss for {key}, constructing")
            value = factory()
            self.store.set(key, value)
            return value


def build_session(descriptor: CredentialDescriptor, cloud: CloudEnvironment, cli: AzureCli) -> Session:
    """Build a session for a selected method.

    For the Azure CLI method the tenant comes from the CLI's token response.

    Raises:
        ConfigError: If the Azure CLI is needed but cannot be found.
        AuthError: If the credential cannot be built or the CLI fails.
    """
    cli_token = None
    if isinstance(descriptor, CliDelegateAuth):
        cli_token = cli.get_access_token()
        tenant_id = cli_token.tenant
    else:
        tenant_id = descriptor.tenant_id or ""

    credential = build_credential(descriptor, cloud, cli=cli, cli_token=cli_token)
    logger.info(f"Created {descriptor.method} session for tenant {tenant_id or '<unknown>'} in {cloud.name}")
    return Session(tenant_id=tenant_id, credential=credential, cloud=cloud, method=descriptor.method)


class ConnectionContext:
    """Everything one connection needs: config, cache, CLI capability, transport.

    Args:
        config: Merged connection configuration.
        cache: Session cache; pass a shared one to share clients across contexts.
        cli: Azure CLI capability (a fake in tests).
        transport: httpx transport for Graph requests.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        cache: SessionCache | None = None,
        cli: AzureCli | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config
        self.cache = cache if cache is not None else SessionCache()
        self.cli = cli if cli is not None else SubprocessAzureCli()
        self.transport = transport

    @classmethod
    def from_values(
        cls,
        values: Mapping[str, Any] | None = None,
        *,
        resolver: ConfigResolver | None = None,
        **kwargs: Any,
    ) -> "ConnectionContext":
        """Create a context from connection settings plus the environment."""
        resolver = resolver if resolver is not None else ConfigResolver()
        return cls(resolver.load(values), **kwargs)

    def _build_session(self) -> Session:
        descriptor = resolve_credential(self.config)
        return build_session(descriptor, self.config.cloud, self.cli)

    def get_session(self) -> Session:
        return self.cache.get_or_create(SESSION_CACHE_KEY, self._build_session)

    def get_client(self) -> GraphClient:
        return self.cache.get_or_create(
            CLIENT_CACHE_KEY,
            lambda: GraphClient(self.get_session(), transport=self.transport),
        )

    def tenant_id(self) -> str:
        return self.get_session().tenant_id
