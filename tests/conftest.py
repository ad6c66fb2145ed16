"""Pytest configuration and shared fixtures for azuread-graph-core tests."""

import time

import httpx
import pytest
from azure.core.credentials import AccessToken

from azuread_graph_core.auth.cli import CliToken
from azuread_graph_core.auth.exceptions import AuthError
from azuread_graph_core.config import PUBLIC_CLOUD, ConnectionConfig
from azuread_graph_core.session import ConnectionContext, Session


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear Azure-related environment variables before each test.

    This prevents a developer's own Azure login settings from leaking into
    method selection tests.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("AZURE_") or key == "AzureCLIPath":
            monkeypatch.delenv(key, raising=False)

    yield


class StaticCredential:
    """Token credential returning a fixed token."""

    def __init__(self, token: str = "test-token"):
        self.token = token
        self.calls = 0

    def get_token(self, *scopes, **kwargs):
        self.calls += 1
        return AccessToken(self.token, int(time.time()) + 3600)


class FakeAzureCli:
    """AzureCli double that never spawns a process."""

    def __init__(self, tenant: str = "cli-tenant", error: Exception | None = None):
        self.tenant = tenant
        self.error = error
        self.calls = 0

    def get_access_token(self) -> CliToken:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return CliToken(
            access_token=f"cli-token-{self.calls}",
            expires_on=int(time.time()) + 3600,
            tenant=self.tenant,
        )


@pytest.fixture
def static_credential():
    return StaticCredential()


@pytest.fixture
def fake_cli():
    return FakeAzureCli()


@pytest.fixture
def failing_cli():
    return FakeAzureCli(error=AuthError("Azure CLI exited with status 1", method="azure_cli"))


@pytest.fixture
def graph_session(static_credential):
    return Session(tenant_id="tenant-123", credential=static_credential, cloud=PUBLIC_CLOUD, method="client_secret")


@pytest.fixture
def make_context(fake_cli):
    """Build a CLI-authenticated ConnectionContext over a mock Graph handler."""

    def _make(handler, config: ConnectionConfig | None = None, **kwargs):
        kwargs.setdefault("cli", fake_cli)
        return ConnectionContext(
            config or ConnectionConfig(),
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
