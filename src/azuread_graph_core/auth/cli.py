"""Azure CLI token delegate.

The Azure CLI is only ever looked up on a fixed list of install locations plus
the directory named by the ``AzureCLIPath`` environment variable. The calling
process's ``PATH`` is never consulted, so a binary planted earlier on ``PATH``
cannot be executed in place of the real CLI.

Example:
    ```python
    from azuread_graph_core.auth.cli import SubprocessAzureCli

    token = SubprocessAzureCli().get_access_token()
    print(token.tenant, token.expires_on)
    ```
"""

import json
import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Protocol

from azure.core.credentials import AccessToken

from azuread_graph_core.auth.exceptions import AuthError, ConfigError

logger = logging.getLogger(__name__)

CLI_METHOD = "azure_cli"

# Directory the operator can set to point at a non-standard CLI install
AZURE_CLI_PATH_VAR = "AzureCLIPath"

DEFAULT_CLI_PATH = "/bin:/sbin:/usr/bin:/usr/local/bin"

TOKEN_REFRESH_MARGIN = 300

GET_TOKEN_ARGS = ("account", "get-access-token", "--resource-type=ms-graph", "-o", "json")


def _default_windows_path() -> str:
    return ";".join(
        [
            f"{os.environ.get('ProgramFiles(x86)', '')}\\Microsoft SDKs\\Azure\\CLI2\\wbin",
            f"{os.environ.get('ProgramFiles', '')}\\Microsoft SDKs\\Azure\\CLI2\\wbin",
        ]
    )


def cli_search_path() -> str:
    """Restricted search path: the operator override first, then the defaults."""
    override = os.environ.get(AZURE_CLI_PATH_VAR, "")
    if os.name == "nt":
        return f"{override};{_default_windows_path()}" if override else _default_windows_path()
    return f"{override}:{DEFAULT_CLI_PATH}" if override else DEFAULT_CLI_PATH


@dataclass(frozen=True)
class CliToken:
    """Parsed output of ``az account get-access-token``."""

    access_token: str = field(repr=False)
    expires_on: int
    tenant: str
    token_type: str = "Bearer"

    @classmethod
    def from_json(cls, output: str | bytes) -> "CliToken":
        """Parse CLI JSON output.

        Raises:
            AuthError: If the output is not JSON or lacks a token.
        """
        try:
            data = json.loads(output)
        except (ValueError, TypeError) as e:
            raise AuthError(f"Azure CLI returned unparsable output: {e}", method=CLI_METHOD) from e

        if not isinstance(data, dict) or not data.get("accessToken"):
            raise AuthError("Azure CLI output did not contain an access token", method=CLI_METHOD)

        return cls(
            access_token=data["accessToken"],
            expires_on=_parse_expiry(data),
            tenant=data.get("tenant") or "",
            token_type=data.get("tokenType") or "Bearer",
        )


def _parse_expiry(data: dict[str, Any]) -> int:
    # Newer CLI versions emit epoch seconds alongside the local-time string
    if data.get("expires_on") is not None:
        try:
            return int(data["expires_on"])
        except (ValueError, TypeError):
            pass

    expires_on = data.get("expiresOn")
    if expires_on:
        for fmt in ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S"):
            try:
                return int(datetime.strptime(expires_on, fmt).timestamp())
            except ValueError:
                continue

    raise AuthError(f"Azure CLI returned an unrecognized expiry: {expires_on!r}", method=CLI_METHOD)


class AzureCli(Protocol):
    """Capability to obtain a Graph token from a local identity helper."""

    def get_access_token(self) -> CliToken: ...


class SubprocessAzureCli:
    """Run the Azure CLI in a child process with a restricted search path."""

    def __init__(self, search_path: str | None = None):
        """Initialize the runner.

        Args:
            search_path: Explicit search path. Defaults to `cli_search_path()`
                evaluated at call time.
        """
        self._search_path = search_path

    def _locate(self, search_path: str) -> str:
        executable = shutil.which("az", path=search_path)
        if executable is None:
            raise ConfigError(
                f"No credentials configured and Azure CLI not found in {search_path}",
                method=CLI_METHOD,
                missing=("tenant_id",),
            )
        return executable

    def _command(self, executable: str) -> list[str]:
        if os.name == "nt":
            shell = os.path.join(os.environ.get("windir", "C:\\Windows"), "system32", "cmd.exe")
            return [shell, "/c", executable, *GET_TOKEN_ARGS]
        return [executable, *GET_TOKEN_ARGS]

    def get_access_token(self) -> CliToken:
        """Invoke the CLI and parse its token response.

        Raises:
            ConfigError: If the CLI cannot be found on the restricted path.
            AuthError: If the CLI exits non-zero or prints unparsable output.
        """
        search_path = self._search_path or cli_search_path()
        executable = self._locate(search_path)

        env = dict(os.environ)
        env["PATH"] = search_path

        logger.debug(f"Requesting Graph token from Azure CLI at {executable}")
        try:
            completed = subprocess.run(
                self._command(executable),
                env=env,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise AuthError(f"Invoking Azure CLI failed with the following error: {e}", method=CLI_METHOD) from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode(errors="replace").strip()
            raise AuthError(
                f"Invoking Azure CLI failed with exit status {completed.returncode}: {stderr}",
                method=CLI_METHOD,
            )

        return CliToken.from_json(completed.stdout)


class CliTokenCredential:
    """azure-core style token credential backed by the Azure CLI.

    The first token is usually supplied by the session builder (which needs the
    tenant anyway); later tokens are fetched when within
    ``TOKEN_REFRESH_MARGIN`` seconds of expiry.
    """

    def __init__(self, cli: AzureCli, token: CliToken | None = None):
        self._cli = cli
        self._token = token
        self._lock = Lock()

    def _current(self) -> CliToken:
        with self._lock:
            if self._token is None or self._token.expires_on - TOKEN_REFRESH_MARGIN <= time.time():
                self._token = self._cli.get_access_token()
            return self._token

    @property
    def tenant_id(self) -> str:
        return self._current().tenant

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        # The CLI is always asked for the Graph resource; scopes are implied
        token = self._current()
        return AccessToken(token.access_token, token.expires_on)

    def close(self) -> None:
        pass
