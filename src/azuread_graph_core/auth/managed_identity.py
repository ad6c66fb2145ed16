"""Managed identity tokens from the instance metadata service (IMDS)."""

import logging
import time
from threading import Lock
from typing import Any

import httpx
from azure.core.credentials import AccessToken

from azuread_graph_core.auth.exceptions import AuthError

logger = logging.getLogger(__name__)

MSI_METHOD = "managed_identity"

IMDS_API_VERSION = "2018-02-01"

TOKEN_REFRESH_MARGIN = 300


def scope_to_resource(scope: str) -> str:
    """Convert an AAD v2 scope to a v1 resource (``https://graph.microsoft.com/.default`` → ``https://graph.microsoft.com``)."""
    if scope.endswith("/.default"):
        return scope[: -len("/.default")]
    return scope


class ImdsCredential:
    """Token credential that queries a (configurable) metadata endpoint.

    Args:
        endpoint: Token endpoint, e.g. the link-local IMDS URL.
        client_id: Optional user-assigned identity client id.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        endpoint: str,
        *,
        client_id: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.client_id = client_id
        self._http = httpx.Client(transport=transport)
        self._tokens: dict[str, AccessToken] = {}
        self._lock = Lock()

    def _request_token(self, resource: str) -> AccessToken:
        params = {"api-version": IMDS_API_VERSION, "resource": resource}
        if self.client_id:
            params["client_id"] = self.client_id

        logger.debug(f"Requesting managed identity token for {resource} from {self.endpoint}")
        try:
            response = self._http.get(self.endpoint, params=params, headers={"Metadata": "true"})
        except httpx.HTTPError as e:
            raise AuthError(f"Managed identity endpoint unreachable: {e}", method=MSI_METHOD) from e

        if not response.is_success:
            raise AuthError(
                f"Managed identity endpoint returned HTTP {response.status_code}: {response.text[:200]}",
                method=MSI_METHOD,
            )

        try:
            data = response.json()
            return AccessToken(data["access_token"], int(data["expires_on"]))
        except (ValueError, TypeError, KeyError) as e:
            raise AuthError(f"Managed identity endpoint returned an invalid token response: {e}", method=MSI_METHOD) from e

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        if not scopes:
            raise ValueError("get_token requires at least one scope")
        resource = scope_to_resource(scopes[0])

        with self._lock:
            token = self._tokens.get(resource)
            if token is None or token.expires_on - TOKEN_REFRESH_MARGIN <= time.time():
                token = self._request_token(resource)
                self._tokens[resource] = token
            return token

    def close(self) -> None:
        self._http.close()
