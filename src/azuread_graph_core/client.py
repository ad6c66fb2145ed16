"""Microsoft Graph client bound to an authenticated session."""

import logging
from collections.abc import Generator
from typing import TYPE_CHECKING, Any

import httpx
from azure.core.exceptions import ClientAuthenticationError

from azuread_graph_core.auth.exceptions import AuthError
from azuread_graph_core.errors.exceptions import TransportError
from azuread_graph_core.errors.handler import raise_for_status
from azuread_graph_core.query.pagination import Page

if TYPE_CHECKING:
    from azuread_graph_core.session import Session

logger = logging.getLogger(__name__)

API_VERSION = "v1.0"


class GraphTokenAuth(httpx.Auth):
    """httpx auth flow attaching a bearer token from a token credential.

    Token refresh is the credential's own responsibility; this flow asks for a
    token on every request and relies on the credential's cache.
    """

    def __init__(self, credential: Any, scope: str):
        self.credential = credential
        self.scope = scope

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        try:
            token = self.credential.get_token(self.scope)
        except ClientAuthenticationError as e:
            raise AuthError(f"Failed to acquire Graph token: {e.message}") from e
        request.headers["Authorization"] = f"Bearer {token.token}"
        yield request


class GraphClient:
    """Thin JSON client for Graph collections and items.

    Args:
        session: Authenticated session (tenant + credential + cloud).
        transport: Optional httpx transport. Retry/backoff, if wanted, is
            layered here by the caller.
        api_version: Graph API version segment.

    Example:
        ```python
        with GraphClient(session) as client:
            page = client.list_page("domains")
            for domain in page.items:
                print(domain["id"])
        ```
    """

    def __init__(
        self,
        session: "Session",
        *,
        transport: httpx.BaseTransport | None = None,
        api_version: str = API_VERSION,
    ):
        self.session = session
        self.base_url = f"{session.cloud.graph_endpoint}/{api_version}/"
        self._http = httpx.Client(
            base_url=self.base_url,
            auth=GraphTokenAuth(session.credential, session.cloud.graph_scope),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "GraphClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def request_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a URL (relative to the API root, or absolute) and decode the JSON body.

        Raises:
            TransportError: If no response was received.
            RemoteProtocolError: If Graph answered with an error status.
        """
        try:
            response = self._http.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

        raise_for_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON in response from {url}: {e}") from e

    def get_item(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Fetch a single resource."""
        return self.request_json(path, params)

    def list_page(
        self,
        path: str,
        *,
        filter: str | None = None,
        top: int | None = None,
        params: dict[str, Any] | None = None,
    ) -> Page:
        """Fetch the first page of a collection."""
        query = dict(params or {})
        if filter:
            query["$filter"] = filter
        if top is not None:
            query["$top"] = top

        if filter:
            logger.debug(f"Listing {path} with $filter={filter}")
        return Page.from_json(self.request_json(path, query))

    def next_page(self, next_link: str) -> Page:
        """Follow an ``@odata.nextLink`` continuation."""
        return Page.from_json(self.request_json(next_link))
