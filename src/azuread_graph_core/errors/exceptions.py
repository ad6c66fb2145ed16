"""Structured exceptions for Graph API errors."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from azuread_graph_core.errors.models import ODataError


class GraphAPIError(Exception):
    """Base exception for Graph API errors."""

    pass


class TransportError(GraphAPIError):
    """The request never produced an HTTP response (connect, timeout, protocol)."""

    pass


class RemoteProtocolError(GraphAPIError):
    """Graph answered with an error response.

    Attributes:
        code: OData error code (e.g. ``Request_ResourceNotFound``), or "".
        message: OData error message, or the raw response text.
    """

    def __init__(
        self,
        message: str,
        code: str = "",
        status_code: int | None = None,
        response: "httpx.Response | None" = None,
        odata_error: "ODataError | None" = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.response = response
        self.odata_error = odata_error


class BadRequestError(RemoteProtocolError):
    """400 Bad Request."""

    pass


class UnauthorizedError(RemoteProtocolError):
    """401 Unauthorized."""

    pass


class ForbiddenError(RemoteProtocolError):
    """403 Forbidden."""

    pass


class NotFoundError(RemoteProtocolError):
    """404 Not Found."""

    pass


class RateLimitError(RemoteProtocolError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(RemoteProtocolError):
    """5xx server errors."""

    pass
