"""Error handling utilities for Graph HTTP responses."""

import httpx

from azuread_graph_core.errors.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    RemoteProtocolError,
    ServerError,
    UnauthorizedError,
)
from azuread_graph_core.errors.models import ODataError


def raise_for_status(response: httpx.Response) -> None:
    """Raise appropriate exception for Graph error responses.

    Parses the OData error body if present, otherwise uses the status code
    and response text.

    Args:
        response: HTTP response object

    Raises:
        RemoteProtocolError subclass based on status code
    """
    if response.is_success:
        return

    odata_error = ODataError.from_response(response)
    status_code = response.status_code

    exception_map = {
        400: BadRequestError,
        401: UnauthorizedError,
        403: ForbiddenError,
        404: NotFoundError,
        429: RateLimitError,
    }

    if status_code in exception_map:
        exc_class = exception_map[status_code]
    elif 500 <= status_code < 600:
        exc_class = ServerError
    else:
        exc_class = RemoteProtocolError

    if odata_error:
        code = odata_error.code
        message = odata_error.message or odata_error.to_exception_message()
    else:
        response_text = response.text[:200]
        code = ""
        message = f"HTTP {status_code}: {response_text}" if response_text else f"HTTP {status_code}"

    if exc_class == RateLimitError:
        retry_after = None
        if "retry-after" in response.headers:
            try:
                retry_after = int(response.headers["retry-after"])
            except (ValueError, TypeError):
                retry_after = None
        raise exc_class(
            message=message,
            retry_after=retry_after,
            code=code,
            status_code=status_code,
            response=response,
            odata_error=odata_error,
        )

    raise exc_class(
        message=message,
        code=code,
        status_code=status_code,
        response=response,
        odata_error=odata_error,
    )
