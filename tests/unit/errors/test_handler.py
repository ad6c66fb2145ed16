"""Tests for Graph error response handling."""

import pytest
from httpx import Response

from azuread_graph_core.errors.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    RemoteProtocolError,
    ServerError,
    UnauthorizedError,
)
from azuread_graph_core.errors.handler import raise_for_status


def odata_error(status_code: int, code: str, message: str, headers: dict | None = None) -> Response:
    return Response(
        status_code=status_code,
        headers={"content-type": "application/json", **(headers or {})},
        json={
            "error": {
                "code": code,
                "message": message,
                "innerError": {
                    "date": "2024-01-01T00:00:00",
                    "request-id": "8f2d1c4e-0000-0000-0000-000000000000",
                    "client-request-id": "8f2d1c4e-0000-0000-0000-000000000000",
                },
            }
        },
    )


@pytest.mark.unit
def test_raise_for_status_success_response():
    """Test raise_for_status doesn't raise for successful responses."""
    response = Response(status_code=200)

    # Should not raise
    raise_for_status(response)


@pytest.mark.unit
def test_raise_for_status_400_bad_request():
    """Test raise_for_status raises BadRequestError with the OData code."""
    response = odata_error(400, "Request_UnsupportedQuery", "Invalid page size specified: '1000'.")

    with pytest.raises(BadRequestError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 400
    assert exc_info.value.response == response
    assert exc_info.value.code == "Request_UnsupportedQuery"
    assert exc_info.value.message == "Invalid page size specified: '1000'."


@pytest.mark.unit
def test_raise_for_status_401_unauthorized():
    """Test raise_for_status raises UnauthorizedError for 401."""
    response = odata_error(401, "InvalidAuthenticationToken", "Access token has expired or is not yet valid.")

    with pytest.raises(UnauthorizedError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 401


@pytest.mark.unit
def test_raise_for_status_403_forbidden():
    """Test raise_for_status raises ForbiddenError for 403."""
    response = odata_error(403, "Authorization_RequestDenied", "Insufficient privileges to complete the operation.")

    with pytest.raises(ForbiddenError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.code == "Authorization_RequestDenied"


@pytest.mark.unit
def test_raise_for_status_404_not_found():
    """Test raise_for_status raises NotFoundError for 404."""
    response = odata_error(404, "Request_ResourceNotFound", "Resource 'abc' does not exist.")

    with pytest.raises(NotFoundError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 404
    assert exc_info.value.odata_error.request_id == "8f2d1c4e-0000-0000-0000-000000000000"


@pytest.mark.unit
def test_raise_for_status_429_rate_limit():
    """Test raise_for_status raises RateLimitError for 429."""
    response = odata_error(429, "TooManyRequests", "Too many requests", headers={"retry-after": "60"})

    with pytest.raises(RateLimitError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after == 60
    assert exc_info.value.code == "TooManyRequests"


@pytest.mark.unit
def test_raise_for_status_429_without_retry_after():
    """Test raise_for_status handles 429 without retry-after header."""
    response = Response(status_code=429, text="Too many requests")

    with pytest.raises(RateLimitError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.retry_after is None


@pytest.mark.unit
def test_raise_for_status_unmapped_status():
    """Test raise_for_status raises RemoteProtocolError for unmapped statuses."""
    response = Response(status_code=409, text="Conflict")

    with pytest.raises(RemoteProtocolError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 409
    assert not isinstance(exc_info.value, BadRequestError)


@pytest.mark.unit
def test_raise_for_status_5xx_server_error():
    """Test raise_for_status raises ServerError for 5xx."""
    response = Response(status_code=503, text="Service unavailable")

    with pytest.raises(ServerError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.status_code == 503


@pytest.mark.unit
def test_raise_for_status_plain_text_body():
    """Test a non-OData body gives an empty code and the response text."""
    response = Response(status_code=502, text="<html>Bad gateway</html>")

    with pytest.raises(ServerError) as exc_info:
        raise_for_status(response)

    assert exc_info.value.code == ""
    assert exc_info.value.odata_error is None
    assert str(exc_info.value) == "HTTP 502: <html>Bad gateway</html>"


@pytest.mark.unit
def test_raise_for_status_empty_body():
    """Test an empty body gives a status-only message."""
    response = Response(status_code=500)

    with pytest.raises(ServerError) as exc_info:
        raise_for_status(response)

    assert str(exc_info.value) == "HTTP 500"
