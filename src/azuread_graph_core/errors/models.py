"""OData error body models.

Graph reports failures as::

    {"error": {"code": "Request_ResourceNotFound",
               "message": "Resource '...' does not exist ...",
               "innerError": {"date": "...", "request-id": "...", "client-request-id": "..."}}}
"""

import json
from dataclasses import asdict, dataclass
from typing import Any

import httpx


@dataclass
class ODataError:
    """Parsed OData ``error`` object."""

    code: str = ""
    message: str = ""
    request_id: str | None = None
    date: str | None = None

    # Remaining innerError members
    inner_error: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ODataError | None":
        """Parse the OData error body of an HTTP response.

        Returns:
            ODataError or None if the body is not an OData error
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            # JSON decode errors, type errors, or missing .json() method
            return None

        if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
            return None
        error = data["error"]

        inner = error.get("innerError") or error.get("innererror")
        inner = dict(inner) if isinstance(inner, dict) else {}
        request_id = inner.pop("request-id", None)
        date = inner.pop("date", None)

        return cls(
            code=str(error.get("code") or ""),
            message=str(error.get("message") or ""),
            request_id=request_id,
            date=date,
            inner_error=inner if inner else None,
        )

    def to_exception_message(self) -> str:
        """Convert the error to an exception message."""
        lines = [f"{self.code}: {self.message}" if self.code else self.message or "Unknown Graph error"]

        if self.request_id:
            lines.append(f"Request ID: {self.request_id}")
        if self.date:
            lines.append(f"Date: {self.date}")

        return "\n".join(lines)


@dataclass(frozen=True)
class RequestError:
    """Normalized (code, message) pair, uniform across error shapes."""

    code: str = ""
    message: str = ""

    def __str__(self) -> str:
        return json.dumps(asdict(self))
