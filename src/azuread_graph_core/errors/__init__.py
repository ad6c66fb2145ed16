"""Error handling and OData error support for Graph clients."""

from azuread_graph_core.errors.classify import ignorable_error_predicate, is_ignorable_error, normalize_error
from azuread_graph_core.errors.exceptions import (
    BadRequestError,
    ForbiddenError,
    GraphAPIError,
    NotFoundError,
    RateLimitError,
    RemoteProtocolError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from azuread_graph_core.errors.handler import raise_for_status
from azuread_graph_core.errors.models import ODataError, RequestError

__all__ = [
    "BadRequestError",
    "ForbiddenError",
    "GraphAPIError",
    "NotFoundError",
    "ODataError",
    "RateLimitError",
    "RemoteProtocolError",
    "RequestError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    "ignorable_error_predicate",
    "is_ignorable_error",
    "normalize_error",
    "raise_for_status",
]
