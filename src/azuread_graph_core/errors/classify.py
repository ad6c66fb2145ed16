"""Error normalization and per-operation ignore predicates.

The same Graph failure can be harmless for one resource and fatal for another,
so ignore rules are declared per operation as a set of patterns. A pattern
matches when it equals the error code or occurs inside the error message.

Example:
    ```python
    from azuread_graph_core.errors.classify import ignorable_error_predicate

    should_ignore = ignorable_error_predicate({"Request_ResourceNotFound", "Invalid object identifier"})
    try:
        item = client.get_item(f"auditLogs/directoryAudits/{audit_id}")
    except RemoteProtocolError as e:
        if not should_ignore(e):
            raise
        item = None
    ```
"""

from collections.abc import Callable, Iterable

from azuread_graph_core.errors.exceptions import RemoteProtocolError
from azuread_graph_core.errors.models import RequestError


def normalize_error(error: BaseException) -> RequestError:
    """Reduce any error to a (code, message) pair."""
    if isinstance(error, RemoteProtocolError):
        return RequestError(code=error.code or "", message=error.message or "")
    return RequestError(code="", message=str(error))


def is_ignorable_error(error: BaseException | None, patterns: Iterable[str]) -> bool:
    """Check an error against an operation's ignore patterns.

    Only errors reported by Graph itself can be ignored; transport and
    credential failures always propagate.
    """
    if not isinstance(error, RemoteProtocolError):
        return False

    normalized = normalize_error(error)
    for pattern in patterns:
        if not pattern:
            continue
        if normalized.code == pattern or pattern in normalized.message:
            return True
    return False


def ignorable_error_predicate(patterns: Iterable[str]) -> Callable[[BaseException | None], bool]:
    """Bind a pattern set into a reusable predicate."""
    frozen = frozenset(patterns)

    def predicate(error: BaseException | None) -> bool:
        return is_ignorable_error(error, frozen)

    return predicate
