"""OData ``$filter`` synthesis from column predicates.

Graph only supports inclusive comparisons on timestamp columns, so strict
comparisons are shifted by one second::

    activity_date_time >  T   →  activityDateTime ge T+1s
    activity_date_time <  T   →  activityDateTime le T-1s

Example:
    ```python
    spec = FilterSpec(equality_fields=("category", "result"), time_field="activity_date_time")
    build_filter([Predicate("result", "=", "success"), Predicate("activity_date_time", ">", start)], spec)
    # "result eq 'success' and activityDateTime ge 2024-01-01T00:00:01Z"
    ```
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

OPERATORS = ("=", ">=", ">", "<=", "<")

_OPERATOR_RANK = {op: rank for rank, op in enumerate(OPERATORS)}

_ONE_SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class Predicate:
    """A single column constraint, e.g. ``Predicate("category", "=", "Policy")``."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class FilterSpec:
    """Which columns of a resource can be pushed down to Graph.

    Attributes:
        equality_fields: Columns supporting ``eq``, in rendering order.
        time_field: Timestamp column supporting ``ge``/``le``/``eq``.
    """

    equality_fields: tuple[str, ...] = ()
    time_field: str | None = None

    def position(self, field: str) -> int | None:
        if field in self.equality_fields:
            return self.equality_fields.index(field)
        if field == self.time_field:
            return len(self.equality_fields)
        return None


def to_lower_camel(name: str) -> str:
    """``activity_display_name`` → ``activityDisplayName``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def quote(value: Any) -> str:
    """Render a string literal, doubling embedded single quotes."""
    return "'" + str(value).replace("'", "''") + "'"


def to_utc(value: datetime | str) -> datetime:
    """Normalize a timestamp; naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise ValueError(f"Expected a timestamp, got {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC, e.g. ``2024-01-01T00:00:00Z``.

    Sub-second values keep their fraction (``00:00:00.5Z``) so ``eq`` and the
    inclusive bounds are never truncated.
    """
    value = to_utc(value)
    rendered = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        rendered += f".{value.microsecond:06d}".rstrip("0")
    return rendered + "Z"


def _time_clause(column: str, operator: str, value: datetime | str) -> str:
    timestamp = to_utc(value)
    if operator == ">":
        return f"{column} ge {format_timestamp(timestamp + _ONE_SECOND)}"
    if operator == ">=":
        return f"{column} ge {format_timestamp(timestamp)}"
    if operator == "=":
        return f"{column} eq {format_timestamp(timestamp)}"
    if operator == "<=":
        return f"{column} le {format_timestamp(timestamp)}"
    return f"{column} le {format_timestamp(timestamp - _ONE_SECOND)}"


def build_filter(
    predicates: Iterable[Predicate],
    spec: FilterSpec,
    raw_filter: str | None = None,
) -> str | None:
    """Build a ``$filter`` expression.

    Args:
        predicates: Column constraints. Columns not declared in `spec` are
            left for the caller to evaluate and are skipped here.
        spec: Filterable columns of the resource.
        raw_filter: Caller-supplied expression; when non-empty it is returned
            unchanged and `predicates` are ignored.

    Returns:
        The expression, or None when nothing can be pushed down.

    Raises:
        ValueError: For an unknown operator, a range operator on an equality
            column, or an unparsable timestamp.
    """
    if raw_filter:
        return raw_filter

    clauses: list[tuple[int, int, str]] = []
    for predicate in predicates:
        if predicate.operator not in _OPERATOR_RANK:
            raise ValueError(f"Unsupported operator {predicate.operator!r} for {predicate.field}")

        position = spec.position(predicate.field)
        if position is None:
            continue

        column = to_lower_camel(predicate.field)
        if predicate.field == spec.time_field:
            clause = _time_clause(column, predicate.operator, predicate.value)
        elif predicate.operator == "=":
            clause = f"{column} eq {quote(predicate.value)}"
        else:
            raise ValueError(f"Operator {predicate.operator!r} is not supported on {predicate.field}")

        clauses.append((position, _OPERATOR_RANK[predicate.operator], clause))

    if not clauses:
        return None

    return " and ".join(clause for _, _, clause in sorted(clauses))


def page_size_for_limit(limit: int | None, max_page_size: int | None) -> int | None:
    """Pick a ``$top`` value for a row limit.

    Graph rejects page sizes above the endpoint maximum, so the limit is only
    used when it is within ``1..max_page_size``.
    """
    if limit is not None and max_page_size is not None and 0 < limit <= max_page_size:
        return limit
    return max_page_size
