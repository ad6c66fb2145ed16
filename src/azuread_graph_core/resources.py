"""List and get flows for Graph resource collections.

Each resource declares its collection path, which columns can be pushed down
as ``$filter`` clauses, the endpoint's maximum page size and which errors make
a get-by-id degrade to "no result".

Example:
    ```python
    from azuread_graph_core.resources import DIRECTORY_AUDITS, get_item

    audit = get_item(context, DIRECTORY_AUDITS, "Directory_ABC123")
    if audit is None:
        print("not found")
    ```
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from azuread_graph_core.errors.classify import is_ignorable_error, normalize_error
from azuread_graph_core.errors.exceptions import GraphAPIError
from azuread_graph_core.query.filters import FilterSpec, Predicate, build_filter, page_size_for_limit
from azuread_graph_core.query.pagination import PageIterator, RowBudget
from azuread_graph_core.session import ConnectionContext

logger = logging.getLogger(__name__)

NOT_FOUND_PATTERNS = frozenset(["Request_ResourceNotFound", "Invalid object identifier"])


@dataclass(frozen=True)
class ResourceDefinition:
    """How one Graph collection is listed and fetched."""

    name: str
    path: str
    filters: FilterSpec = field(default_factory=FilterSpec)
    max_page_size: int | None = None
    get_ignore_patterns: frozenset[str] = frozenset()
    list_ignore_patterns: frozenset[str] = frozenset()

    def item_path(self, item_id: str) -> str:
        return f"{self.path}/{item_id}"


DIRECTORY_AUDITS = ResourceDefinition(
    name="azuread_directory_audit_report",
    path="auditLogs/directoryAudits",
    filters=FilterSpec(
        equality_fields=("activity_display_name", "category", "correlation_id", "result"),
        time_field="activity_date_time",
    ),
    max_page_size=1000,
    get_ignore_patterns=NOT_FOUND_PATTERNS,
)

SIGN_INS = ResourceDefinition(
    name="azuread_sign_in_report",
    path="auditLogs/signIns",
    filters=FilterSpec(
        equality_fields=("app_display_name", "app_id", "correlation_id", "ip_address", "user_id", "user_principal_name"),
        time_field="created_date_time",
    ),
    max_page_size=999,
    get_ignore_patterns=NOT_FOUND_PATTERNS,
)

APPLICATIONS = ResourceDefinition(
    name="azuread_application",
    path="applications",
    filters=FilterSpec(equality_fields=("app_id", "display_name")),
    max_page_size=999,
    get_ignore_patterns=NOT_FOUND_PATTERNS,
    list_ignore_patterns=frozenset(["Request_ResourceNotFound"]),
)

DOMAINS = ResourceDefinition(
    name="azuread_domain",
    path="domains",
    get_ignore_patterns=frozenset(["Request_ResourceNotFound"]),
    list_ignore_patterns=frozenset(["Request_ResourceNotFound"]),
)


def list_items(
    context: ConnectionContext,
    resource: ResourceDefinition,
    visitor: Callable[[dict[str, Any]], Any],
    *,
    predicates: Iterable[Predicate] = (),
    raw_filter: str | None = None,
    limit: int | None = None,
    budget: RowBudget | None = None,
) -> int:
    """Stream a collection to `visitor`.

    Args:
        context: Connection providing the cached client.
        resource: Collection to list.
        visitor: Called once per item.
        predicates: Column constraints to push down where supported.
        raw_filter: Explicit ``$filter`` overriding `predicates`.
        limit: Row limit, used to size the first page.
        budget: Row budget polled after every item.

    Returns:
        Number of items emitted. A Graph error matching the resource's list
        ignore patterns ends the listing early instead of raising.

    Raises:
        AuthError, ConfigError: If no session can be established.
        GraphAPIError: On any other Graph failure.
    """
    filter_expression = build_filter(predicates, resource.filters, raw_filter)
    top = page_size_for_limit(limit, resource.max_page_size)
    client = context.get_client()

    emitted = 0

    def counting_visitor(item: dict[str, Any]) -> Any:
        nonlocal emitted
        result = visitor(item)
        emitted += 1
        return result

    try:
        first_page = client.list_page(resource.path, filter=filter_expression, top=top)
        iterator = PageIterator(client.next_page, first_page)
        return iterator.iterate(counting_visitor, budget)
    except GraphAPIError as e:
        if is_ignorable_error(e, resource.list_ignore_patterns):
            logger.debug(f"{resource.name}: ignoring list error after {emitted} items: {normalize_error(e)}")
            return emitted
        logger.error(f"{resource.name}: list failed: {normalize_error(e)}")
        raise


def get_item(context: ConnectionContext, resource: ResourceDefinition, item_id: str | None) -> dict[str, Any] | None:
    """Fetch one item by id.

    Returns:
        The item, or None when `item_id` is empty or Graph reports an error
        matching the resource's ignore patterns.
    """
    if not item_id:
        return None

    client = context.get_client()
    try:
        return client.get_item(resource.item_path(item_id))
    except GraphAPIError as e:
        if is_ignorable_error(e, resource.get_ignore_patterns):
            logger.debug(f"{resource.name}: ignoring error for {item_id}: {normalize_error(e)}")
            return None
        logger.error(f"{resource.name}: get failed for {item_id}: {normalize_error(e)}")
        raise
