"""Azure AD Graph Core - Shared runtime library for Microsoft Graph directory queries.

This library provides the pieces a directory-querying plugin needs:
- Credential method selection (secret → certificate → managed identity → Azure CLI)
- A connection-scoped session/client cache
- OData `$filter` synthesis from column predicates
- Paged collection iteration with a caller-owned row budget
- Normalized Graph error classification

Example:
    ```python
    from azuread_graph_core import ConnectionContext
    from azuread_graph_core.query import Predicate, RowCounter
    from azuread_graph_core.resources import DIRECTORY_AUDITS, list_items

    context = ConnectionContext.from_values({"tenant_id": "contoso.onmicrosoft.com"})
    rows = RowCounter(limit=50)

    def visit(item):
        print(item["activityDisplayName"])
        rows.decrement()

    list_items(
        context,
        DIRECTORY_AUDITS,
        visit,
        predicates=[Predicate("category", "=", "UserManagement")],
        limit=50,
        budget=rows,
    )
    ```
"""

from azuread_graph_core.session import ConnectionContext, SessionCache

__version__ = "0.1.0"

__all__ = ["ConnectionContext", "SessionCache", "__version__"]
