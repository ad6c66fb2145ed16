"""Query building and paged retrieval."""

from azuread_graph_core.query.filters import FilterSpec, Predicate, build_filter, page_size_for_limit
from azuread_graph_core.query.pagination import IteratorState, Page, PageIterator, RowBudget, RowCounter

__all__ = [
    "FilterSpec",
    "IteratorState",
    "Page",
    "PageIterator",
    "Predicate",
    "RowBudget",
    "RowCounter",
    "build_filter",
    "page_size_for_limit",
]
