"""Paged collection iteration with cooperative early stop.

The iterator emits items from the first page, follows ``@odata.nextLink``
cursors one request at a time, and after every emitted item polls the caller's
row budget. Once the budget reads zero no further page is requested.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, Protocol

logger = logging.getLogger(__name__)

NEXT_LINK = "@odata.nextLink"


@dataclass
class Page:
    """One page of a Graph collection."""

    items: list[dict[str, Any]] = field(default_factory=list)
    next_link: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Page":
        return cls(items=list(data.get("value") or []), next_link=data.get(NEXT_LINK) or None)


class RowBudget(Protocol):
    """Caller-owned count of rows still wanted."""

    def remaining(self) -> int: ...


class RowCounter:
    """Thread-safe row budget decremented by whoever consumes the rows.

    Example:
        ```python
        budget = RowCounter(limit=10)

        def visit(item):
            rows.append(item)
            budget.decrement()
        ```
    """

    def __init__(self, limit: int):
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self._remaining = limit
        self._lock = Lock()

    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    def decrement(self, count: int = 1) -> int:
        with self._lock:
            self._remaining = max(self._remaining - count, 0)
            return self._remaining


class IteratorState(Enum):
    FETCHING = "fetching"
    EMITTING = "emitting"
    DONE = "done"


class PageIterator:
    """Stream the items of a paged collection to a visitor.

    Args:
        fetch_next: Retrieves the page behind a ``@odata.nextLink`` cursor.
        first_page: The already-fetched first page.

    Example:
        ```python
        first = client.list_page("auditLogs/signIns", top=100)
        emitted = PageIterator(client.next_page, first).iterate(visit, budget)
        ```
    """

    def __init__(self, fetch_next: Callable[[str], Page], first_page: Page):
        self._fetch_next = fetch_next
        self._page = first_page
        self.state = IteratorState.EMITTING
        self.pages_fetched = 1

    def iterate(self, visitor: Callable[[dict[str, Any]], Any], budget: RowBudget | None = None) -> int:
        """Emit items until the budget is spent or the cursor chain ends.

        Args:
            visitor: Called once per item.
            budget: Polled once after every emitted item; None means unlimited.

        Returns:
            Number of items passed to the visitor.

        Raises:
            RuntimeError: If the iterator has already finished.
            Exception: Whatever `fetch_next` raises, after moving to DONE.
        """
        if self.state is IteratorState.DONE:
            raise RuntimeError("PageIterator has already finished")

        emitted = 0
        while self.state is not IteratorState.DONE:
            if self.state is IteratorState.EMITTING:
                for item in self._page.items:
                    visitor(item)
                    emitted += 1
                    if budget is not None and budget.remaining() <= 0:
                        logger.debug(f"Row budget exhausted after {emitted} items")
                        self.state = IteratorState.DONE
                        return emitted

                self.state = IteratorState.FETCHING if self._page.next_link else IteratorState.DONE
                continue

            try:
                self._page = self._fetch_next(self._page.next_link)
            except Exception:
                self.state = IteratorState.DONE
                raise
            self.pages_fetched += 1
            self.state = IteratorState.EMITTING

        return emitted
