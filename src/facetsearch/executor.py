"""Paged execution of compiled predicates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from facetsearch.predicate import CompiledPredicate
from facetsearch.store import DjangoListingStore


@dataclass(frozen=True)
class PageResult:
    items: list[Any]
    total_matches: int


class QueryExecutor:
    def __init__(self, store: DjangoListingStore) -> None:
        self.store = store

    def execute(
        self, predicate: CompiledPredicate, page: int, page_size: int
    ) -> PageResult:
        """Fetch page ``page`` (1-based) of the matches in store order.

        Pages past the end are empty but still carry the total.
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be >= 1.")
        items, total = self.store.fetch_page(
            predicate, offset=(page - 1) * page_size, limit=page_size
        )
        return PageResult(items=items, total_matches=total)
