"""Django ORM implementation of the listing store."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from django.db import DEFAULT_DB_ALIAS, connections, models, transaction
from django.db.models import Count, Window
from django.db.models.fields.json import KeyTextTransform, KeyTransform

from facetsearch.predicate import CompiledPredicate
from facetsearch.translate import ListingFields, predicate_to_q

logger = logging.getLogger(__name__)

_TOTAL_ALIAS = "_facetsearch_total"
_FACET_VALUE_ALIAS = "facet_value"


class DjangoListingStore:
    """Runs compiled predicates against a listing model.

    All reads of one search should happen inside ``snapshot()`` so the page,
    the total and the facet counts observe the same data.
    """

    def __init__(
        self,
        listing_model: type[models.Model],
        *,
        using: str = DEFAULT_DB_ALIAS,
        fields: ListingFields | None = None,
        ordering: Sequence[str] = ("created_at", "pk"),
        timeout_ms: int | None = None,
    ) -> None:
        if not ordering:
            raise ValueError("A deterministic ordering is required for pagination.")
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive.")
        if not any(name.lstrip("-") in ("pk", "id") for name in ordering):
            # Ties on the leading keys must not reorder rows between pages.
            ordering = (*ordering, "pk")
        self.listing_model = listing_model
        self.using = using
        self.fields = fields or ListingFields()
        self.ordering = tuple(ordering)
        self.timeout_ms = timeout_ms

    @property
    def vendor(self) -> str:
        return connections[self.using].vendor

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Open one read transaction bounded by ``timeout_ms``.

        PostgreSQL gets REPEATABLE READ so every statement sees the snapshot
        taken by the first one. SQLite transactions hold their read snapshot
        until they end. Other backends only get the atomic block.
        """
        connection = connections[self.using]
        outermost = not connection.in_atomic_block
        with transaction.atomic(using=self.using):
            if connection.vendor == "postgresql":
                with connection.cursor() as cursor:
                    if outermost:
                        cursor.execute(
                            "SET TRANSACTION ISOLATION LEVEL REPEATABLE READ"
                        )
                    if self.timeout_ms is not None:
                        cursor.execute(
                            "SELECT set_config('statement_timeout', %s, true)",
                            [f"{int(self.timeout_ms)}ms"],
                        )
            yield

    def queryset(self, predicate: CompiledPredicate) -> models.QuerySet[Any]:
        manager = self.listing_model._default_manager.using(self.using)
        return manager.filter(predicate_to_q(predicate, self.fields))

    def fetch_page(
        self, predicate: CompiledPredicate, *, offset: int, limit: int
    ) -> tuple[list[Any], int]:
        """Return one ordered page of listings and the total match count.

        The total rides along on the page rows as ``COUNT(*) OVER ()`` so both
        come from one statement; an empty page falls back to ``count()``.
        """
        if offset < 0 or limit < 1:
            raise ValueError("offset must be >= 0 and limit >= 1.")
        if predicate.match_nothing:
            return [], 0
        queryset = (
            self.queryset(predicate)
            .annotate(**{_TOTAL_ALIAS: Window(expression=Count("pk"))})
            .order_by(*self.ordering)[offset : offset + limit]
        )
        rows = list(queryset)
        if not rows:
            total = 0 if offset == 0 else self.count(predicate)
            return rows, total
        total = int(getattr(rows[0], _TOTAL_ALIAS))
        for row in rows:
            delattr(row, _TOTAL_ALIAS)
        return rows, total

    def count(self, predicate: CompiledPredicate) -> int:
        if predicate.match_nothing:
            return 0
        return self.queryset(predicate).count()

    def facet_counts(
        self, predicate: CompiledPredicate, key: str, *, as_text: bool = False
    ) -> list[tuple[Any, int]]:
        """Group matching listings by ``attributes[key]``.

        By default values come back decoded from JSON. With ``as_text`` they
        are the stored text as-is and JSON nulls are left out. Listings
        without the key are reported under ``None``.
        """
        if predicate.match_nothing:
            return []
        queryset = self.queryset(predicate)
        expression: KeyTransform
        if as_text:
            expression = KeyTextTransform(key, self.fields.attributes)
            queryset = queryset.exclude(
                **{f"{self.fields.attributes}__{key}__exact": None}
            )
        else:
            expression = KeyTransform(key, self.fields.attributes)
        rows = (
            queryset.values(**{_FACET_VALUE_ALIAS: expression})
            .annotate(count=Count("pk"))
            .order_by()
        )
        return [(row[_FACET_VALUE_ALIAS], int(row["count"])) for row in rows]
