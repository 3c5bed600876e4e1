"""Facet value/count aggregation over the matching listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from facetsearch.predicate import CompiledPredicate
from facetsearch.schema import AttributeDefinition, CategorySchema, ValueType
from facetsearch.store import DjangoListingStore

logger = logging.getLogger(__name__)


class FacetPolicy(str, Enum):
    """Which listings an attribute's facet counts.

    ``INCLUSIVE`` counts over the full result set, including the attribute's
    own active filter, so a filtered attribute only shows its selected
    values. ``MARGINAL`` drops the attribute's own clause when counting it,
    so sibling values stay visible with the count they would yield.
    """

    INCLUSIVE = "inclusive"
    MARGINAL = "marginal"


@dataclass(frozen=True)
class FacetBucket:
    value: str | bool
    count: int

    def to_dict(self) -> dict[str, object]:
        return {"value": self.value, "count": self.count}


FacetResult = dict[str, list[FacetBucket]]


def _enum_label(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    # Stored JSON numbers come back as numbers from SQLite, as text elsewhere.
    if isinstance(value, int | float | Decimal):
        return str(value)
    return None


class FacetAggregator:
    """Compute facets for every enumerated and boolean attribute of a schema."""

    def __init__(
        self,
        store: DjangoListingStore,
        policy: FacetPolicy = FacetPolicy.INCLUSIVE,
    ) -> None:
        self.store = store
        self.policy = FacetPolicy(policy)

    def aggregate(
        self, predicate: CompiledPredicate, schema: CategorySchema | None
    ) -> FacetResult:
        if schema is None or predicate.match_nothing:
            return {}
        facets: FacetResult = {}
        for definition in schema.facetable_attributes():
            scope = predicate
            if self.policy is FacetPolicy.MARGINAL:
                scope = predicate.without_attribute(definition.key)
            if definition.value_type is ValueType.BOOLEAN:
                counts = self.store.facet_counts(scope, definition.key)
                facets[definition.key] = self._boolean_buckets(counts)
            else:
                counts = self.store.facet_counts(scope, definition.key, as_text=True)
                facets[definition.key] = self._enumerated_buckets(definition, counts)
        return facets

    @staticmethod
    def _boolean_buckets(counts: list[tuple[Any, int]]) -> list[FacetBucket]:
        totals = {True: 0, False: 0}
        for value, count in counts:
            if isinstance(value, bool):
                totals[value] += count
        return [FacetBucket(True, totals[True]), FacetBucket(False, totals[False])]

    @staticmethod
    def _enumerated_buckets(
        definition: AttributeDefinition, counts: list[tuple[Any, int]]
    ) -> list[FacetBucket]:
        totals: dict[str, int] = {}
        for value, count in counts:
            label = _enum_label(value)
            if label is None:
                if value not in (None, ""):
                    logger.debug(
                        "Skipping unusable facet value for %r: %r",
                        definition.key,
                        value,
                    )
                continue
            totals[label] = totals.get(label, 0) + count

        # Schema order first, then values the schema does not know by count.
        ordered = [v for v in definition.allowed_values if totals.get(v)]
        extra = sorted(
            (v for v in totals if v not in definition.allowed_values and totals[v]),
            key=lambda v: (-totals[v], v),
        )
        return [FacetBucket(value, totals[value]) for value in (*ordered, *extra)]
