"""Search entry point: compile, execute, aggregate and assemble."""

from __future__ import annotations

import logging

from django.db import DatabaseError

from facetsearch import conf
from facetsearch.assembler import SearchResponse, assemble, empty_response
from facetsearch.compiler import FilterCompiler
from facetsearch.errors import StoreFailure
from facetsearch.executor import QueryExecutor
from facetsearch.facets import FacetAggregator, FacetPolicy
from facetsearch.registry import ModelSchemaRegistry, SchemaRegistry
from facetsearch.request import FilterRequest
from facetsearch.schema import CategorySchema
from facetsearch.store import DjangoListingStore
from facetsearch.translate import ListingFields

logger = logging.getLogger(__name__)


class SearchEngine:
    """Faceted search over one listing store.

    ``search()`` either returns a complete ``SearchResponse`` or raises
    ``StoreFailure``; it never returns listings with partial facets.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        store: DjangoListingStore,
        *,
        facet_policy: FacetPolicy | str = FacetPolicy.INCLUSIVE,
    ) -> None:
        self.registry = registry
        self.store = store
        self.compiler = FilterCompiler(registry)
        self.executor = QueryExecutor(store)
        self.aggregator = FacetAggregator(store, FacetPolicy(facet_policy))

    def search(self, request: FilterRequest) -> SearchResponse:
        try:
            return self._search(request)
        except DatabaseError as exc:
            logger.exception("Search failed for request %r", request)
            raise StoreFailure(str(exc)) from exc

    def _search(self, request: FilterRequest) -> SearchResponse:
        predicate, schema = self.compiler.compile(request)
        if predicate.match_nothing:
            return empty_response(page_size=request.page_size)

        with self.store.snapshot():
            page = self.executor.execute(predicate, request.page, request.page_size)
            facets = (
                self.aggregator.aggregate(predicate, schema)
                if page.total_matches
                else {}
            )

        response = assemble(
            items=page.items,
            total_matches=page.total_matches,
            facets=facets,
            schema=schema,
            page=request.page,
            page_size=request.page_size,
            category_field=self.store.fields.category,
        )
        logger.debug(
            "Search %r returned %d of %d results (page %d/%d)",
            request.free_text,
            len(response.listings),
            response.total_results,
            response.current_page,
            response.total_pages,
        )
        return response

    def list_categories(self) -> list[CategorySchema]:
        try:
            return self.registry.list_schemas()
        except DatabaseError as exc:
            logger.exception("Listing categories failed")
            raise StoreFailure(str(exc)) from exc


def build_engine() -> SearchEngine:
    """Build a ``SearchEngine`` from ``settings.FACETSEARCH``."""
    using = conf.get_setting("DATABASE")
    timeout_ms = conf.get_setting("QUERY_TIMEOUT_MS")
    registry = ModelSchemaRegistry(
        conf.get_model("CATEGORY_MODEL"),
        using=using,
        cache_timeout=int(conf.get_setting("SCHEMA_CACHE_TIMEOUT") or 0),
    )
    store = DjangoListingStore(
        conf.get_model("LISTING_MODEL"),
        using=using,
        fields=ListingFields(text=tuple(conf.get_setting("TEXT_FIELDS"))),
        ordering=tuple(conf.get_setting("ORDERING")),
        timeout_ms=int(timeout_ms) if timeout_ms else None,
    )
    return SearchEngine(
        registry, store, facet_policy=conf.get_setting("FACET_POLICY")
    )
