"""Read-only access to category attribute schemas."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from django.core.cache import cache
from django.db import DEFAULT_DB_ALIAS, models

from facetsearch.errors import CategoryNotFound
from facetsearch.schema import AttributeDefinition, CategorySchema

logger = logging.getLogger(__name__)

_CACHE_PREFIX = "facetsearch:schema:"


class SchemaRegistry:
    """Interface of a category schema source."""

    def get_schema(self, slug: str) -> CategorySchema:
        raise NotImplementedError

    def list_schemas(self) -> list[CategorySchema]:
        raise NotImplementedError


class InMemorySchemaRegistry(SchemaRegistry):
    def __init__(self, schemas: Iterable[CategorySchema]) -> None:
        self._schemas: dict[str, CategorySchema] = {}
        for schema in schemas:
            if schema.slug in self._schemas:
                raise ValueError(f"Duplicate category slug: {schema.slug!r}.")
            self._schemas[schema.slug] = schema

    def get_schema(self, slug: str) -> CategorySchema:
        try:
            return self._schemas[slug]
        except KeyError:
            raise CategoryNotFound(slug) from None

    def list_schemas(self) -> list[CategorySchema]:
        return list(self._schemas.values())


def schema_from_instance(instance: Any) -> CategorySchema:
    """Build a ``CategorySchema`` from a category model instance.

    Malformed stored attribute records are logged and skipped so one bad
    definition does not take the whole category offline.
    """
    definitions: list[AttributeDefinition] = []
    seen: set[str] = set()
    for record in instance.attribute_schema or ():
        try:
            if not isinstance(record, Mapping):
                raise ValueError(f"expected an object, got {type(record).__name__}")
            definition = AttributeDefinition.from_dict(record)
        except ValueError as exc:
            logger.warning(
                "Skipping malformed attribute definition in category %r: %s",
                instance.slug,
                exc,
            )
            continue
        if definition.key in seen:
            logger.warning(
                "Skipping duplicate attribute %r in category %r",
                definition.key,
                instance.slug,
            )
            continue
        seen.add(definition.key)
        definitions.append(definition)
    return CategorySchema(
        id=instance.pk,
        slug=instance.slug,
        name=instance.name,
        attributes=tuple(definitions),
    )


class ModelSchemaRegistry(SchemaRegistry):
    """Schema registry backed by a category model.

    Resolved schemas are kept in Django's cache for ``cache_timeout`` seconds;
    ``cache_timeout=0`` reads the database on every call. Unknown slugs are
    never cached.
    """

    def __init__(
        self,
        category_model: type[models.Model],
        *,
        using: str = DEFAULT_DB_ALIAS,
        cache_timeout: int = 0,
    ) -> None:
        if cache_timeout < 0:
            raise ValueError("cache_timeout must be zero or positive.")
        self.category_model = category_model
        self.using = using
        self.cache_timeout = cache_timeout

    def _manager(self) -> models.QuerySet[Any]:
        return self.category_model._default_manager.using(self.using)

    def _cache_key(self, slug: str) -> str:
        return f"{_CACHE_PREFIX}{self.category_model._meta.label_lower}:{slug}"

    def get_schema(self, slug: str) -> CategorySchema:
        if self.cache_timeout:
            cached = cache.get(self._cache_key(slug))
            if cached is not None:
                return cached
        try:
            instance = self._manager().get(slug=slug)
        except self.category_model.DoesNotExist:
            raise CategoryNotFound(slug) from None
        schema = schema_from_instance(instance)
        if self.cache_timeout:
            cache.set(self._cache_key(slug), schema, self.cache_timeout)
        return schema

    def list_schemas(self) -> list[CategorySchema]:
        return [
            schema_from_instance(instance)
            for instance in self._manager().order_by("name", "pk")
        ]

    def invalidate(self, slug: str) -> None:
        cache.delete(self._cache_key(slug))
