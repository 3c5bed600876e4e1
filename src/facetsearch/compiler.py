"""Compile raw filter requests into validated predicates."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from facetsearch.errors import CategoryNotFound
from facetsearch.predicate import MATCH_NOTHING, AttributeClause, CompiledPredicate
from facetsearch.registry import SchemaRegistry
from facetsearch.request import FilterRequest
from facetsearch.schema import (
    AttributeDefinition,
    CategorySchema,
    ValueType,
    is_valid_attribute_key,
)

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true"})
_FALSE_STRINGS = frozenset({"false"})


def _is_scalar(value: object) -> bool:
    # json.loads accepts NaN, Infinity and 1e999; none of them can be stored.
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return value is None or isinstance(value, str | int | float | bool)


def _as_list(value: object) -> list[Any]:
    if isinstance(value, list | tuple | set | frozenset):
        return list(value)
    return [value]


def _dedupe(values: list[Any]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for value in values:
        # bools and ints compare equal; keep them apart.
        if not any(type(v) is type(value) and v == value for v in seen):
            seen.append(value)
    return tuple(seen)


def coerce_bool(value: object) -> bool | None:
    """Coerce ``True``/``False``/``"true"``/``"false"``; anything else is None."""
    if isinstance(value, list | tuple) and len(value) == 1:
        value = value[0]
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    return None


def normalize_enum_values(value: object) -> tuple[str, ...] | None:
    """Normalize one or many requested enumerated values to a tuple of strings.

    Returns None when the payload contains something that is not a scalar.
    """
    normalized: list[str] = []
    for item in _as_list(value):
        if item is None or isinstance(item, bool) or not _is_scalar(item):
            return None
        text = str(item).strip()
        if text:
            normalized.append(text)
    return _dedupe(normalized)


class FilterCompiler:
    """Turn a ``FilterRequest`` into a ``CompiledPredicate`` for one category.

    Invalid filters never abort compilation: each one is logged and dropped,
    and the remaining clauses still apply.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def compile(
        self, request: FilterRequest
    ) -> tuple[CompiledPredicate, CategorySchema | None]:
        schema: CategorySchema | None = None
        if request.category_slug:
            try:
                schema = self.registry.get_schema(request.category_slug)
            except CategoryNotFound:
                logger.info(
                    "Category slug %r not found; returning empty results",
                    request.category_slug,
                )
                return MATCH_NOTHING, None

        clauses: list[AttributeClause] = []
        filters = request.attribute_filters
        if not isinstance(filters, Mapping):
            logger.warning("Ignoring attribute filters that are not a mapping: %r", filters)
            filters = {}
        for key, requested in filters.items():
            clause = self._compile_attribute(schema, key, requested)
            if clause is not None:
                clauses.append(clause)

        predicate = CompiledPredicate(
            category_id=schema.id if schema is not None else None,
            text=request.free_text.strip(),
            attribute_clauses=tuple(clauses),
        )
        logger.debug("Compiled predicate: %s", predicate.describe())
        return predicate, schema

    def _compile_attribute(
        self, schema: CategorySchema | None, key: object, requested: object
    ) -> AttributeClause | None:
        if not is_valid_attribute_key(key):
            logger.warning("Dropping filter on invalid attribute key %r", key)
            return None
        definition = schema.get(key) if schema is not None else None
        if definition is None:
            return self._compile_untyped(key, requested)
        if definition.value_type is ValueType.ENUMERATED:
            return self._compile_enumerated(definition, requested)
        if definition.value_type is ValueType.BOOLEAN:
            return self._compile_boolean(definition, requested)
        logger.warning(
            "Dropping filter on %s attribute %r; only enumerated and boolean "
            "attributes are filterable",
            definition.value_type.value,
            key,
        )
        return None

    def _compile_enumerated(
        self, definition: AttributeDefinition, requested: object
    ) -> AttributeClause | None:
        values = normalize_enum_values(requested)
        if values is None:
            logger.warning(
                "Dropping malformed filter on %r: %r", definition.key, requested
            )
            return None
        if not values:
            logger.debug("Empty selection for %r; filter not applied", definition.key)
            return None
        unknown = [v for v in values if v not in definition.allowed_values]
        if unknown:
            logger.debug(
                "Filter on %r requests values outside the schema: %r",
                definition.key,
                unknown,
            )
        return AttributeClause(key=definition.key, operator="in", values=values)

    def _compile_boolean(
        self, definition: AttributeDefinition, requested: object
    ) -> AttributeClause | None:
        value = coerce_bool(requested)
        if value is None:
            logger.warning(
                "Dropping filter on boolean %r: cannot coerce %r",
                definition.key,
                requested,
            )
            return None
        return AttributeClause(key=definition.key, operator="eq", values=(value,))

    def _compile_untyped(self, key: str, requested: object) -> AttributeClause | None:
        values = _as_list(requested)
        if not values:
            return None
        if not all(_is_scalar(v) and v is not None for v in values):
            logger.warning("Dropping malformed filter on %r: %r", key, requested)
            return None
        logger.debug("Applying untyped filter on attribute %r not in schema", key)
        if isinstance(requested, list | tuple | set | frozenset):
            return AttributeClause(
                key=key, operator="in", values=_dedupe(values), typed=False
            )
        return AttributeClause(key=key, operator="eq", values=(requested,), typed=False)
