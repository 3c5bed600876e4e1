"""Tests for the category schema registries."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from facetsearch.errors import CategoryNotFound
from facetsearch.registry import InMemorySchemaRegistry, ModelSchemaRegistry
from facetsearch.schema import CategorySchema, ValueType
from tests.models import Category


class TestInMemorySchemaRegistry:
    def test_lookup(self) -> None:
        schema = CategorySchema(1, "books", "Books")
        registry = InMemorySchemaRegistry([schema])
        assert registry.get_schema("books") is schema
        assert registry.list_schemas() == [schema]

    def test_unknown_slug(self) -> None:
        with pytest.raises(CategoryNotFound) as excinfo:
            InMemorySchemaRegistry([]).get_schema("books")
        assert excinfo.value.slug == "books"

    def test_duplicate_slug(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            InMemorySchemaRegistry(
                [CategorySchema(1, "books", "Books"), CategorySchema(2, "books", "B")]
            )


@pytest.mark.django_db
class TestModelSchemaRegistry:
    def test_get_schema(self, catalog: dict[str, Any]) -> None:
        schema = ModelSchemaRegistry(Category).get_schema("laptops")
        assert schema.id == catalog["laptops"].pk
        assert schema.get("brand").value_type is ValueType.ENUMERATED
        assert schema.get("backlit").value_type is ValueType.BOOLEAN

    def test_unknown_slug(self, catalog: dict[str, Any]) -> None:
        with pytest.raises(CategoryNotFound):
            ModelSchemaRegistry(Category).get_schema("does-not-exist")

    def test_list_schemas_ordered_by_name(self, catalog: dict[str, Any]) -> None:
        slugs = [s.slug for s in ModelSchemaRegistry(Category).list_schemas()]
        assert slugs == ["headphones", "laptops"]

    def test_malformed_definitions_are_skipped(
        self, db: None, caplog: pytest.LogCaptureFixture
    ) -> None:
        Category.objects.create(
            name="Books",
            slug="books",
            attribute_schema=[
                {"key": "genre", "name": "Genre", "type": "enum", "options": ["Fiction"]},
                {"key": "genre", "name": "Genre again", "type": "boolean"},
                {"key": "format", "name": "Format", "type": "enum"},
                {"name": "No key", "type": "boolean"},
                "paperback",
                {"key": "signed", "name": "Signed", "type": "boolean"},
            ],
        )
        with caplog.at_level(logging.WARNING, logger="facetsearch.registry"):
            schema = ModelSchemaRegistry(Category).get_schema("books")
        assert [d.key for d in schema.attributes] == ["genre", "signed"]
        assert len(caplog.records) == 4

    def test_cache_serves_stale_schema_until_invalidated(
        self, catalog: dict[str, Any]
    ) -> None:
        registry = ModelSchemaRegistry(Category, cache_timeout=60)
        assert len(registry.get_schema("laptops").attributes) == 5
        Category.objects.filter(slug="laptops").update(attribute_schema=[])
        assert len(registry.get_schema("laptops").attributes) == 5
        registry.invalidate("laptops")
        assert registry.get_schema("laptops").attributes == ()

    def test_negative_cache_timeout(self) -> None:
        with pytest.raises(ValueError, match="cache_timeout"):
            ModelSchemaRegistry(Category, cache_timeout=-1)
