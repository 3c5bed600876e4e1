"""Pytest configuration shared across unit and database tests."""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import urlparse

import django
import pytest
from django.conf import settings
from django.core.cache import cache


def _database_settings() -> dict[str, object]:
    database_url = os.environ.get("FACETSEARCH_TEST_DSN")
    if not database_url:
        return {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}
    parsed = urlparse(database_url)
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/") or "postgres",
        "USER": parsed.username or "",
        "PASSWORD": parsed.password or "",
        "HOST": parsed.hostname or "",
        "PORT": parsed.port or "",
        "TEST": {"NAME": os.environ.get("FACETSEARCH_TEST_DB", "facetsearch_test")},
    }


def pytest_configure(config: Any) -> None:
    """Ensure Django is initialized before test modules import models."""
    if not settings.configured:
        settings.configure(
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "facetsearch",
                "tests",
            ],
            DATABASES={"default": _database_settings()},
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            SECRET_KEY="tests-secret-key",
            MIGRATION_MODULES={"tests": None},
            USE_TZ=True,
            FACETSEARCH={
                "CATEGORY_MODEL": "tests.Category",
                "LISTING_MODEL": "tests.Listing",
                "SCHEMA_CACHE_TIMEOUT": 0,
            },
        )
    django.setup()


@pytest.fixture(autouse=True)
def _clear_cache() -> None:
    cache.clear()


LAPTOP_SCHEMA = [
    {
        "key": "brand",
        "name": "Brand",
        "type": "enum",
        "options": ["Dell", "HP", "Apple"],
    },
    {"key": "ram_gb", "name": "RAM (GB)", "type": "enum", "options": ["8", "16"]},
    {"key": "backlit", "name": "Backlit Keyboard", "type": "boolean"},
    {"key": "weight_kg", "name": "Weight (kg)", "type": "number"},
    {"key": "model", "name": "Model", "type": "string"},
]

HEADPHONE_SCHEMA = [
    {"key": "noise_cancellation", "name": "Noise Cancellation", "type": "boolean"},
    {"key": "color", "name": "Color", "type": "enum", "options": ["Black", "White"]},
]


def _laptop_rows() -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for i in range(10):
        rows.append(
            {
                "title": f"Dell Latitude {i}",
                "description": "Business laptop with a sturdy chassis",
                "attributes": {
                    "brand": "Dell",
                    "ram_gb": "8" if i % 2 == 0 else "16",
                    "backlit": i % 3 == 0,
                    "weight_kg": 1.4,
                    "model": f"L{i}",
                },
            }
        )
    for i in range(5):
        rows.append(
            {
                "title": f"HP EliteBook {i}",
                "description": "Lightweight ultrabook for travel",
                "attributes": {"brand": "HP", "ram_gb": "16", "backlit": True},
            }
        )
    for i in range(3):
        rows.append(
            {
                "title": f"MacBook Air {i}",
                "description": "Apple silicon Ultrabook",
                "attributes": {"brand": "Apple", "ram_gb": "8", "backlit": True},
            }
        )
    return rows


@pytest.fixture
def catalog(db: None) -> dict[str, Any]:
    """Seed a laptops category (10 Dell, 5 HP, 3 Apple) and a headphones category."""
    from tests.models import Category, Listing

    laptops = Category.objects.create(
        name="Laptops", slug="laptops", attribute_schema=LAPTOP_SCHEMA
    )
    headphones = Category.objects.create(
        name="Headphones", slug="headphones", attribute_schema=HEADPHONE_SCHEMA
    )
    for row in _laptop_rows():
        Listing.objects.create(
            category=laptops,
            price="999.00",
            location="Bengaluru",
            images=["https://example.com/laptop.png"],
            **row,
        )
    Listing.objects.create(
        category=headphones,
        title="Sony WH-1000XM5",
        description="Over-ear headphones",
        price="349.99",
        location="Mumbai",
        attributes={"noise_cancellation": True, "color": "Black", "brand": "Sony"},
    )
    Listing.objects.create(
        category=headphones,
        title="Budget earbuds",
        description="In-ear headphones",
        price="19.99",
        location="Delhi",
        attributes={"noise_cancellation": False, "color": ""},
    )
    return {"laptops": laptops, "headphones": headphones}
