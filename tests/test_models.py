"""Tests for write-time validation on the abstract catalog models."""

from __future__ import annotations

from typing import Any

import pytest
from django.core.exceptions import ValidationError

from tests.models import Listing

pytestmark = pytest.mark.django_db


def _listing(category: Any, attributes: Any) -> Listing:
    return Listing(
        category=category,
        title="ThinkPad X1",
        description="Carbon",
        price="1500.00",
        location="Chennai",
        attributes=attributes,
    )


def test_valid_attributes_pass(catalog: dict[str, Any]) -> None:
    _listing(
        catalog["laptops"], {"brand": "HP", "backlit": False, "weight_kg": 1.1}
    ).clean()


def test_stray_attributes_are_tolerated(catalog: dict[str, Any]) -> None:
    _listing(catalog["laptops"], {"brand": "Dell", "colour": "black"}).clean()


def test_invalid_enumerated_value(catalog: dict[str, Any]) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _listing(catalog["laptops"], {"brand": "Lenovo"}).clean()
    assert "attributes" in excinfo.value.message_dict


def test_attributes_must_be_an_object(catalog: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        _listing(catalog["laptops"], ["brand"]).clean()


def test_category_to_schema(catalog: dict[str, Any]) -> None:
    schema = catalog["headphones"].to_schema()
    assert schema.slug == "headphones"
    assert [d.key for d in schema.facetable_attributes()] == [
        "noise_cancellation",
        "color",
    ]
