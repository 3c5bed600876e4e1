"""Tests for the facetsearch management commands."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

pytestmark = [pytest.mark.django_db, pytest.mark.usefixtures("catalog")]


def _run(*args: str) -> object:
    out = StringIO()
    call_command(*args, stdout=out)
    return json.loads(out.getvalue())


def test_categories_command() -> None:
    payload = _run("facetsearch_categories")
    assert [category["slug"] for category in payload] == ["headphones", "laptops"]


def test_categories_command_single_slug() -> None:
    (category,) = _run("facetsearch_categories", "--slug", "laptops")
    assert category["name"] == "Laptops"


def test_categories_command_unknown_slug() -> None:
    with pytest.raises(CommandError, match="Unknown category slug"):
        call_command("facetsearch_categories", "--slug", "nope", stdout=StringIO())


def test_search_command() -> None:
    payload = _run(
        "facetsearch_search",
        "ultrabook",
        "--category",
        "laptops",
        "--filters",
        '{"brand": "HP"}',
        "--limit",
        "2",
    )
    assert payload["totalResults"] == 5
    assert payload["totalPages"] == 3
    assert len(payload["listings"]) == 2
