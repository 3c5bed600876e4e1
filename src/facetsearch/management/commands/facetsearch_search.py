"""Run one faceted search and print the response JSON."""

from __future__ import annotations

import argparse

from django.core.management.base import BaseCommand, CommandError

from facetsearch.engine import build_engine
from facetsearch.errors import StoreFailure
from facetsearch.management.commands._facetsearch_cli_utils import write_json
from facetsearch.request import parse_search_params


class Command(BaseCommand):
    help = "Search listings with the same parameters the search endpoint accepts."

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("q", nargs="?", default="", help="Free-text query.")
        parser.add_argument("--category", default="", help="Category slug.")
        parser.add_argument(
            "--filters",
            default=None,
            help='Attribute filters as a JSON object, e.g. \'{"brand": ["Dell"]}\'.',
        )
        parser.add_argument("--page", default=None, help="Page number (1-based).")
        parser.add_argument("--limit", default=None, help="Results per page.")

    def handle(self, *_args: object, **options: object) -> None:
        request = parse_search_params(
            {
                "q": options["q"],
                "category": options["category"],
                "filters": options["filters"],
                "page": options["page"],
                "limit": options["limit"],
            }
        )
        try:
            response = build_engine().search(request)
        except StoreFailure as exc:
            raise CommandError(f"Search failed: {exc}") from exc
        write_json(self.stdout, response.to_dict())
