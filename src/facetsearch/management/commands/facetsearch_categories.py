"""List category attribute schemas as JSON."""

from __future__ import annotations

import argparse

from django.core.management.base import BaseCommand, CommandError

from facetsearch.engine import build_engine
from facetsearch.errors import StoreFailure
from facetsearch.management.commands._facetsearch_cli_utils import write_json


class Command(BaseCommand):
    help = "List every category with its attribute schema."

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--slug",
            default=None,
            help="Only print the category with this slug.",
        )

    def handle(self, *_args: object, **options: object) -> None:
        try:
            schemas = build_engine().list_categories()
        except StoreFailure as exc:
            raise CommandError(f"Could not read categories: {exc}") from exc
        slug = options["slug"]
        if slug is not None:
            schemas = [schema for schema in schemas if schema.slug == slug]
            if not schemas:
                raise CommandError(f"Unknown category slug: {slug}")
        write_json(self.stdout, [schema.to_dict() for schema in schemas])
