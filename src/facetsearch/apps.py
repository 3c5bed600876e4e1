from __future__ import annotations

from django.apps import AppConfig


class FacetSearchConfig(AppConfig):
    name = "facetsearch"
    verbose_name = "Facet search"
