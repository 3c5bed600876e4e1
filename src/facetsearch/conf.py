"""Settings for facetsearch, read from ``settings.FACETSEARCH``.

Example::

    FACETSEARCH = {
        "CATEGORY_MODEL": "catalog.Category",
        "LISTING_MODEL": "catalog.Listing",
        "QUERY_TIMEOUT_MS": 2000,
    }
"""

from __future__ import annotations

from typing import Any

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, models

DEFAULTS: dict[str, Any] = {
    "CATEGORY_MODEL": None,
    "LISTING_MODEL": None,
    "DATABASE": DEFAULT_DB_ALIAS,
    "DEFAULT_PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
    "QUERY_TIMEOUT_MS": 5000,
    "SCHEMA_CACHE_TIMEOUT": 60,
    "FACET_POLICY": "inclusive",
    "TEXT_FIELDS": ("title", "description"),
    "ORDERING": ("created_at", "pk"),
}


def get_setting(name: str) -> Any:
    if name not in DEFAULTS:
        raise ImproperlyConfigured(f"Unknown FACETSEARCH setting: {name}.")
    user_settings = getattr(settings, "FACETSEARCH", None) or {}
    unknown = set(user_settings) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown FACETSEARCH settings: {', '.join(sorted(unknown))}."
        )
    return user_settings.get(name, DEFAULTS[name])


def get_model(name: str) -> type[models.Model]:
    """Resolve the ``"app_label.Model"`` string stored under setting ``name``."""
    label = get_setting(name)
    if not label:
        raise ImproperlyConfigured(f"FACETSEARCH['{name}'] must be set.")
    try:
        return apps.get_model(label, require_ready=False)
    except ValueError:
        raise ImproperlyConfigured(
            f"FACETSEARCH['{name}'] must be of the form 'app_label.model_name'."
        ) from None
    except LookupError:
        raise ImproperlyConfigured(
            f"FACETSEARCH['{name}'] refers to model '{label}' that has not been "
            "installed."
        ) from None
