"""Search requests and transport parameter parsing."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from facetsearch.conf import get_setting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterRequest:
    """One search request.

    ``attribute_filters`` maps attribute keys to a single requested value or a
    list of values; values are validated later by the filter compiler.
    """

    free_text: str = ""
    category_slug: str = ""
    attribute_filters: Mapping[str, Any] = field(default_factory=dict)
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int):
            raise TypeError("page must be an integer.")
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int):
            raise TypeError("page_size must be an integer.")
        if self.page < 1:
            raise ValueError("page must be >= 1.")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1.")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _positive_int(raw: object, default: int, *, name: str) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.warning("Ignoring non-numeric %s parameter: %r", name, raw)
        return default
    if value < 1:
        logger.warning("Ignoring non-positive %s parameter: %r", name, raw)
        return default
    return value


def parse_filters(raw: str | None) -> dict[str, Any]:
    """Decode the ``filters`` JSON object; anything malformed yields ``{}``."""
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to parse filters JSON %r: %s", raw, exc)
        return {}
    if not isinstance(decoded, dict):
        logger.warning(
            "Ignoring filters payload that is not a JSON object: %r", raw
        )
        return {}
    return decoded


def _get(params: Mapping[str, Any], name: str) -> Any:
    # QueryDict.get returns the last value for repeated keys.
    value = params.get(name)
    if isinstance(value, list | tuple):
        return value[-1] if value else None
    return value


def parse_search_params(params: Mapping[str, Any]) -> FilterRequest:
    """Build a ``FilterRequest`` from ``q``/``category``/``filters``/``page``/``limit``.

    ``pageSize`` is accepted as an alias of ``limit``. Page sizes above
    ``MAX_PAGE_SIZE`` are clamped.
    """
    default_page_size = int(get_setting("DEFAULT_PAGE_SIZE"))
    max_page_size = int(get_setting("MAX_PAGE_SIZE"))

    raw_limit = _get(params, "pageSize")
    if raw_limit in (None, ""):
        raw_limit = _get(params, "limit")
    page_size = _positive_int(raw_limit, default_page_size, name="limit")
    if page_size > max_page_size:
        logger.debug("Clamping page size %d to %d", page_size, max_page_size)
        page_size = max_page_size

    return FilterRequest(
        free_text=str(_get(params, "q") or "").strip(),
        category_slug=str(_get(params, "category") or "").strip(),
        attribute_filters=parse_filters(_get(params, "filters")),
        page=_positive_int(_get(params, "page"), 1, name="page"),
        page_size=page_size,
    )
