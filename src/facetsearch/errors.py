"""Exceptions raised by the facet search engine."""

from __future__ import annotations


class FacetSearchError(Exception):
    """Base class for facet search errors."""


class CategoryNotFound(FacetSearchError, LookupError):
    """No category schema is registered under the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Unknown category slug: {slug!r}.")
        self.slug = slug


class StoreFailure(FacetSearchError):
    """The listing store could not complete a read.

    The message is safe to log but is never sent to clients; it may contain
    backend details.
    """
