"""Shape search results into the response contract."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from facetsearch.facets import FacetResult
from facetsearch.schema import AttributeDefinition, CategorySchema

FAILURE_MESSAGE = "Internal server error during search"
CATEGORIES_FAILURE_MESSAGE = "Server error"


def _number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def serialize_listing(listing: Any, *, category_field: str = "category") -> dict[str, Any]:
    """Project a listing instance onto the public listing shape."""
    return {
        "id": listing.pk,
        "title": listing.title,
        "description": listing.description,
        "price": _number(listing.price),
        "location": listing.location,
        "categoryId": getattr(listing, f"{category_field}_id", None),
        "images": list(getattr(listing, "images", None) or []),
        "attributes": dict(listing.attributes or {}),
        "createdAt": getattr(listing, "created_at", None),
        "updatedAt": getattr(listing, "updated_at", None),
    }


@dataclass(frozen=True)
class SearchResponse:
    listings: list[dict[str, Any]]
    facets: FacetResult
    category_attribute_schema: tuple[AttributeDefinition, ...]
    total_results: int
    current_page: int
    total_pages: int
    page_size: int = field(default=10, compare=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "listings": self.listings,
            "facets": {
                key: [bucket.to_dict() for bucket in buckets]
                for key, buckets in self.facets.items()
            },
            "categoryAttributeSchema": [
                definition.to_dict() for definition in self.category_attribute_schema
            ],
            "totalResults": self.total_results,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
        }


def assemble(
    *,
    items: list[Any],
    total_matches: int,
    facets: FacetResult,
    schema: CategorySchema | None,
    page: int,
    page_size: int,
    category_field: str = "category",
) -> SearchResponse:
    return SearchResponse(
        listings=[serialize_listing(item, category_field=category_field) for item in items],
        facets=dict(facets),
        category_attribute_schema=schema.attributes if schema is not None else (),
        total_results=total_matches,
        current_page=page,
        total_pages=math.ceil(total_matches / page_size) if total_matches else 0,
        page_size=page_size,
    )


def empty_response(page: int = 1, page_size: int = 10) -> SearchResponse:
    return SearchResponse(
        listings=[],
        facets={},
        category_attribute_schema=(),
        total_results=0,
        current_page=page,
        total_pages=0,
        page_size=page_size,
    )


def failure_payload(message: str = FAILURE_MESSAGE) -> dict[str, str]:
    return {"message": message}
