"""JSON views for the search and category endpoints."""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from facetsearch.assembler import CATEGORIES_FAILURE_MESSAGE, failure_payload
from facetsearch.engine import SearchEngine, build_engine
from facetsearch.errors import StoreFailure
from facetsearch.request import parse_search_params


def _engine(engine: SearchEngine | None) -> SearchEngine:
    return engine if engine is not None else build_engine()


@require_GET
def search_view(request: HttpRequest, engine: SearchEngine | None = None) -> JsonResponse:
    filter_request = parse_search_params(request.GET)
    try:
        response = _engine(engine).search(filter_request)
    except StoreFailure:
        return JsonResponse(failure_payload(), status=500)
    return JsonResponse(response.to_dict())


@require_GET
def categories_view(
    request: HttpRequest, engine: SearchEngine | None = None
) -> JsonResponse:
    try:
        schemas = _engine(engine).list_categories()
    except StoreFailure:
        return JsonResponse(failure_payload(CATEGORIES_FAILURE_MESSAGE), status=500)
    return JsonResponse([schema.to_dict() for schema in schemas], safe=False)
