"""Render search requests and response pages as indented structured text."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from retail_search.search.models import BoostCondition, SearchRequest, SearchResponsePage

_INDENT = 2


def request_fields(request: SearchRequest) -> dict[str, Any]:
    """Return the request in wire shape with camelCase keys and defaults omitted."""

    return _prune(
        {
            "placement": request.placement,
            "query": request.query,
            "boostSpec": {
                "conditionBoostSpecs": [
                    {"condition": item.condition, "boost": item.boost}
                    for item in request.boost_spec
                ]
            },
            "visitorId": request.visitor_id,
            "pageSize": request.page_size,
        }
    )


def response_fields(page: SearchResponsePage) -> dict[str, Any]:
    """Return the diagnostic fields of a response page.

    Nested mappings are rendered as the backend produced them; map keys inside
    results and facets are catalog data and keep their spelling.
    """

    return _prune(
        {
            "results": list(page.results),
            "totalSize": page.total_size,
            "attributionToken": page.attribution_token,
            "nextPageToken": page.next_page_token,
            "facets": list(page.facets),
            "queryExpansionInfo": page.query_expansion_info,
        }
    )


def render_request(request: SearchRequest) -> str:
    return _dump(request_fields(request))


def render_response_page(page: SearchResponsePage) -> str:
    return _dump(response_fields(page))


def parse_request(text: str) -> SearchRequest:
    """Parse a rendered request; omitted fields come back as their defaults."""

    data = json.loads(text)
    if not isinstance(data, Mapping):
        raise ValueError("Rendered request must be a JSON object")
    boost_spec = data.get("boostSpec") or {}
    return SearchRequest(
        placement=data.get("placement", ""),
        query=data.get("query", ""),
        boost_spec=tuple(
            BoostCondition(
                condition=item.get("condition", ""),
                boost=float(item.get("boost", 0.0)),
            )
            for item in boost_spec.get("conditionBoostSpecs", ())
        ),
        visitor_id=data.get("visitorId", ""),
        page_size=int(data.get("pageSize", 0)),
    )


def _prune(value: Any) -> Any:
    # Sequence items are kept even when empty so positions survive.
    if isinstance(value, Mapping):
        pruned = {key: _prune(item) for key, item in value.items()}
        return {key: item for key, item in pruned.items() if not _is_default(item)}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_prune(item) for item in value]
    return value


def _is_default(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, Mapping, Sequence)):
        return len(value) == 0
    if isinstance(value, (bool, int, float)):
        return value == 0
    return False


def _dump(fields: Mapping[str, Any]) -> str:
    return json.dumps(fields, indent=_INDENT, ensure_ascii=False, allow_nan=False, default=str)


__all__ = [
    "parse_request",
    "render_request",
    "render_response_page",
    "request_fields",
    "response_fields",
]
