"""Build boosted search requests."""

from __future__ import annotations

import logging

from retail_search.search.models import BoostCondition, SearchRequest
from retail_search.search.render import render_request

logger = logging.getLogger(__name__)

PLACEMENT_TEMPLATE = (
    "projects/{project_number}/locations/global/catalogs/default_catalog"
    "/placements/default_search"
)


def placement_for(project_number: str | None) -> str:
    """Return the default search placement for a project.

    The placement names the serving configuration that handles the request.
    A missing project number is interpolated as-is and rejected remotely.
    """

    return PLACEMENT_TEMPLATE.format(project_number=project_number or "")


def build_search_request(
    query: str,
    condition: str,
    boost_strength: float,
    *,
    placement: str,
    visitor_id: str,
    page_size: int,
) -> SearchRequest:
    """Build a request that re-ranks results matching ``condition`` by ``boost_strength``."""

    request = SearchRequest(
        placement=placement,
        query=query,
        boost_spec=(BoostCondition(condition=condition, boost=boost_strength),),
        visitor_id=visitor_id,
        page_size=page_size,
    )
    logger.info(
        "Search request:\n%s",
        render_request(request),
        extra={"placement": request.placement, "query": request.query},
    )
    return request


__all__ = ["PLACEMENT_TEMPLATE", "build_search_request", "placement_for"]
