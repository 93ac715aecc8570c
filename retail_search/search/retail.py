"""Search backend backed by the Google Cloud Retail API."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from google.api_core.client_options import ClientOptions
from google.cloud import retail_v2

from retail_search.search.models import SearchRequest, SearchResponsePage

if TYPE_CHECKING:
    from retail_search.config import AppConfig

logger = logging.getLogger(__name__)


class RetailSearchBackend:
    """Adapt a ``retail_v2.SearchServiceClient`` to the search backend interface.

    The client is shared and may serve many calls; it is never reconfigured
    here. Retries, deadlines and credentials are left to the client.
    """

    def __init__(self, client: retail_v2.SearchServiceClient) -> None:
        self._client = client

    def search(self, request: SearchRequest) -> Iterator[SearchResponsePage]:
        pager = self._client.search(request=to_retail_request(request))
        for response in pager.pages:
            yield to_response_page(response)


def create_backend(config: AppConfig) -> RetailSearchBackend:
    client_options = None
    if config.google.api_endpoint:
        client_options = ClientOptions(api_endpoint=config.google.api_endpoint)
    client = retail_v2.SearchServiceClient(client_options=client_options)
    logger.debug(
        "Initialized Retail search client",
        extra={"api_endpoint": config.google.api_endpoint or "default"},
    )
    return RetailSearchBackend(client)


def to_retail_request(request: SearchRequest) -> retail_v2.SearchRequest:
    boost_spec = retail_v2.SearchRequest.BoostSpec(
        condition_boost_specs=[
            retail_v2.SearchRequest.BoostSpec.ConditionBoostSpec(
                condition=item.condition,
                boost=item.boost,
            )
            for item in request.boost_spec
        ]
    )
    return retail_v2.SearchRequest(
        placement=request.placement,
        query=request.query,
        boost_spec=boost_spec,
        visitor_id=request.visitor_id,
        page_size=request.page_size,
    )


def to_response_page(response: retail_v2.SearchResponse) -> SearchResponsePage:
    # Field names come back camelCased; map keys are left untouched.
    data: dict[str, Any] = type(response).to_dict(response, preserving_proto_field_name=False)
    return SearchResponsePage(
        results=tuple(data.get("results") or ()),
        total_size=response.total_size,
        attribution_token=response.attribution_token,
        next_page_token=response.next_page_token,
        facets=tuple(data.get("facets") or ()),
        query_expansion_info=data.get("queryExpansionInfo") or None,
    )


__all__ = ["RetailSearchBackend", "create_backend", "to_response_page", "to_retail_request"]
