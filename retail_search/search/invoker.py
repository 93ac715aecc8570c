"""Send search requests and surface the first response page."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator
from typing import Protocol

from google.api_core.exceptions import GoogleAPICallError

from retail_search.search.models import SearchRequest, SearchResponsePage
from retail_search.search.render import render_response_page

logger = logging.getLogger(__name__)


class SearchBackend(Protocol):
    def search(self, request: SearchRequest) -> Iterable[SearchResponsePage]:
        """Return a lazy sequence of response pages for ``request``."""
        ...


def search(request: SearchRequest, backend: SearchBackend) -> Iterator[SearchResponsePage]:
    """Invoke ``backend`` and return its pages, logging the first one.

    The first page is fetched before returning so it can be logged; later
    pages are fetched only as the caller iterates. Remote failures are logged
    and re-raised unchanged.
    """

    pages = _fetch_pages(backend, request)
    first = next(pages, None)
    if first is None:
        return iter(())

    logger.info(
        "Search response:\n%s",
        render_response_page(first),
        extra={"total_size": first.total_size, "has_next_page": first.has_next_page},
    )
    return itertools.chain((first,), pages)


def _fetch_pages(backend: SearchBackend, request: SearchRequest) -> Iterator[SearchResponsePage]:
    try:
        yield from backend.search(request)
    except GoogleAPICallError:
        logger.exception(
            "Search call failed",
            extra={"placement": request.placement, "query": request.query},
        )
        raise


__all__ = ["SearchBackend", "search"]
