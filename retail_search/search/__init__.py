"""Boosted product search against the Retail API."""

from __future__ import annotations

from retail_search.search.builder import build_search_request, placement_for
from retail_search.search.invoker import SearchBackend, search
from retail_search.search.models import BoostCondition, SearchRequest, SearchResponsePage

__all__ = [
    "BoostCondition",
    "SearchBackend",
    "SearchRequest",
    "SearchResponsePage",
    "build_search_request",
    "placement_for",
    "search",
]
