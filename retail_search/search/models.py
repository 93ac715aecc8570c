"""Value objects exchanged with the Retail search service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class BoostCondition:
    """A filter expression and the strength applied to items that match it.

    ``boost`` is expected in ``[-1.0, 1.0]``; negative values bury matches.
    The range is enforced by the service, not here.
    """

    condition: str
    boost: float = 0.0


@dataclass(frozen=True, slots=True)
class SearchRequest:
    placement: str
    query: str
    boost_spec: tuple[BoostCondition, ...] = ()
    visitor_id: str = ""
    page_size: int = 0


@dataclass(frozen=True, slots=True)
class SearchResponsePage:
    """One page of search results as returned by a single round trip."""

    results: tuple[Mapping[str, Any], ...] = ()
    total_size: int = 0
    attribution_token: str = ""
    next_page_token: str = ""
    facets: tuple[Mapping[str, Any], ...] = ()
    query_expansion_info: Mapping[str, Any] | None = None

    @property
    def has_next_page(self) -> bool:
        return bool(self.next_page_token)


__all__ = ["BoostCondition", "SearchRequest", "SearchResponsePage"]
