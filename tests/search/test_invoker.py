from __future__ import annotations

import json
import logging
from collections.abc import Callable

import pytest
from google.api_core.exceptions import InvalidArgument, ServiceUnavailable
from retail_search.search import builder, invoker
from retail_search.search.models import SearchRequest, SearchResponsePage
from retail_search.search.render import response_fields

INVOKER_LOGGER = "retail_search.search.invoker"


@pytest.fixture()
def request_value() -> SearchRequest:
    return builder.build_search_request(
        "Tee",
        'colorFamilies: ANY("Blue")',
        0.0,
        placement=builder.placement_for("123456789"),
        visitor_id="123456",
        page_size=10,
    )


def response_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [
        record
        for record in caplog.records
        if record.name == INVOKER_LOGGER and record.getMessage().startswith("Search response:")
    ]


def test_empty_sequence_skips_diagnostic(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=INVOKER_LOGGER)
    backend = make_backend([])

    pages = invoker.search(request_value, backend)

    assert list(pages) == []
    assert response_records(caplog) == []
    assert backend.requests == [request_value]


def test_first_page_is_logged_and_returned_first(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=INVOKER_LOGGER)
    first = SearchResponsePage(
        results=({"id": "p-1", "matchingVariantCount": 1},),
        total_size=2,
        attribution_token="attr-1",
        next_page_token="page-2",
        facets=({"key": "colorFamilies"},),
    )
    second = SearchResponsePage(results=({"id": "p-2"},), total_size=2, attribution_token="attr-1")
    backend = make_backend([first, second])

    pages = list(invoker.search(request_value, backend))

    assert pages == [first, second]
    [record] = response_records(caplog)
    rendered = record.getMessage().partition("\n")[2]
    assert json.loads(rendered) == response_fields(pages[0])
    assert record.total_size == 2
    assert record.has_next_page is True


def test_later_pages_are_fetched_lazily(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
) -> None:
    backend = make_backend([SearchResponsePage(total_size=i, next_page_token="n") for i in (1, 2, 3)])

    pages = invoker.search(request_value, backend)
    assert backend.fetched == 1

    assert next(pages).total_size == 1
    assert backend.fetched == 1
    assert next(pages).total_size == 2
    assert backend.fetched == 2


def test_invocation_failure_propagates_unchanged(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=INVOKER_LOGGER)
    error = InvalidArgument("placement is malformed")
    backend = make_backend([], fail_with=error)

    with pytest.raises(InvalidArgument) as excinfo:
        invoker.search(request_value, backend)

    assert excinfo.value is error
    assert response_records(caplog) == []
    failures = [r for r in caplog.records if r.getMessage() == "Search call failed"]
    assert len(failures) == 1
    assert failures[0].exc_info is not None


def test_failure_during_lazy_iteration_propagates(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=INVOKER_LOGGER)
    backend = make_backend(
        [SearchResponsePage(total_size=5, next_page_token="page-2")],
        fail_with=ServiceUnavailable("backend went away"),
    )

    pages = invoker.search(request_value, backend)
    assert len(response_records(caplog)) == 1

    assert next(pages).total_size == 5
    with pytest.raises(ServiceUnavailable):
        next(pages)


def test_non_remote_errors_are_not_logged_as_call_failures(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=INVOKER_LOGGER)
    backend = make_backend([], fail_with=KeyError("bug"))

    with pytest.raises(KeyError):
        invoker.search(request_value, backend)

    assert not [r for r in caplog.records if r.getMessage() == "Search call failed"]


def test_tee_query_end_to_end(
    request_value: SearchRequest,
    make_backend: Callable[..., object],
) -> None:
    backend = make_backend([SearchResponsePage(total_size=3, attribution_token="token")])

    pages = invoker.search(request_value, backend)
    first = next(pages)

    assert request_value.placement == (
        "projects/123456789/locations/global/catalogs/default_catalog/placements/default_search"
    )
    assert request_value.visitor_id == "123456"
    assert request_value.page_size == 10
    assert first.total_size == 3
    assert list(pages) == []
