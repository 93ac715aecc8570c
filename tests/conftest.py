from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import pytest
import retail_search.config as app_config
from retail_search.search.models import SearchRequest, SearchResponsePage

CONFIG_ENV_KEYS = [
    "PROJECT_NUMBER",
    "RETAIL_API_ENDPOINT",
    "RETAIL_SEARCH_VISITOR_ID",
    "RETAIL_SEARCH_PAGE_SIZE",
]


class StubBackend:
    """Backend yielding canned pages, recording each request and page fetch."""

    def __init__(
        self,
        pages: Iterable[SearchResponsePage] = (),
        *,
        fail_with: Exception | None = None,
    ) -> None:
        self.pages = list(pages)
        self.fail_with = fail_with
        self.requests: list[SearchRequest] = []
        self.fetched = 0

    def search(self, request: SearchRequest) -> Iterator[SearchResponsePage]:
        self.requests.append(request)
        for page in self.pages:
            self.fetched += 1
            yield page
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv(app_config.ENV_FILE_ENV_VAR, str(tmp_path / "missing.env"))
    monkeypatch.setenv(app_config.CONFIG_FILE_ENV_VAR, str(tmp_path / "missing.toml"))
    monkeypatch.setattr(app_config, "_CONFIG_CACHE", None)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    try:
        yield
    finally:
        # configure_logging installs plain StreamHandlers bound to captured streams.
        for handler in list(root.handlers):
            if type(handler) is logging.StreamHandler:
                root.removeHandler(handler)
        root.setLevel(level)


@pytest.fixture()
def make_backend() -> Callable[..., StubBackend]:
    return StubBackend
