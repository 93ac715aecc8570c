"""`retail-search` CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import math
from collections.abc import Sequence

from google.api_core.exceptions import GoogleAPICallError
from google.auth.exceptions import GoogleAuthError

from retail_search.cli import _common
from retail_search.search import build_search_request, placement_for, search
from retail_search.search.retail import create_backend

PROG_NAME = "retail-search"
DESCRIPTION = "Search the product catalog, boosting or burying items that match a condition."

DEFAULT_QUERY = "Tee"
DEFAULT_CONDITION = 'colorFamilies: ANY("Blue")'
DEFAULT_BOOST = 0.0

logger = logging.getLogger("retail_search.cli.search")


def build_parser() -> argparse.ArgumentParser:
    parser = _common.build_parser(prog=PROG_NAME, description=DESCRIPTION)
    parser.add_argument("query", nargs="?", default=DEFAULT_QUERY, help="Free-text query.")
    parser.add_argument(
        "--condition",
        default=DEFAULT_CONDITION,
        help="Filter expression selecting the products to re-rank.",
    )
    parser.add_argument(
        "--boost",
        type=_boost_strength,
        default=DEFAULT_BOOST,
        help="Boost strength in [-1.0, 1.0]; negative values bury matching products.",
    )
    parser.add_argument("--visitor-id", help="Visitor identifier (defaults to configuration).")
    parser.add_argument(
        "--page-size", type=int, help="Results per page (defaults to configuration)."
    )
    return parser


def _boost_strength(value: str) -> float:
    strength = float(value)
    if not math.isfinite(strength):
        raise argparse.ArgumentTypeError(f"Boost strength must be a finite number, got '{value}'")
    return strength


def run(args: argparse.Namespace) -> int:
    config = args.app_config
    request = build_search_request(
        args.query,
        args.condition,
        args.boost,
        placement=placement_for(config.google.project_number),
        visitor_id=args.visitor_id or config.search.visitor_id,
        page_size=args.page_size or config.search.page_size,
    )
    try:
        pages = search(request, create_backend(config))
        first = next(pages, None)
    except (GoogleAPICallError, GoogleAuthError) as exc:
        logger.error("Search failed", extra={"cli": "search", "error": str(exc)})
        return 1

    if first is None:
        logger.info("No results", extra={"cli": "search", "query": request.query})
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    return _common.run_cli(parser, argv, cli_name="search", display_name="Search", runner=run)


if __name__ == "__main__":  # pragma: no cover - manual execution guard
    raise SystemExit(main())


__all__ = ["build_parser", "main", "run"]
