from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from retail_search.search.builder import placement_for

from . import ConfigError, doctor, load_config


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="retail-search-config",
        description="Inspect the Retail search settings resolved from .env, config.toml and env.",
    )
    parser.add_argument("--env-file", type=Path, help="Path to the .env file to read.")
    parser.add_argument(
        "--config-file", type=Path, help="Path to the user config file (config.toml)."
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "doctor",
        help="Check PROJECT_NUMBER, the API endpoint and the visitor/page-size defaults.",
    )
    subparsers.add_parser(
        "placement",
        help="Print the search placement resource name built from PROJECT_NUMBER.",
    )

    args = parser.parse_args(argv)
    if args.command == "doctor":
        return 0 if doctor(env_file=args.env_file, config_file=args.config_file) else 1
    if args.command == "placement":
        return _print_placement(env_file=args.env_file, config_file=args.config_file)

    parser.print_help()
    return 1


def _print_placement(*, env_file: Path | None, config_file: Path | None) -> int:
    try:
        config = load_config(env_file=env_file, config_file=config_file)
    except ConfigError as exc:
        print(f"Cannot resolve placement: {exc}", file=sys.stderr)
        return 1
    print(placement_for(config.google.project_number), file=sys.stdout)
    return 0 if config.google.project_number else 1


if __name__ == "__main__":
    sys.exit(main())
