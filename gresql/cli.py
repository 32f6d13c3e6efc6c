"""gresql - grep SQL statements.

Search SQL source files for statements of a given kind that touch a given
table, instead of simply matching strings the way grep does.

Usage:
    gresql -s <kinds>:<table>[,<table>...] [-s ...] [options] [PATH ...]

where <kinds> is one or more of s (select), i (insert), u (update),
d (delete), m (merge), or ``*`` for every kind except select.

Examples:
    gresql -s ud:t_pick_detail
        updates or deletes to t_pick_detail under the current directory

    gresql -s u:t_order,t_order_detail './usp_wave_mgmt*.sql'
        updates to t_order or t_order_detail in the wave management procs

    gresql -s u:t_pick_detail -s d:t_pick_detail
        files with both an update AND a delete to t_pick_detail
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gresql import __version__
from gresql.config import ConfigError, load_config
from gresql.diagnostics import DiagnosticCollector
from gresql.models import parse_clauses
from gresql.output import write_result
from gresql.paths import resolve_paths
from gresql.search import search

logger = logging.getLogger("gresql")


def _delimiter(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError("delimiter must be a single character")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gresql",
        description="Find SQL statements by statement kind and table.",
    )
    parser.add_argument(
        "-s",
        "--search",
        dest="search_queries",
        action="append",
        required=True,
        metavar="[KINDS:]TABLES",
        help="Search query, e.g. 'ud:t_order'. Repeat to AND several queries",
    )
    parser.add_argument(
        "-d",
        "--delimiter",
        type=_delimiter,
        default=None,
        help="Result field delimiter (default: ',')",
    )
    parser.add_argument(
        "-p",
        "--path-only",
        dest="paths_only",
        action="store_true",
        help="Only print the paths of matching files",
    )
    parser.add_argument(
        "-T",
        "--no-statement-text",
        dest="hide_statement",
        action="store_true",
        help="Don't print statement text",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: $GRESQL_CONFIG or ./.gresql.yaml)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files, directories, or glob patterns to search (default: .)",
    )
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    logging.getLogger("gresql").setLevel(level)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(
            args.config,
            delimiter=args.delimiter,
            paths_only=args.paths_only,
            hide_statement=args.hide_statement,
            verbose=args.verbose,
        )
    except ConfigError as e:
        logging.basicConfig(format="%(message)s", stream=sys.stderr)
        logger.error("gresql: %s", e)
        return 2

    _configure_logging(config.verbose)
    diagnostics = DiagnosticCollector()

    clauses = parse_clauses(args.search_queries, diagnostics)
    if config.verbose:
        logger.debug("Search clauses:")
        for clause in clauses:
            logger.debug("  %s", clause.describe())
        logger.debug("Paths given: %s", ", ".join(args.paths))

    paths = resolve_paths(args.paths, config.file_glob, diagnostics)
    if config.verbose:
        logger.debug("Paths found: %d", len(paths))
        for path in sorted(paths):
            logger.debug("  %s", path)

    result = search(paths, clauses, config, diagnostics)

    if result.is_empty:
        logger.info("No statements found")
    else:
        write_result(result, config, sys.stdout)

    if config.verbose:
        diagnostics.print_summary()
    return 0
