"""Find SQL statements by statement kind and referenced table.

A precision grep for SQL source files: ``-s ud:t_order`` finds UPDATE or
DELETE statements whose table is ``t_order``, not just lines that mention it.
"""

__version__ = "0.2.0"

from gresql.config import ConfigError, RunConfig, load_config
from gresql.diagnostics import Diagnostic, DiagnosticCollector
from gresql.extract import extract_table
from gresql.models import (
    SearchClause,
    Statement,
    StatementKind,
    parse_clause,
    parse_clauses,
    parse_kinds,
)
from gresql.parser import StatementParser, find_statements
from gresql.paths import resolve_paths
from gresql.search import SearchResult, prefilter, search

__all__ = [
    "ConfigError",
    "Diagnostic",
    "DiagnosticCollector",
    "RunConfig",
    "SearchClause",
    "SearchResult",
    "Statement",
    "StatementKind",
    "StatementParser",
    "extract_table",
    "find_statements",
    "load_config",
    "parse_clause",
    "parse_clauses",
    "parse_kinds",
    "prefilter",
    "resolve_paths",
    "search",
]
