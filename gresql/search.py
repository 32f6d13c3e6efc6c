"""Two-phase search over a set of SQL files.

Phase 1 is a cheap whole-file prefilter: a file survives only if, for every
clause, it contains one of the clause's statement keywords *and* one of its
table names somewhere.  It knows nothing about statement boundaries, so a
table name in a comment is enough to pass; it must simply never reject a file
that Phase 2 would accept.

Phase 2 re-scans the survivors statement by statement, once per clause.  Each
clause narrows the set of files: a file with no matching statement for a
clause is dropped.  Statements from every clause are collected into one flat
list, without de-duplication.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from gresql.config import RunConfig
from gresql.diagnostics import DiagnosticCollector
from gresql.models import SearchClause, Statement
from gresql.parser import StatementParser

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Everything a search produced."""

    statements: list[Statement] = field(default_factory=list)
    files: frozenset[Path] = frozenset()
    prefiltered: frozenset[Path] = frozenset()
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)

    @property
    def matched_statements(self) -> list[Statement]:
        """Statements from files that satisfied every clause, in file order."""
        return sorted(
            (s for s in self.statements if s.path in self.files),
            key=lambda s: s.sort_key,
        )

    @property
    def is_empty(self) -> bool:
        return not self.matched_statements


def _read_error(path: Path, exc: OSError, diagnostics: DiagnosticCollector) -> None:
    logger.error("Error when searching %s: %s", path, exc)
    diagnostics.error("READ_ERROR", str(exc), file=path)


def file_matches(content: bytes, clauses: Iterable[SearchClause]) -> bool:
    """Phase 1 test for one file's raw contents."""
    for clause in clauses:
        kind_pattern = clause.kind_pattern()
        if kind_pattern is None or not kind_pattern.search(content):
            return False
        if not clause.table_pattern().search(content):
            return False
    return True


def prefilter(
    paths: Iterable[Path],
    clauses: list[SearchClause],
    diagnostics: DiagnosticCollector,
) -> frozenset[Path]:
    """Return the files that pass the Phase 1 whole-file test."""
    survivors: set[Path] = set()
    for path in sorted(paths):
        try:
            content = path.read_bytes()
        except OSError as e:
            _read_error(path, e, diagnostics)
            continue
        if file_matches(content, clauses):
            survivors.add(path)
    return frozenset(survivors)


def narrow(
    files: frozenset[Path],
    clause: SearchClause,
    diagnostics: DiagnosticCollector,
) -> tuple[frozenset[Path], list[Statement]]:
    """Run one clause over *files*.

    Returns the files that produced at least one statement, and the
    statements themselves.
    """
    parser = StatementParser(clause, diagnostics)
    kept: set[Path] = set()
    statements: list[Statement] = []
    for path in sorted(files):
        try:
            found = parser.parse_file(path)
        except OSError as e:
            _read_error(path, e, diagnostics)
            continue
        if found:
            kept.add(path)
            statements.extend(found)
    return frozenset(kept), statements


def search(
    paths: Iterable[Path],
    clauses: list[SearchClause],
    config: RunConfig | None = None,
    diagnostics: DiagnosticCollector | None = None,
) -> SearchResult:
    """Find statements matching every clause across *paths*."""
    config = config or RunConfig()
    diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

    prefiltered = prefilter(paths, clauses, diagnostics)
    if config.verbose:
        logger.debug("STEP 1 RESULTS: %d files matched", len(prefiltered))
        for path in sorted(prefiltered):
            logger.debug("  %s", path)

    files = prefiltered
    statements: list[Statement] = []
    for clause in clauses:
        files, found = narrow(files, clause, diagnostics)
        statements.extend(found)
        if config.verbose:
            logger.debug("Clause %s: %d statements in %d files", clause.describe(), len(found), len(files))

    if config.verbose:
        logger.debug("STEP 2 RESULTS: %d files matched", len(files))
        for path in sorted(files):
            logger.debug("  %s", path)

    return SearchResult(
        statements=statements,
        files=files,
        prefiltered=prefiltered,
        diagnostics=diagnostics,
    )
