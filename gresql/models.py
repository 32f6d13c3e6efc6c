"""Query model for gresql searches.

A search is a list of clauses.  Each clause pairs a set of statement kinds
with a list of table names, e.g. ``ud:t_pick_detail`` means "an UPDATE or a
DELETE whose table is ``t_pick_detail``".  Clauses combine with AND at the
file level.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gresql.diagnostics import DiagnosticCollector

logger = logging.getLogger(__name__)

WILDCARD = "*"

# Characters a table identifier may contain: letters, digits, underscore, plus
# '@' and '#' for variables and temp tables.
IDENTIFIER_CHARS = "@#A-Za-z0-9_"


# ---------------------------------------------------------------------------
# Statement kinds
# ---------------------------------------------------------------------------


class StatementKind(str, Enum):
    """SQL statement categories gresql can search for.

    Values are the lowercase leading keyword, so ``StatementKind("update")``
    parses a keyword directly.
    """

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    MERGE = "merge"

    def __str__(self) -> str:
        return self.display

    @property
    def display(self) -> str:
        """Canonical uppercase form, e.g. ``UPDATE``."""
        return self.value.upper()

    @classmethod
    def from_char(cls, char: str) -> StatementKind:
        """Resolve a single discriminating character (``s/i/u/d/m``)."""
        try:
            return _CHAR_KINDS[char]
        except KeyError:
            raise ValueError(f"{char!r} is not a statement kind character") from None

    @classmethod
    def from_keyword(cls, keyword: str) -> StatementKind:
        """Resolve a full lowercase keyword such as ``delete``."""
        return cls(keyword)


_CHAR_KINDS: dict[str, StatementKind] = {
    "s": StatementKind.SELECT,
    "i": StatementKind.INSERT,
    "u": StatementKind.UPDATE,
    "d": StatementKind.DELETE,
    "m": StatementKind.MERGE,
}

# SELECT is left out of the wildcard: "*" means "anything that writes".
WRITE_KINDS: frozenset[StatementKind] = frozenset({
    StatementKind.INSERT,
    StatementKind.UPDATE,
    StatementKind.DELETE,
    StatementKind.MERGE,
})

_KIND_ORDER = list(StatementKind)


def parse_kinds(spec: str) -> frozenset[StatementKind]:
    """Parse a kind specifier like ``ud`` or ``*``.

    Unknown characters and duplicates are ignored, so a specifier with no
    recognised characters yields an empty set.
    """
    if WILDCARD in spec:
        return WRITE_KINDS
    kinds: set[StatementKind] = set()
    for char in spec:
        try:
            kinds.add(StatementKind.from_char(char))
        except ValueError:
            continue
    return frozenset(kinds)


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class SearchClause:
    """One ``-s`` argument: statement kinds and the tables they must touch."""

    kinds: frozenset[StatementKind]
    tables: list[str] = field(default_factory=list)

    @property
    def sorted_kinds(self) -> list[StatementKind]:
        return sorted(self.kinds, key=_KIND_ORDER.index)

    def kind_pattern(self) -> re.Pattern[bytes] | None:
        """Whole-file test for any of the clause's statement keywords.

        Returns ``None`` for an empty kind-set, which can never match.
        """
        if not self.kinds:
            return None
        alternation = "|".join(k.display for k in self.sorted_kinds)
        return re.compile(rf"\b(?:{alternation})\b".encode(), re.IGNORECASE)

    def table_pattern(self) -> re.Pattern[bytes]:
        """Whole-file test for any of the clause's table names.

        The name must not run on into a longer identifier.  Word boundaries
        are not enough because names may start or end with ``#`` or ``@``.
        """
        alternation = "|".join(re.escape(t) for t in self.tables)
        return re.compile(rf"(?<![{IDENTIFIER_CHARS}])(?:{alternation})(?![{IDENTIFIER_CHARS}])".encode())

    def accepts(self, kind: StatementKind, table: str) -> bool:
        return kind in self.kinds and table in self.tables

    def describe(self) -> str:
        kinds = ",".join(k.display for k in self.sorted_kinds) or "<none>"
        return f"{kinds}:{','.join(self.tables)}"


def parse_clause(
    spec: str, diagnostics: DiagnosticCollector | None = None
) -> SearchClause | None:
    """Parse ``[kinds:]table[,table...]`` into a clause.

    A spec with more than one colon is malformed and yields ``None``.
    """
    parts = spec.split(":")
    if len(parts) == 1:
        kinds, tables = WRITE_KINDS, parts[0]
    elif len(parts) == 2:
        kinds, tables = parse_kinds(parts[0]), parts[1]
    else:
        logger.warning("Ignoring malformed search clause: %s", spec)
        if diagnostics is not None:
            diagnostics.warning(
                "MALFORMED_CLAUSE", f"expected [kinds:]tables, got {spec!r}"
            )
        return None

    if not kinds:
        logger.warning("Search clause %s names no statement kinds; it cannot match", spec)
        if diagnostics is not None:
            diagnostics.warning(
                "EMPTY_KIND_SET", f"no recognised statement kinds in {spec!r}"
            )
    return SearchClause(kinds=kinds, tables=tables.split(","))


def parse_clauses(
    specs: list[str], diagnostics: DiagnosticCollector | None = None
) -> list[SearchClause]:
    clauses = []
    for spec in specs:
        clause = parse_clause(spec, diagnostics)
        if clause is not None:
            clauses.append(clause)
    return clauses


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Statement:
    """A matched statement and where it lives.

    ``begin`` and ``end`` are zero-based, inclusive line offsets.
    """

    path: Path
    kind: StatementKind
    table: str
    begin: int
    end: int
    text: str

    @property
    def sort_key(self) -> tuple[str, int, int]:
        return (str(self.path), self.begin, self.end)
