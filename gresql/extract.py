"""Table extraction heuristics.

Each statement kind has an anchor keyword that is followed by the table it
touches: ``INSERT INTO t``, ``SELECT ... FROM t``, ``MERGE t``.  UPDATE and
DELETE often have no FROM clause (``UPDATE t SET ...``), so for those we fall
back to the statement's own keyword.
"""

from __future__ import annotations

import re

from gresql.models import IDENTIFIER_CHARS, StatementKind

IDENTIFIER = rf"([{IDENTIFIER_CHARS}]+)"


def _anchored(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b(?i:{keyword})\s+{IDENTIFIER}")


_FROM = _anchored("from")

# Tried in order; the first pattern that matches wins.
TABLE_PATTERNS: dict[StatementKind, tuple[re.Pattern[str], ...]] = {
    StatementKind.SELECT: (_FROM,),
    StatementKind.INSERT: (_anchored("into"),),
    StatementKind.UPDATE: (_FROM, _anchored("update")),
    StatementKind.DELETE: (_FROM, _anchored("delete")),
    StatementKind.MERGE: (_anchored("merge"),),
}


def extract_table(kind: StatementKind, text: str) -> str | None:
    """Return the table referenced by a statement of *kind*, or ``None``."""
    for pattern in TABLE_PATTERNS[kind]:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None
