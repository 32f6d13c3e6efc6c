"""Result writers.

Statement rows are ``path, begin, end, KIND, table[, text]`` joined by the
configured delimiter.  SQL text routinely contains commas, so rows go through
``csv.writer`` and a field holding the delimiter gets quoted.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from gresql.config import RunConfig
from gresql.models import Statement
from gresql.search import SearchResult


def statement_row(statement: Statement, hide_statement: bool = False) -> list[str]:
    row = [
        str(statement.path),
        str(statement.begin),
        str(statement.end),
        statement.kind.display,
        statement.table,
    ]
    if not hide_statement:
        row.append(statement.text)
    return row


def write_statements(
    statements: Iterable[Statement],
    stream: TextIO,
    delimiter: str = ",",
    hide_statement: bool = False,
) -> int:
    """Write one row per statement and return the number of rows."""
    writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
    count = 0
    for statement in statements:
        writer.writerow(statement_row(statement, hide_statement))
        count += 1
    return count


def write_paths(paths: Iterable[Path], stream: TextIO) -> int:
    count = 0
    for path in sorted(paths):
        stream.write(f"{path}\n")
        count += 1
    return count


def write_result(result: SearchResult, config: RunConfig, stream: TextIO) -> int:
    """Write *result* in the shape *config* asks for."""
    if config.paths_only:
        return write_paths(result.files, stream)
    return write_statements(
        result.matched_statements,
        stream,
        delimiter=config.delimiter,
        hide_statement=config.hide_statement,
    )
