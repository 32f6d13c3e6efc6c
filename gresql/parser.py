"""Line-oriented statement scanner.

This is not a SQL parser.  It walks a file line by line, looks for lines whose
first word is a statement keyword the clause cares about, and then glues the
following lines onto that statement until something that looks like the end
of it:

- an empty line,
- a line starting with ``;``,
- a line ending with ``;`` (included in the statement),
- end of file.

Line comments (``--``) are trimmed and block comments (``/* ... */``) are
tracked with a depth counter so commented-out statements are not matched.
A ``--`` inside a string literal still truncates the line.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from gresql.diagnostics import DiagnosticCollector
from gresql.extract import extract_table
from gresql.models import SearchClause, Statement, StatementKind

logger = logging.getLogger(__name__)

LINE_COMMENT = "--"
BLOCK_OPEN = "/*"
BLOCK_CLOSE = "*/"
TERMINATOR = ";"

_INLINE_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/")


def clean_text(line: str) -> str:
    """Normalise tabs and drop inline block comments and any line comment."""
    line = line.replace("\t", " ")
    line = _INLINE_BLOCK_COMMENT_RE.sub(" ", line)
    idx = line.find(LINE_COMMENT)
    if idx != -1:
        line = line[:idx]
    return line.strip()


def leading_kind(line: str) -> StatementKind | None:
    """Return the statement kind named by the first word of *line*, if any."""
    words = line.split(None, 1)
    if not words:
        return None
    try:
        return StatementKind.from_keyword(words[0].lower())
    except ValueError:
        return None


class CommentTracker:
    """Block-comment depth counter for one file.

    The depth never drops below zero; a stray ``*/`` is reported instead.
    """

    def __init__(self, path: Path | None = None, diagnostics: DiagnosticCollector | None = None) -> None:
        self.depth = 0
        self.path = path
        self.diagnostics = diagnostics

    def feed(self, line: str, index: int) -> str | None:
        """Update the depth for *line*.

        Returns the part of the line that is outside a block comment, or
        ``None`` if the whole line should be skipped.
        """
        was_open = self.depth > 0
        if BLOCK_OPEN in line:
            self.depth += 1
        if BLOCK_CLOSE in line:
            if self.depth == 0:
                self._unbalanced(index)
            else:
                self.depth -= 1

        if self.depth > 0:
            return None
        if was_open:
            # Closing line of a multi-line comment: only the tail is code.
            tail = line.rsplit(BLOCK_CLOSE, 1)[1].strip()
            return tail or None
        return line

    def _unbalanced(self, index: int) -> None:
        logger.debug("%s:%d: '*/' without matching '/*'", self.path, index + 1)
        if self.diagnostics is not None:
            self.diagnostics.warning(
                "UNBALANCED_COMMENT",
                "block comment close without a matching open",
                file=self.path,
                line=index + 1,
            )


@dataclass
class _Pending:
    kind: StatementKind
    begin: int
    parts: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(" ".join(self.parts).split())


class StatementParser:
    """Find the statements in a file that satisfy one search clause."""

    def __init__(self, clause: SearchClause, diagnostics: DiagnosticCollector | None = None) -> None:
        self.clause = clause
        self.diagnostics = diagnostics

    def parse_file(self, path: Path) -> list[Statement]:
        """Scan *path*.  ``OSError`` propagates to the caller."""
        with path.open(encoding="utf-8", errors="replace") as fh:
            return self.parse_lines(fh, path)

    def parse_lines(self, lines: Iterable[str], path: Path) -> list[Statement]:
        tracker = CommentTracker(path, self.diagnostics)
        statements: list[Statement] = []
        pending: _Pending | None = None
        index = -1

        for index, raw in enumerate(lines):
            if pending is None:
                pending = self._seek(raw, index, tracker)
                if pending is not None and pending.parts[-1].endswith(TERMINATOR):
                    self._finish(pending, index, path, statements)
                    pending = None
                continue

            line = raw.strip()
            if line.startswith(LINE_COMMENT):
                continue
            line = tracker.feed(line, index)
            if line is None:
                continue
            if not line or line.startswith(TERMINATOR):
                self._finish(pending, index, path, statements)
                pending = None
                continue

            text = clean_text(line)
            if text:
                pending.parts.append(text)
            if text.endswith(TERMINATOR):
                self._finish(pending, index, path, statements)
                pending = None

        if pending is not None:
            self._finish(pending, index, path, statements)
        if tracker.depth > 0:
            logger.debug("%s: block comment still open at end of file", path)
            if self.diagnostics is not None:
                self.diagnostics.warning(
                    "UNTERMINATED_COMMENT",
                    "block comment still open at end of file",
                    file=path,
                )
        return statements

    def _seek(self, raw: str, index: int, tracker: CommentTracker) -> _Pending | None:
        line = raw.strip().lstrip(TERMINATOR)
        if not line or line.startswith(LINE_COMMENT):
            return None
        line = tracker.feed(line, index)
        if not line:
            return None
        kind = leading_kind(line)
        if kind is None or kind not in self.clause.kinds:
            return None
        return _Pending(kind=kind, begin=index, parts=[clean_text(line)])

    def _finish(self, pending: _Pending, end: int, path: Path, out: list[Statement]) -> None:
        text = pending.text
        table = extract_table(pending.kind, text)
        if table is None:
            logger.debug("%s:%d: no table found in %s statement", path, pending.begin + 1, pending.kind.display)
            return
        if not self.clause.accepts(pending.kind, table):
            return
        out.append(
            Statement(
                path=path,
                kind=pending.kind,
                table=table,
                begin=pending.begin,
                end=end,
                text=text,
            )
        )


def find_statements(
    path: Path, clause: SearchClause, diagnostics: DiagnosticCollector | None = None
) -> list[Statement]:
    """Return every statement in *path* matching *clause*."""
    return StatementParser(clause, diagnostics).parse_file(path)
