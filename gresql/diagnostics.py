"""Structured diagnostics for a gresql run.

Every recoverable condition (a dropped clause, a missing path, an unreadable
file, an unbalanced comment marker) is recorded here so a verbose run can
report them together at the end instead of aborting.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class Diagnostic:
    """A single diagnostic finding."""

    severity: str  # "error", "warning", "info"
    code: str  # e.g. "READ_ERROR", "UNBALANCED_COMMENT"
    message: str
    file: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        where = ""
        if self.file is not None:
            where = f" {self.file}" if self.line is None else f" {self.file}:{self.line}"
        return f"[{self.severity}] {self.code}{where}: {self.message}"


class DiagnosticCollector:
    """Accumulates diagnostics and provides summary counts.

    Usage::

        dc = DiagnosticCollector()
        dc.error("READ_ERROR", "Permission denied", file="proc.sql")
        dc.warning("UNBALANCED_COMMENT", "'*/' without '/*'", file="proc.sql", line=12)

        # At the end:
        dc.print_summary()
    """

    def __init__(self) -> None:
        self.items: list[Diagnostic] = []

    # -- convenience methods --

    def error(self, code: str, message: str, **kwargs: Any) -> None:
        self._add(Diagnostic(severity="error", code=code, message=message, **_norm(kwargs)))

    def warning(self, code: str, message: str, **kwargs: Any) -> None:
        self._add(Diagnostic(severity="warning", code=code, message=message, **_norm(kwargs)))

    def info(self, code: str, message: str, **kwargs: Any) -> None:
        self._add(Diagnostic(severity="info", code=code, message=message, **_norm(kwargs)))

    def _add(self, diagnostic: Diagnostic) -> None:
        # A file is re-scanned once per clause; report each finding once.
        if diagnostic not in self.items:
            self.items.append(diagnostic)

    # -- queries --

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity == "warning"]

    def by_code(self, code: str) -> list[Diagnostic]:
        return [d for d in self.items if d.code == code]

    def count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {"error": 0, "warning": 0, "info": 0}
        for d in self.items:
            counts[d.severity] = counts.get(d.severity, 0) + 1
        return counts

    # -- output --

    def print_summary(self, *, file: Any = None) -> None:
        """Print each diagnostic, then a one-line summary of counts."""
        out = file or sys.stderr
        for d in self.items:
            print(d, file=out)
        c = self.count_by_severity()
        print(
            f"Diagnostics: {c['error']} error(s), {c['warning']} warning(s), {c['info']} info(s)",
            file=out,
        )


def _norm(kwargs: dict[str, Any]) -> dict[str, Any]:
    # Paths are stored as plain strings so equal findings compare equal.
    if isinstance(kwargs.get("file"), Path):
        kwargs["file"] = str(kwargs["file"])
    return kwargs
