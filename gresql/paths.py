"""Turn command-line path arguments into a set of files to search.

Each argument may be a file, a symlink, a directory (searched recursively for
SQL files), or a glob pattern.
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable
from pathlib import Path

from gresql.diagnostics import DiagnosticCollector

logger = logging.getLogger(__name__)

DEFAULT_FILE_GLOB = "**/*.sql"
_GLOB_MAGIC = frozenset("*?[")


def _is_glob(arg: str) -> bool:
    return any(ch in _GLOB_MAGIC for ch in arg)


def _expand_dir(directory: Path, file_glob: str) -> set[Path]:
    return {p for p in directory.glob(file_glob) if p.is_file()}


def resolve_paths(
    args: Iterable[str],
    file_glob: str = DEFAULT_FILE_GLOB,
    diagnostics: DiagnosticCollector | None = None,
) -> set[Path]:
    """Resolve *args* to a deduplicated set of existing files.

    Two arguments naming the same file (a relative and an absolute spelling,
    or a symlink and its target) yield it once, under the first spelling
    seen.  Arguments that resolve to nothing are logged and skipped.
    """
    seen: dict[Path, Path] = {}
    for arg in args:
        path = Path(arg)
        if path.is_symlink() and path.exists():
            path = path.resolve()

        found: set[Path] = set()
        if path.is_file():
            found.add(path)
        elif path.is_dir():
            found |= _expand_dir(path, file_glob)
        elif _is_glob(arg):
            matches = {Path(m) for m in glob.glob(arg, recursive=True)}
            found |= {m for m in matches if m.is_file()}
            for d in sorted(m for m in matches if m.is_dir()):
                found |= _expand_dir(d, file_glob)
        else:
            logger.error("File not found: %s", arg)
            if diagnostics is not None:
                diagnostics.error("PATH_NOT_FOUND", "file not found", file=arg)

        for p in sorted(found):
            seen.setdefault(p.resolve(), p)
    return set(seen.values())
