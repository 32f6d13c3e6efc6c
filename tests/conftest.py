"""Shared fixtures for gresql tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Ensure the project root is importable without an install
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from gresql.config import FIELD_ENV_MAP, CONFIG_ENV_VAR  # noqa: E402


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's GRESQL_* settings out of the tests."""
    for var in [*FIELD_ENV_MAP.values(), CONFIG_ENV_VAR]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def sql_dir(tmp_path: Path) -> Path:
    """A temporary directory to hold SQL files."""
    d = tmp_path / "procs"
    d.mkdir()
    return d


@pytest.fixture
def write_sql(sql_dir: Path) -> Callable[..., Path]:
    """Write ``lines`` to ``sql_dir/name`` and return the path."""

    def _write(name: str, *lines: str) -> Path:
        p = sql_dir / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("\n".join(lines) + "\n")
        return p

    return _write
