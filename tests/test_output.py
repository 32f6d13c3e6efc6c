"""Tests for result writers."""

from __future__ import annotations

import io
from pathlib import Path

from gresql.config import RunConfig
from gresql.models import Statement, StatementKind
from gresql.output import statement_row, write_paths, write_result, write_statements
from gresql.search import SearchResult

UPDATE = Statement(
    path=Path("procs/usp_b.sql"),
    kind=StatementKind.UPDATE,
    table="t_order",
    begin=4,
    end=6,
    text="UPDATE t_order SET status = 'C' WHERE id = @id",
)
INSERT = Statement(
    path=Path("procs/usp_a.sql"),
    kind=StatementKind.INSERT,
    table="t_pick_detail",
    begin=10,
    end=10,
    text="INSERT INTO t_pick_detail (a, b) VALUES (1, 2);",
)


def test_statement_row() -> None:
    assert statement_row(UPDATE) == [
        "procs/usp_b.sql", "4", "6", "UPDATE", "t_order",
        "UPDATE t_order SET status = 'C' WHERE id = @id",
    ]
    assert statement_row(UPDATE, hide_statement=True) == ["procs/usp_b.sql", "4", "6", "UPDATE", "t_order"]


def test_text_with_delimiter_is_quoted() -> None:
    out = io.StringIO()
    assert write_statements([INSERT], out) == 1
    assert out.getvalue() == (
        'procs/usp_a.sql,10,10,INSERT,t_pick_detail,"INSERT INTO t_pick_detail (a, b) VALUES (1, 2);"\n'
    )


def test_custom_delimiter() -> None:
    out = io.StringIO()
    write_statements([INSERT], out, delimiter="|", hide_statement=True)
    assert out.getvalue() == "procs/usp_a.sql|10|10|INSERT|t_pick_detail\n"


def test_write_paths_sorted() -> None:
    out = io.StringIO()
    assert write_paths([Path("b.sql"), Path("a.sql")], out) == 2
    assert out.getvalue() == "a.sql\nb.sql\n"


class TestWriteResult:
    def result(self) -> SearchResult:
        return SearchResult(
            statements=[UPDATE, INSERT],
            files=frozenset({UPDATE.path, INSERT.path}),
            prefiltered=frozenset({UPDATE.path, INSERT.path}),
        )

    def test_rows_in_file_order(self) -> None:
        out = io.StringIO()
        write_result(self.result(), RunConfig(hide_statement=True), out)
        assert out.getvalue().splitlines() == [
            "procs/usp_a.sql,10,10,INSERT,t_pick_detail",
            "procs/usp_b.sql,4,6,UPDATE,t_order",
        ]

    def test_paths_only(self) -> None:
        out = io.StringIO()
        write_result(self.result(), RunConfig(paths_only=True), out)
        assert out.getvalue() == "procs/usp_a.sql\nprocs/usp_b.sql\n"

    def test_statements_from_dropped_files_are_not_written(self) -> None:
        result = self.result()
        result.files = frozenset({INSERT.path})
        out = io.StringIO()
        write_result(result, RunConfig(hide_statement=True), out)
        assert out.getvalue() == "procs/usp_a.sql,10,10,INSERT,t_pick_detail\n"
