"""Tests for run configuration layering."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gresql.config import ConfigError, RunConfig, find_config_file, load_config, load_config_file


class TestRunConfig:
    def test_defaults(self) -> None:
        config = RunConfig()
        assert config.delimiter == ","
        assert not config.paths_only
        assert not config.hide_statement
        assert not config.verbose
        assert config.file_glob == "**/*.sql"

    @pytest.mark.parametrize("delimiter", ["", "::", "\t\t"])
    def test_delimiter_must_be_one_char(self, delimiter: str) -> None:
        with pytest.raises(ConfigError):
            RunConfig(delimiter=delimiter)

    def test_file_glob_must_be_relative(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="relative"):
            RunConfig(file_glob=str(tmp_path / "*.sql"))

    def test_absolute_file_glob_from_env(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="relative"):
            RunConfig.from_env({"GRESQL_FILE_GLOB": str(tmp_path / "**" / "*.sql")})

    def test_from_env(self) -> None:
        config = RunConfig.from_env({
            "GRESQL_DELIMITER": "|",
            "GRESQL_HIDE_STATEMENT": "yes",
            "GRESQL_VERBOSE": "0",
            "GRESQL_FILE_GLOB": "**/*.prc",
        })
        assert config == RunConfig(delimiter="|", hide_statement=True, file_glob="**/*.prc")

    def test_from_env_bad_bool(self) -> None:
        with pytest.raises(ConfigError, match="paths_only"):
            RunConfig.from_env({"GRESQL_PATHS_ONLY": "sometimes"})

    def test_unknown_keys_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="gresql"):
            config = RunConfig.from_mapping({"colour": "always", "verbose": True})
        assert config.verbose
        assert "Ignoring unknown config key: colour" in caplog.text


class TestConfigFile:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "gresql.yaml"
        path.write_text("delimiter: '|'\npaths_only: true\n")
        assert load_config_file(path) == {"delimiter": "|", "paths_only": True}

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "gresql.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "gresql.yaml"
        path.write_text("- delimiter\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "gresql.yaml"
        path.write_text("delimiter: [unclosed\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config_file(path)

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="could not read"):
            load_config(tmp_path / "missing.yaml", environ={})


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path: Path) -> None:
        explicit = tmp_path / "a.yaml"
        assert find_config_file(explicit, {"GRESQL_CONFIG": "b.yaml"}) == explicit

    def test_env(self) -> None:
        assert find_config_file(None, {"GRESQL_CONFIG": "b.yaml"}) == Path("b.yaml")

    def test_default_file_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert find_config_file(None, {}) is None
        (tmp_path / ".gresql.yaml").write_text("verbose: true\n")
        assert find_config_file(None, {}) == Path(".gresql.yaml")


class TestLoadConfig:
    def test_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "gresql.yaml"
        path.write_text("delimiter: ';'\nhide_statement: true\nfile_glob: '**/*.prc'\n")

        config = load_config(
            path,
            environ={"GRESQL_DELIMITER": "|", "GRESQL_FILE_GLOB": "**/*.tab"},
            delimiter="\t",
            paths_only=True,
            verbose=False,
        )

        assert config.delimiter == "\t"  # flag beats env beats file
        assert config.file_glob == "**/*.tab"  # env beats file
        assert config.hide_statement  # file beats default
        assert config.paths_only  # flag
        assert not config.verbose  # an unset flag does not override

    def test_no_sources(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config(environ={}) == RunConfig()
