"""Run configuration for gresql.

Settings are layered, lowest precedence first:

1. built-in defaults,
2. a YAML file (``--config``, else ``$GRESQL_CONFIG``, else ``./.gresql.yaml``
   when present),
3. environment variables,
4. command-line flags.

Environment variables:
    GRESQL_CONFIG: Path to a YAML config file
    GRESQL_DELIMITER: Result field delimiter (default: ",")
    GRESQL_PATHS_ONLY: Only print matching file paths (default: false)
    GRESQL_HIDE_STATEMENT: Omit statement text from result rows (default: false)
    GRESQL_VERBOSE: Verbose diagnostic output (default: false)
    GRESQL_FILE_GLOB: Pattern used to expand directories (default: "**/*.sql")
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(".gresql.yaml")
CONFIG_ENV_VAR = "GRESQL_CONFIG"

# field name -> environment variable
FIELD_ENV_MAP: dict[str, str] = {
    "delimiter": "GRESQL_DELIMITER",
    "paths_only": "GRESQL_PATHS_ONLY",
    "hide_statement": "GRESQL_HIDE_STATEMENT",
    "verbose": "GRESQL_VERBOSE",
    "file_glob": "GRESQL_FILE_GLOB",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when a configuration value or file is unusable."""


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


@dataclass(frozen=True)
class RunConfig:
    """Options that shape a single search run and its output."""

    delimiter: str = ","
    paths_only: bool = False
    hide_statement: bool = False
    verbose: bool = False
    file_glob: str = "**/*.sql"

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ConfigError(f"delimiter must be a single character, got {self.delimiter!r}")
        if not self.file_glob:
            raise ConfigError("file_glob must not be empty")
        if Path(self.file_glob).is_absolute():
            raise ConfigError(f"file_glob must be relative to the searched directory, got {self.file_glob!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: RunConfig | None = None) -> RunConfig:
        """Overlay *data* onto *base* (or the defaults).

        Unknown keys are logged and ignored.
        """
        base = base or cls()
        known = {f.name for f in dataclasses.fields(cls)}
        changes: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            if value is None:
                continue
            if isinstance(getattr(base, key), bool):
                changes[key] = _parse_bool(key, value)
            else:
                changes[key] = str(value)
        return dataclasses.replace(base, **changes)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, base: RunConfig | None = None) -> RunConfig:
        environ = os.environ if environ is None else environ
        data = {
            name: environ[var]
            for name, var in FIELD_ENV_MAP.items()
            if var in environ
        }
        return cls.from_mapping(data, base)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file into a plain mapping."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigError(f"could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if data is None:
        logger.debug("Config file %s is empty", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} is not a YAML mapping")
    return data


def find_config_file(explicit: Path | None = None, environ: Mapping[str, str] | None = None) -> Path | None:
    """Pick the config file to load, if any.

    An explicitly named file must exist; the default file is optional.
    """
    environ = os.environ if environ is None else environ
    if explicit is not None:
        return explicit
    if environ.get(CONFIG_ENV_VAR):
        return Path(environ[CONFIG_ENV_VAR])
    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE
    return None


def load_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> RunConfig:
    """Build a RunConfig from file, environment, and explicit overrides.

    Overrides that are ``None`` or ``False`` are treated as "not given", so
    boolean command-line flags can only switch options on.
    """
    config = RunConfig()
    path = find_config_file(config_file, environ)
    if path is not None:
        logger.debug("Loading config from %s", path)
        config = RunConfig.from_mapping(load_config_file(path), config)
    config = RunConfig.from_env(environ, config)
    given = {k: v for k, v in overrides.items() if v is not None and v is not False}
    return RunConfig.from_mapping(given, config)
