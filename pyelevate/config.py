"""Configuration file loader for pyelevate.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``pyelevate.toml``: settings under ``[pyelevate]`` table
- ``pyproject.toml``: settings under ``[tool.pyelevate]`` table

Discovery order:

1. Explicit path from ``--config`` or ``PYELEVATE_CONFIG``
2. ``pyelevate.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.pyelevate]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``pyelevate.toml``)::

    [pyelevate]
    timeout = 5
    max_concurrency = 20
    fetch_popularity = true
"""

from __future__ import annotations

import tomli
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from pyelevate.exceptions import ConfigError
from pyelevate.utils.logger import get_logger
from pyelevate.constants import (
    DEFAULT_CHECK_SECURITY,
    DEFAULT_FETCH_CHANGELOG,
    DEFAULT_FETCH_POPULARITY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    OSV_QUERY_API,
    PYPI_JSON_API,
    PYPISTATS_RECENT_API,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "pyelevate.toml"
SECTION_NAME = "pyelevate"


@dataclass
class PyElevateConfig:
    """Parsed and validated pyelevate configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        timeout: Per-request network deadline in seconds.
        max_concurrency: Maximum in-flight HTTP requests.
        max_retries: Retries per request; resolution reports failures as-is
            by default.
        index_url: Package index JSON endpoint (``{package}`` placeholder).
        advisory_url: Vulnerability query endpoint.
        popularity_url: Download statistics endpoint (``{package}``).
        check_security: Run the advisory phase.
        fetch_popularity: Run the popularity phase.
        fetch_changelog: Run the changelog phase.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    timeout: float = DEFAULT_TIMEOUT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    max_retries: int = DEFAULT_MAX_RETRIES

    index_url: str = PYPI_JSON_API
    advisory_url: str = OSV_QUERY_API
    popularity_url: str = PYPISTATS_RECENT_API

    check_security: bool = DEFAULT_CHECK_SECURITY
    fetch_popularity: bool = DEFAULT_FETCH_POPULARITY
    fetch_changelog: bool = DEFAULT_FETCH_CHANGELOG

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {name: getattr(self, name) for name in _OPTIONS}


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _is_int_at_least(minimum: int) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and value >= minimum

    return check


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


#: option name -> (validator, description used in error messages)
_OPTIONS: Dict[str, Tuple[Callable[[Any], bool], str]] = {
    "timeout": (_is_positive_number, "a positive number"),
    "max_concurrency": (_is_int_at_least(1), "an integer >= 1"),
    "max_retries": (_is_int_at_least(0), "an integer >= 0"),
    "index_url": (_is_url, "an http(s) URL"),
    "advisory_url": (_is_url, "an http(s) URL"),
    "popularity_url": (_is_url, "an http(s) URL"),
    "check_security": (_is_bool, "a boolean"),
    "fetch_popularity": (_is_bool, "a boolean"),
    "fetch_changelog": (_is_bool, "a boolean"),
}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``PYELEVATE_CONFIG``)
    2. ``pyelevate.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.pyelevate]`` section in current directory

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILE_NAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml: %s", SECTION_NAME, pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.pyelevate]`` section.

    A pyproject.toml that cannot be parsed is treated as not configuring
    pyelevate.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and SECTION_NAME in tool


def load_config(config_path: Optional[Path] = None) -> PyElevateConfig:
    """Load and validate pyelevate configuration.

    Returns config with defaults if no file is found.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PyElevateConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SECTION_NAME, {})
    else:
        section = raw.get(SECTION_NAME, {})

    if not isinstance(section, dict):
        raise ConfigError(
            f"[{SECTION_NAME}] must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file found but no %s section, using defaults", SECTION_NAME)
        return PyElevateConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomli.load(fh)
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PyElevateConfig:
    """Validate a ``[pyelevate]`` table and build the config from it.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    unknown = set(section) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = PyElevateConfig()
    for name, value in section.items():
        validator, expected = _OPTIONS[name]
        if not validator(value):
            raise ConfigError(
                f"{name} must be {expected}, got {value!r}",
                config_path=config_path,
                option=name,
            )
        setattr(config, name, float(value) if name == "timeout" else value)

    return config
