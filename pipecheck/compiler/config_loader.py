"""Configuration loader for pipecheck.

Parses configuration into :class:`~pipecheck.kernel.config.PipecheckConfig`.
Supported sources:

1. **kind: Config YAML**, loaded via explicit path or the
   ``PIPECHECK_CONFIG_PATH`` env var.
2. **pipecheck.toml**, flat keys or a ``[tool.pipecheck]`` table.
3. **pyproject.toml [tool.pipecheck]**, discovered in the working directory
   or its parents.

``PIPECHECK_*`` environment variables override file values.
"""

from __future__ import annotations

import os
import re
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from pipecheck.kernel.config.models import (
    ExternalValidatorConfig,
    LoggingConfig,
    PipecheckConfig,
)
from pipecheck.kernel.exceptions import ConfigurationError
from pipecheck.kernel.logging import get_logger

_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_KNOWN_KEYS = frozenset({
    "logging",
    "max_fix_iterations",
    "auto_fix",
    "compatibility_checks",
    "warning_severity",
    "external",
})

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


@lru_cache(maxsize=32)
def _load_and_parse_cached(path_str: str) -> PipecheckConfig:
    """Cached configuration loader."""
    loader = ConfigLoader()
    return loader._load_and_parse(Path(path_str))


class ConfigLoader:
    """Loads and processes pipecheck configuration files."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> PipecheckConfig:
        """Load configuration from YAML or TOML.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Returns
        -------
        PipecheckConfig
            Parsed configuration with environment variables substituted

        Raises
        ------
        FileNotFoundError
            If an explicit path does not exist or nothing is discovered
        """
        config_path = self._find_config_file(path)
        return _load_and_parse_cached(str(config_path.absolute()))

    def _load_and_parse(self, config_path: Path) -> PipecheckConfig:
        logger.debug("Loading configuration from {path}", path=config_path)

        if config_path.suffix in (".yaml", ".yml"):
            return self._load_yaml_config(config_path)
        return self._load_toml_config(config_path)

    def _load_yaml_config(self, config_path: Path) -> PipecheckConfig:
        """Load and parse a kind: Config YAML file.

        Raises
        ------
        ConfigurationError
            If the YAML file is not a valid kind: Config manifest
        """
        with config_path.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(config_path.name, f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                config_path.name, f"expected a mapping, got {type(data).__name__}"
            )

        kind = data.get("kind")
        if kind != "Config":
            raise ConfigurationError(
                config_path.name, f"must use 'kind: Config' manifest format, got 'kind: {kind}'"
            )

        spec = data.get("spec", {})
        if not isinstance(spec, dict):
            raise ConfigurationError(config_path.name, "'spec' must be a mapping")

        return self._parse_config(self._substitute_env_vars(spec))

    def _load_toml_config(self, config_path: Path) -> PipecheckConfig:
        """Load and parse pipecheck.toml or pyproject.toml."""
        with config_path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(config_path.name, f"invalid TOML: {e}") from e

        tool_data = data.get("tool", {}).get("pipecheck")
        if config_path.name == "pyproject.toml":
            if not tool_data:
                logger.debug("No [tool.pipecheck] section in pyproject.toml, using defaults")
                return self._parse_config({})
            section = tool_data
        else:
            section = tool_data if tool_data is not None else data

        return self._parse_config(self._substitute_env_vars(section))

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Discovery order:
        1. Explicit path argument
        2. ``PIPECHECK_CONFIG_PATH`` env var
        3. ``pipecheck.toml`` in CWD
        4. ``pyproject.toml`` with ``[tool.pipecheck]`` in CWD or a parent

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        """
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv("PIPECHECK_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from PIPECHECK_CONFIG_PATH: {}", config_path)
                return config_path
            logger.warning("PIPECHECK_CONFIG_PATH set but file not found: {}", config_path)

        if Path("pipecheck.toml").exists():
            return Path("pipecheck.toml")

        current = Path.cwd()
        while True:
            pyproject = current / "pyproject.toml"
            if pyproject.exists():
                with pyproject.open("rb") as f:
                    try:
                        data = tomllib.load(f)
                    except tomllib.TOMLDecodeError:
                        data = {}
                if "pipecheck" in data.get("tool", {}):
                    return pyproject
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            "set PIPECHECK_CONFIG_PATH, or add [tool.pipecheck] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` references with environment values.

        Unset variables keep their placeholder.
        """
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable ${{{var_name}}} not found, keeping placeholder",
                        var_name=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> PipecheckConfig:
        """Parse raw configuration data into PipecheckConfig.

        Raises
        ------
        ConfigurationError
            If a value has the wrong type or is out of range
        """
        for key in data:
            if key not in _KNOWN_KEYS:
                logger.warning("Ignoring unknown configuration key {key!r}", key=key)

        max_fix_iterations = data.get("max_fix_iterations", 10)
        auto_fix = data.get("auto_fix", True)
        compatibility_checks = data.get("compatibility_checks", True)
        warning_severity = data.get("warning_severity", "warning")

        if env_iterations := os.getenv("PIPECHECK_MAX_FIX_ITERATIONS"):
            try:
                max_fix_iterations = int(env_iterations)
            except ValueError as e:
                raise ConfigurationError(
                    "PIPECHECK_MAX_FIX_ITERATIONS", f"not an integer: {env_iterations!r}"
                ) from e

        if env_compat := os.getenv("PIPECHECK_COMPATIBILITY_CHECKS"):
            try:
                compatibility_checks = _parse_bool_env(env_compat)
            except ValueError as e:
                logger.warning("Invalid PIPECHECK_COMPATIBILITY_CHECKS value: {}", e)

        if env_severity := os.getenv("PIPECHECK_WARNING_SEVERITY"):
            warning_severity = env_severity.lower()

        for name, value in (("auto_fix", auto_fix), ("compatibility_checks", compatibility_checks)):
            if not isinstance(value, bool):
                raise ConfigurationError(name, f"must be a boolean (got {value!r})")

        return PipecheckConfig(
            logging=self._parse_logging_config(self._section(data, "logging")),
            max_fix_iterations=max_fix_iterations,
            auto_fix=auto_fix,
            compatibility_checks=compatibility_checks,
            warning_severity=warning_severity,
            external=self._parse_external_config(self._section(data, "external")),
        )

    @staticmethod
    def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
        section = data.get(name, {})
        if not isinstance(section, dict):
            raise ConfigurationError(name, "must be a table/mapping")
        return section

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        Environment variables take precedence over config file values:
        - PIPECHECK_LOG_LEVEL: Log level
        - PIPECHECK_LOG_FORMAT: Output format (console, json, structured, rich)
        - PIPECHECK_LOG_FILE: Optional file path for log output
        - PIPECHECK_LOG_COLOR: Use color output (true/false)
        """
        level = str(logging_data.get("level", "WARNING")).upper()
        format_type = str(logging_data.get("format", "structured")).lower()
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)
        include_timestamp = logging_data.get("include_timestamp", True)

        if env_level := os.getenv("PIPECHECK_LOG_LEVEL"):
            level = env_level.upper()
        if env_format := os.getenv("PIPECHECK_LOG_FORMAT"):
            format_type = env_format.lower()
        if env_file := os.getenv("PIPECHECK_LOG_FILE"):
            output_file = env_file
        if env_color := os.getenv("PIPECHECK_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid PIPECHECK_LOG_COLOR value: {}", e)

        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError("logging.level", f"unknown level {level!r}")
        if format_type not in ("console", "json", "structured", "rich"):
            raise ConfigurationError("logging.format", f"unknown format {format_type!r}")

        return LoggingConfig(
            level=level,  # type: ignore[arg-type]
            format=format_type,  # type: ignore[arg-type]
            output_file=output_file,
            use_color=use_color,
            include_timestamp=include_timestamp,
        )

    def _parse_external_config(self, external_data: dict[str, Any]) -> ExternalValidatorConfig:
        """Parse external validator settings.

        ``PIPECHECK_EXTERNAL_URL`` sets the URL and enables the validator;
        ``PIPECHECK_EXTERNAL_TIMEOUT`` overrides the timeout.
        """
        enabled = external_data.get("enabled", False)
        url = external_data.get("url")
        timeout = external_data.get("timeout", 10.0)

        if env_url := os.getenv("PIPECHECK_EXTERNAL_URL"):
            url = env_url
            enabled = True
        if env_timeout := os.getenv("PIPECHECK_EXTERNAL_TIMEOUT"):
            try:
                timeout = float(env_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    "PIPECHECK_EXTERNAL_TIMEOUT", f"not a number: {env_timeout!r}"
                ) from e

        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
            raise ConfigurationError("external.timeout", f"must be a number (got {timeout!r})")

        return ExternalValidatorConfig(enabled=bool(enabled), url=url, timeout=float(timeout))


def load_config(path: str | Path | None = None) -> PipecheckConfig:
    """Load configuration from file or return defaults.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search

    Returns
    -------
    PipecheckConfig
        Loaded configuration, or defaults if no file was found

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist
    """
    loader = ConfigLoader()
    try:
        return loader.load_config_file(path)
    except FileNotFoundError:
        if path:
            raise
        logger.debug("No configuration file found, using defaults")
        return get_default_config()


def clear_config_cache() -> None:
    """Clear cached configurations.

    Useful for testing or when configuration files have been modified.
    """
    _load_and_parse_cached.cache_clear()


def get_default_config() -> PipecheckConfig:
    """Return the built-in defaults, with environment overrides applied."""
    return ConfigLoader()._parse_config({})
