"""Configuration data models for pipecheck."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pipecheck.kernel.exceptions import ConfigurationError

WarningSeverity = Literal["error", "warning", "info"]


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration for pipecheck.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write JSON logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.pipecheck.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export PIPECHECK_LOG_LEVEL=DEBUG
    export PIPECHECK_LOG_FORMAT=json
    export PIPECHECK_LOG_FILE=/var/log/pipecheck.log
    ```
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


@dataclass(frozen=True, slots=True)
class ExternalValidatorConfig:
    """Settings for the optional authoritative validator service.

    Attributes
    ----------
    enabled : bool, default=False
        Call the service after local validation
    url : str | None, default=None
        Endpoint receiving the pipeline text as a JSON ``{"yaml": ...}`` body
    timeout : float, default=10.0
        Request timeout in seconds
    """

    enabled: bool = False
    url: str | None = None
    timeout: float = 10.0

    def __post_init__(self) -> None:
        """Validate the external validator settings.

        Raises
        ------
        ConfigurationError
            If enabled without a URL or the timeout is not positive
        """
        if self.enabled and not self.url:
            raise ConfigurationError("external.url", "required when external.enabled is true")
        if self.timeout <= 0:
            raise ConfigurationError("external.timeout", f"must be positive (got {self.timeout})")


@dataclass(frozen=True, slots=True)
class PipecheckConfig:
    """Complete pipecheck configuration.

    Attributes
    ----------
    logging : LoggingConfig
        Logging configuration
    max_fix_iterations : int, default=10
        Upper bound on auto-fix passes before the fixed point is reached
    auto_fix : bool, default=True
        Whether the API facade runs auto-fix before validating
    compatibility_checks : bool, default=True
        Run cross-component compatibility rules and report them as warnings
    warning_severity : str, default="warning"
        Lowest compatibility severity reported ("error", "warning" or "info")
    external : ExternalValidatorConfig
        Optional external validator settings

    Examples
    --------
    TOML configuration in pyproject.toml:

    ```toml
    [tool.pipecheck]
    max_fix_iterations = 5
    compatibility_checks = true
    warning_severity = "info"

    [tool.pipecheck.external]
    enabled = true
    url = "${PIPECHECK_VALIDATOR_URL}"
    timeout = 5.0
    ```
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    max_fix_iterations: int = 10
    auto_fix: bool = True
    compatibility_checks: bool = True
    warning_severity: WarningSeverity = "warning"
    external: ExternalValidatorConfig = field(default_factory=ExternalValidatorConfig)

    def __post_init__(self) -> None:
        """Validate scalar settings.

        Raises
        ------
        ConfigurationError
            If a value is out of range
        """
        if not isinstance(self.max_fix_iterations, int) or self.max_fix_iterations < 1:
            raise ConfigurationError(
                "max_fix_iterations", f"must be a positive integer (got {self.max_fix_iterations!r})"
            )
        if self.warning_severity not in ("error", "warning", "info"):
            raise ConfigurationError(
                "warning_severity",
                f"must be one of error, warning, info (got {self.warning_severity!r})",
            )
