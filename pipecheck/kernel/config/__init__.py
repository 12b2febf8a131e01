"""Configuration models."""

from pipecheck.kernel.config.models import (
    ExternalValidatorConfig,
    LoggingConfig,
    PipecheckConfig,
    WarningSeverity,
)

__all__ = ["ExternalValidatorConfig", "LoggingConfig", "PipecheckConfig", "WarningSeverity"]
