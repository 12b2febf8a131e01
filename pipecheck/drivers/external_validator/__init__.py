"""External validator driver."""

from pipecheck.drivers.external_validator.external_validator import (
    EXTERNAL_PATH,
    ExternalValidatorDriver,
)

__all__ = ["EXTERNAL_PATH", "ExternalValidatorDriver"]
