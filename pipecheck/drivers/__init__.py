"""Drivers for services outside the engine."""

from pipecheck.drivers.external_validator import ExternalValidatorDriver

__all__ = ["ExternalValidatorDriver"]
