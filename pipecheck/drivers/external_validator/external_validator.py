"""External validator driver using httpx.AsyncClient.

Sends pipeline text to an authoritative validator service and converts its
answer into a :class:`~pipecheck.compiler.results.ValidationResult`. The
driver fails open: an unreachable or misbehaving service contributes no
errors and never fails the local result.
"""

from __future__ import annotations

from typing import Any

import httpx

from pipecheck.compiler.results import ValidationError, ValidationResult
from pipecheck.kernel.config.models import ExternalValidatorConfig
from pipecheck.kernel.exceptions import ExternalValidatorError
from pipecheck.kernel.logging import get_logger

logger = get_logger(__name__)

#: Path given to service errors that carry none
EXTERNAL_PATH = "external"


class ExternalValidatorDriver:
    """Client for an external pipeline validator.

    The service receives ``POST {"yaml": <text>}`` and answers with JSON
    ``{"valid": bool, "errors": [...], "warnings": [...]}``. Each error is
    either a string or an object with ``message`` and optional ``path`` and
    ``suggestion``.

    Parameters
    ----------
    url : str
        Endpoint of the validator service
    timeout : float
        Request timeout in seconds (default: 10.0)
    headers : dict[str, str] | None
        Extra headers sent with every request

    Examples
    --------
    Basic usage::

        driver = ExternalValidatorDriver("https://validator.example.com/validate")
        result = await driver.avalidate(pipeline_text)
        print(result.errors)

    From configuration::

        driver = ExternalValidatorDriver.from_config(config.external)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._headers = dict(headers) if headers else {}
        self._client: httpx.AsyncClient | None = None
        # Hook for testing: inject a custom transport
        self._transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(cls, config: ExternalValidatorConfig) -> ExternalValidatorDriver:
        """Build a driver from the ``external`` configuration section."""
        if not config.url:
            raise ValueError("ExternalValidatorConfig.url is not set")
        return cls(config.url, timeout=config.timeout)

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx client on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {"timeout": self._timeout, "headers": self._headers}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def avalidate(self, text: str) -> ValidationResult:
        """Validate ``text`` with the service.

        Returns
        -------
        ValidationResult
            The service's verdict, or an empty (valid) result when the call
            fails for any transport or protocol reason
        """
        try:
            payload = await self._request(text)
            return self._parse_payload(payload)
        except ExternalValidatorError as e:
            logger.warning("External validator unavailable, failing open: {reason}", reason=e.reason)
            return ValidationResult()

    async def _request(self, text: str) -> dict[str, Any]:
        client = self._get_client()
        try:
            response = await client.post(self._url, json={"yaml": text})
        except httpx.HTTPError as e:
            raise ExternalValidatorError(self._url, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ExternalValidatorError(self._url, f"HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalValidatorError(self._url, "response is not JSON") from e
        if not isinstance(payload, dict):
            raise ExternalValidatorError(self._url, "response is not a JSON object")
        logger.debug(
            "External validator answered {status}", status=response.status_code
        )
        return payload

    def _parse_payload(self, payload: dict[str, Any]) -> ValidationResult:
        errors_data = payload.get("errors") or []
        warnings_data = payload.get("warnings") or []
        if not isinstance(errors_data, list) or not isinstance(warnings_data, list):
            raise ExternalValidatorError(self._url, "errors and warnings must be lists")

        errors: list[ValidationError] = []
        for item in errors_data:
            if isinstance(item, str):
                errors.append(ValidationError(EXTERNAL_PATH, item))
            elif isinstance(item, dict) and item.get("message"):
                suggestion = item.get("suggestion")
                errors.append(
                    ValidationError(
                        str(item.get("path") or EXTERNAL_PATH),
                        str(item["message"]),
                        str(suggestion) if suggestion else None,
                    )
                )
        if payload.get("valid") is False and not errors:
            errors.append(ValidationError(EXTERNAL_PATH, "Rejected by external validator"))
        return ValidationResult(errors=errors, warnings=[str(w) for w in warnings_data])

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ExternalValidatorDriver:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
