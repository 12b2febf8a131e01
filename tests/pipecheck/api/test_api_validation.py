"""Tests for pipecheck.api.validation."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from pipecheck.api import validation
from pipecheck.api.validation import avalidate_with_external, check_pipeline
from pipecheck.drivers.external_validator import ExternalValidatorDriver
from pipecheck.kernel.config.models import ExternalValidatorConfig, PipecheckConfig

TYPO_PIPELINE = """\
input:
  kafaka:
    addresses: [localhost:9092]
    topics: [events]
    consumer_group: g
output:
  stdout: {}
"""


class StaticTransport(httpx.AsyncBaseTransport):
    """Transport that answers every request with the same JSON body."""

    def __init__(self, body: Any, status: int = 200) -> None:
        self._body = body
        self._status = status
        self.payloads: list[bytes] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(request.content)
        return httpx.Response(status_code=self._status, json=self._body, request=request)


def _driver(transport: httpx.AsyncBaseTransport) -> ExternalValidatorDriver:
    driver = ExternalValidatorDriver("https://validator.test/validate")
    driver._transport = transport
    return driver


class TestCheckPipeline:
    """Test the synchronous check."""

    def test_valid_document(self, valid_pipeline: str) -> None:
        result = check_pipeline(valid_pipeline)
        assert result["valid"] is True
        assert result["errors"] == []
        assert "fixed_yaml" not in result
        assert "fixes_applied" not in result
        assert "suggested_fixes" not in result

    def test_fixes_are_applied_before_validation(self) -> None:
        result = check_pipeline(TYPO_PIPELINE)
        assert result["valid"] is True
        assert result["fixes_applied"] == ['Component: "kafaka" -> "kafka"']
        assert "  kafka:\n" in result["fixed_yaml"]

    def test_auto_fix_disabled(self) -> None:
        result = check_pipeline(TYPO_PIPELINE, PipecheckConfig(auto_fix=False))
        assert result["valid"] is False
        assert result["errors"][0] == {
            "path": "input.kafaka",
            "message": 'Unknown input type: "kafaka"',
            "suggestion": "Did you mean: kafka?",
        }
        assert "fixed_yaml" not in result

    def test_suggestions_for_ambiguous_names(self) -> None:
        text = "input:\n  http:\n    url: http://x\noutput:\n  stdout: {}\n"
        result = check_pipeline(text)
        assert result["valid"] is False
        assert "fixed_yaml" not in result
        (suggestion,) = result["suggested_fixes"]
        assert suggestion["candidates"] == ["http_client", "http_server"]
        assert suggestion["confidence"] == "medium"

    def test_compatibility_setting(self) -> None:
        text = (
            "input:\n  stdin: {}\n"
            "pipeline:\n  processors:\n    - try:\n        - mapping: root = this\n"
            "output:\n  stdout: {}\n"
        )
        assert check_pipeline(text)["warnings"]
        assert check_pipeline(text, PipecheckConfig(compatibility_checks=False))["warnings"] == []

    def test_multiple_documents(self) -> None:
        text = "input:\n  stdin: {}\n---\ninput:\n  stdin: {}\n"
        result = check_pipeline(text)
        assert result["valid"] is False
        assert len(result["errors"]) == 1


class TestExternalValidation:
    """Test merging the external validator's verdict."""

    @pytest.mark.asyncio
    async def test_no_external_call_by_default(self, valid_pipeline: str) -> None:
        result = await avalidate_with_external(valid_pipeline)
        assert result == check_pipeline(valid_pipeline)

    @pytest.mark.asyncio
    async def test_external_errors_are_merged(self, valid_pipeline: str) -> None:
        transport = StaticTransport(
            {"valid": False, "errors": [{"path": "input", "message": "broker unreachable"}]}
        )
        async with _driver(transport) as driver:
            result = await avalidate_with_external(valid_pipeline, driver=driver)
        assert result["valid"] is False
        assert result["errors"] == [{"path": "input", "message": "broker unreachable"}]

    @pytest.mark.asyncio
    async def test_external_sees_fixed_text(self) -> None:
        transport = StaticTransport({"valid": True})
        async with _driver(transport) as driver:
            result = await avalidate_with_external(TYPO_PIPELINE, driver=driver)
        assert result["valid"] is True
        assert b"kafaka" not in transport.payloads[0]

    @pytest.mark.asyncio
    async def test_failing_service_is_ignored(self, valid_pipeline: str) -> None:
        async with _driver(StaticTransport({"error": "down"}, status=503)) as driver:
            result = await avalidate_with_external(valid_pipeline, driver=driver)
        assert result == check_pipeline(valid_pipeline)

    @pytest.mark.asyncio
    async def test_driver_built_from_config(
        self, valid_pipeline: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        transport = StaticTransport({"valid": True, "warnings": ["checked remotely"]})

        class InjectedDriver(ExternalValidatorDriver):
            def __init__(self, *args: Any, **kwargs: Any) -> None:
                super().__init__(*args, **kwargs)
                self._transport = transport

        monkeypatch.setattr(validation, "ExternalValidatorDriver", InjectedDriver)
        config = PipecheckConfig(
            external=ExternalValidatorConfig(enabled=True, url="https://validator.test/validate")
        )
        result = await avalidate_with_external(valid_pipeline, config)
        assert "checked remotely" in result["warnings"]
        assert len(transport.payloads) == 1
