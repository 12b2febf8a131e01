"""Tests for pipecheck.kernel.catalog.aliases."""

import pytest

from pipecheck.kernel.catalog.aliases import (
    AMBIGUOUS_COMPONENTS,
    BLOBLANG_FUNCTION_TYPOS,
    BLOBLANG_METHOD_TYPOS,
    COMPONENT_TYPOS,
    STRUCTURE_FIXES,
    Confidence,
    Resolution,
    resolve_component,
    resolve_function,
    resolve_method,
)
from pipecheck.kernel.catalog.bloblang import FUNCTION_NAMES, METHOD_NAMES
from pipecheck.kernel.catalog.components import COMPONENT_NAMES


class TestResolution:
    """Test the auto-fix eligibility of a resolution."""

    def test_high_single_candidate_is_replacement(self) -> None:
        assert Resolution(("kafka",), Confidence.HIGH, "typo").replacement == "kafka"

    def test_multiple_candidates_have_no_replacement(self) -> None:
        resolution = Resolution(("http_client", "http_server"), Confidence.HIGH, "ambiguous")
        assert resolution.replacement is None

    @pytest.mark.parametrize("confidence", [Confidence.MEDIUM, Confidence.LOW])
    def test_lower_confidence_has_no_replacement(self, confidence: Confidence) -> None:
        assert Resolution(("stdout",), confidence, "fuzzy").replacement is None


class TestTables:
    """Test the misspelling and ambiguity tables point at real names."""

    def test_component_typo_targets_are_known(self) -> None:
        known = set().union(*COMPONENT_NAMES.values())
        assert set(COMPONENT_TYPOS.values()) <= known

    def test_method_typo_targets_are_methods(self) -> None:
        assert set(BLOBLANG_METHOD_TYPOS.values()) <= METHOD_NAMES

    def test_function_typo_targets_are_functions(self) -> None:
        assert set(BLOBLANG_FUNCTION_TYPOS.values()) <= FUNCTION_NAMES

    def test_ambiguous_entries_have_candidates(self) -> None:
        for alias in AMBIGUOUS_COMPONENTS.values():
            assert alias.candidates
            assert alias.confidence is not Confidence.HIGH

    def test_structure_synonyms(self) -> None:
        assert set(STRUCTURE_FIXES.values()) == {"processors"}
        assert {"steps", "with", "stages", "transforms"} <= set(STRUCTURE_FIXES)


class TestResolveComponent:
    """Test component resolution order and category filtering."""

    @pytest.mark.parametrize(
        ("name", "category", "expected"),
        [
            ("kafaka", "input", "kafka"),
            ("kakfa", "output", "kafka"),
            ("s3", "output", "aws_s3"),
            ("elastic", "output", "elasticsearch_v8"),
            ("blobl", "processor", "bloblang"),
            ("console", "input", "stdin"),
            ("console", "output", "stdout"),
            ("Kafka", "input", "kafka"),
            ("KAFAKA", "input", "kafka"),
        ],
    )
    def test_high_confidence(self, name: str, category: str, expected: str) -> None:
        resolution = resolve_component(name, category)  # type: ignore[arg-type]
        assert resolution is not None
        assert resolution.confidence is Confidence.HIGH
        assert resolution.replacement == expected

    def test_valid_name_resolves_to_none(self) -> None:
        assert resolve_component("kafka", "input") is None

    def test_http_is_ambiguous(self) -> None:
        resolution = resolve_component("http", "input")
        assert resolution is not None
        assert resolution.candidates == ("http_client", "http_server")
        assert resolution.confidence is Confidence.MEDIUM
        assert resolution.replacement is None
        assert resolution.reason

    def test_http_is_a_valid_processor(self) -> None:
        assert resolve_component("http", "processor") is None

    def test_ambiguous_candidates_filtered_by_category(self) -> None:
        resolution = resolve_component("sql", "input")
        assert resolution is not None
        assert resolution.candidates == ("sql_select", "sql_raw")
        assert resolution.confidence is Confidence.MEDIUM

    def test_typo_target_outside_category_is_skipped(self) -> None:
        # elasticsearch_v8 is an output only
        resolution = resolve_component("elastic", "input")
        assert resolution is None or resolution.replacement != "elasticsearch_v8"

    def test_fuzzy_match_is_low(self) -> None:
        resolution = resolve_component("stdot", "output")
        assert resolution is not None
        assert resolution.candidates == ("stdout",)
        assert resolution.confidence is Confidence.LOW
        assert resolution.replacement is None

    def test_nothing_plausible(self) -> None:
        assert resolve_component("zz", "rate_limit") is None


class TestResolveMethod:
    """Test Bloblang method resolution."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("parseJson", "parse_json"),
            ("toUpperCase", "uppercase"),
            ("toLowerCase", "lowercase"),
            ("formatJson", "format_json"),
            ("mapEachKey", "map_each_key"),
            ("PARSE_JSON", "parse_json"),
        ],
    )
    def test_high_confidence(self, name: str, expected: str) -> None:
        resolution = resolve_method(name)
        assert resolution is not None
        assert resolution.replacement == expected

    def test_known_method(self) -> None:
        assert resolve_method("parse_json") is None

    def test_ambiguous_map(self) -> None:
        resolution = resolve_method("map")
        assert resolution is not None
        assert resolution.candidates == ("map_each", "map_each_key")
        assert resolution.confidence is Confidence.MEDIUM

    def test_function_used_as_method(self) -> None:
        resolution = resolve_method("uuid_v4")
        assert resolution is not None
        assert resolution.source == "kind"
        assert resolution.confidence is Confidence.LOW

    def test_prefix_fallback(self) -> None:
        resolution = resolve_method("sorted_keys")
        assert resolution is not None
        assert resolution.source == "prefix"
        assert resolution.candidates == ("sort", "sort_by")

    def test_prefix_fallback_keeps_three(self) -> None:
        resolution = resolve_method("parse_jsonl")
        assert resolution is not None
        assert resolution.candidates == ("parse_csv", "parse_duration", "parse_form_url_encoded")


class TestResolveFunction:
    """Test Bloblang function resolution."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("uuid", "uuid_v4"), ("uuidv4", "uuid_v4"), ("getenv", "env"), ("host_name", "hostname")],
    )
    def test_high_confidence(self, name: str, expected: str) -> None:
        resolution = resolve_function(name)
        assert resolution is not None
        assert resolution.replacement == expected

    def test_known_function(self) -> None:
        assert resolve_function("now") is None

    def test_ambiguous_timestamp(self) -> None:
        resolution = resolve_function("timestamp")
        assert resolution is not None
        assert resolution.replacement is None
        assert resolution.candidates == ("now", "timestamp_unix")
