"""End-to-end behaviour of validation combined with auto-fix."""

import pytest

from pipecheck.compiler.autofix import apply_auto_fixes
from pipecheck.compiler.results import ROOT
from pipecheck.compiler.yaml_validator import validate_pipeline_yaml
from pipecheck.kernel.catalog.aliases import Confidence

MAPPING_PIPELINE = """\
input:
  stdin: {{}}
pipeline:
  processors:
    - mapping: |
        {expression}
output:
  stdout: {{}}
"""


class TestValidation:
    """Document-level outcomes."""

    def test_valid_document(self, valid_pipeline: str) -> None:
        result = validate_pipeline_yaml(valid_pipeline)
        assert result.valid
        assert result.errors == []

    @pytest.mark.parametrize(
        ("text", "section"),
        [
            ("output:\n  stdout: {}\n", "input"),
            ("input:\n  stdin: {}\n", "output"),
        ],
    )
    def test_missing_section(self, text: str, section: str) -> None:
        result = validate_pipeline_yaml(text)
        assert not result.valid
        (error,) = result.errors
        assert error.path == ROOT
        assert f'"{section}"' in error.message

    def test_multiple_documents(self) -> None:
        text = "input:\n  stdin: {}\noutput:\n  stdout: {}\n---\ninput:\n  stdin: {}\noutput:\n  drop: {}\n"
        (error,) = validate_pipeline_yaml(text).errors
        assert "Multiple pipeline documents" in error.message

    def test_single_unknown_component(self) -> None:
        result = validate_pipeline_yaml("input:\n  stdin: {}\noutput:\n  stdot: {}\n")
        (error,) = result.errors
        assert error.path == "output.stdot"
        assert error.suggestion == "Did you mean: stdout?"


class TestAutoFix:
    """Auto-fix contracts."""

    def test_kafka_typo(self) -> None:
        text = "input:\n  kafaka:\n    addresses: [a:9092]\n    topics: [t]\n    consumer_group: g\n"
        result = apply_auto_fixes(text)
        assert "kafka:" in result.corrected_text
        assert "kafaka:" not in result.corrected_text
        assert result.applied_fixes == ['Component: "kafaka" -> "kafka"']

    @pytest.mark.parametrize(
        ("before", "after"),
        [
            ("root = this.parseJson()", "root = this.parse_json()"),
            ("root = this.items.mapEach(i -> i * 2)", "root = this.items.map_each(i -> i * 2)"),
            ("root = this.name.toUpperCase()", "root = this.name.uppercase()"),
        ],
    )
    def test_method_renames(self, before: str, after: str) -> None:
        result = apply_auto_fixes(MAPPING_PIPELINE.format(expression=before))
        assert after in result.corrected_text

    def test_idempotent(self) -> None:
        text = (
            "input:\n  kafaka: {}\n"
            "pipeline:\n  steps:\n    - mapping: root = this.parseJson()\n"
        )
        first = apply_auto_fixes(text)
        assert apply_auto_fixes(first.corrected_text).applied_fixes == []

    def test_structure_synonym_revalidates(self) -> None:
        text = (
            "input:\n  stdin: {}\n"
            "pipeline:\n  steps:\n    - mapping: root = this\n"
            "output:\n  stdout: {}\n"
        )
        assert not validate_pipeline_yaml(text).valid
        fixed = apply_auto_fixes(text).corrected_text
        assert "  processors:\n" in fixed
        assert validate_pipeline_yaml(fixed).valid

    def test_ambiguous_names_are_only_suggested(self) -> None:
        result = apply_auto_fixes("input:\n  http:\n    url: http://x\n")
        assert result.applied_fixes == []
        assert result.suggested_fixes
        for suggestion in result.suggested_fixes:
            assert suggestion.confidence in (Confidence.MEDIUM, Confidence.LOW)
