"""Tests for pipecheck.compiler.yaml_validator."""

from typing import Any

import pytest

from pipecheck.compiler.yaml_validator import (
    MULTIPLE_DOCUMENTS_ERROR,
    PipelineValidator,
    validate_pipeline,
    validate_pipeline_yaml,
)


def _base(**overrides: Any) -> dict[str, Any]:
    config: dict[str, Any] = {"input": {"stdin": {}}, "output": {"stdout": {}}}
    config.update(overrides)
    return config


def _paths(config: Any) -> list[str]:
    return [e.path for e in validate_pipeline(config, compatibility=False).errors]


class TestDocumentLevel:
    """Test whole-document checks."""

    def setup_method(self) -> None:
        self.validator = PipelineValidator(compatibility=False)

    def test_valid_pipeline(self, valid_pipeline: str) -> None:
        result = self.validator.validate_text(valid_pipeline)
        assert result.valid
        assert result.errors == []

    def test_minimal_pipeline(self) -> None:
        assert self.validator.validate(_base()).valid

    @pytest.mark.parametrize("section", ["input", "output"])
    def test_missing_section(self, section: str) -> None:
        config = _base()
        del config[section]
        (error,) = self.validator.validate(config).errors
        assert error.path == "root"
        assert error.message == f'Missing required "{section}" section'

    def test_not_an_object(self) -> None:
        (error,) = self.validator.validate(["input"]).errors
        assert error.message == "Pipeline configuration must be an object"

    def test_unparseable_text(self) -> None:
        (error,) = self.validator.validate_text("This is not yaml").errors
        assert error.path == "root"
        assert error.message.startswith("Failed to parse YAML: line 1:")

    def test_multiple_documents(self) -> None:
        text = "input:\n  stdin: {}\noutput:\n  stdout: {}\n---\ninput:\n  stdin: {}\n"
        assert self.validator.validate_text(text).errors == [MULTIPLE_DOCUMENTS_ERROR]

    def test_single_pipeline_among_documents(self) -> None:
        text = "foo: 1\n---\ninput:\n  stdin: {}\noutput:\n  stdout: {}\n"
        assert self.validator.validate_text(text).valid

    def test_json_document(self) -> None:
        assert self.validator.validate_text('{"input": {"stdin": {}}, "output": {"stdout": {}}}').valid


class TestForeignKeys:
    """Test keys borrowed from other configuration formats."""

    def test_hallucinated_section(self) -> None:
        result = validate_pipeline(_base(steps=[]), compatibility=False)
        (error,) = result.errors
        assert error.path == "root.steps"
        assert result.warnings == []

    def test_kubernetes_key(self) -> None:
        assert _paths(_base(apiVersion="v1")) == ["root.apiVersion"]

    def test_top_level_type(self) -> None:
        assert _paths(_base(type="stream")) == ["root.type"]

    def test_github_actions(self) -> None:
        result = validate_pipeline(_base(name="ci", on="push"), compatibility=False)
        assert [e.message for e in result.errors] == [
            "This looks like a GitHub Actions workflow, not an Expanso pipeline"
        ]
        assert result.warnings == []

    def test_docker_compose(self) -> None:
        result = validate_pipeline(_base(services={}), compatibility=False)
        assert result.errors[0].message == "This looks like a Docker Compose file, not an Expanso pipeline"

    def test_unknown_top_level_key_warns(self) -> None:
        result = validate_pipeline(_base(foo=1), compatibility=False)
        assert result.valid
        assert result.warnings == ['Unknown top-level key "foo" will be ignored']

    def test_known_top_level_keys_are_quiet(self) -> None:
        result = validate_pipeline(_base(logger={"level": "INFO"}, http={}), compatibility=False)
        assert result.warnings == []

    def test_invalid_pipeline_key(self) -> None:
        assert _paths(_base(pipeline={"processors": [], "steps": []})) == ["pipeline.steps"]

    def test_pipeline_not_an_object(self) -> None:
        assert _paths(_base(pipeline="x")) == ["pipeline"]


class TestComponents:
    """Test component type and field checks."""

    def test_typo_suggests_single_fix(self) -> None:
        (error,) = validate_pipeline(_base(input={"kafaka": {}}), compatibility=False).errors
        assert error.path == "input.kafaka"
        assert error.message == 'Unknown input type: "kafaka"'
        assert error.suggestion == "Did you mean: kafka?"

    def test_close_match_suggestion(self) -> None:
        (error,) = validate_pipeline(_base(output={"stdot": {}}), compatibility=False).errors
        assert error.suggestion == "Did you mean: stdout?"

    def test_no_suggestion(self) -> None:
        config = _base(pipeline={"processors": [{"zzzzqqq": {}}]})
        (error,) = validate_pipeline(config, compatibility=False).errors
        assert error.path == "pipeline.processors[0].zzzzqqq"
        assert error.suggestion == "Check the Expanso documentation for valid processor types"

    def test_component_not_an_object(self) -> None:
        (error,) = validate_pipeline(_base(input="stdin"), compatibility=False).errors
        assert error.message == "input must be an object"

    def test_no_component_type(self) -> None:
        (error,) = validate_pipeline(_base(input={"label": "x"}), compatibility=False).errors
        assert error.message == "No component type found in input"

    def test_label_is_metadata(self) -> None:
        assert _paths(_base(input={"label": "in", "stdin": {}})) == []

    def test_field_errors_are_reported(self) -> None:
        config = _base(input={"kafka": {"topics": ["t"], "consumer_group": "g"}})
        assert _paths(config) == ["input.kafka.addresses"]

    def test_input_level_processors(self) -> None:
        config = _base(input={"stdin": {}, "processors": [{"zzzzqqq": {}}]})
        assert _paths(config) == ["input.processors[0].zzzzqqq"]

    def test_try_children(self) -> None:
        config = _base(pipeline={"processors": [{"try": [{"zzzzqqq": {}}]}]})
        assert _paths(config) == ["pipeline.processors[0].try[0].zzzzqqq"]

    def test_switch_output_cases(self) -> None:
        output = {"switch": {"cases": [{"check": "this.a", "output": {"zzzzqqq": {}}}]}}
        assert _paths(_base(output=output)) == ["output.switch.cases[0].output.zzzzqqq"]

    def test_switch_processor_cases(self) -> None:
        switch = [{"check": "this.a", "processors": [{"zzzzqqq": {}}]}]
        config = _base(pipeline={"processors": [{"switch": switch}]})
        assert _paths(config) == ["pipeline.processors[0].switch[0].processors[0].zzzzqqq"]

    def test_broker_inputs(self) -> None:
        config = _base(input={"broker": {"inputs": [{"stdin": {}}, {"zzzzqqq": {}}]}})
        assert _paths(config) == ["input.broker.inputs[1].zzzzqqq"]

    def test_fallback_outputs(self) -> None:
        config = _base(output={"fallback": [{"stdout": {}}, {"zzzzqqq": {}}]})
        assert _paths(config) == ["output.fallback[1].zzzzqqq"]


class TestBufferAndResources:
    """Test buffer and resource sections."""

    def test_unknown_buffer(self) -> None:
        (error,) = validate_pipeline(_base(buffer={"nope": {}}), compatibility=False).errors
        assert error.path == "buffer.nope"
        assert error.message == 'Unknown buffer type: "nope"'
        assert error.suggestion == "Valid buffer types are: memory, none, system_window"

    def test_known_buffer(self) -> None:
        assert _paths(_base(buffer={"memory": {}})) == []

    def test_resource_without_label(self) -> None:
        result = validate_pipeline(_base(cache_resources=[{"memory": {}}]), compatibility=False)
        (error,) = result.errors
        assert error.path == "cache_resources[0]"
        assert error.message == "Resource in cache_resources has no label"

    def test_resource_section_not_a_list(self) -> None:
        (error,) = validate_pipeline(_base(cache_resources="x"), compatibility=False).errors
        assert error.message == "cache_resources must be a list"

    def test_unknown_resource_type(self) -> None:
        config = _base(rate_limit_resources=[{"label": "r", "zzzzqqq": {}}])
        (error,) = validate_pipeline(config, compatibility=False).errors
        assert error.path == "rate_limit_resources[0].zzzzqqq"
        assert error.message == 'Unknown rate limit type: "zzzzqqq"'


class TestExpressions:
    """Test Bloblang checks inside the document."""

    def test_mapping_method_error(self) -> None:
        config = _base(pipeline={"processors": [{"mapping": "root = this.parseJson()"}]})
        (error,) = validate_pipeline(config, compatibility=False).errors
        assert error.path == "pipeline.processors[0].mapping"
        assert error.message == 'Unknown Bloblang method ".parseJson()"'
        assert error.suggestion == "Use .parse_json() instead"

    def test_interpolation_error(self) -> None:
        log = {"log": {"message": "${! this.id.toUpperCase() }"}}
        config = _base(pipeline={"processors": [log]})
        assert _paths(config) == ["pipeline.processors[0].log.message"]

    def test_anti_pattern(self) -> None:
        config = _base(pipeline={"processors": [{"mapping": "var x = this.a"}]})
        result = validate_pipeline(config, compatibility=False)
        assert not result.valid
        assert result.errors[0].path == "pipeline.processors[0].mapping"


class TestCompatibilityWarnings:
    """Test compatibility rules surfacing as warnings."""

    def test_warning_format(self) -> None:
        config = _base(pipeline={"processors": [{"try": [{"mapping": "root = this"}]}]})
        result = validate_pipeline(config)
        assert result.valid
        assert any(w.startswith("try-without-catch: ") for w in result.warnings)

    def test_disabled(self) -> None:
        config = _base(pipeline={"processors": [{"try": []}]})
        assert validate_pipeline(config, compatibility=False).warnings == []

    def test_severity_floor(self) -> None:
        config = _base(input={"http_server": {}})
        assert validate_pipeline(config).warnings == []
        info = validate_pipeline(config, warning_severity="info").warnings
        assert any(w.startswith("http-server-without-sync-response: ") for w in info)

    def test_yaml_entry_point(self, valid_pipeline: str) -> None:
        assert validate_pipeline_yaml(valid_pipeline).valid
