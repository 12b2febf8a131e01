"""Tests for the config loader module.

This module tests configuration loading for pipecheck, covering
kind: Config YAML manifests, pipecheck.toml and pyproject.toml [tool.pipecheck].
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pipecheck.compiler.config_loader import (
    ConfigLoader,
    _parse_bool_env,
    clear_config_cache,
    get_default_config,
    load_config,
)
from pipecheck.kernel.config.models import PipecheckConfig
from pipecheck.kernel.exceptions import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path


class TestParseBoolEnv:
    """Tests for _parse_bool_env function."""

    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", "ON", "enabled", "  true  "])
    def test_truthy_values(self, value: str) -> None:
        assert _parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["false", "FALSE", "0", "no", "off", "disabled"])
    def test_falsy_values(self, value: str) -> None:
        assert _parse_bool_env(value) is False

    def test_invalid_value_raises_error(self) -> None:
        """Test that invalid values raise ValueError."""
        with pytest.raises(ValueError) as exc_info:
            _parse_bool_env("maybe")
        assert "Invalid boolean value" in str(exc_info.value)
        assert "maybe" in str(exc_info.value)


class TestEnvSubstitution:
    """Tests for ${VAR} substitution."""

    def test_env_var_pattern(self) -> None:
        loader = ConfigLoader()
        assert loader.ENV_VAR_PATTERN.match("${MY_VAR}")
        assert not loader.ENV_VAR_PATTERN.match("$MY_VAR")

    def test_substitutes_nested_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VALIDATOR_HOST", "validator.local")
        loader = ConfigLoader()
        data = {"external": {"url": "http://${VALIDATOR_HOST}/validate"}, "list": ["${VALIDATOR_HOST}"]}
        assert loader._substitute_env_vars(data) == {
            "external": {"url": "http://validator.local/validate"},
            "list": ["validator.local"],
        }

    def test_missing_variable_keeps_placeholder(self) -> None:
        assert ConfigLoader()._substitute_env_vars("${PIPECHECK_TEST_UNSET}") == "${PIPECHECK_TEST_UNSET}"

    def test_non_strings_pass_through(self) -> None:
        assert ConfigLoader()._substitute_env_vars(5) == 5


class TestYamlConfig:
    """Tests for kind: Config manifests."""

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.yaml"
        path.write_text(
            "kind: Config\n"
            "metadata:\n"
            "  name: ci\n"
            "spec:\n"
            "  max_fix_iterations: 3\n"
            "  warning_severity: info\n"
            "  logging:\n"
            "    level: debug\n"
            "    format: json\n"
        )
        config = load_config(path)
        assert config.max_fix_iterations == 3
        assert config.warning_severity == "info"
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_wrong_kind(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("kind: Pipeline\nspec: {}\n")
        with pytest.raises(ConfigurationError, match="kind: Config"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="expected a mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("kind: [Config\n")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_config(path)

    def test_spec_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("kind: Config\nspec: [1]\n")
        with pytest.raises(ConfigurationError, match="'spec' must be a mapping"):
            load_config(path)


class TestTomlConfig:
    """Tests for pipecheck.toml and pyproject.toml."""

    def test_flat_pipecheck_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pipecheck.toml").write_text(
            "max_fix_iterations = 4\ncompatibility_checks = false\n"
        )
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.max_fix_iterations == 4
        assert config.compatibility_checks is False

    def test_tool_table_in_pipecheck_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text("[tool.pipecheck]\nauto_fix = false\n")
        assert load_config(path).auto_fix is False

    def test_pyproject_discovery_from_subdirectory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n'
            "[tool.pipecheck]\nwarning_severity = \"error\"\n\n"
            "[tool.pipecheck.external]\nenabled = true\nurl = \"http://v/validate\"\ntimeout = 2\n"
        )
        nested = tmp_path / "pipelines"
        nested.mkdir()
        monkeypatch.chdir(nested)
        config = load_config()
        assert config.warning_severity == "error"
        assert config.external.enabled is True
        assert config.external.url == "http://v/validate"
        assert config.external.timeout == 2.0

    def test_pyproject_without_section_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n')
        assert load_config(path) == PipecheckConfig()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text("max_fix_iterations = = 3\n")
        with pytest.raises(ConfigurationError, match="invalid TOML"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text('auto_fix = "sometimes"\n')
        with pytest.raises(ConfigurationError, match="auto_fix"):
            load_config(path)

    def test_invalid_logging_level(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text('[logging]\nlevel = "loud"\n')
        with pytest.raises(ConfigurationError, match="logging.level"):
            load_config(path)

    def test_section_must_be_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text('external = "http://v"\n')
        with pytest.raises(ConfigurationError, match="must be a table/mapping"):
            load_config(path)


class TestDiscoveryAndCache:
    """Tests for discovery fallbacks and caching."""

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_defaults_when_nothing_found(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == get_default_config() == PipecheckConfig()

    def test_config_path_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.toml"
        path.write_text("max_fix_iterations = 7\n")
        monkeypatch.setenv("PIPECHECK_CONFIG_PATH", str(path))
        assert load_config().max_fix_iterations == 7

    def test_cache_is_cleared(self, tmp_path: Path) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text("max_fix_iterations = 2\n")
        assert load_config(path).max_fix_iterations == 2
        path.write_text("max_fix_iterations = 5\n")
        assert load_config(path).max_fix_iterations == 2
        clear_config_cache()
        assert load_config(path).max_fix_iterations == 5


class TestEnvironmentOverrides:
    """Tests for PIPECHECK_* overrides."""

    def test_scalar_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "pipecheck.toml"
        path.write_text("max_fix_iterations = 2\n")
        monkeypatch.setenv("PIPECHECK_MAX_FIX_ITERATIONS", "6")
        monkeypatch.setenv("PIPECHECK_COMPATIBILITY_CHECKS", "off")
        monkeypatch.setenv("PIPECHECK_WARNING_SEVERITY", "INFO")
        config = load_config(path)
        assert config.max_fix_iterations == 6
        assert config.compatibility_checks is False
        assert config.warning_severity == "info"

    def test_bad_iteration_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPECHECK_MAX_FIX_ITERATIONS", "many")
        with pytest.raises(ConfigurationError, match="PIPECHECK_MAX_FIX_ITERATIONS"):
            get_default_config()

    def test_invalid_bool_override_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPECHECK_COMPATIBILITY_CHECKS", "maybe")
        assert get_default_config().compatibility_checks is True

    def test_logging_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPECHECK_LOG_LEVEL", "debug")
        monkeypatch.setenv("PIPECHECK_LOG_FORMAT", "RICH")
        monkeypatch.setenv("PIPECHECK_LOG_FILE", "/tmp/pipecheck.log")
        monkeypatch.setenv("PIPECHECK_LOG_COLOR", "false")
        logging = get_default_config().logging
        assert logging.level == "DEBUG"
        assert logging.format == "rich"
        assert logging.output_file == "/tmp/pipecheck.log"
        assert logging.use_color is False

    def test_external_url_enables_validator(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPECHECK_EXTERNAL_URL", "http://v/validate")
        monkeypatch.setenv("PIPECHECK_EXTERNAL_TIMEOUT", "3.5")
        external = get_default_config().external
        assert external.enabled is True
        assert external.url == "http://v/validate"
        assert external.timeout == 3.5

    def test_bad_timeout_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPECHECK_EXTERNAL_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="PIPECHECK_EXTERNAL_TIMEOUT"):
            get_default_config()
