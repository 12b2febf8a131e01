"""Tests for pipecheck.kernel.logging."""

import json
from pathlib import Path

import pytest
from loguru import logger

from pipecheck.kernel import logging as pipecheck_logging
from pipecheck.kernel.logging import configure_logging, get_logger


class TestConfigureLogging:
    """Test global logging configuration."""

    def teardown_method(self) -> None:
        configure_logging(level="WARNING", format="console", force_reconfigure=True)

    def test_idempotent_for_same_settings(self) -> None:
        configure_logging(level="INFO", format="console", force_reconfigure=True)
        handlers = list(pipecheck_logging._HANDLER_IDS)
        configure_logging(level="INFO", format="console")
        assert pipecheck_logging._HANDLER_IDS == handlers

    def test_changed_settings_replace_handlers(self) -> None:
        configure_logging(level="INFO", format="console", force_reconfigure=True)
        configure_logging(level="DEBUG", format="json")
        assert len(pipecheck_logging._HANDLER_IDS) == 1
        assert pipecheck_logging._CURRENT_CONFIG is not None
        assert pipecheck_logging._CURRENT_CONFIG["level"] == "DEBUG"

    def test_output_file_receives_json_records(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "pipecheck.log"
        configure_logging(level="INFO", format="console", output_file=log_file)
        assert len(pipecheck_logging._HANDLER_IDS) == 2

        get_logger("tests.logging").info("Applied {count} fixes", count=2)
        configure_logging(level="WARNING", format="console", force_reconfigure=True)

        records = [json.loads(line) for line in log_file.read_text().splitlines() if line]
        assert any(r["record"]["message"] == "Applied 2 fixes" for r in records)


    def test_level_filters_debug_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="WARNING", format="console", force_reconfigure=True)
        log = get_logger("tests.levels")
        log.debug("hidden debug record")
        log.warning("visible warning record")

        err = capsys.readouterr().err
        assert "visible warning record" in err
        assert "hidden debug record" not in err

    def test_default_handler_is_removed(self) -> None:
        configure_logging(level="WARNING", format="console", force_reconfigure=True)
        with pytest.raises(ValueError):
            logger.remove(0)


class TestGetLogger:
    """Test module-bound loggers."""

    def test_binds_module_name(self) -> None:
        bound = get_logger("pipecheck.tests")
        assert bound is get_logger("pipecheck.tests")
