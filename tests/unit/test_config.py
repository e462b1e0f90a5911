"""
Unit tests for configuration and logging utilities.
"""

import json
import logging

import pytest

from specoracle.oracle.checks import DefaultContractChecker
from specoracle.classifier import CallReport
from specoracle.oracle.outcome import BehaviorType, Classification, ExceptionalExecution, NormalExecution
from specoracle.utils.config import Config, OracleConfig, load_config, save_config
from specoracle.utils.logging import (
    StructuredFormatter,
    get_logger,
    log_classification,
    log_with_data,
    setup_logger,
)


class TestConfig:
    """Tests for Config."""

    def test_default_config(self):
        config = Config()

        assert config.oracle.exception_behavior == "error"
        assert config.oracle.skip_invalid is False
        assert config.evaluation.timeout_ms == 5000
        assert config.log_level == "INFO"

    def test_config_from_dict(self):
        config = Config.from_dict({
            "oracle": {"exception_behavior": "invalid", "flaky_exceptions": ["OSError"]},
            "evaluation": {"timeout_ms": 100},
            "log_level": "DEBUG",
        })

        assert config.oracle.exception_behavior == "invalid"
        assert config.oracle.flaky_exceptions == ["OSError"]
        assert config.evaluation.timeout_ms == 100
        assert config.log_level == "DEBUG"

    def test_partial_oracle_section_keeps_defaults(self):
        config = Config.from_dict({"oracle": {"skip_invalid": True}})

        assert config.oracle.skip_invalid is True
        assert config.oracle.flaky_exceptions == OracleConfig().flaky_exceptions

    def test_save_and_load(self, tmp_path):
        config = Config.from_dict({"oracle": {"exception_behavior": "expected"}})
        path = tmp_path / "nested" / "config.yaml"
        save_config(config, str(path))

        assert load_config(str(path)).to_dict() == config.to_dict()

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(str(path)).to_dict() == Config().to_dict()

    def test_default_checker(self):
        config = Config.from_dict({"oracle": {"flaky_exceptions": ["json.JSONDecodeError"]}})
        checker = config.default_checker()

        assert isinstance(checker, DefaultContractChecker)
        assert checker.exception_behavior == BehaviorType.ERROR
        assert checker.check(ExceptionalExecution(json.JSONDecodeError("x", "", 0))).is_invalid()

    def test_unknown_exception_behavior(self):
        config = Config.from_dict({"oracle": {"exception_behavior": "maybe"}})

        with pytest.raises(ValueError):
            config.default_checker()


class TestLogging:
    """Tests for logging utilities."""

    def test_get_logger_reuses_instance(self):
        assert get_logger("spec_oracle.test") is get_logger("spec_oracle.test")

    def test_structured_file_log(self, tmp_path):
        log_file = tmp_path / "oracle.log"
        logger = setup_logger("spec_oracle.file", level="DEBUG", log_file=str(log_file))
        log_with_data(logger, "INFO", "classified", {"behavior": "expected"})
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "classified"
        assert entry["level"] == "INFO"
        assert entry["data"] == {"behavior": "expected"}

    def test_log_with_data_respects_level(self, tmp_path):
        log_file = tmp_path / "quiet.log"
        logger = setup_logger("spec_oracle.quiet", level="WARNING", log_file=str(log_file))
        log_with_data(logger, "DEBUG", "hidden", {})

        assert log_file.read_text() == ""

    def test_structured_formatter(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "hello world"
        assert entry["level"] == "WARNING"

    def test_classification_verdict_is_top_level(self, tmp_path):
        """Classification events expose operation and behavior as top-level JSON fields."""
        log_file = tmp_path / "verdicts.log"
        logger = setup_logger("spec_oracle.verdicts", level="DEBUG", log_file=str(log_file))
        report = CallReport(
            "Stack.pop",
            Classification(BehaviorType.ERROR, "Postcondition violated: result > 0", "PostconditionChecker"),
            NormalExecution(-1),
        )
        log_classification(logger, report)
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["operation"] == "Stack.pop"
        assert entry["behavior"] == "error"
        assert entry["checker"] == "PostconditionChecker"
        assert entry["deferred"] is False
        assert entry["data"]["classification"]["reason"] == "Postcondition violated: result > 0"
