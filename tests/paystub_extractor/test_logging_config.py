"""Tests for centralized logging configuration."""

import logging
import sys
from collections.abc import Generator
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, cast

import pytest

from paystub_extractor.logging import get_log_config_summary
from paystub_extractor.logging.config import LoggingConfig, setup_logging


def _force_config(log_to_file: bool = False, **kwargs: Any) -> LoggingConfig:
    """Return a LoggingConfig that forces handler replacement."""
    return LoggingConfig(log_to_file=log_to_file, force_reconfigure=True, **kwargs)


def _console_handlers() -> list[logging.Handler]:
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLogging:
    """Tests for setup_logging handler configuration."""

    @pytest.fixture(autouse=True)
    def _reset_root_logger(self) -> Generator[None, Any, None]:
        """Remove handlers added during each test to avoid leaking state."""
        root = logging.getLogger()
        original_handlers = list(root.handlers)
        original_level = root.level
        yield
        for handler in root.handlers:
            if handler not in original_handlers:
                handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)

    @pytest.mark.unit
    @pytest.mark.parametrize("cli_mode", [False, True])
    def test_console_handler_uses_stderr(self, cli_mode: bool) -> None:
        """Console output must stay off stdout, where the CLI writes JSON."""
        setup_logging(config=_force_config(), cli_mode=cli_mode)

        handlers = _console_handlers()
        assert handlers, "Expected at least one StreamHandler"
        for h in handlers:
            stream: object = getattr(cast(Any, h), "stream", None)
            assert stream is sys.stderr

    @pytest.mark.unit
    def test_cli_mode_uses_bare_messages(self) -> None:
        setup_logging(config=_force_config(), cli_mode=True)

        formatter = _console_handlers()[0].formatter
        assert formatter is not None
        assert formatter._fmt == "%(message)s"

    @pytest.mark.unit
    def test_verbose_enables_debug(self) -> None:
        setup_logging(config=_force_config(level="WARNING"), verbose=True)

        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.unit
    def test_third_party_loggers_are_quieted(self) -> None:
        setup_logging(config=_force_config(), verbose=True)

        assert logging.getLogger("pdfminer").level == logging.WARNING

    @pytest.mark.unit
    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "paystub.log"

        setup_logging(config=_force_config(log_to_file=True, log_file_path=log_file))

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert log_file.parent.is_dir()


class TestLoggingConfigFromEnvironment:
    """Environment loading for LoggingConfig."""

    @pytest.mark.unit
    def test_settings_values_are_used(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("PAYSTUB_LOGGING__LEVEL", "ERROR")

        assert LoggingConfig.from_environment().level == "ERROR"

    @pytest.mark.unit
    def test_debug_setting_lowers_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("PAYSTUB_LOGGING__LEVEL", "WARNING")
        monkeypatch.setenv("PAYSTUB_DEBUG", "true")

        assert LoggingConfig.from_environment().level == "DEBUG"

    @pytest.mark.unit
    def test_log_level_beats_debug_setting(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PAYSTUB_DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "error")

        assert LoggingConfig.from_environment().level == "ERROR"

    @pytest.mark.unit
    def test_log_variables_take_precedence(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("PAYSTUB_LOGGING__LEVEL", "ERROR")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_TO_FILE", "true")
        monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "x.log"))

        config = LoggingConfig.from_environment()

        assert config.level == "DEBUG"
        assert config.log_to_file is True
        assert config.log_file_path == tmp_path / "x.log"

    @pytest.mark.unit
    def test_summary_keys(self) -> None:
        summary = get_log_config_summary()

        assert set(summary) == {
            "level",
            "handlers",
            "log_to_file",
            "log_file_path",
            "format_string",
        }
