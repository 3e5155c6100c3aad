"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import dataclasses as dc
from unittest import mock

import pytest

from peppol_support.logging import (
    LOG_LEVEL_ENV_VAR,
    configure_logging,
    configure_logging_from_env,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


@dc.dataclass(slots=True)
class _RecordingLogger:
    """Logger double keeping ``(level, message, exc_info, stack_info)``."""

    calls: list[tuple[str, str, object | None, bool]] = dc.field(
        default_factory=list
    )

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param("warning", ("WARNING", False), id="lower-case"),
        pytest.param(" debug ", ("DEBUG", False), id="padded"),
        pytest.param("WARN", ("WARN", False), id="femto-alias"),
        pytest.param(None, ("INFO", True), id="missing"),
        pytest.param("", ("INFO", True), id="empty"),
        pytest.param("verbose", ("INFO", True), id="unknown"),
    ],
)
def test_normalize_log_level(raw: str | None, expected: tuple[str, bool]) -> None:
    """Levels are upper-cased; anything unknown falls back to INFO."""
    assert normalize_log_level(raw) == expected


class TestConfigureLogging:
    """Tests for the femtologging configuration entry points."""

    def test_configure_logging_passes_normalized_level(self) -> None:
        """configure_logging hands the normalized level to basicConfig."""
        with mock.patch("peppol_support.logging.basicConfig") as basic_config:
            result = configure_logging("error", force=True)

        assert result == ("ERROR", False)
        basic_config.assert_called_once_with(level="ERROR", force=True)

    def test_from_env_applies_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """PEPPOL_LOG_LEVEL selects the level."""
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
        with mock.patch("peppol_support.logging.basicConfig") as basic_config:
            assert configure_logging_from_env() == "DEBUG"
        basic_config.assert_called_once_with(level="DEBUG", force=False)

    def test_from_env_defaults_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without the variable INFO is used silently."""
        monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
        with (
            mock.patch("peppol_support.logging.basicConfig"),
            mock.patch("peppol_support.logging.log_warning") as warn,
        ):
            assert configure_logging_from_env() == "INFO"
        warn.assert_not_called()

    def test_from_env_warns_on_unknown_level(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A misspelt level falls back to INFO and says so."""
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "verbose")
        with (
            mock.patch("peppol_support.logging.basicConfig"),
            mock.patch("peppol_support.logging.log_warning") as warn,
        ):
            assert configure_logging_from_env() == "INFO"

        warn.assert_called_once()
        args = warn.call_args.args
        assert args[1:] == (
            "Invalid %s %r, falling back to %s",
            LOG_LEVEL_ENV_VAR,
            "verbose",
            "INFO",
        )


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    message = format_log_message("stored %s for %s (%d)", "tsr10", "2024-03", 1)
    assert message == "stored tsr10 for 2024-03 (1)"


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        pytest.param(log_debug, "DEBUG", id="debug"),
        pytest.param(log_info, "INFO", id="info"),
        pytest.param(log_warning, "WARNING", id="warning"),
        pytest.param(log_error, "ERROR", id="error"),
    ],
)
def test_level_helpers_format_and_forward(
    helper: object, level: str
) -> None:
    """Each helper formats its message and never requests stack info."""
    logger = _RecordingLogger()
    exc = ConnectionError("SMP unreachable")

    helper(logger, "lookup for %s failed", "9915:c1", exc_info=exc)  # type: ignore[operator]

    assert logger.calls == [(level, "lookup for 9915:c1 failed", exc, False)]


def test_log_exception_formats_and_passes_exc_info() -> None:
    """log_exception formats like the other helpers and attaches ``exc``."""
    logger = _RecordingLogger()
    exc = RuntimeError("rules not compiled")

    log_exception(
        logger, "Error in %s %s Schematron validation", "TSR", "2024-03", exc=exc
    )

    assert logger.calls == [
        ("ERROR", "Error in TSR 2024-03 Schematron validation", exc, False)
    ]
