"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import pytest

from chronodesk.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _RecordingLogger:
    """Stand-in logger keeping every ``log`` call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        assert stack_info is False
        self.calls.append((level, message, exc_info))
        return message


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param("debug", ("DEBUG", False), id="lower-case"),
        pytest.param(" warn ", ("WARN", False), id="padded"),
        pytest.param(None, ("INFO", True), id="missing"),
        pytest.param("chatty", ("INFO", True), id="unknown"),
    ],
)
def test_normalize_log_level(raw: str | None, expected: tuple[str, bool]) -> None:
    """Levels are upper-cased and unusable values fall back to INFO."""
    assert normalize_log_level(raw) == expected


def test_format_log_message() -> None:
    """Templates use percent formatting."""
    assert format_log_message("%s uploaded %d", "acme", 3) == "acme uploaded 3"


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers(helper: object, level: str) -> None:
    """Each helper formats the message and forwards its level."""
    logger = _RecordingLogger()
    error = RuntimeError("boom")

    helper(logger, "tenant=%s", "acme", exc_info=error)  # type: ignore[operator]

    assert logger.calls == [(level, "tenant=acme", error)]


def test_log_exception_keeps_message_verbatim() -> None:
    """Pre-formatted messages are not interpolated again."""
    logger = _RecordingLogger()
    error = ValueError("100% broken")

    log_exception(logger, "run failed: 100% broken", error)

    assert logger.calls == [("ERROR", "run failed: 100% broken", error)]


def test_configure_logging_installs_normalized_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The root handler is configured with the normalized level."""
    seen: dict[str, object] = {}
    monkeypatch.setattr(
        "chronodesk.logging.basicConfig", lambda **kwargs: seen.update(kwargs)
    )

    assert configure_logging("error") == ("ERROR", False)
    assert seen == {"level": "ERROR", "force": False}
