"""Logging helpers built on femtologging.

Statement runs are long, mostly unattended batch jobs whose only
user-visible output is the process log, so every module logs through these
helpers. Messages are interpolated eagerly with percent-style templates and
handed to femtologging as finished strings.

Example:
>>> from chronodesk.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Uploaded %s for tenant %s", "acme-Max_Muster-Mai-2024.pdf", "acme")

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Log levels accepted by ``CHRONODESK_LOG_LEVEL``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Normalize a raw log level and flag values that had to be replaced.

    Parameters
    ----------
    level : str | None
        Raw level, typically read from the environment.

    Returns
    -------
    tuple[str, bool]
        The upper-cased level (``INFO`` when unusable) and ``True`` when the
        input was missing or unknown.

    """
    if not level:
        return ("INFO", True)

    normalized = level.strip().upper()
    if normalized in LogLevel.__members__:
        return (normalized, False)

    return ("INFO", True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install the femtologging root handler at the normalized level.

    Parameters
    ----------
    level : str | None
        Raw level to normalize before configuring.
    force : bool, optional
        Replace an existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        The level that was applied and whether the input was invalid.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into a percent-style ``template``."""
    return template % args


class _SupportsLog(typ.Protocol):
    """Anything exposing femtologging's ``log`` signature."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: str,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    logger.log(
        level,
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a DEBUG message with percent-style formatting."""
    _emit(logger, "DEBUG", template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting.

    Parameters
    ----------
    logger : _SupportsLog
        Logger that receives the formatted message.
    template : str
        Message template using percent-style placeholders.
    *args : object
        Values to interpolate into the template.
    exc_info : object | None, optional
        Exception information to attach to the record.

    """
    _emit(logger, "INFO", template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message with percent-style formatting."""
    _emit(logger, "WARNING", template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message with percent-style formatting."""
    _emit(logger, "ERROR", template, args, exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log a pre-formatted ERROR message with ``exc`` attached as exc_info."""
    logger.log("ERROR", message, exc_info=exc, stack_info=False)


__all__ = [
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
