"""Configuration and start-up assets for the statement pipeline.

Usage
-----
>>> import os
>>> os.environ["CHRONODESK_TIMEZONE"] = "Europe/Vienna"
>>> config = StatementConfig.from_env()
>>> config.timezone
'Europe/Vienna'
>>> assets = load_assets(config)
>>> assets.logo_data_uri
''

"""

from __future__ import annotations

import base64
import dataclasses as dc
import mimetypes
import os
from pathlib import Path

from chronodesk.common.time import load_timezone
from chronodesk.errors import ConfigurationError

DEFAULT_TIMEZONE = "Europe/Berlin"
DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / "statement.html"


def _optional_path(env_var: str) -> Path | None:
    raw = os.environ.get(env_var, "")
    return Path(raw.strip()) if raw.strip() else None


@dc.dataclass(frozen=True, slots=True)
class StatementConfig:
    """Settings for rendering statements.

    Attributes
    ----------
    template_path
        HTML template rendered per worker. Defaults to the packaged
        template.
    logo_path
        Optional image embedded into every statement as a data URI.
    timezone
        IANA zone used for "today" and for clock times on statements.

    """

    template_path: Path = DEFAULT_TEMPLATE_PATH
    logo_path: Path | None = None
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_env(cls) -> StatementConfig:
        """Create configuration from environment variables.

        Reads ``CHRONODESK_TEMPLATE_PATH``, ``CHRONODESK_LOGO_PATH`` and
        ``CHRONODESK_TIMEZONE``; unset or blank values fall back to the
        defaults.

        Raises
        ------
        ConfigurationError
            If ``CHRONODESK_TIMEZONE`` names an unknown zone.

        """
        timezone = os.environ.get("CHRONODESK_TIMEZONE", "").strip()
        timezone = timezone or DEFAULT_TIMEZONE
        load_timezone(timezone)
        return cls(
            template_path=(
                _optional_path("CHRONODESK_TEMPLATE_PATH") or DEFAULT_TEMPLATE_PATH
            ),
            logo_path=_optional_path("CHRONODESK_LOGO_PATH"),
            timezone=timezone,
        )


@dc.dataclass(frozen=True, slots=True)
class StatementAssets:
    """Template source and logo loaded once at start-up."""

    template_source: str
    logo_data_uri: str = ""


def _logo_data_uri(path: Path) -> str:
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def load_assets(config: StatementConfig) -> StatementAssets:
    """Read the template and logo named by ``config``.

    Raises
    ------
    ConfigurationError
        If the template, or a configured logo, does not exist or cannot be
        read.

    """
    if not config.template_path.is_file():
        raise ConfigurationError.missing_asset("template", config.template_path)
    try:
        template_source = config.template_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"template could not be read: {config.template_path}: {exc}"
        raise ConfigurationError(msg) from exc

    logo_data_uri = ""
    if config.logo_path is not None:
        if not config.logo_path.is_file():
            raise ConfigurationError.missing_asset("logo", config.logo_path)
        try:
            logo_data_uri = _logo_data_uri(config.logo_path)
        except OSError as exc:
            msg = f"logo could not be read: {config.logo_path}: {exc}"
            raise ConfigurationError(msg) from exc

    return StatementAssets(template_source=template_source, logo_data_uri=logo_data_uri)


@dc.dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings for the tenant database."""

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Read ``CHRONODESK_DATABASE_URL``.

        Raises
        ------
        ConfigurationError
            If the variable is unset or blank.

        """
        url = os.environ.get("CHRONODESK_DATABASE_URL", "").strip()
        if not url:
            raise ConfigurationError.missing_env("CHRONODESK_DATABASE_URL")
        return cls(url=url)


__all__ = [
    "DEFAULT_TEMPLATE_PATH",
    "DEFAULT_TIMEZONE",
    "DatabaseConfig",
    "StatementAssets",
    "StatementConfig",
    "load_assets",
]
