"""Unit tests for statement configuration and asset loading."""

from __future__ import annotations

import base64
import typing as typ

import pytest

from chronodesk.errors import ConfigurationError
from chronodesk.statements.config import (
    DEFAULT_TEMPLATE_PATH,
    DEFAULT_TIMEZONE,
    DatabaseConfig,
    StatementConfig,
    load_assets,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestStatementConfig:
    """Tests for ``StatementConfig.from_env``."""

    def test_defaults(self) -> None:
        """Unset variables give the packaged template and Berlin time."""
        config = StatementConfig.from_env()
        assert config.template_path == DEFAULT_TEMPLATE_PATH
        assert config.logo_path is None
        assert config.timezone == DEFAULT_TIMEZONE

    def test_reads_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Paths and timezone come from the environment."""
        monkeypatch.setenv("CHRONODESK_TEMPLATE_PATH", str(tmp_path / "t.html"))
        monkeypatch.setenv("CHRONODESK_LOGO_PATH", str(tmp_path / "logo.png"))
        monkeypatch.setenv("CHRONODESK_TIMEZONE", "Europe/Vienna")

        config = StatementConfig.from_env()

        assert config.template_path == tmp_path / "t.html"
        assert config.logo_path == tmp_path / "logo.png"
        assert config.timezone == "Europe/Vienna"

    def test_rejects_unknown_timezone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unknown zones fail at start-up."""
        monkeypatch.setenv("CHRONODESK_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(ConfigurationError, match="Unknown timezone"):
            StatementConfig.from_env()


class TestLoadAssets:
    """Tests for ``load_assets``."""

    def test_loads_template_and_logo(self, tmp_path: Path) -> None:
        """The logo is embedded as a base64 data URI."""
        template = tmp_path / "statement.html"
        template.write_text("<p>{{ company_name }}</p>", encoding="utf-8")
        logo = tmp_path / "logo.png"
        logo.write_bytes(b"\x89PNG")

        assets = load_assets(StatementConfig(template_path=template, logo_path=logo))

        assert assets.template_source == "<p>{{ company_name }}</p>"
        encoded = base64.b64encode(b"\x89PNG").decode("ascii")
        assert assets.logo_data_uri == f"data:image/png;base64,{encoded}"

    def test_no_logo_gives_empty_uri(self) -> None:
        """Without a configured logo the data URI is empty."""
        assets = load_assets(StatementConfig())
        assert assets.logo_data_uri == ""
        assert "{{ rows_markup }}" in assets.template_source

    def test_missing_template_is_fatal(self, tmp_path: Path) -> None:
        """A configured template that does not exist aborts the run."""
        config = StatementConfig(template_path=tmp_path / "missing.html")
        with pytest.raises(ConfigurationError, match="template not found"):
            load_assets(config)

    def test_missing_logo_is_fatal(self, tmp_path: Path) -> None:
        """A configured logo that does not exist aborts the run."""
        config = StatementConfig(logo_path=tmp_path / "missing.png")
        with pytest.raises(ConfigurationError, match="logo not found"):
            load_assets(config)


class TestDatabaseConfig:
    """Tests for ``DatabaseConfig.from_env``."""

    def test_requires_url(self) -> None:
        """The database URL is mandatory."""
        with pytest.raises(ConfigurationError, match="CHRONODESK_DATABASE_URL"):
            DatabaseConfig.from_env()

    def test_reads_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The URL is read verbatim, stripped of whitespace."""
        monkeypatch.setenv("CHRONODESK_DATABASE_URL", " sqlite+aiosqlite:///x.db ")
        assert DatabaseConfig.from_env().url == "sqlite+aiosqlite:///x.db"
