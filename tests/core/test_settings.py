"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

from tradespine.core.settings import DEFAULT_INTERCOMPANY_NAMES, TradeSpineSettings


class TestTradeSpineSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TRADESPINE_ANALYTICS_URL", raising=False)
        settings = TradeSpineSettings(_env_file=None)
        assert settings.api_prefix == "/api/v1"
        assert tuple(settings.intercompany_names) == DEFAULT_INTERCOMPANY_NAMES

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TRADESPINE_LEDGER_URL", "oracle://u:p@ledger/NUCPRD")
        monkeypatch.setenv("TRADESPINE_INTERCOMPANY_NAMES", '["SENA"]')
        settings = TradeSpineSettings(_env_file=None)
        assert settings.ledger_url == "oracle://u:p@ledger/NUCPRD"
        assert settings.intercompany_names == ["SENA"]

    def test_analytics_url_defaults_under_data_dir(self, tmp_path: Path):
        settings = TradeSpineSettings(_env_file=None, data_dir=tmp_path, analytics_url=None)
        assert settings.resolved_analytics_url() == f"sqlite:///{tmp_path / 'analytics.db'}"

    def test_explicit_analytics_url_wins(self):
        settings = TradeSpineSettings(_env_file=None, analytics_url="sqlite:///:memory:")
        assert settings.resolved_analytics_url() == "sqlite:///:memory:"
