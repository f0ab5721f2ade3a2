"""Tests for optional Sentry initialization."""

from unittest.mock import patch

import pytest

from pgload.core.monitoring import setup_sentry


@pytest.mark.unit
class TestSetupSentry:
    def test_no_dsn_skips_init(self, monkeypatch):
        monkeypatch.delenv("PGLOAD_SENTRY_DSN", raising=False)
        with patch("sentry_sdk.init") as init:
            assert setup_sentry() is False
        init.assert_not_called()

    def test_explicit_dsn(self):
        with patch("sentry_sdk.init") as init:
            assert setup_sentry("https://key@sentry.example.com/1") is True
        assert init.call_args.kwargs["dsn"] == "https://key@sentry.example.com/1"
        assert init.call_args.kwargs["send_default_pii"] is False

    def test_env_dsn(self, monkeypatch):
        monkeypatch.setenv("PGLOAD_SENTRY_DSN", "https://env@sentry.example.com/2")
        with patch("sentry_sdk.init") as init:
            assert setup_sentry(environment="ci") is True
        assert init.call_args.kwargs["environment"] == "ci"
