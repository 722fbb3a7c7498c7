import logging

from fairway.utils import sentry


def test_sample_rate_parsing(monkeypatch, caplog):
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "0.25")
    assert sentry.parse_sample_rate("SENTRY_TRACES_SAMPLE_RATE") == 0.25

    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "lots")
    with caplog.at_level(logging.WARNING):
        assert sentry.parse_sample_rate("SENTRY_TRACES_SAMPLE_RATE", 0.1) == 0.1
    assert "not a valid float" in caplog.text

    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "1.5")
    assert sentry.parse_sample_rate("SENTRY_TRACES_SAMPLE_RATE") == 0.0


def test_init_skipped_without_dsn(monkeypatch):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    assert sentry.init_sentry() is False


def test_init_passes_environment(monkeypatch):
    calls = {}
    monkeypatch.setenv("SENTRY_DSN", "https://key@example.ingest.sentry.io/1")
    monkeypatch.setenv("SENTRY_ENVIRONMENT", "staging")
    monkeypatch.setenv("SENTRY_PROFILES_SAMPLE_RATE", "0.5")
    monkeypatch.delenv("SENTRY_TRACES_SAMPLE_RATE", raising=False)
    monkeypatch.setattr(sentry.sentry_sdk, "init", lambda **kwargs: calls.update(kwargs))

    assert sentry.init_sentry() is True
    assert calls["environment"] == "staging"
    assert calls["profiles_sample_rate"] == 0.5
    assert calls["traces_sample_rate"] == 0.0
