from backend.app.core.settings import DEFAULT_TRANSPORT_FEES, Settings


def test_defaults(monkeypatch):
    for name in ("TUTORING_HOURLY_RATE", "TUTORING_TRANSPORT_FEES", "TUTORING_ENVIRONMENT", "TUTORING_DEBUG_CLOCK_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.hourly_rate == 3500
    assert settings.transport_fees == DEFAULT_TRANSPORT_FEES
    assert settings.debug_clock_enabled is True


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TUTORING_HOURLY_RATE", "4000")
    monkeypatch.setenv("TUTORING_TRANSPORT_FEES", '{"日暮里": 1000}')
    monkeypatch.setenv("TUTORING_LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.hourly_rate == 4000
    assert settings.transport_fees == {"日暮里": 1000}
    assert settings.log_level == "debug"


def test_debug_clock_follows_environment(monkeypatch):
    monkeypatch.delenv("TUTORING_DEBUG_CLOCK_ENABLED", raising=False)
    monkeypatch.setenv("TUTORING_ENVIRONMENT", "production")
    assert Settings().debug_clock_enabled is False

    monkeypatch.setenv("TUTORING_DEBUG_CLOCK_ENABLED", "true")
    assert Settings().debug_clock_enabled is True
