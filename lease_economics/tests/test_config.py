import pytest
from pydantic import ValidationError

from lease_economics.config import EngineSettings, configure_logging, get_settings, settings_from_env


def test_defaults(monkeypatch):
    for name in ("PAYMENT_TIMING", "ROUNDING", "IRR_GUESS", "ALLOWED_ORIGINS"):
        monkeypatch.delenv(f"LEASE_ENGINE_{name}", raising=False)
    settings = settings_from_env()
    assert settings.payment_timing == "advance"
    assert settings.rounding == "none"
    assert settings.irr_guess == 0.1
    assert settings.irr_max_iterations == 100
    assert "http://localhost:3000" in settings.allowed_origins


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LEASE_ENGINE_PAYMENT_TIMING", "Arrears")
    monkeypatch.setenv("LEASE_ENGINE_ROUNDING", "cents")
    monkeypatch.setenv("LEASE_ENGINE_IRR_GUESS", "0.05")
    monkeypatch.setenv("LEASE_ENGINE_IRR_MAX_ITERATIONS", "25")
    monkeypatch.setenv("LEASE_ENGINE_RECONCILE_TOLERANCE", "5")
    monkeypatch.setenv("LEASE_ENGINE_LOG_LEVEL", "debug")
    monkeypatch.setenv("LEASE_ENGINE_ALLOWED_ORIGINS", "https://a.example.com, https://b.example.com,")
    settings = get_settings()
    assert settings.payment_timing == "arrears"
    assert settings.rounding == "cents"
    assert settings.irr_guess == 0.05
    assert settings.irr_max_iterations == 25
    assert settings.reconcile_tolerance == 5.0
    assert settings.log_level == "DEBUG"
    assert settings.allowed_origins == ["https://a.example.com", "https://b.example.com"]


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("LEASE_ENGINE_ROUNDING", "cents")
    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().rounding == "cents"


def test_bad_values_are_rejected(monkeypatch):
    monkeypatch.setenv("LEASE_ENGINE_PAYMENT_TIMING", "sometimes")
    with pytest.raises(ValidationError):
        settings_from_env()
    with pytest.raises(ValidationError):
        EngineSettings(irr_tolerance=0)


def test_configure_logging_uses_settings_level(monkeypatch):
    calls = {}
    monkeypatch.setattr("logging.basicConfig", lambda **kwargs: calls.update(kwargs))
    monkeypatch.setenv("LEASE_ENGINE_LOG_LEVEL", "warning")
    configure_logging()
    assert calls["level"] == "WARNING"
    configure_logging("debug")
    assert calls["level"] == "DEBUG"
