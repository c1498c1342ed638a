"""Tests for configuration loading and application wiring."""

from pathlib import Path

import pytest

from config.settings import Settings, get_settings
from sahay.errors import ConfigurationError
from sahay.main import build_application, build_slot_generator
from sahay.services.matching import MatchStrategy

SEED_FILE = Path(__file__).resolve().parent.parent / "data" / "doctors.json"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LLM_PROVIDER", "GEMINI_API_KEY", "GROQ_API_KEY", "STORAGE_BACKEND",
        "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SLOT_DURATION_MINUTES",
        "SLOT_BREAKS", "DOCTOR_MATCH_STRATEGY", "DOCTORS_SEED_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "groq")
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("DOCTORS_SEED_FILE", str(SEED_FILE))


def test_memory_backend_settings(memory_env, monkeypatch):
    monkeypatch.setenv("SLOT_BREAKS", "13:00-14:00, 16:00-16:30")
    monkeypatch.setenv("DOCTOR_MATCH_STRATEGY", "exact")

    settings = get_settings()

    assert settings.break_windows == ["13:00-14:00", "16:00-16:30"]
    assert settings.doctor_match_strategy == MatchStrategy.EXACT


def test_missing_provider_key(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")

    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()
    assert "GEMINI_API_KEY" in exc_info.value.message


def test_missing_supabase_credentials(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "groq")
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("STORAGE_BACKEND", "supabase")

    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()
    assert "SUPABASE_URL" in exc_info.value.message


def test_invalid_values(memory_env, monkeypatch):
    monkeypatch.setenv("SLOT_DURATION_MINUTES", "0")
    with pytest.raises(ConfigurationError):
        get_settings()


def test_bad_break_window_is_configuration_error():
    settings = Settings(slot_breaks="lunch")
    with pytest.raises(ConfigurationError):
        build_slot_generator(settings)


async def test_build_application_with_memory_backend(memory_env):
    app = await build_application(get_settings())

    routes = {route.resource.canonical for route in app.router.routes()}
    assert "/api/chat" in routes
    assert "/api/appointments/book" in routes
    assert app["tools"].tool_names[0] == "list_specialties"


def test_main_cancels_handlers_on_disconnect(memory_env, monkeypatch):
    import sahay.main

    captured = {}

    def fake_run_app(app, **kwargs):
        app.close()
        captured.update(kwargs)

    monkeypatch.setattr(sahay.main.web, "run_app", fake_run_app)

    sahay.main.main()

    assert captured["handler_cancellation"] is True
