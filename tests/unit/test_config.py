from __future__ import annotations

from valuninja.core.config import AppSettings


def clear_env(monkeypatch) -> None:
    for name in (
        "CORS_ORIGINS",
        "FRONTEND_ORIGIN",
        "API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "OPENAI_API_KEY",
        "SCOUT_LLM_PROVIDER",
        "AFFILIATE_AMAZON_TAG",
        "AMAZON_TAG",
    ):
        monkeypatch.delenv(name, raising=False)


def test_resolved_cors_origins_appends_frontend_origin(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend = "https://valuninja.app"
    monkeypatch.setenv("FRONTEND_ORIGIN", frontend)

    settings = AppSettings(_env_file=None)

    origins = settings.resolved_cors_origins
    assert "http://localhost:5173" in origins
    assert frontend in origins


def test_resolved_cors_origins_deduplicates(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend = "https://valuninja.app"
    monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:5173", "https://valuninja.app"]')
    monkeypatch.setenv("FRONTEND_ORIGIN", f"{frontend}/")

    settings = AppSettings(_env_file=None)

    assert settings.resolved_cors_origins.count(frontend) == 1


def test_api_key_read_from_environment_aliases(monkeypatch) -> None:
    clear_env(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-secret")

    settings = AppSettings(_env_file=None)

    assert settings.api_key == "gemini-secret"
    assert settings.resolved_api_key == "gemini-secret"


def test_missing_api_key_resolves_to_none(monkeypatch) -> None:
    clear_env(monkeypatch)

    assert AppSettings(_env_file=None).resolved_api_key is None


def test_openai_provider_prefers_openai_key(monkeypatch) -> None:
    clear_env(monkeypatch)

    settings = AppSettings(_env_file=None, scout_llm_provider="openai", api_key="shared", openai_api_key="oa")
    fallback = AppSettings(_env_file=None, scout_llm_provider="openai", api_key="shared")

    assert settings.resolved_api_key == "oa"
    assert fallback.resolved_api_key == "shared"


def test_default_affiliates_from_environment(monkeypatch) -> None:
    clear_env(monkeypatch)
    monkeypatch.setenv("AFFILIATE_AMAZON_TAG", "ninja-20")

    affiliates = AppSettings(_env_file=None).default_affiliates

    assert affiliates.amazonTag == "ninja-20"
    assert affiliates.impactId == ""
