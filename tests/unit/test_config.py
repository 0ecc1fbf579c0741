import pytest
from pydantic import ValidationError

from update_steward.config import Settings


def test_defaults_representative_fields():
    s = Settings()
    assert s.MAVEN_CENTRAL_BASE_URL == "https://search.maven.org/solrsearch/select"
    assert s.HTTP_TIMEOUT_SECONDS == 10
    assert s.CACHE_ENABLED is True
    assert s.LOG_LEVEL == "INFO"
    assert s.LOG_JSON is False


def test_env_overrides_str_int_bool(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MAVEN_CENTRAL_BASE_URL", "https://example.invalid/search")
    monkeypatch.setenv("HTTP_MAX_RETRIES", "5")
    monkeypatch.setenv("cache_enabled", "false")

    s = Settings()

    assert s.MAVEN_CENTRAL_BASE_URL == "https://example.invalid/search"
    assert s.HTTP_MAX_RETRIES == 5
    assert s.CACHE_ENABLED is False


def test_plain_http_base_url_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MAVEN_CENTRAL_BASE_URL", "http://example.invalid/search")
    with pytest.raises(ValidationError):
        Settings()


def test_bounds_are_validated(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MAVEN_CENTRAL_MAX_VERSIONS", "0")
    with pytest.raises(ValidationError):
        Settings()
