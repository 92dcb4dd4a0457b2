import pytest
from fastapi.testclient import TestClient

from fairgate.config import Settings, get_settings
from fairgate.errors import ConfigurationError
from fairgate.main import app


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_numeric_env_parsed(monkeypatch):
    monkeypatch.setenv("FAIRSCALE_TIMEOUT", "2.5")
    monkeypatch.setenv("CHALLENGE_TTL_SECONDS", " 120 ")
    monkeypatch.setenv("PERMIT_TTL_SECONDS", "")
    settings = Settings.from_env()
    assert settings.fairscale_timeout == 2.5
    assert settings.challenge_ttl_seconds == 120
    assert settings.permit_ttl_seconds == 600


@pytest.mark.parametrize("name,value", [
    ("FAIRSCALE_TIMEOUT", "fast"),
    ("CHALLENGE_TTL_SECONDS", "5m"),
    ("PERMIT_TTL_SECONDS", "1.5"),
])
def test_non_numeric_env_is_configuration_error(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env()
    assert name in exc.value.message


def test_bad_env_surfaces_as_server_not_configured(monkeypatch):
    monkeypatch.setenv("PERMIT_SECRET", "s")
    monkeypatch.setenv("PERMIT_TTL_SECONDS", "ten minutes")
    r = TestClient(app).get("/healthz")
    assert r.status_code == 500
    assert r.json()["detail"] == "SERVER_NOT_CONFIGURED"
