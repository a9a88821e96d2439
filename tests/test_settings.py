from __future__ import annotations

import pytest
from pydantic import ValidationError

from userhub.core.config import DEFAULT_JWT_SECRET, Settings


def test_defaults() -> None:
    settings = Settings()

    assert settings.router_prefix == "/api"
    assert settings.jwt_secret_key == DEFAULT_JWT_SECRET
    assert settings.access_token_expire_minutes == 60 * 24 * 7


def test_comma_separated_lists_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERHUB_CORS_ALLOW_ORIGINS", "https://a.example, https://b.example,")

    settings = Settings()

    assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]


def test_log_level_is_normalised(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERHUB_LOG_LEVEL", " debug ")

    assert Settings().log_level == "DEBUG"


@pytest.mark.parametrize(
    ("api_prefix", "expected"),
    [("api/", "/api"), ("/v1/", "/v1"), ("", "")],
)
def test_router_prefix_is_normalised(api_prefix: str, expected: str) -> None:
    assert Settings(api_prefix=api_prefix).router_prefix == expected


def test_production_rejects_default_secret() -> None:
    with pytest.raises(ValidationError):
        Settings(environment="production")

    settings = Settings(environment="production", jwt_secret_key="s3cr3t")
    assert settings.environment == "production"


def test_password_hash_rounds_are_bounded() -> None:
    with pytest.raises(ValidationError):
        Settings(password_hash_rounds=2)
