"""
Unit Tests for settings parsing
"""
import pytest
from pydantic import ValidationError

from app.core.settings import Settings
from app.services.location_resolver import LocationConfig


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_keywords_accept_comma_separated_strings():
    s = _settings(PICKUP_WAREHOUSE_KEYWORDS="מחסן, warehouse ,", PICKUP_STORE_KEYWORDS="חנות")

    assert s.PICKUP_WAREHOUSE_KEYWORDS == ["מחסן", "warehouse"]
    assert s.PICKUP_STORE_KEYWORDS == ["חנות"]


def test_default_location_falls_back_to_store():
    s = _settings(PICKUP_STORE_LOCATION_ID=10, PICKUP_DEFAULT_LOCATION_ID=None)
    assert s.default_location_id == 10

    s = _settings(PICKUP_STORE_LOCATION_ID=10, PICKUP_DEFAULT_LOCATION_ID=20)
    assert s.default_location_id == 20


def test_location_config_from_settings():
    s = _settings(
        PICKUP_STORE_LOCATION_ID=10,
        PICKUP_WAREHOUSE_LOCATION_ID=20,
        PICKUP_WAREHOUSE_KEYWORDS="wh",
        PICKUP_STORE_KEYWORDS="st",
    )
    config = LocationConfig.from_settings(s)

    assert config.store_location_id == 10
    assert config.warehouse_location_id == 20
    assert config.default_location_id == 10
    assert config.warehouse_keywords == ["wh"]
    assert config.store_keywords == ["st"]


def test_token_algorithm_is_normalised():
    assert _settings(PICKUP_TOKEN_ALGORITHM="SHA256").PICKUP_TOKEN_ALGORITHM == "sha256"


@pytest.mark.parametrize("algorithm", ["md42", "shake_128"])
def test_unknown_token_algorithm_is_rejected(algorithm):
    with pytest.raises(ValidationError):
        _settings(PICKUP_TOKEN_ALGORITHM=algorithm)


def test_keywords_from_environment(monkeypatch):
    monkeypatch.setenv("PICKUP_WAREHOUSE_KEYWORDS", "מחסן,warehouse")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://shop.example.com")

    s = _settings()

    assert s.PICKUP_WAREHOUSE_KEYWORDS == ["מחסן", "warehouse"]
    assert s.ALLOWED_ORIGINS == ["https://shop.example.com"]
