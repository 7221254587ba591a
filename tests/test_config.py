from src.delivery.config import Settings


def test_defaults_match_matching_constants():
    settings = Settings()

    assert settings.geocode_concurrency == 4
    assert settings.geocode_throttle_seconds == 0.12
    assert settings.proximity_load_penalty_km == 0.5
    assert (settings.fuzzy_city_weight, settings.fuzzy_address_weight, settings.fuzzy_threshold) == (0.9, 0.95, 0.25)


def test_origins_parse_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("DELIVERY_FRONTEND_ALLOWED_ORIGINS", "http://a.test, http://b.test")

    assert Settings().frontend_allowed_origins == ("http://a.test", "http://b.test")


def test_overrides_from_env(monkeypatch):
    monkeypatch.setenv("DELIVERY_FUZZY_THRESHOLD", "0.4")
    monkeypatch.setenv("DELIVERY_GEOCODER_BASE_URL", "http://localhost:8088/")

    settings = Settings()

    assert settings.fuzzy_threshold == 0.4
    assert settings.geocoder_base_url == "http://localhost:8088"
