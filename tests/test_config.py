from fingerspell.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("ASL_MODEL_API_URL", "FINGERSPELL_MIN_SCORE", "FINGERSPELL_WS_DEBUG"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.model_api_url is None
    assert settings.min_score == 7.5
    assert settings.relay_max_attempts == 5
    assert settings.remote_cooldown_s == 15.0
    assert not settings.ws_debug


def test_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("ASL_MODEL_API_URL", " https://model.example/predict ")
    monkeypatch.setenv("FINGERSPELL_MIN_SCORE", "8")
    monkeypatch.setenv("FINGERSPELL_RELAY_MAX_ATTEMPTS", "2")
    monkeypatch.setenv("FINGERSPELL_WS_DEBUG", "1")

    settings = Settings.from_env()

    assert settings.model_api_url == "https://model.example/predict"
    assert settings.min_score == 8.0
    assert settings.relay_max_attempts == 2
    assert settings.ws_debug


def test_blank_url_means_unconfigured(monkeypatch) -> None:
    monkeypatch.setenv("ASL_MODEL_API_URL", "   ")

    assert Settings.from_env().model_api_url is None
