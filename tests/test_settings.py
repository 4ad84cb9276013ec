from clubscore.settings import DEFAULT_DATABASE_URL, load_settings


def test_defaults(monkeypatch):
    for key in ("DATABASE_URL", "SCORING_PIN", "SCORECARD_TOKEN_MODE", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    settings = load_settings()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.scoring_pin == "1234"
    assert settings.token_mode == "diff"
    assert settings.log_level == "INFO"


def test_file_path_becomes_sqlite_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "/var/lib/club/scores.db")
    assert load_settings().database_url == "sqlite:////var/lib/club/scores.db"


def test_postgres_url_is_kept(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://club@localhost/scores")
    assert load_settings().database_url == "postgresql://club@localhost/scores"


def test_mode_and_level_are_validated(monkeypatch):
    monkeypatch.setenv("SCORECARD_TOKEN_MODE", " Strokes ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.token_mode == "strokes"
    assert settings.log_level == "DEBUG"

    monkeypatch.setenv("SCORECARD_TOKEN_MODE", "gross")
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    settings = load_settings()
    assert settings.token_mode == "diff"
    assert settings.log_level == "INFO"
