from clubscore.server import build_config


def test_port_comes_from_environment(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.delenv("SSL_CERT_FILE", raising=False)
    monkeypatch.delenv("SSL_KEY_FILE", raising=False)
    config = build_config([])
    assert config.port == 9100
    assert config.tls == {}


def test_bad_port_and_partial_tls_fall_back(monkeypatch):
    monkeypatch.setenv("APP_PORT", "eighty")
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("SSL_CERT_FILE", "cert.pem")
    monkeypatch.delenv("SSL_KEY_FILE", raising=False)
    config = build_config(["--host", "127.0.0.1"])
    assert config.port == 8000
    assert config.host == "127.0.0.1"
    assert config.tls == {}


def test_cli_port_wins_and_tls_pair_is_used(monkeypatch):
    monkeypatch.setenv("APP_PORT", "9000")
    monkeypatch.setenv("SSL_CERT_FILE", "cert.pem")
    monkeypatch.setenv("SSL_KEY_FILE", "key.pem")
    monkeypatch.delenv("SSL_KEY_PASSWORD", raising=False)
    config = build_config(["--port", "8443"])
    assert config.port == 8443
    assert config.tls == {"ssl_certfile": "cert.pem", "ssl_keyfile": "key.pem"}
