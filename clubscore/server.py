import argparse
import logging
import os
from dataclasses import dataclass, field

import uvicorn

from clubscore.settings import load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "clubscore.main:app"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    tls: dict[str, str] = field(default_factory=dict)


def _env_port(default: int) -> int:
    for key in ("APP_PORT", "PORT"):
        raw = os.getenv(key)
        if not raw:
            continue
        if raw.isdigit():
            return int(raw)
        logger.warning("%s=%r is not a port number, using %d", key, raw, default)
    return default


def _tls_files() -> dict[str, str]:
    files = {
        "ssl_certfile": os.getenv("SSL_CERT_FILE"),
        "ssl_keyfile": os.getenv("SSL_KEY_FILE"),
    }
    given = [value for value in files.values() if value]
    if not given:
        return {}
    if len(given) == 1:
        logger.warning("HTTPS needs both SSL_CERT_FILE and SSL_KEY_FILE; serving plain HTTP.")
        return {}
    if os.getenv("SSL_KEY_PASSWORD"):
        files["ssl_keyfile_password"] = os.environ["SSL_KEY_PASSWORD"]
    return files


def build_config(argv: list[str] | None = None) -> ServerConfig:
    parser = argparse.ArgumentParser(description="Run the club scoring web app.")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development).")
    args = parser.parse_args(argv)
    port = args.port if args.port is not None else _env_port(8000)
    return ServerConfig(host=args.host, port=port, reload=args.reload, tls=_tls_files())


def main(argv: list[str] | None = None) -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    config = build_config(argv)
    scheme = "https" if config.tls else "http"
    logger.info("Serving %s on %s://%s:%d", APP_MODULE, scheme, config.host, config.port)
    uvicorn.run(
        APP_MODULE,
        host=config.host,
        port=config.port,
        reload=config.reload,
        log_level=os.getenv("UVICORN_LOG_LEVEL", settings.log_level.lower()),
        **config.tls,
    )


if __name__ == "__main__":
    main()
