"""CLI entrypoint for running the counter store service."""

from __future__ import annotations

import sys

import uvicorn
from dotenv import load_dotenv

from .config import ServiceSettings
from .database import create_store_engine
from .errors import ConfigError, StoreError
from .logger import configure_root_logger, get_logger
from .server import create_app
from .store import CounterStore


def main() -> None:
    load_dotenv(override=False)

    try:
        settings = ServiceSettings.from_env()
    except ConfigError as exc:
        print(f"counter-store: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_root_logger(settings.log_level)
    logger = get_logger("counter_store")
    logger.info("Starting counter store with %s", settings.to_dict())

    engine = create_store_engine(
        settings.database_url,
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
    )
    try:
        store = CounterStore(engine)
        store.initialize()
    except (ConfigError, StoreError) as exc:
        logger.critical("Failed to initialize database: %s", exc)
        engine.dispose()
        sys.exit(1)

    try:
        logger.info("Starting server at http://%s:%s", settings.host, settings.port)
        uvicorn.run(
            create_app(store),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            # Keep the handler installed by configure_root_logger
            log_config=None,
        )
    finally:
        store.dispose()


if __name__ == "__main__":
    main()
