#!/usr/bin/env python3
"""
Main entry point for the shortlink service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + asyncpg connection pool) in a single uvicorn process.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL, or memory:// for a throwaway store
    DATABASE_CREATE_TABLES - Set to true to create tables on startup
    BASE_URL - Base URL for short links
    CLIENT_URL - Frontend URL used in emailed links
    ACTIVATION_TOKEN_SECRET, ACCESS_TOKEN_SECRET,
    REFRESH_TOKEN_SECRET, RESET_PASSWORD_SECRET - Token signing secrets
    SMTP_HOST, SMTP_USER, SMTP_PASSWORD - Mail delivery (links are logged if unset)
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.auth_service import AuthService
from shortlink.common.logging_config import setup_logging
from shortlink.database import create_database
from shortlink.notifier import create_notifier
from shortlink.tokens import TokenService
from shortlink.url_service import URLShortenerService
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting shortlink service...")

    db = create_database(config.database_url, logger=logger)
    if config.database_create_tables:
        await db.ensure_tables()

    tokens = TokenService.from_config(config, logger=logger)
    notifier = create_notifier(config, logger=logger)

    auth_service = AuthService(
        db=db,
        tokens=tokens,
        notifier=notifier,
        logger=logger,
        bcrypt_rounds=config.bcrypt_rounds,
    )
    url_service = URLShortenerService.from_config(db, config, logger=logger)

    app.state.db = db
    app.state.auth_service = auth_service
    app.state.url_service = url_service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down shortlink service...")
    await url_service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Shortlink Service")
    logger.info(f"Configuration: {config.safe_dump()}")

    # Instances are built in the lifespan
    app = create_app(
        db_instance=None,
        auth_service=None,
        url_service=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
