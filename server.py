#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Uvicorn server entry point for the mediaquery application.

Loads a .env file, configures logging from the environment, and starts
the Uvicorn server process.
"""

import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from config import config
from logging_config import setup_logging


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def main():
    # 1. Environment from .env; real environment variables win
    env_path = Path(".") / ".env"
    if env_path.is_file():
        load_dotenv(dotenv_path=env_path, override=False)
        print(f"Loaded environment variables from: {env_path.resolve()}")

    # 2. Re-read configuration now that .env values are visible
    config.load_from_env()

    # 3. Logging
    log_level_console = getattr(logging, os.environ.get("LOG_LEVEL_CONSOLE", "INFO").upper(), logging.INFO)
    log_level_file = getattr(logging, os.environ.get("LOG_LEVEL_FILE", "DEBUG").upper(), logging.DEBUG)
    setup_logging(
        log_level_console=log_level_console,
        log_level_file=log_level_file,
        structured=_env_flag("LOG_STRUCTURED", "true"),
    )

    if not config.INVIDIOUS_INSTANCE:
        logging.warning("=" * 80)
        logging.warning(f" WARNING: {config.INSTANCE_ENV_VAR} is not defined.")
        logging.warning(" Please define it in a .env file or as an environment variable.")
        logging.warning(" The server will start, but lookups will answer 503.")
        logging.warning("=" * 80)

    # 4. Server parameters
    run_host = os.environ.get("HOST", "127.0.0.1")
    try:
        run_port = int(os.environ.get("PORT", "8000"))
    except ValueError:
        logging.warning(f"Invalid PORT environment variable '{os.environ.get('PORT')}', using default 8000.")
        run_port = 8000

    debug_mode = _env_flag("DEBUG", "false")
    uvicorn_log_level = os.environ.get("UVICORN_LOG_LEVEL", "debug" if debug_mode else "info").lower()

    logging.info(f"Starting Uvicorn server on http://{run_host}:{run_port}")
    uvicorn.run(
        "main:app",
        host=run_host,
        port=run_port,
        reload=debug_mode,
        log_level=uvicorn_log_level,
    )


if __name__ == "__main__":
    main()
