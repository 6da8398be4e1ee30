#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration module for mediaquery.

Defines configuration parameters and loads values from environment variables.
"""

import os
import logging
from typing import Dict, Any

# Initialize a basic logger for config loading issues
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Default configuration values
_CONFIG_DEFAULTS: Dict[str, Any] = {
    # Invidious instance
    "INVIDIOUS_INSTANCE": "",  # Base URL, e.g. https://invidious.example.org
    "INSTANCE_ENV_VAR": "INVIDIOUS_INSTANCE",
    "USER_AGENT": "",  # Outbound User-Agent override (empty = transport default)

    # Limits
    "PLAYLIST_ITEM_LIMIT": 2000,  # Playlists at or above this size are rejected
    "RAW_BODY_LOG_CHARS": 1000,  # Max characters of an undecodable body to log

    # Timeouts
    "API_TIMEOUT_SECONDS": 20.0,  # Timeout for a single request to the instance

    # Caching
    "METADATA_CACHE_SIZE": 512,  # Max single-video descriptors kept in memory
    "METADATA_CACHE_TTL_SECONDS": 3600,  # 1 hour TTL for cached descriptors
    "CACHE_EVICTION_PERCENT": 20,  # Percentage of entries to evict when cache is full

    # Web Server
    "ALLOWED_ORIGINS": [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ],
}


class Config:
    """Configuration class that loads values from environment variables."""

    def __init__(self, load_from_env=True):
        """Initialize configuration with default values and optionally from environment.

        Args:
            load_from_env: Whether to load values from environment variables
        """
        for key, value in _CONFIG_DEFAULTS.items():
            # Copy lists so instances never share mutable defaults
            setattr(self, key, list(value) if isinstance(value, list) else value)

        if load_from_env:
            self.load_from_env()

    def load_from_env(self):
        """Load configuration values from environment variables."""
        self.INVIDIOUS_INSTANCE = os.environ.get(self.INSTANCE_ENV_VAR, self.INVIDIOUS_INSTANCE).strip()
        self.USER_AGENT = os.environ.get("USER_AGENT", self.USER_AGENT)

        env_origins = os.environ.get("ALLOWED_ORIGINS", "")
        if env_origins:
            origins = [origin.strip() for origin in env_origins.split(",")]
            self.ALLOWED_ORIGINS = [o for o in origins if o]
            logger.info(f"CORS origins set from environment: {self.ALLOWED_ORIGINS}")

        self._load_int_from_env("PLAYLIST_ITEM_LIMIT")
        self._load_int_from_env("RAW_BODY_LOG_CHARS")
        self._load_float_from_env("API_TIMEOUT_SECONDS")
        self._load_int_from_env("METADATA_CACHE_SIZE")
        self._load_int_from_env("METADATA_CACHE_TTL_SECONDS")
        self._load_int_from_env("CACHE_EVICTION_PERCENT")

        if not self.INVIDIOUS_INSTANCE:
            logger.warning(f"Invidious instance not found in env var {self.INSTANCE_ENV_VAR}.")

    def _load_int_from_env(self, key):
        """Load an integer value from environment variable.

        Args:
            key: The configuration key to load

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, int(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid integer value for {key}: {env_value}")
        return False

    def _load_float_from_env(self, key):
        """Load a float value from environment variable.

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, float(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid float value for {key}: {env_value}")
        return False


# Process-wide instance used by the application wiring (main.py, server.py)
config = Config(load_from_env=True)
