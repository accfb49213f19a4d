#!/usr/bin/env python3
"""
Configuration management for the FedSpace scoring API.
"""

import os
from pathlib import Path
from functools import lru_cache

from core.config_loader import AppConfig, load_config


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply web server environment variable overrides."""
    if 'WEB_HOST' in os.environ:
        config.web.host = os.environ['WEB_HOST']

    if 'WEB_PORT' in os.environ:
        config.web.port = int(os.environ['WEB_PORT'])

    return config


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Reads CONFIG_PATH when set, else config.yaml at the project root, via
    core.config_loader (which applies the DATABASE_URL, REDIS_URL and
    SCORE_CACHE_BACKEND overrides) and then the web overrides.

    Returns:
        AppConfig: The application configuration.
    """
    config_path = os.environ.get('CONFIG_PATH') or str(get_project_root() / 'config.yaml')
    return _apply_env_overrides(load_config(config_path))
