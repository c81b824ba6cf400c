"""
AI Trends Configuration Module

Load and manage configuration from config.yaml.
"""

import copy
import os
from pathlib import Path
from typing import Any
import yaml


DEFAULT_CONFIG = {
    "database": {
        "enabled": True,
        "path": "db/aitrends.db"
    },
    "logging": {
        "level": "INFO"
    },
    "app": {
        "url": "http://localhost:5000"
    },
    "cron": {
        "secret": None
    },
    "discovery": {
        "results_per_query": 10,
        "batch_size": 5,
        "query_delay": 1.0,
    },
    "metrics": {
        "check_serp": True,
        "tool_delay": 2.0,
    },
    "refresh": {
        "batch_size": 10,
        "tool_delay": 3.0,
        "stale_days": None,
    },
    "classifier": {
        "claude_model": "claude-sonnet-4-20250514",
        "openai_model": "gpt-4o-mini",
        "max_tokens": 4096,
    },
}

# Environment variable -> (section, key). First match wins.
ENV_OVERRIDES = [
    ("AITRENDS_DB_PATH", ("database", "path")),
    ("AITRENDS_LOG_LEVEL", ("logging", "level")),
    ("CRON_SECRET", ("cron", "secret")),
    ("VITE_CRON_SECRET", ("cron", "secret")),
    ("APP_URL", ("app", "url")),
    ("VITE_APP_URL", ("app", "url")),
]

API_KEY_ENV = {
    "jina": ["JINA_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY", "CLAUDE_API_KEY"],
    "openai": ["OPENAI_API_KEY"],
    "github": ["GITHUB_TOKEN"],
}


def find_config_file() -> Path | None:
    """Find the config file, checking common locations."""
    locations = [
        Path("config.yaml"),
        Path("config.yml"),
        Path.home() / ".config" / "aitrends" / "config.yaml",
    ]

    for path in locations:
        if path.exists():
            return path

    return None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Optional explicit path to config file.

    Returns:
        Configuration dictionary with defaults applied.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        path = Path(config_path)
    else:
        path = find_config_file()

    if path and path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, file_config)

    # Override with environment variables
    applied = set()
    for env_var, (section, key) in ENV_OVERRIDES:
        if (section, key) in applied:
            continue
        if os.environ.get(env_var):
            config.setdefault(section, {})[key] = os.environ[env_var]
            applied.add((section, key))

    database_url = os.environ.get("DATABASE_URL", "")
    if database_url.startswith("sqlite:///") and not os.environ.get("AITRENDS_DB_PATH"):
        config["database"]["path"] = database_url[len("sqlite:///"):]

    for name in API_KEY_ENV:
        value = _api_key_from_env(name)
        if value:
            config.setdefault("api_keys", {})[name] = value

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _api_key_from_env(key_name: str) -> str | None:
    for env_var in API_KEY_ENV.get(key_name, [f"{key_name.upper()}_API_KEY"]):
        if os.environ.get(env_var):
            return os.environ[env_var]
    return None


def get_api_key(config: dict, key_name: str) -> str | None:
    """Get an API key from config, with environment variable fallback."""
    # Check environment first
    value = _api_key_from_env(key_name)
    if value:
        return value

    # Check config
    return (config.get("api_keys") or {}).get(key_name)


def get_section(config: dict, name: str) -> dict[str, Any]:
    """Return a config section merged over its defaults."""
    return _deep_merge(DEFAULT_CONFIG.get(name, {}), config.get(name) or {})
