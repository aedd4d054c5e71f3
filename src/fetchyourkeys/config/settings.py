"""
Client settings management.

Settings are layered: optional YAML file, then FYK_* environment variables,
then explicit keyword arguments.
"""
import logging
import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://apifetchyourkeys.vercel.app/v1/keys'
DEFAULT_TIMEOUT = 10.0
DEV = 'dev'
PROD = 'prod'

ENV_SECRET_KEY = 'FYK_SECRET_KEY'

# FYK_* variable -> settings field
_ENV_VARS = {
    ENV_SECRET_KEY: 'api_key',
    'FYK_BASE_URL': 'base_url',
    'FYK_ENVIRONMENT': 'environment',
    'FYK_CACHE_DIR': 'cache_dir',
    'FYK_DEBUG': 'debug',
    'FYK_SILENT': 'silent_mode',
}

_ENVIRONMENT_ALIASES = {
    'dev': DEV,
    'development': DEV,
    'prod': PROD,
    'production': PROD,
}

CONFIG_PATHS = [
    Path("fetchyourkeys.yaml"),
    Path("config/fetchyourkeys.yaml"),
]


class ClientSettings(BaseModel):
    """Resolved configuration for a FetchYourKeys client."""
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    environment: str = DEV
    debug: bool = False
    silent_mode: bool = False
    timeout: float = DEFAULT_TIMEOUT
    cache_dir: Optional[Path] = None


def normalize_environment(value: Optional[str]) -> str:
    """Map an environment tag to 'dev' or 'prod'; unknown tags become 'dev'."""
    if not value:
        return DEV
    normalized = _ENVIRONMENT_ALIASES.get(str(value).strip().lower())
    if normalized is None:
        logger.warning(f"Invalid environment '{value}', using '{DEV}' (valid: {DEV}, {PROD})")
        return DEV
    return normalized


def _load_config_file(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load settings from a YAML file, if one exists."""
    candidates = [Path(config_path)] if config_path else CONFIG_PATHS
    for path in candidates:
        if not path.exists():
            continue
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load settings from {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: expected a mapping")
            return {}
        logger.debug(f"Loaded settings from {path}")
        return data.get('fetchyourkeys', data)
    return {}


def _load_env_vars() -> Dict[str, Any]:
    values = {}
    for var, field in _ENV_VARS.items():
        raw = os.getenv(var)
        if raw is None or raw == '':
            continue
        if field in ('debug', 'silent_mode'):
            values[field] = raw.strip().lower() in ('1', 'true', 'yes', 'on')
        else:
            values[field] = raw
    return values


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> ClientSettings:
    """Resolve client settings.

    Args:
        config_path: Explicit YAML file (defaults to fetchyourkeys.yaml lookup)
        **overrides: Explicit values; None means "not provided"

    Returns:
        ClientSettings with a normalized environment
    """
    values: Dict[str, Any] = {}
    values.update(_load_config_file(config_path))
    values.update(_load_env_vars())
    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {k: v for k, v in values.items() if k in ClientSettings.model_fields}
    settings = ClientSettings(**known)
    settings.environment = normalize_environment(settings.environment)
    return settings
