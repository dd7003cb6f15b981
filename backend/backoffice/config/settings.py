from __future__ import annotations
"""Environment-driven defaults for create_app().

Values are read at call time so tests can tweak os.environ before building an app.
Explicit dicts passed to create_app() always win over these.
"""
import os
from typing import Any, Dict

DEFAULT_DATABASE_URL = 'sqlite:///dev.db'
DEFAULT_PERMISSION_CACHE_TTL = 30


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{name} must be int')


def load_settings() -> Dict[str, Any]:
    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret'),
        'DATABASE_URL': os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL),
        # seconds an override map may be served from cache; 0 disables caching
        'PERMISSION_CACHE_TTL': _int_env('PERMISSION_CACHE_TTL', DEFAULT_PERMISSION_CACHE_TTL),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),
    }

__all__ = ['load_settings', 'DEFAULT_DATABASE_URL', 'DEFAULT_PERMISSION_CACHE_TTL']
