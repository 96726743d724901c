# config/__init__.py
"""Expose adapter configuration as stable module-level constants.

The primary API is the [`settings`](config/settings.py) singleton; the
module-level constants below mirror its fields for callers that prefer
``config.NEO4J_HOST`` style access.

Values come from the process environment and may be sourced from a `.env`
file. [`reload()`](config/__init__.py) re-reads `.env` with override enabled
and replaces this module's exported values.
"""

from typing import Any

from .settings import AdapterSettings as AdapterSettings
from .settings import rich_formatter as rich_formatter
from .settings import settings as settings
from .settings import simple_formatter as simple_formatter

NEO4J_PROTOCOL = settings.NEO4J_PROTOCOL
NEO4J_HOST = settings.NEO4J_HOST
NEO4J_PORT = settings.NEO4J_PORT
NEO4J_BASE_PATH = settings.NEO4J_BASE_PATH
NEO4J_USER = settings.NEO4J_USER
NEO4J_PASSWORD = settings.NEO4J_PASSWORD
NEO4J_DATABASE = settings.NEO4J_DATABASE
NEO4J_CONNECTION_TIMEOUT = settings.NEO4J_CONNECTION_TIMEOUT
NEO4J_URI = settings.neo4j_uri
DEBUG_QUERIES = settings.DEBUG_QUERIES

LOG_LEVEL_STR = settings.LOG_LEVEL_STR
LOG_FORMAT = settings.LOG_FORMAT
LOG_DATE_FORMAT = settings.LOG_DATE_FORMAT
LOG_FILE = settings.LOG_FILE
ENABLE_RICH_LOGGING = settings.ENABLE_RICH_LOGGING


def get(key: str) -> Any:
    """Return the value of a configuration attribute from `settings`.

    Raises:
        AttributeError: If `key` is not a valid attribute on `settings`.
    """
    return getattr(settings, key)


def set(key: str, value: Any) -> None:
    """Set a configuration attribute on `settings` at runtime.

    This mutates the in-memory settings instance and does not persist to `.env`.
    """
    setattr(settings, key, value)


def reload() -> bool:
    """Reload configuration and refresh this package's exported constants.

    Delegates to [`config.loader.reload_settings()`](config/loader.py).
    """
    from .loader import reload_settings

    return reload_settings()
