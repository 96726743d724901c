# config/loader.py
"""
Configuration reload utilities.

``reload_settings()``:
1. Reloads environment variables from ``.env`` (via ``dotenv.load_dotenv``).
2. Builds a fresh ``AdapterSettings`` instance so that changed values apply.
3. Updates the symbols exported by the ``config`` package to match.

Connections that are already open keep their settings until the registry is
shut down and reconnects.
"""

from __future__ import annotations

import importlib

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

logger = structlog.get_logger(__name__)


def reload_settings() -> bool:
    """
    Reload configuration from the environment and refresh the ``config`` package.

    Returns ``True`` on success, ``False`` when the new environment does not
    validate (the previous settings stay in place).
    """
    import config as config_pkg

    # `config.settings` is the instance; the module lives in sys.modules.
    settings_mod = importlib.import_module("config.settings")

    load_dotenv(override=True)

    try:
        new_settings = settings_mod.AdapterSettings()
    except ValidationError as e:
        logger.error("Configuration reload failed; keeping previous settings", error=str(e))
        return False

    settings_mod.settings = new_settings
    config_pkg.settings = new_settings

    for field_name in type(new_settings).model_fields:
        value = getattr(new_settings, field_name)
        setattr(settings_mod, field_name, value)
        setattr(config_pkg, field_name, value)
    config_pkg.NEO4J_URI = new_settings.neo4j_uri

    logger.info("Configuration reloaded", neo4j_uri=new_settings.neo4j_uri)
    return True
