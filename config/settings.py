# config/settings.py
"""
Configuration settings for the Cypher adapter.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

import structlog
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

BOLT_SCHEMES = frozenset({"bolt", "neo4j"})


class AdapterSettings(BaseSettings):
    """Full configuration for the adapter and its Neo4j connection."""

    # Neo4j Connection Settings
    NEO4J_PROTOCOL: str = "bolt"
    NEO4J_HOST: str = "localhost"
    NEO4J_PORT: int = 7687
    NEO4J_BASE_PATH: str = ""
    NEO4J_USER: str = "neo4j"
    NEO4J_PASSWORD: str = "neo4j"
    NEO4J_DATABASE: str | None = "neo4j"
    NEO4J_CONNECTION_TIMEOUT: float = 30.0

    # Print every query and its parameters before submission
    DEBUG_QUERIES: bool = True

    # Logging
    LOG_LEVEL_STR: str = Field("INFO", alias="LOG_LEVEL")
    LOG_FORMAT: str = "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = None
    ENABLE_RICH_LOGGING: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @field_validator("NEO4J_PROTOCOL")
    @classmethod
    def _strip_scheme_separator(cls, value: str) -> str:
        # Accept "bolt://" as well as "bolt"
        return value.split("://", 1)[0].strip().lower()

    @field_validator("NEO4J_BASE_PATH")
    @classmethod
    def _normalize_base_path(cls, value: str) -> str:
        value = value.strip()
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value.rstrip("/")

    @property
    def neo4j_uri(self) -> str:
        uri = f"{self.NEO4J_PROTOCOL}://{self.NEO4J_HOST}:{self.NEO4J_PORT}"
        # Bolt routing ignores URI paths; the base path only applies to HTTP endpoints.
        if self.NEO4J_PROTOCOL.split("+", 1)[0] in BOLT_SCHEMES:
            return uri
        return f"{uri}{self.NEO4J_BASE_PATH}"

    def connection_defaults(self) -> dict[str, Any]:
        """The connection surface handed to the driver, without credentials."""
        return {
            "protocol": self.NEO4J_PROTOCOL,
            "host": self.NEO4J_HOST,
            "port": self.NEO4J_PORT,
            "base": self.NEO4J_BASE_PATH,
            "database": self.NEO4J_DATABASE,
            "debug": self.DEBUG_QUERIES,
        }


settings = AdapterSettings()


# Update module level variables for backward compatibility
for _field in AdapterSettings.model_fields:
    globals()[_field] = getattr(settings, _field)


# Configure structlog to integrate with standard logging and output human‑readable messages
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="%m/%d/%Y, %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


def filter_internal_keys(logger: Any, name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Remove internal structlog fields from event dict."""
    keys_to_remove = [k for k in event_dict.keys() if k.startswith("_")]
    for key in keys_to_remove:
        event_dict.pop(key, None)
    return event_dict


def _format_context(event_dict: MutableMapping[str, Any], key_template: str) -> str:
    context_parts = []
    for key, value in event_dict.items():
        if key.startswith("_"):
            continue
        if isinstance(value, str) and len(value) > 120:
            value_str = f"{value[:117]}..."
        else:
            value_str = str(value)
        context_parts.append(f"{key_template.format(key=key)}={value_str}")
    return f"({', '.join(context_parts)})" if context_parts else ""


def simple_log_format_rich(logger: Any, name: str, event_dict: MutableMapping[str, Any]) -> str:
    """Human-readable log line with Rich markup for console output."""
    level = event_dict.pop("level", "INFO")
    timestamp = event_dict.pop("timestamp", "")
    logger_name = event_dict.pop("logger", "")
    event = event_dict.pop("event", "")

    parts = []
    if timestamp:
        parts.append(f"{timestamp}")
    if logger_name:
        parts.append(f"[cyan]{logger_name.rsplit('.', 1)[-1]}[/cyan]")

    level_upper = level.upper()
    if level_upper in ("ERROR", "CRITICAL"):
        parts.append(f"[red]{level_upper}[/red]")
    elif level_upper == "WARNING":
        parts.append(f"[yellow]{level_upper}[/yellow]")
    elif level_upper == "INFO":
        parts.append(f"[green]{level_upper}[/green]")
    else:
        parts.append(level_upper)

    parts.append(f"[bold]{event}[/bold]" if event else "")
    context = _format_context(event_dict, "[dim]{key}[/dim]")
    if context:
        parts.append(context)
    return " ".join(parts)


def simple_log_format_plain(logger: Any, name: str, event_dict: MutableMapping[str, Any]) -> str:
    """Human-readable log line without markup for file output."""
    level = event_dict.pop("level", "INFO")
    timestamp = event_dict.pop("timestamp", "")
    logger_name = event_dict.pop("logger", "")
    event = event_dict.pop("event", "")

    parts = []
    if timestamp:
        parts.append(f"{timestamp}")
    if logger_name:
        parts.append(f"[{logger_name.rsplit('.', 1)[-1]}]")
    parts.append(level.upper())
    parts.append(event if event else "")
    context = _format_context(event_dict, "{key}")
    if context:
        parts.append(context)
    return " ".join(parts)


_foreign_pre_chain = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="%m/%d/%Y, %H:%M:%S"),
]

# Formatter for file output (plain text, no Rich markup)
simple_formatter = structlog.stdlib.ProcessorFormatter(
    foreign_pre_chain=_foreign_pre_chain,
    processors=[
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        filter_internal_keys,
        simple_log_format_plain,
    ],
)

# Formatter for Rich console output (with color markup)
rich_formatter = structlog.stdlib.ProcessorFormatter(
    foreign_pre_chain=_foreign_pre_chain,
    processors=[
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        filter_internal_keys,
        simple_log_format_rich,
    ],
)
