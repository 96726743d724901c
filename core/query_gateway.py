# core/query_gateway.py
"""Submit built queries to the driver and map the outcome to a `QueryResult`."""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

import structlog

from core.db_manager import Neo4jConnectionRegistry
from core.exceptions import ExecutionError, create_error_context
from models.query_models import QueryResult, QuerySpec

logger = structlog.get_logger(__name__)

TraceSink = Callable[[str, Mapping[str, Any]], None]


def log_trace_sink(query_text: str, parameters: Mapping[str, Any]) -> None:
    logger.debug("Executing Cypher query", query=query_text, parameters=dict(parameters))


def _record_to_value(record: Any) -> Any:
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "items"):
        # neo4j.Record: keep every key, node/relationship values stay as driver objects
        return dict(record.items())
    return record


class QueryGateway:
    """Execute `QuerySpec`s over the registry's shared connection.

    Failures never raise out of `execute`; they come back as a `QueryResult`
    holding an `ExecutionError` with the driver exception as its cause.
    Nothing is retried here.
    """

    def __init__(self, registry: Neo4jConnectionRegistry, trace_sink: TraceSink | None = None):
        self.registry = registry
        self.trace_sink = trace_sink

    def _trace(self, query_text: str, spec: QuerySpec) -> None:
        if self.trace_sink is None:
            return
        try:
            # The sink gets a read-only view over its own copy, apart from the driver's.
            self.trace_sink(query_text, MappingProxyType(spec.driver_parameters()))
        except Exception as e:
            logger.warning("Trace sink raised; continuing with query", error=str(e), exc_info=True)

    async def execute(self, spec: QuerySpec) -> QueryResult:
        query_text = spec.text
        parameters = spec.driver_parameters()
        self._trace(query_text, spec)

        try:
            connection = await self.registry.get_connection()
            raw_records = await connection.query(query_text, parameters)
        except Exception as e:
            logger.error(
                "Cypher query failed",
                operation=spec.operation.value,
                label=spec.label,
                error=str(e),
                error_type=type(e).__name__,
            )
            error = ExecutionError(
                f"Query execution failed during {spec.operation.value}",
                details=create_error_context(
                    operation=spec.operation.value,
                    label=spec.label,
                    original_error=str(e),
                    error_type=type(e).__name__,
                ),
                cause=e,
            )
            error.__cause__ = e
            return QueryResult.failure(spec.operation, error)

        records = [_record_to_value(record) for record in raw_records]
        logger.debug("Cypher query succeeded", operation=spec.operation.value, record_count=len(records))
        return QueryResult.success(spec.operation, records)
