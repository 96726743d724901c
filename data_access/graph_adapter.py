# data_access/graph_adapter.py
"""Object-storage style facade over the Cypher builders and query gateway.

Every method takes the collection label first. Build errors raise before any
I/O; execution errors raise `ExecutionError` with the driver exception as
cause. Nothing here is transactional: `find_or_create` is a find followed by
a create, and concurrent callers can both create.
"""

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from core.db_manager import Neo4jConnectionRegistry, connection_registry
from core.exceptions import InvalidValue, UnalignedBatch
from core.query_gateway import QueryGateway, log_trace_sink
from data_access.cypher_builders.query_builder import NODE_ALIAS, NodeQueryBuilder
from models.query_models import QuerySpec

logger = structlog.get_logger(__name__)


class GraphAdapter:
    """Create/find/update/destroy nodes by label and criteria."""

    # Neo4j is schemaless; there is nothing to sync at startup.
    syncable = False

    def __init__(
        self,
        gateway: QueryGateway | None = None,
        registry: Neo4jConnectionRegistry | None = None,
    ):
        if gateway is None:
            registry = registry or connection_registry
            trace_sink = log_trace_sink if registry.settings.DEBUG_QUERIES else None
            gateway = QueryGateway(registry, trace_sink=trace_sink)
        self.gateway = gateway

    @property
    def defaults(self) -> dict[str, Any]:
        return self.gateway.registry.settings.connection_defaults()

    async def _run(self, spec: QuerySpec) -> list[Any]:
        result = await self.gateway.execute(spec)
        return result.unwrap()

    @staticmethod
    def _nodes(records: list[Any]) -> list[Any]:
        return [record[NODE_ALIAS] for record in records]

    async def create(self, label: str | None, values: Mapping[str, Any]) -> Any:
        """Create one node and return it (``None`` if the server returned nothing)."""
        nodes = self._nodes(await self._run(NodeQueryBuilder.build_create(label, values)))
        return nodes[0] if nodes else None

    async def create_many(self, label: str | None, values: Mapping[str, Sequence[Any]]) -> list[Any]:
        """Create one node per row of the column-oriented ``values``."""
        return self._nodes(await self._run(NodeQueryBuilder.build_create_many(label, values)))

    async def create_each(self, label: str | None, records: Sequence[Mapping[str, Any]]) -> list[Any]:
        """Create one node per record mapping in a single batch query.

        Raises:
            UnalignedBatch: Records do not all have the same fields.
        """
        if not records:
            return []
        if not all(isinstance(record, Mapping) for record in records):
            raise InvalidValue("create_each expects a sequence of mappings")

        fields = list(records[0])
        for index, record in enumerate(records):
            if set(record) != set(fields):
                raise UnalignedBatch(
                    "Records in a batch must share the same fields",
                    details={"index": index, "expected": fields, "got": list(record)},
                )
        columns = {field_name: [record[field_name] for record in records] for field_name in fields}
        return await self.create_many(label, columns)

    async def find(
        self,
        label: str | None,
        criteria: Mapping[str, Any] | None = None,
        *,
        skip: int | None = None,
        limit: int | None = None,
        sort: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None,
    ) -> list[Any]:
        spec = NodeQueryBuilder.build_find(label, criteria, skip=skip, limit=limit, sort=sort)
        return self._nodes(await self._run(spec))

    async def find_or_create(
        self,
        label: str | None,
        criteria: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> Any:
        """Return the first node matching ``criteria`` or create one.

        The created node gets ``criteria`` merged with ``values``. Both queries
        are built up front, so criteria that can only be matched (membership
        lists, for instance) fail before anything is sent.
        """
        find_spec = NodeQueryBuilder.build_find(label, criteria, limit=1)
        create_spec = NodeQueryBuilder.build_create(label, {**criteria, **(values or {})})

        found = self._nodes(await self._run(find_spec))
        if found:
            return found[0]
        logger.debug("find_or_create found no match, creating", label=label)
        nodes = self._nodes(await self._run(create_spec))
        return nodes[0] if nodes else None

    async def update(
        self,
        label: str | None,
        criteria: Mapping[str, Any] | None,
        values: Mapping[str, Any],
    ) -> list[Any]:
        """Set ``values`` on every matching node and return the updated nodes."""
        return self._nodes(await self._run(NodeQueryBuilder.build_update(label, criteria, values)))

    async def destroy(self, label: str | None, criteria: Mapping[str, Any] | None = None) -> int:
        """Delete matching nodes with their relationships; return how many."""
        records = await self._run(NodeQueryBuilder.build_destroy(label, criteria))
        return records[0]["deleted"] if records else 0

    async def query(self, text: str, parameters: Mapping[str, Any] | None = None) -> list[Any]:
        """Run hand-written Cypher; values must go through ``parameters``."""
        return await self._run(NodeQueryBuilder.build_raw(text, parameters))

    async def teardown(self) -> None:
        await self.gateway.registry.shutdown()

