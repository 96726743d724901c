# tests/conftest.py
import os
import sys

import pytest

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from config.settings import AdapterSettings  # noqa: E402
from core.db_manager import Neo4jConnectionRegistry  # noqa: E402
from core.query_gateway import QueryGateway  # noqa: E402
from data_access.graph_adapter import GraphAdapter  # noqa: E402
from tests.fakes.fake_connection import FakeConnection, FakeConnector  # noqa: E402


@pytest.fixture
def adapter_settings() -> AdapterSettings:
    return AdapterSettings(
        NEO4J_HOST="graph.test",
        NEO4J_PORT=7688,
        NEO4J_USER="tester",
        NEO4J_PASSWORD="secret",
        NEO4J_DATABASE="testdb",
        DEBUG_QUERIES=False,
    )


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def fake_connector(fake_connection: FakeConnection) -> FakeConnector:
    return FakeConnector(fake_connection)


@pytest.fixture
def registry(adapter_settings: AdapterSettings, fake_connector: FakeConnector) -> Neo4jConnectionRegistry:
    return Neo4jConnectionRegistry(settings=adapter_settings, connector=fake_connector)


@pytest.fixture
def gateway(registry: Neo4jConnectionRegistry) -> QueryGateway:
    return QueryGateway(registry)


@pytest.fixture
def adapter(gateway: QueryGateway) -> GraphAdapter:
    return GraphAdapter(gateway=gateway)
