# tests/core/test_db_manager.py
"""Tests for core/db_manager.py"""

import asyncio
from unittest.mock import MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from core.db_manager import Neo4jConnection, Neo4jConnectionRegistry, connect
from core.exceptions import DatabaseConnectionError
from tests.fakes.fake_connection import FakeConnector


@pytest.mark.asyncio
class TestConnect:
    """Driver creation and connectivity check"""

    async def test_connect_success(self, monkeypatch, adapter_settings):
        mock_driver = MagicMock()
        mock_graph_database = MagicMock()
        mock_graph_database.driver.return_value = mock_driver
        monkeypatch.setattr("core.db_manager.GraphDatabase", mock_graph_database)

        connection = await connect(adapter_settings)

        assert isinstance(connection, Neo4jConnection)
        assert connection.driver is mock_driver
        assert connection.database == "testdb"
        mock_graph_database.driver.assert_called_once_with(
            "bolt://graph.test:7688",
            auth=("tester", "secret"),
            connection_timeout=adapter_settings.NEO4J_CONNECTION_TIMEOUT,
        )
        mock_driver.verify_connectivity.assert_called_once()

    async def test_connect_service_unavailable(self, monkeypatch, adapter_settings):
        mock_driver = MagicMock()
        mock_driver.verify_connectivity.side_effect = ServiceUnavailable("Service down")
        mock_graph_database = MagicMock()
        mock_graph_database.driver.return_value = mock_driver
        monkeypatch.setattr("core.db_manager.GraphDatabase", mock_graph_database)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await connect(adapter_settings)

        assert "Neo4j database is not available" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ServiceUnavailable)
        mock_driver.close.assert_called_once()

    async def test_connect_unexpected_error(self, monkeypatch, adapter_settings):
        mock_driver = MagicMock()
        mock_driver.verify_connectivity.side_effect = RuntimeError("handshake rejected")
        mock_graph_database = MagicMock()
        mock_graph_database.driver.return_value = mock_driver
        monkeypatch.setattr("core.db_manager.GraphDatabase", mock_graph_database)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await connect(adapter_settings)

        assert exc_info.value.details["error_type"] == "RuntimeError"
        mock_driver.close.assert_called_once()

    async def test_driver_creation_failure(self, monkeypatch, adapter_settings):
        mock_graph_database = MagicMock()
        mock_graph_database.driver.side_effect = ValueError("bad uri")
        monkeypatch.setattr("core.db_manager.GraphDatabase", mock_graph_database)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await connect(adapter_settings)

        assert exc_info.value.details["uri"] == "bolt://graph.test:7688"


@pytest.mark.asyncio
class TestNeo4jConnection:
    async def test_query_runs_in_session_and_lists_records(self):
        records = [{"n": 1}, {"n": 2}]
        session = MagicMock()
        session.run.return_value = iter(records)
        driver = MagicMock()
        driver.session.return_value.__enter__.return_value = session

        connection = Neo4jConnection(driver, database="testdb")
        result = await connection.query("MATCH (n) RETURN n", {"x": 1})

        assert result == records
        driver.session.assert_called_once_with(database="testdb")
        session.run.assert_called_once_with("MATCH (n) RETURN n", {"x": 1})

    async def test_close_closes_driver(self):
        driver = MagicMock()
        await Neo4jConnection(driver).close()
        driver.close.assert_called_once()


@pytest.mark.asyncio
class TestConnectionRegistry:
    async def test_connects_lazily_once(self, registry, fake_connector, adapter_settings):
        assert not registry.is_connected
        assert fake_connector.calls == 0

        first = await registry.get_connection()
        second = await registry.get_connection()

        assert first is second
        assert fake_connector.calls == 1
        assert fake_connector.settings_seen == [adapter_settings]
        assert registry.is_connected

    async def test_concurrent_first_use_connects_once(self, adapter_settings):
        connector = FakeConnector()
        original_call = connector.__call__

        async def slow_connect(settings):
            await asyncio.sleep(0.01)
            return await original_call(settings)

        registry = Neo4jConnectionRegistry(settings=adapter_settings, connector=slow_connect)
        handles = await asyncio.gather(*(registry.get_connection() for _ in range(5)))

        assert connector.calls == 1
        assert all(handle is connector.connection for handle in handles)

    async def test_shutdown_closes_and_allows_reconnect(self, registry, fake_connector, fake_connection):
        await registry.get_connection()
        await registry.shutdown()

        assert fake_connection.closed
        assert not registry.is_connected

        await registry.get_connection()
        assert fake_connector.calls == 2

    async def test_shutdown_without_connection_is_a_no_op(self, registry, fake_connection):
        await registry.shutdown()
        assert not fake_connection.closed

    async def test_connect_failure_leaves_registry_empty(self, adapter_settings):
        async def failing_connect(settings):
            raise DatabaseConnectionError("down")

        registry = Neo4jConnectionRegistry(settings=adapter_settings, connector=failing_connect)
        with pytest.raises(DatabaseConnectionError):
            await registry.get_connection()
        assert not registry.is_connected


def test_registry_settings_default_to_config():
    import config

    assert Neo4jConnectionRegistry().settings is config.settings
