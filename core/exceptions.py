# core/exceptions.py
"""Define standardized exception types for the Cypher adapter.

Two families live here:

- Build errors (`QueryBuildError` subclasses) are raised synchronously by the
  criteria translator and query builders, before any I/O happens.
- Database errors (`DatabaseError` subclasses) wrap failures coming back from
  the Neo4j driver without losing the original exception.
"""

from typing import Any


class AdapterError(Exception):
    """Base exception for all adapter errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class QueryBuildError(AdapterError):
    """Errors detected while translating criteria or assembling a query."""


class InvalidCriteria(QueryBuildError):
    """Criteria value or field name that cannot be translated unambiguously."""


class ParameterCollision(QueryBuildError):
    """A parameter name is already taken by the enclosing query."""


class InvalidValue(QueryBuildError):
    """Values of the wrong shape for the requested operation."""


class UnalignedBatch(QueryBuildError):
    """Batch create columns of differing lengths."""


class UnscopedMutation(QueryBuildError):
    """Update or destroy with neither a label nor any criteria field.

    Such a query would touch every node in the graph, so it is refused.
    """


class DatabaseError(AdapterError):
    """Errors related to database operations."""


class DatabaseConnectionError(DatabaseError):
    """Errors related to database connection issues."""


class ExecutionError(DatabaseError):
    """A submitted query failed inside the driver or on the server.

    The original driver exception is kept on `cause` (and chained as
    `__cause__` when raised with ``from``).
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, details)
        self.cause = cause


def create_error_context(**kwargs: Any) -> dict[str, Any]:
    """Build a context dictionary for structured errors.

    Args:
        **kwargs: Key-value pairs to include.

    Returns:
        A dictionary containing only keys whose values are not `None`.
    """
    return {k: v for k, v in kwargs.items() if v is not None}

