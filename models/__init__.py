# models/__init__.py
"""Export the value types passed between builders and the query gateway."""

from .query_models import (
    CriteriaValue,
    OperationKind,
    QueryResult,
    QuerySpec,
    ScalarValue,
    SequenceValue,
)

__all__ = [
    "CriteriaValue",
    "OperationKind",
    "QueryResult",
    "QuerySpec",
    "ScalarValue",
    "SequenceValue",
]
