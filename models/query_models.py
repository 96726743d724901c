# models/query_models.py
"""Value types shared by the criteria translator, query builders and gateway."""

from __future__ import annotations

import copy
import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from core.exceptions import ExecutionError

SCALAR_TYPES: tuple[type, ...] = (
    str,
    bool,
    int,
    float,
    datetime.date,
    datetime.time,
    datetime.datetime,
)
"""Python types accepted as a single property value."""

SEQUENCE_TYPES: tuple[type, ...] = (list, tuple)
"""Ordered containers accepted as a membership list or a batch column."""


def is_scalar(value: Any) -> bool:
    return isinstance(value, SCALAR_TYPES)


def is_sequence(value: Any) -> bool:
    return isinstance(value, SEQUENCE_TYPES)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if is_sequence(value):
        return tuple(_freeze(item) for item in value)
    return copy.deepcopy(value)


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return copy.deepcopy(value)


class OperationKind(str, Enum):
    """Kind of query a `QuerySpec` was built for."""

    CREATE = "create"
    CREATE_MANY = "create_many"
    FIND = "find"
    UPDATE = "update"
    DESTROY = "destroy"
    RAW = "raw"


@dataclass(frozen=True)
class ScalarValue:
    """Criteria value matched by equality."""

    value: Any


@dataclass(frozen=True)
class SequenceValue:
    """Criteria value matched by list membership."""

    values: tuple[Any, ...]


CriteriaValue = ScalarValue | SequenceValue


@dataclass(frozen=True)
class QuerySpec:
    """Immutable, fully parameterized query ready for submission.

    `clauses` keep their order; `text` joins them with newlines. `parameters`
    is frozen all the way down: nested lists become tuples and nested mappings
    read-only views. `driver_parameters()` thaws a fresh copy for the driver.
    """

    operation: OperationKind
    label: str | None
    clauses: tuple[str, ...]
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "clauses", tuple(self.clauses))
        object.__setattr__(self, "parameters", _freeze(dict(self.parameters)))

    @property
    def text(self) -> str:
        return "\n".join(self.clauses)

    @property
    def shape(self) -> tuple[OperationKind, str | None, tuple[str, ...], tuple[str, ...]]:
        """Structural key: identical for queries that differ only in values."""
        return (self.operation, self.label, self.clauses, tuple(self.parameters))

    def driver_parameters(self) -> dict[str, Any]:
        return _thaw(self.parameters)


@dataclass(frozen=True)
class QueryResult:
    """Outcome of one executed query: records on success, an error otherwise."""

    operation: OperationKind
    records: tuple[Any, ...] = ()
    error: ExecutionError | None = None

    @classmethod
    def success(cls, operation: OperationKind, records: list[Any]) -> QueryResult:
        return cls(operation=operation, records=tuple(records))

    @classmethod
    def failure(cls, operation: OperationKind, error: ExecutionError) -> QueryResult:
        return cls(operation=operation, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[Any]:
        """Return the records, raising the wrapped `ExecutionError` on failure."""
        if self.error is not None:
            raise self.error
        return list(self.records)
