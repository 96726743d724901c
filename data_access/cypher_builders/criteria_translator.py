# data_access/cypher_builders/criteria_translator.py
"""Translate criteria mappings into a parameterized WHERE fragment.

Every criteria value is resolved once into a `ScalarValue` (equality) or a
`SequenceValue` (membership) before any text is produced. Property keys are
identifiers and cannot be passed as Cypher parameters, so they are validated
against `IDENTIFIER_PATTERN`; values always travel in the parameter map.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from typing import Any, NoReturn

import structlog

from core.exceptions import InvalidCriteria, ParameterCollision
from models.query_models import (
    CriteriaValue,
    ScalarValue,
    SequenceValue,
    is_scalar,
    is_sequence,
)

logger = structlog.get_logger(__name__)

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_identifier(name: Any) -> bool:
    return isinstance(name, str) and IDENTIFIER_PATTERN.fullmatch(name) is not None


def _element_kind(value: Any) -> str:
    # int and float compare fine against each other in Cypher; bool does not.
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int | float):
        return "number"
    return type(value).__name__


def _check_sequence(field_name: str, elements: Any) -> tuple[Any, ...]:
    kinds = set()
    for element in elements:
        if not is_scalar(element):
            raise InvalidCriteria(
                f"Criteria field '{field_name}' contains a non-scalar element",
                details={"field": field_name, "element_type": type(element).__name__},
            )
        kinds.add(_element_kind(element))
    if len(kinds) > 1:
        raise InvalidCriteria(
            f"Criteria field '{field_name}' mixes element types",
            details={"field": field_name, "element_types": sorted(kinds)},
        )
    return tuple(elements)


def _reject_value(field_name: str, value: Any) -> NoReturn:
    if value is None:
        raise InvalidCriteria(
            f"Criteria field '{field_name}' is None; equality with null never matches",
            details={"field": field_name},
        )
    raise InvalidCriteria(
        f"Criteria field '{field_name}' has an ambiguous value",
        details={"field": field_name, "value_type": type(value).__name__},
    )


def resolve_criteria_value(field_name: str, raw: Any) -> CriteriaValue:
    """Resolve one raw criteria value into its tagged form.

    Already tagged values go through the same checks as raw ones.

    Raises:
        InvalidCriteria: For `None`, mappings, sets, bytes-like values, nested
            sequences or sequences mixing element kinds.
    """
    if isinstance(raw, ScalarValue):
        if not is_scalar(raw.value):
            _reject_value(field_name, raw.value)
        return raw
    if isinstance(raw, SequenceValue):
        if not is_sequence(raw.values):
            _reject_value(field_name, raw.values)
        return SequenceValue(_check_sequence(field_name, raw.values))
    if is_scalar(raw):
        return ScalarValue(raw)
    if is_sequence(raw):
        return SequenceValue(_check_sequence(field_name, raw))
    _reject_value(field_name, raw)


def normalize_criteria(criteria: Mapping[str, Any] | None) -> dict[str, CriteriaValue]:
    """Validate field names and resolve every value, keeping insertion order."""
    if criteria is None:
        return {}
    if not isinstance(criteria, Mapping):
        raise InvalidCriteria(
            "Criteria must be a mapping of field name to value",
            details={"criteria_type": type(criteria).__name__},
        )

    normalized: dict[str, CriteriaValue] = {}
    for field_name, raw in criteria.items():
        if not is_identifier(field_name):
            raise InvalidCriteria(
                "Criteria field name is not a valid property key",
                details={"field": field_name},
            )
        normalized[field_name] = resolve_criteria_value(field_name, raw)
    return normalized


def translate_criteria(
    criteria: Mapping[str, Any] | None,
    *,
    alias: str = "n",
    reserved: Collection[str] = frozenset(),
) -> tuple[str, dict[str, Any]]:
    """Translate criteria into `(fragment, parameters)`.

    Fields become ``alias.field = $field`` or ``alias.field IN $field``, ANDed
    and wrapped in one pair of parentheses. Empty criteria yield ``("", {})``
    so callers can omit the WHERE clause entirely.

    Args:
        criteria: Raw or already-normalized criteria.
        alias: Node variable the fragment refers to.
        reserved: Parameter names already used by the enclosing query.

    Raises:
        InvalidCriteria: Bad field name or value (see `resolve_criteria_value`).
        ParameterCollision: A field's parameter name is in `reserved`.
    """
    if not is_identifier(alias):
        raise InvalidCriteria("Node alias is not a valid identifier", details={"alias": alias})

    normalized = normalize_criteria(criteria)
    comparisons: list[str] = []
    parameters: dict[str, Any] = {}

    for field_name, value in normalized.items():
        param_name = field_name
        if param_name in reserved:
            raise ParameterCollision(
                f"Parameter '${param_name}' is already used by the enclosing query",
                details={"field": field_name, "reserved": sorted(reserved)},
            )
        if isinstance(value, SequenceValue):
            comparisons.append(f"{alias}.{field_name} IN ${param_name}")
            parameters[param_name] = list(value.values)
        else:
            comparisons.append(f"{alias}.{field_name} = ${param_name}")
            parameters[param_name] = value.value

    if not comparisons:
        return "", {}

    fragment = "(" + " AND ".join(comparisons) + ")"
    logger.debug("Translated criteria", fragment=fragment, fields=list(parameters))
    return fragment, parameters
