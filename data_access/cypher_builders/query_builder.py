# data_access/cypher_builders/query_builder.py
"""
Parameterized Cypher builders for node create/find/update/destroy.

Each builder is a pure function of its arguments and returns an immutable
`QuerySpec`. Labels and property keys are validated identifiers; every value
goes into the parameter map.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from core.exceptions import InvalidValue, UnalignedBatch, UnscopedMutation
from data_access.cypher_builders.criteria_translator import (
    is_identifier,
    normalize_criteria,
    translate_criteria,
)
from models.query_models import OperationKind, QuerySpec, is_scalar, is_sequence

NODE_ALIAS = "n"
ROW_ALIAS = "row"
UPDATE_PARAM_PREFIX = "update_"

SORT_DIRECTIONS = {"ASC": "ASC", "DESC": "DESC", 1: "ASC", -1: "DESC"}


def _label_pattern(label: str | None) -> str:
    if label is None:
        return ""
    if not is_identifier(label):
        raise InvalidValue("Label is not a valid identifier", details={"label": label})
    return f":{label}"


def _check_property_key(field_name: Any) -> None:
    if not is_identifier(field_name):
        raise InvalidValue("Field name is not a valid property key", details={"field": field_name})


def _check_mapping(values: Any, operation: OperationKind) -> None:
    if not isinstance(values, Mapping):
        raise InvalidValue(
            "Values must be a mapping of field name to value",
            details={"operation": operation.value, "values_type": type(values).__name__},
        )


def _check_single_value(field_name: str, value: Any, operation: OperationKind) -> None:
    if value is None or is_scalar(value):
        return
    if is_sequence(value):
        raise InvalidValue(
            f"Field '{field_name}' holds a sequence; use create_many for batches",
            details={"field": field_name, "operation": operation.value},
        )
    raise InvalidValue(
        f"Field '{field_name}' holds an unsupported value",
        details={"field": field_name, "value_type": type(value).__name__, "operation": operation.value},
    )


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class NodeQueryBuilder:
    """Build Cypher for single-node-pattern CRUD operations."""

    @staticmethod
    def build_create(label: str | None, values: Mapping[str, Any]) -> QuerySpec:
        """
        Build ``CREATE (n:Label {field: $field, ...}) RETURN n``.

        Args:
            label: Optional node label.
            values: Flat mapping of field to scalar (or None).

        Returns:
            QuerySpec whose parameters equal ``values``.

        Raises:
            InvalidValue: Bad label, bad field name, or a sequence/nested value.
        """
        operation = OperationKind.CREATE
        label_pattern = _label_pattern(label)
        _check_mapping(values, operation)

        properties: list[str] = []
        for field_name, value in values.items():
            _check_property_key(field_name)
            _check_single_value(field_name, value, operation)
            properties.append(f"{field_name}: ${field_name}")

        node = f"({NODE_ALIAS}{label_pattern}"
        if properties:
            node += " {" + ", ".join(properties) + "}"
        node += ")"

        return QuerySpec(
            operation=operation,
            label=label,
            clauses=(f"CREATE {node}", f"RETURN {NODE_ALIAS}"),
            parameters=dict(values),
        )

    @staticmethod
    def build_create_many(label: str | None, values: Mapping[str, Sequence[Any]]) -> QuerySpec:
        """
        Build a batch create from column-oriented values.

        ``{"name": ["a", "b"], "age": [1, 2]}`` describes two records. The
        columns are zipped into ``$rows`` and unwound, one CREATE per row.

        Raises:
            InvalidValue: No fields, bad field name, or a column that is not a
                sequence of scalars.
            UnalignedBatch: Columns of different lengths.
        """
        operation = OperationKind.CREATE_MANY
        label_pattern = _label_pattern(label)
        _check_mapping(values, operation)
        if not values:
            raise InvalidValue("Batch create needs at least one field", details={"operation": operation.value})

        lengths: dict[str, int] = {}
        for field_name, column in values.items():
            _check_property_key(field_name)
            if not is_sequence(column):
                raise InvalidValue(
                    f"Batch field '{field_name}' must be a sequence",
                    details={"field": field_name, "value_type": type(column).__name__},
                )
            for element in column:
                if element is not None and not is_scalar(element):
                    raise InvalidValue(
                        f"Batch field '{field_name}' contains an unsupported element",
                        details={"field": field_name, "element_type": type(element).__name__},
                    )
            lengths[field_name] = len(column)

        if len(set(lengths.values())) > 1:
            raise UnalignedBatch("Batch fields have different lengths", details={"lengths": lengths})

        fields = list(values)
        record_count = next(iter(lengths.values()))
        rows = [{field_name: values[field_name][i] for field_name in fields} for i in range(record_count)]
        properties = ", ".join(f"{field_name}: {ROW_ALIAS}.{field_name}" for field_name in fields)

        return QuerySpec(
            operation=operation,
            label=label,
            clauses=(
                f"UNWIND $rows AS {ROW_ALIAS}",
                f"CREATE ({NODE_ALIAS}{label_pattern} {{{properties}}})",
                f"RETURN {NODE_ALIAS}",
            ),
            parameters={"rows": rows},
        )

    @staticmethod
    def build_find(
        label: str | None,
        criteria: Mapping[str, Any] | None,
        *,
        skip: int | None = None,
        limit: int | None = None,
        sort: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None,
    ) -> QuerySpec:
        """
        Build ``MATCH (n:Label) WHERE (...) RETURN n`` with optional paging.

        The label lives in the MATCH pattern, criteria in the WHERE clause;
        with no criteria fields there is no WHERE clause at all. ``skip`` and
        ``limit`` are passed as ``$skip`` / ``$limit``.

        Raises:
            InvalidCriteria: Bad criteria (see the translator).
            ParameterCollision: A criteria field named ``skip``/``limit`` while
                paging with that option.
            InvalidValue: Bad label, negative paging values, bad sort spec.
        """
        operation = OperationKind.FIND
        label_pattern = _label_pattern(label)

        paging: dict[str, int] = {}
        for name, value in (("skip", skip), ("limit", limit)):
            if value is None:
                continue
            if not _is_non_negative_int(value):
                raise InvalidValue(f"'{name}' must be a non-negative integer", details={name: value})
            paging[name] = value

        order_by = NodeQueryBuilder._order_by(sort)
        fragment, parameters = translate_criteria(criteria, alias=NODE_ALIAS, reserved=set(paging))

        clauses = [f"MATCH ({NODE_ALIAS}{label_pattern})"]
        if fragment:
            clauses.append(f"WHERE {fragment}")
        clauses.append(f"RETURN {NODE_ALIAS}")
        if order_by:
            clauses.append(f"ORDER BY {order_by}")
        for name in paging:
            clauses.append(f"{name.upper()} ${name}")
        parameters.update(paging)

        return QuerySpec(operation=operation, label=label, clauses=tuple(clauses), parameters=parameters)

    @staticmethod
    def build_update(
        label: str | None,
        criteria: Mapping[str, Any] | None,
        values: Mapping[str, Any],
    ) -> QuerySpec:
        """
        Build ``MATCH ... WHERE ... SET n.field = $update_field, ... RETURN n``.

        Raises:
            UnscopedMutation: Neither a label nor any criteria field.
            InvalidValue: Empty values, bad field name or non-scalar value.
            ParameterCollision: A criteria field named like an update parameter.
        """
        operation = OperationKind.UPDATE
        label_pattern = _label_pattern(label)
        normalized = NodeQueryBuilder._require_scope(label, criteria, operation)
        _check_mapping(values, operation)
        if not values:
            raise InvalidValue("Update needs at least one field to set", details={"operation": operation.value})

        assignments: list[str] = []
        update_parameters: dict[str, Any] = {}
        for field_name, value in values.items():
            _check_property_key(field_name)
            _check_single_value(field_name, value, operation)
            param_name = f"{UPDATE_PARAM_PREFIX}{field_name}"
            assignments.append(f"{NODE_ALIAS}.{field_name} = ${param_name}")
            update_parameters[param_name] = value

        fragment, parameters = translate_criteria(normalized, alias=NODE_ALIAS, reserved=set(update_parameters))
        parameters.update(update_parameters)

        clauses = [f"MATCH ({NODE_ALIAS}{label_pattern})"]
        if fragment:
            clauses.append(f"WHERE {fragment}")
        clauses.append("SET " + ", ".join(assignments))
        clauses.append(f"RETURN {NODE_ALIAS}")

        return QuerySpec(operation=operation, label=label, clauses=tuple(clauses), parameters=parameters)

    @staticmethod
    def build_destroy(label: str | None, criteria: Mapping[str, Any] | None) -> QuerySpec:
        """
        Build ``MATCH ... WHERE ... DETACH DELETE n RETURN count(n) AS deleted``.

        Raises:
            UnscopedMutation: Neither a label nor any criteria field.
        """
        operation = OperationKind.DESTROY
        label_pattern = _label_pattern(label)
        normalized = NodeQueryBuilder._require_scope(label, criteria, operation)
        fragment, parameters = translate_criteria(normalized, alias=NODE_ALIAS)

        clauses = [f"MATCH ({NODE_ALIAS}{label_pattern})"]
        if fragment:
            clauses.append(f"WHERE {fragment}")
        clauses.append(f"DETACH DELETE {NODE_ALIAS}")
        clauses.append(f"RETURN count({NODE_ALIAS}) AS deleted")

        return QuerySpec(operation=operation, label=label, clauses=tuple(clauses), parameters=parameters)

    @staticmethod
    def build_raw(text: str, parameters: Mapping[str, Any] | None = None) -> QuerySpec:
        """Wrap hand-written Cypher so it can go through the gateway."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidValue("Raw query text must be a non-empty string")
        parameters = dict(parameters or {})
        for name in parameters:
            if not is_identifier(name):
                raise InvalidValue("Parameter name is not a valid identifier", details={"parameter": name})
        return QuerySpec(operation=OperationKind.RAW, label=None, clauses=(text.strip(),), parameters=parameters)

    @staticmethod
    def _require_scope(label: str | None, criteria: Mapping[str, Any] | None, operation: OperationKind):
        normalized = normalize_criteria(criteria)
        if label is None and not normalized:
            raise UnscopedMutation(
                f"Refusing {operation.value} without a label or criteria",
                details={"operation": operation.value},
            )
        return normalized

    @staticmethod
    def _order_by(sort: Mapping[str, Any] | Sequence[tuple[str, Any]] | None) -> str:
        if sort is None:
            return ""
        if isinstance(sort, Mapping):
            items = list(sort.items())
        elif is_sequence(sort):
            items = list(sort)
        else:
            raise InvalidValue("Sort must be a mapping or a sequence of pairs", details={"sort_type": type(sort).__name__})

        terms: list[str] = []
        for item in items:
            if not (is_sequence(item) and len(item) == 2):
                raise InvalidValue("Sort entries must be (field, direction) pairs", details={"entry": repr(item)})
            field_name, direction = item
            _check_property_key(field_name)
            key = direction.upper() if isinstance(direction, str) else direction
            if isinstance(key, bool) or not isinstance(key, str | int) or key not in SORT_DIRECTIONS:
                raise InvalidValue("Unknown sort direction", details={"field": field_name, "direction": direction})
            terms.append(f"{NODE_ALIAS}.{field_name} {SORT_DIRECTIONS[key]}")
        return ", ".join(terms)
