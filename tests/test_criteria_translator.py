"""Tests for data_access/cypher_builders/criteria_translator.py"""

import datetime

import pytest

from core.exceptions import InvalidCriteria, ParameterCollision
from data_access.cypher_builders.criteria_translator import (
    is_identifier,
    normalize_criteria,
    resolve_criteria_value,
    translate_criteria,
)
from models.query_models import ScalarValue, SequenceValue


class TestResolveCriteriaValue:
    """Scalar/sequence resolution at the API boundary."""

    @pytest.mark.parametrize("value", ["Alice", 30, 1.5, True, datetime.date(2024, 1, 2)])
    def test_scalars(self, value):
        assert resolve_criteria_value("f", value) == ScalarValue(value)

    def test_list_and_tuple_become_sequences(self):
        assert resolve_criteria_value("f", [30, 40]) == SequenceValue((30, 40))
        assert resolve_criteria_value("f", ("a", "b")) == SequenceValue(("a", "b"))

    def test_mixed_int_and_float_is_allowed(self):
        assert resolve_criteria_value("f", [1, 2.5]) == SequenceValue((1, 2.5))

    def test_valid_tagged_values_are_accepted(self):
        assert resolve_criteria_value("f", ScalarValue("Alice")) == ScalarValue("Alice")
        assert resolve_criteria_value("f", SequenceValue((1, 2.5))) == SequenceValue((1, 2.5))
        assert resolve_criteria_value("f", SequenceValue([1, 2])) == SequenceValue((1, 2))

    @pytest.mark.parametrize(
        "tagged",
        [
            ScalarValue({"city": "Paris"}),
            ScalarValue(None),
            ScalarValue([30, 40]),
            SequenceValue((1, "a")),
            SequenceValue((1, {"x": 1})),
            SequenceValue(([1], [2])),
            SequenceValue("abc"),
            SequenceValue(None),
        ],
    )
    def test_invalid_tagged_values_are_rejected(self, tagged):
        with pytest.raises(InvalidCriteria):
            resolve_criteria_value("f", tagged)

    def test_tagged_values_are_checked_through_translation(self):
        with pytest.raises(InvalidCriteria):
            translate_criteria({"address": ScalarValue({"city": "Paris"})})
        with pytest.raises(InvalidCriteria):
            translate_criteria({"nick": ScalarValue(None)})
        with pytest.raises(InvalidCriteria):
            translate_criteria({"age": SequenceValue((1, "a", {"x": 1}))})

    @pytest.mark.parametrize(
        "value",
        [
            b"bytes",
            bytearray(b"x"),
            {"nested": 1},
            {1, 2},
            None,
            [[1, 2]],
            [{"a": 1}],
            [1, "one"],
            [True, 1],
            object(),
        ],
    )
    def test_ambiguous_values_rejected(self, value):
        with pytest.raises(InvalidCriteria):
            resolve_criteria_value("f", value)

    def test_error_details_name_the_field(self):
        with pytest.raises(InvalidCriteria) as exc_info:
            resolve_criteria_value("tags", [["nested"]])
        assert exc_info.value.details["field"] == "tags"


class TestNormalizeCriteria:
    def test_none_is_empty(self):
        assert normalize_criteria(None) == {}

    def test_keeps_insertion_order(self):
        normalized = normalize_criteria({"b": 1, "a": [2], "c": "x"})
        assert list(normalized) == ["b", "a", "c"]

    def test_rejects_non_mapping(self):
        with pytest.raises(InvalidCriteria):
            normalize_criteria([("name", "Alice")])

    @pytest.mark.parametrize("field_name", ["", "1abc", "na me", "n.name", "x`) DETACH DELETE n //", 5])
    def test_rejects_bad_field_names(self, field_name):
        with pytest.raises(InvalidCriteria):
            normalize_criteria({field_name: "v"})


class TestTranslateCriteria:
    def test_single_equality(self):
        fragment, params = translate_criteria({"name": "Alice"})
        assert fragment == "(n.name = $name)"
        assert params == {"name": "Alice"}

    def test_membership(self):
        fragment, params = translate_criteria({"age": [30, 40]})
        assert fragment == "(n.age IN $age)"
        assert params == {"age": [30, 40]}

    def test_fields_are_anded_in_insertion_order(self):
        fragment, params = translate_criteria({"name": "Alice", "age": [30, 40], "active": True})
        assert fragment == "(n.name = $name AND n.age IN $age AND n.active = $active)"
        assert params == {"name": "Alice", "age": [30, 40], "active": True}

    def test_parameter_keys_match_fields_and_one_test_per_field(self):
        criteria = {"a": 1, "b": [2, 3], "c": "x", "d": 4.5}
        fragment, params = translate_criteria(criteria)
        assert set(params) == set(criteria)
        assert fragment.count(" AND ") == len(criteria) - 1
        for field_name in criteria:
            assert f"n.{field_name} " in fragment

    def test_empty_criteria(self):
        assert translate_criteria({}) == ("", {})
        assert translate_criteria(None) == ("", {})

    def test_translation_is_idempotent(self):
        criteria = {"name": "Alice", "age": [30, 40]}
        assert translate_criteria(criteria) == translate_criteria(criteria)
        assert translate_criteria({}) == translate_criteria({})

    def test_values_never_appear_in_fragment(self):
        fragment, params = translate_criteria({"name": "x' OR 1=1 //"})
        assert "OR 1=1" not in fragment
        assert params["name"] == "x' OR 1=1 //"

    def test_custom_alias(self):
        fragment, _ = translate_criteria({"name": "Alice"}, alias="p")
        assert fragment == "(p.name = $name)"

    def test_bad_alias_rejected(self):
        with pytest.raises(InvalidCriteria):
            translate_criteria({"name": "Alice"}, alias="n)")

    def test_reserved_name_collision(self):
        with pytest.raises(ParameterCollision) as exc_info:
            translate_criteria({"name": "Alice", "limit": 3}, reserved={"limit"})
        assert exc_info.value.details["field"] == "limit"

    def test_reserved_names_not_used_are_fine(self):
        fragment, params = translate_criteria({"name": "Alice"}, reserved={"limit", "skip"})
        assert params == {"name": "Alice"}

    def test_sequence_parameters_are_fresh_lists(self):
        ages = (30, 40)
        _, params = translate_criteria({"age": ages})
        assert params["age"] == [30, 40]
        assert isinstance(params["age"], list)


@pytest.mark.parametrize("name,expected", [("name", True), ("_x1", True), ("1x", False), ("a-b", False), (None, False)])
def test_is_identifier(name, expected):
    assert is_identifier(name) is expected
