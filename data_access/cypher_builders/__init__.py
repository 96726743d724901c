"""Build parameterized Cypher statements for `data_access`.

Notes:
    Security:
        Cypher identifiers (labels, property keys) are not parameterizable in
        Neo4j. Builders only insert identifiers that match
        `criteria_translator.IDENTIFIER_PATTERN` into query text and pass every
        value through the parameter map.
"""

from .criteria_translator import normalize_criteria, translate_criteria
from .query_builder import NodeQueryBuilder

__all__ = ["NodeQueryBuilder", "normalize_criteria", "translate_criteria"]
