# data_access/__init__.py
"""Expose the `data_access` public API.

Builders live in `data_access.cypher_builders`; `GraphAdapter` runs what they
build through the query gateway.
"""

from .cypher_builders import NodeQueryBuilder, normalize_criteria, translate_criteria
from .graph_adapter import GraphAdapter

__all__ = ["GraphAdapter", "NodeQueryBuilder", "normalize_criteria", "translate_criteria"]
