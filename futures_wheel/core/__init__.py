"""
Core Graph Layer

Structural queries and vote aggregation over immutable graph values.
"""

from .topology import GraphTopology
from .votes import cast_vote, aggregate_probability, validate_vote

__all__ = [
    'GraphTopology',
    'cast_vote',
    'aggregate_probability',
    'validate_vote',
]
