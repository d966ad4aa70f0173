"""
Vote Aggregator
===============

Crowd-sourced probability for a node.

Each user holds at most one vote per node, an integer 1..5.
Re-voting overwrites; the node's probability is the mean of the
current votes, or 0.0 when there are none. The same rules are applied
client-side by the session and server-side by the repository.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Mapping
import numpy as np

from ..contracts.base import (
    MIN_VOTE, MAX_VOTE, ValidationError, ErrorCode,
)
from ..contracts.graph import Node, freeze_votes


def validate_vote(user_id: str, value: object) -> int:
    """Return value as int or raise ValidationError."""
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("A user id is required to vote", ErrorCode.INVALID_USER)
    # bool is an int subclass; True must not count as a vote of 1
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"Vote must be an integer between {MIN_VOTE} and {MAX_VOTE}, got {value!r}",
            ErrorCode.INVALID_VOTE,
        )
    if not MIN_VOTE <= int(value) <= MAX_VOTE:
        raise ValidationError(
            f"Vote must be between {MIN_VOTE} and {MAX_VOTE}, got {value}",
            ErrorCode.INVALID_VOTE,
        )
    return int(value)


def aggregate_probability(votes: Mapping[str, int]) -> float:
    """Mean of the vote values, 0.0 if empty."""
    if not votes:
        return 0.0
    return float(np.mean(np.fromiter(votes.values(), dtype=float)))


def cast_vote(node: Node, user_id: str, value: object) -> Node:
    """Return a copy of node with the user's vote applied."""
    checked = validate_vote(user_id, value)
    votes = node.vote_map
    votes[user_id] = checked
    return replace(
        node,
        votes=freeze_votes(votes),
        probability=aggregate_probability(votes),
    )
