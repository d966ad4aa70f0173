"""
Report Analyzer
===============

Structured summary of a futures wheel.

Key outcomes are non-root nodes whose vote probability is at least
HIGH_PROBABILITY_THRESHOLD, strongest first. Each outcome yields a
scenario: the path from the central idea down its parent links and a
narrative naming the relationship label of every hop.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..contracts.base import ValidationError, ErrorCode
from ..contracts.graph import Node, Edge, Graph
from ..core.topology import GraphTopology

HIGH_PROBABILITY_THRESHOLD = 3.5


@dataclass(frozen=True)
class KeyOutcome:
    node_id: str
    label: str
    probability: float
    tier: int
    description: Optional[str] = None


@dataclass(frozen=True)
class PathStep:
    node_id: str
    label: str
    tier: int


@dataclass(frozen=True)
class Scenario:
    path: Tuple[PathStep, ...]
    final_outcome_probability: float
    narrative: str


@dataclass(frozen=True)
class ReportData:
    title: str
    generated_at: datetime
    summary: str
    key_outcomes: Tuple[KeyOutcome, ...]
    scenarios: Tuple[Scenario, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "generatedDate": self.generated_at.isoformat(),
            "summary": self.summary,
            "keyOutcomes": [
                {
                    "label": o.label,
                    "probability": o.probability,
                    "tier": o.tier,
                    "description": o.description,
                }
                for o in self.key_outcomes
            ],
            "scenarios": [
                {
                    "path": [{"label": s.label, "tier": s.tier} for s in sc.path],
                    "finalOutcomeProbability": sc.final_outcome_probability,
                    "narrative": sc.narrative,
                }
                for sc in self.scenarios
            ],
        }


def _key_outcomes(nodes: Tuple[Node, ...]) -> List[Node]:
    strong = [
        n for n in nodes
        if n.tier > 0 and n.probability >= HIGH_PROBABILITY_THRESHOLD
    ]
    # sorted() is stable: equal probabilities keep node order
    return sorted(strong, key=lambda n: n.probability, reverse=True)


def _narrative(path: List[Node], edge_labels: Dict[Tuple[str, str], Optional[str]]) -> str:
    text = f'The scenario begins with the central concept of "{path[0].label}".'
    for source, target in zip(path, path[1:]):
        label = edge_labels.get((source.id, target.id))
        relationship = f' as a "{label}"' if label else ""
        text += f' This leads to "{target.label}"{relationship}.'
    return text


def analyze_diagram(
    nodes: Tuple[Node, ...],
    edges: Tuple[Edge, ...],
    title: str,
    generated_at: Optional[datetime] = None,
) -> ReportData:
    """
    Build the report for a wheel.

    Raises ValidationError when the central (tier-0) node is missing.
    """
    nodes = tuple(nodes)
    edges = tuple(edges)
    if Graph(nodes=nodes).root() is None:
        raise ValidationError("Central node not found for analysis", ErrorCode.ROOT_MISSING)

    topology = GraphTopology(nodes, edges)
    by_id = {n.id: n for n in nodes}
    edge_labels: Dict[Tuple[str, str], Optional[str]] = {}
    for edge in edges:
        edge_labels.setdefault((edge.source, edge.target), edge.label)

    outcomes = _key_outcomes(nodes)
    scenarios = []
    for outcome in outcomes:
        path = [by_id[i] for i in topology.path_to_root(outcome.id) if i in by_id]
        scenarios.append(Scenario(
            path=tuple(PathStep(node_id=n.id, label=n.label, tier=n.tier) for n in path),
            final_outcome_probability=outcome.probability,
            narrative=_narrative(path, edge_labels),
        ))

    summary = (
        f'This report analyzes the futures wheel for "{title}". '
        f"It identifies {len(outcomes)} key outcomes with a high probability "
        f"(average score >= {HIGH_PROBABILITY_THRESHOLD}). These outcomes form the basis of "
        f"{len(scenarios)} likely scenarios, tracing potential pathways from the central concept."
    )

    return ReportData(
        title=f"Futures Wheel Analysis: {title}",
        generated_at=generated_at or datetime.now(timezone.utc),
        summary=summary,
        key_outcomes=tuple(
            KeyOutcome(
                node_id=n.id,
                label=n.label,
                probability=n.probability,
                tier=n.tier,
                description=n.description,
            )
            for n in outcomes
        ),
        scenarios=tuple(scenarios),
    )
