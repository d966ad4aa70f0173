"""
Analysis Layer

Read-only reports over a diagram.
"""

from .report import (
    analyze_diagram, ReportData, KeyOutcome, Scenario, PathStep,
    HIGH_PROBABILITY_THRESHOLD,
)

__all__ = [
    'analyze_diagram',
    'ReportData',
    'KeyOutcome',
    'Scenario',
    'PathStep',
    'HIGH_PROBABILITY_THRESHOLD',
]
