"""
Observability & Audit
=====================

RESPONSIBILITY: logging setup and an append-only record of session mutations.

WHAT THIS LAYER MUST NOT DO:
============================
- Modify session behavior
- Filter or interpret records (only record them)
- Hold references to mutable session state

Records are plain frozen values; collectors only append.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("futures_wheel").setLevel(level)


@dataclass(frozen=True)
class MutationRecord:
    """One applied (or rejected) session operation."""
    sequence: int
    operation: str
    target_id: Optional[str]
    applied: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    detail: str = ""


class AuditCollector:
    """
    Append-only mutation log with per-operation counters.

    One collector per session.
    """

    def __init__(self, name: str = "session"):
        self._name = name
        self._records: List[MutationRecord] = []
        self._counts: Counter = Counter()

    def record(
        self,
        operation: str,
        target_id: Optional[str] = None,
        applied: bool = True,
        detail: str = "",
    ) -> MutationRecord:
        entry = MutationRecord(
            sequence=len(self._records) + 1,
            operation=operation,
            target_id=target_id,
            applied=applied,
            detail=detail,
        )
        self._records.append(entry)
        self._counts[(operation, applied)] += 1
        return entry

    def get_records(self, operation: Optional[str] = None) -> List[MutationRecord]:
        if operation is None:
            return list(self._records)
        return [r for r in self._records if r.operation == operation]

    def counts(self) -> Dict[str, int]:
        """Applied operations by name."""
        return {op: n for (op, applied), n in self._counts.items() if applied}

    def rejected_counts(self) -> Dict[str, int]:
        return {op: n for (op, applied), n in self._counts.items() if not applied}

    @property
    def name(self) -> str:
        return self._name

    @property
    def record_count(self) -> int:
        return len(self._records)


__all__ = [
    'configure_logging',
    'MutationRecord',
    'AuditCollector',
]
