"""
Configuration
=============

Dataclass configuration for a diagram session and its collaborators.
Nested sections default in __post_init__; from_env() reads FW_* overrides.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os

from .layout import LayoutStrategy, TreeLayoutConfig
from .temporal.history import DEFAULT_MAX_DEPTH


@dataclass
class LayoutConfig:
    """Layout strategy and tidy-tree box geometry."""
    strategy: LayoutStrategy = LayoutStrategy.TREE
    node_width: float = 160.0
    node_height: float = 60.0
    horizontal_gap: float = 40.0
    vertical_gap: float = 90.0

    def tree_config(self) -> TreeLayoutConfig:
        return TreeLayoutConfig(
            node_width=self.node_width,
            node_height=self.node_height,
            horizontal_gap=self.horizontal_gap,
            vertical_gap=self.vertical_gap,
        )


@dataclass
class HistoryConfig:
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class RefreshConfig:
    """Remote API location and polling cadence."""
    base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 5.0
    timeout_seconds: float = 10.0


@dataclass
class SessionConfig:
    """Unified configuration for a diagram session."""
    layout: LayoutConfig = None
    history: HistoryConfig = None
    refresh: RefreshConfig = None
    strict_structure: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        self.layout = self.layout or LayoutConfig()
        self.history = self.history or HistoryConfig()
        self.refresh = self.refresh or RefreshConfig()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> SessionConfig:
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("FW_LAYOUT"):
            config.layout.strategy = LayoutStrategy(env["FW_LAYOUT"].lower())
        if env.get("FW_HISTORY_DEPTH"):
            config.history.max_depth = int(env["FW_HISTORY_DEPTH"])
        if env.get("FW_API_BASE_URL"):
            config.refresh.base_url = env["FW_API_BASE_URL"]
        if env.get("FW_POLL_INTERVAL"):
            config.refresh.poll_interval_seconds = float(env["FW_POLL_INTERVAL"])
        if env.get("FW_LOG_LEVEL"):
            config.log_level = env["FW_LOG_LEVEL"].upper()
        if env.get("FW_STRICT_STRUCTURE"):
            config.strict_structure = env["FW_STRICT_STRUCTURE"].lower() in ("1", "true", "yes")

        return config
