"""Event-driven managers for phases, statistics and logging."""

from .log_manager import ActionLogEntry, LogCategory, LogLevel, LogManager
from .phase_manager import PhaseManager, PhaseTransitionRule
from .statistics_manager import (
    BlockFaceStat,
    RollStatistics,
    StatisticsManager,
    THEORETICAL_BLOCK_PERCENTAGES,
    deviation,
)

__all__ = [
    "ActionLogEntry",
    "LogCategory",
    "LogLevel",
    "LogManager",
    "PhaseManager",
    "PhaseTransitionRule",
    "BlockFaceStat",
    "RollStatistics",
    "StatisticsManager",
    "THEORETICAL_BLOCK_PERCENTAGES",
    "deviation",
]
