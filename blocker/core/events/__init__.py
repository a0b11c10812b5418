"""Event system for publisher-subscriber communication.

This package contains the complete event-driven architecture:
- event_manager.py: Publisher-subscriber event routing and coordination
- events.py: Event definitions for inter-system communication
"""

from .event_manager import EventManager
from .events import (
    ActionAbandoned,
    ActionCompleted,
    ActionLogged,
    ActionSelected,
    ApothecaryChosen,
    ArgueTheCallRolled,
    ArmourRolled,
    ArmourValueSet,
    BlockDiceRolled,
    CasualtyRolled,
    DiceCountSelected,
    EventType,
    GameEvent,
    InjuryRolled,
    LogMessage,
    PhaseChanged,
    ResultSelected,
    SessionStarted,
    StatisticsReset,
    StatisticsUpdated,
)

__all__ = [
    "EventManager",
    "ActionAbandoned",
    "ActionCompleted",
    "ActionLogged",
    "ActionSelected",
    "ApothecaryChosen",
    "ArgueTheCallRolled",
    "ArmourRolled",
    "ArmourValueSet",
    "BlockDiceRolled",
    "CasualtyRolled",
    "DiceCountSelected",
    "EventType",
    "GameEvent",
    "InjuryRolled",
    "LogMessage",
    "PhaseChanged",
    "ResultSelected",
    "SessionStarted",
    "StatisticsReset",
    "StatisticsUpdated",
]
