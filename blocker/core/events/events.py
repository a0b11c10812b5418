"""Event-driven engine events.

This module defines all events that managers can subscribe to.

Event Design Principles:
- Events are immutable dataclasses with rich object payloads
- All events carry the number of the action they belong to (0 before the first)
- Roll events carry the tagged roll payload instead of loose primitive fields
- Events use proper enums instead of magic strings
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

from ..data import (
    ActionType,
    ApothecaryOutcome,
    ArgueTheCallRoll,
    ArmourRoll,
    BlockDiceRoll,
    BlockFace,
    CasualtyRoll,
    InjuryRoll,
)

if TYPE_CHECKING:
    from ...game.managers.log_manager import ActionLogEntry
    from ...game.skills import Skills
    from ..engine.game_state import Phase


class EventType(Enum):
    """Types of engine events that managers can subscribe to."""
    # Session Events
    SESSION_STARTED = auto()

    # Action Flow Events
    ACTION_SELECTED = auto()
    DICE_COUNT_SELECTED = auto()
    BLOCK_DICE_ROLLED = auto()
    RESULT_SELECTED = auto()
    ARMOUR_VALUE_SET = auto()
    ARMOUR_ROLLED = auto()
    INJURY_ROLLED = auto()
    CASUALTY_ROLLED = auto()
    APOTHECARY_CHOSEN = auto()
    ARGUE_THE_CALL_ROLLED = auto()
    ACTION_COMPLETED = auto()
    ACTION_ABANDONED = auto()

    # State Events
    PHASE_CHANGED = auto()
    STATISTICS_UPDATED = auto()
    STATISTICS_RESET = auto()

    # Logging Events
    LOG_MESSAGE = auto()
    ACTION_LOGGED = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all engine events."""
    action_number: int
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class SessionStarted(GameEvent):
    """Event emitted when a seed word starts (or restarts) a session."""
    seed_text: str

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.SESSION_STARTED)


@dataclass(frozen=True)
class ActionSelected(GameEvent):
    """Event emitted when the coach picks a block or a foul."""
    action_type: ActionType

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ACTION_SELECTED)


@dataclass(frozen=True)
class DiceCountSelected(GameEvent):
    """Event emitted when the number of block dice is chosen."""
    count: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.DICE_COUNT_SELECTED)


@dataclass(frozen=True)
class BlockDiceRolled(GameEvent):
    """Event emitted after the block dice are rolled."""
    roll: BlockDiceRoll

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.BLOCK_DICE_ROLLED)


@dataclass(frozen=True)
class ResultSelected(GameEvent):
    """Event emitted when the coach commits to a block face."""
    chosen_face: BlockFace
    resolved_face: BlockFace
    skills: "Skills"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.RESULT_SELECTED)


@dataclass(frozen=True)
class ArmourValueSet(GameEvent):
    """Event emitted when the defender's armour value is entered."""
    armour_value: int
    stunty: bool

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ARMOUR_VALUE_SET)


@dataclass(frozen=True)
class ArmourRolled(GameEvent):
    """Event emitted after an armour roll."""
    roll: ArmourRoll

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ARMOUR_ROLLED)


@dataclass(frozen=True)
class InjuryRolled(GameEvent):
    """Event emitted after an injury roll."""
    roll: InjuryRoll

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.INJURY_ROLLED)


@dataclass(frozen=True)
class CasualtyRolled(GameEvent):
    """Event emitted after a casualty roll (including an apothecary re-roll)."""
    roll: CasualtyRoll
    is_reroll: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CASUALTY_ROLLED)


@dataclass(frozen=True)
class ApothecaryChosen(GameEvent):
    """Event emitted once the apothecary decision is made."""
    outcome: ApothecaryOutcome

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.APOTHECARY_CHOSEN)


@dataclass(frozen=True)
class ArgueTheCallRolled(GameEvent):
    """Event emitted after the coach argues a foul send-off."""
    roll: ArgueTheCallRoll

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ARGUE_THE_CALL_ROLLED)


@dataclass(frozen=True)
class ActionCompleted(GameEvent):
    """Event emitted when a finished action is cleared for the next one."""
    action_type: ActionType

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ACTION_COMPLETED)


@dataclass(frozen=True)
class ActionAbandoned(GameEvent):
    """Event emitted when the current action is cancelled part-way."""
    action_type: Optional[ActionType]
    phase: "Phase"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ACTION_ABANDONED)


@dataclass(frozen=True)
class PhaseChanged(GameEvent):
    """Event emitted when the phase changes."""
    old_phase: "Phase"
    new_phase: "Phase"
    reason: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.PHASE_CHANGED)


@dataclass(frozen=True)
class StatisticsUpdated(GameEvent):
    """Event emitted after the statistics record changes."""
    total_rolls: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.STATISTICS_UPDATED)


@dataclass(frozen=True)
class StatisticsReset(GameEvent):
    """Event requesting that all statistics be zeroed."""

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.STATISTICS_RESET)


@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event for diagnostic log messages."""
    message: str
    category: str
    level: str = "INFO"
    source: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)


@dataclass(frozen=True)
class ActionLogged(GameEvent):
    """Event carrying a new entry for the player-facing action log."""
    entry: "ActionLogEntry"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ACTION_LOGGED)
