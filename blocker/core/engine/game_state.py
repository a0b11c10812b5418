"""Session game state with a focused action record.

This module defines the :class:`Phase` enum, the per-action
:class:`ActionRecord` and the top-level :class:`GameState` that the managers
share. The state is mutated in place by the single thread driving the session;
the action record is discarded when its action completes or is abandoned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..data import (
    ActionType,
    ApothecaryOutcome,
    ArgueTheCallResult,
    ArgueTheCallRoll,
    ArmourRoll,
    BlockFace,
    CasualtyRoll,
    InjuryRoll,
)


class Phase(Enum):
    """Phases of a block or foul action."""

    GAME_START = "game-start"        # Before a seed word has been chosen
    ACTION_SELECT = "action-select"
    DICE_SELECT = "dice-select"
    DICE_ROLL = "dice-roll"
    RESULT_SELECT = "result-select"
    ARMOUR_VALUE = "armour-value"
    ARMOUR_ROLL = "armour-roll"
    INJURY_ROLL = "injury-roll"
    CASUALTY_ROLL = "casualty-roll"
    APOTHECARY = "apothecary"
    COMPLETE = "complete"


# Full phase order per action type; bracketed phases in the rules are skipped
# when armour holds or the injury is not a casualty.
PHASE_SEQUENCES: dict[ActionType, tuple[Phase, ...]] = {
    ActionType.BLOCK: (
        Phase.ACTION_SELECT,
        Phase.DICE_SELECT,
        Phase.DICE_ROLL,
        Phase.RESULT_SELECT,
        Phase.ARMOUR_VALUE,
        Phase.ARMOUR_ROLL,
        Phase.INJURY_ROLL,
        Phase.CASUALTY_ROLL,
        Phase.APOTHECARY,
        Phase.COMPLETE,
    ),
    ActionType.FOUL: (
        Phase.ACTION_SELECT,
        Phase.ARMOUR_VALUE,
        Phase.ARMOUR_ROLL,
        Phase.INJURY_ROLL,
        Phase.CASUALTY_ROLL,
        Phase.APOTHECARY,
        Phase.COMPLETE,
    ),
}

PHASE_ICONS = {
    Phase.GAME_START: "🎮",
    Phase.ACTION_SELECT: "⚔️",
    Phase.DICE_SELECT: "🎯",
    Phase.DICE_ROLL: "🎲",
    Phase.RESULT_SELECT: "👆",
    Phase.ARMOUR_VALUE: "🛡️",
    Phase.ARMOUR_ROLL: "🎲",
    Phase.INJURY_ROLL: "🩸",
    Phase.CASUALTY_ROLL: "💀",
    Phase.APOTHECARY: "⚕️",
    Phase.COMPLETE: "✅",
}


@dataclass
class ActionRecord:
    """Choices and results accumulated by the action in progress."""

    action_type: ActionType
    number: int
    dice_count: Optional[int] = None
    block_faces: tuple[BlockFace, ...] = ()
    chosen_face: Optional[BlockFace] = None
    resolved_face: Optional[BlockFace] = None
    armour_value: Optional[int] = None
    stunty: bool = False
    armour_roll: Optional[ArmourRoll] = None
    injury_roll: Optional[InjuryRoll] = None
    casualty_roll: Optional[CasualtyRoll] = None
    apothecary: Optional[ApothecaryOutcome] = None
    niggling_injuries: int = 0
    piling_on_roll: Optional[Phase] = None  # Roll that spent Piling On
    sent_off: bool = False
    argue_the_call: Optional[ArgueTheCallRoll] = None

    # Phases entered during this action, oldest first
    phase_history: list[Phase] = field(default_factory=list)

    @property
    def armour_broken(self) -> bool:
        return self.armour_roll is not None and self.armour_roll.broken

    @property
    def send_off_stands(self) -> bool:
        """True when a send-off was called and not overturned by arguing."""
        if not self.sent_off:
            return False
        return self.argue_the_call is None or self.argue_the_call.result != ArgueTheCallResult.SWAYED


@dataclass
class GameState:
    """Central state shared by the managers for one session."""

    phase: Phase = Phase.GAME_START
    seed_text: Optional[str] = None
    action: Optional[ActionRecord] = None
    actions_started: int = 0
    apothecary_used: bool = False

    @property
    def action_number(self) -> int:
        """Number of the action in progress (or the last one started)."""
        return self.actions_started

    @property
    def action_type(self) -> Optional[ActionType]:
        return self.action.action_type if self.action else None

    def start_action(self, action_type: ActionType) -> ActionRecord:
        """Open a fresh action record."""
        self.actions_started += 1
        self.action = ActionRecord(action_type=action_type, number=self.actions_started)
        return self.action

    def clear_action(self) -> None:
        """Discard the current action record."""
        self.action = None
