"""Core data structures and definitions.

This package contains fundamental data types and game definitions:
- data_structures.py: DieRoll and the tagged roll payloads
- game_enums.py: Centralized enums for faces, results, skills and display names
"""

from .data_structures import (
    ApothecaryOutcome,
    ArgueTheCallRoll,
    ArmourRoll,
    BlockDiceRoll,
    CasualtyRoll,
    DieRoll,
    InjuryRoll,
    LastingInjury,
    LastingInjuryRoll,
    RollModifiers,
    RollPayload,
)
from .game_enums import (
    ACTION_TYPE_ICONS,
    ACTION_TYPE_NAMES,
    ActionType,
    ArgueTheCallResult,
    BLOCK_FACE_DESCRIPTIONS,
    BLOCK_FACE_EMOJIS,
    BLOCK_FACE_NAMES,
    BlockFace,
    CASUALTY_RESULT_EFFECTS,
    CASUALTY_RESULT_NAMES,
    CasualtyResult,
    Deviation,
    DiceKind,
    INJURY_RESULT_NAMES,
    InjuryResult,
    LastingInjuryType,
    Skill,
    SkillSide,
)

__all__ = [
    "ApothecaryOutcome",
    "ArgueTheCallRoll",
    "ArmourRoll",
    "BlockDiceRoll",
    "CasualtyRoll",
    "DieRoll",
    "InjuryRoll",
    "LastingInjury",
    "LastingInjuryRoll",
    "RollModifiers",
    "RollPayload",
    "ACTION_TYPE_ICONS",
    "ACTION_TYPE_NAMES",
    "ActionType",
    "ArgueTheCallResult",
    "BLOCK_FACE_DESCRIPTIONS",
    "BLOCK_FACE_EMOJIS",
    "BLOCK_FACE_NAMES",
    "BlockFace",
    "CASUALTY_RESULT_EFFECTS",
    "CASUALTY_RESULT_NAMES",
    "CasualtyResult",
    "Deviation",
    "DiceKind",
    "INJURY_RESULT_NAMES",
    "InjuryResult",
    "LastingInjuryType",
    "Skill",
    "SkillSide",
]
