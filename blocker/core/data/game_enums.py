"""Centralized game enums and constants.

This module contains all core enums that are used across multiple modules,
eliminating duplication and providing a single source of truth. Enum values
are the stable string identifiers used in the action log and in persisted
statistics.
"""

from enum import Enum


class ActionType(Enum):
    """Combat actions the engine resolves."""
    BLOCK = "block"
    FOUL = "foul"


class BlockFace(Enum):
    """Faces of a block die. Push occupies two of the six sides."""
    SKULL = "skull"          # Attacker down
    BOTH_DOWN = "both-down"
    POW = "pow"              # Defender down
    STUMBLE = "stumble"
    PUSH = "push"


class DiceKind(Enum):
    """Kinds of physical roll a DieRoll can represent."""
    BLOCK = "block"
    PLAIN_D6 = "plain-d6"
    TWO_D6 = "two-d6"
    CASUALTY_D16 = "casualty-d16"


class InjuryResult(Enum):
    """Outcomes of the injury table."""
    STUNNED = "stunned"
    KO = "ko"
    BADLY_HURT = "badly-hurt"  # Stunty table only
    CASUALTY = "casualty"


class CasualtyResult(Enum):
    """Outcomes of the casualty table."""
    BADLY_HURT = "badly-hurt"
    MISS_NEXT_GAME = "miss-next-game"
    NIGGLING_INJURY = "niggling-injury"
    LASTING_INJURY = "lasting-injury"
    DEAD = "dead"


class LastingInjuryType(Enum):
    """Characteristic reductions from the lasting injury table."""
    HEAD_INJURY = "head-injury"
    SMASHED_KNEE = "smashed-knee"
    BROKEN_ARM = "broken-arm"
    NECK_INJURY = "neck-injury"
    DISLOCATED_SHOULDER = "dislocated-shoulder"


class ArgueTheCallResult(Enum):
    """Referee responses when a coach argues a send-off."""
    EJECTED = "ejected"
    IGNORED = "ignored"
    SWAYED = "swayed"


class SkillSide(Enum):
    """Which player in the action owns a skill."""
    ATTACKER = "attacker"
    DEFENDER = "defender"


class Skill(Enum):
    """Skills with a modelled effect on block or injury resolution."""
    BLOCK = "Block"
    WRESTLE = "Wrestle"
    DODGE = "Dodge"
    THICK_SKULL = "Thick Skull"
    MIGHTY_BLOW = "Mighty Blow"
    PILING_ON = "Piling On"
    DECAY = "Decay"


class Deviation(Enum):
    """How far an observed percentage sits from its theoretical value."""
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


# Display names and icons used by the action log
ACTION_TYPE_NAMES = {
    ActionType.BLOCK: "Block",
    ActionType.FOUL: "Foul",
}

ACTION_TYPE_ICONS = {
    ActionType.BLOCK: "🏈",
    ActionType.FOUL: "⚡",
}

BLOCK_FACE_NAMES = {
    BlockFace.SKULL: "Attacker Down",
    BlockFace.BOTH_DOWN: "Both Down",
    BlockFace.POW: "Defender Down",
    BlockFace.STUMBLE: "Stumble",
    BlockFace.PUSH: "Push",
}

BLOCK_FACE_DESCRIPTIONS = {
    BlockFace.SKULL: "The attacker is knocked down",
    BlockFace.BOTH_DOWN: "Both players are knocked down",
    BlockFace.POW: "The defender is knocked down",
    BlockFace.STUMBLE: "The defender stumbles (can be modified by Dodge)",
    BlockFace.PUSH: "The defender is pushed back",
}

BLOCK_FACE_EMOJIS = {
    BlockFace.SKULL: "💀",
    BlockFace.BOTH_DOWN: "⚔️",
    BlockFace.POW: "💥",
    BlockFace.STUMBLE: "❗",
    BlockFace.PUSH: "↗️",
}

INJURY_RESULT_NAMES = {
    InjuryResult.STUNNED: "Stunned",
    InjuryResult.KO: "KO'd",
    InjuryResult.BADLY_HURT: "Badly Hurt",
    InjuryResult.CASUALTY: "Casualty!",
}

CASUALTY_RESULT_NAMES = {
    CasualtyResult.BADLY_HURT: "Badly Hurt",
    CasualtyResult.MISS_NEXT_GAME: "Miss Next Game",
    CasualtyResult.NIGGLING_INJURY: "Niggling Injury",
    CasualtyResult.LASTING_INJURY: "Lasting Injury",
    CasualtyResult.DEAD: "DEAD",
}

CASUALTY_RESULT_EFFECTS = {
    CasualtyResult.BADLY_HURT: "Player misses the rest of this game only",
    CasualtyResult.MISS_NEXT_GAME: "Player misses this game and the next game",
    CasualtyResult.NIGGLING_INJURY: "Player gets +1 to future casualty rolls and misses next game",
    CasualtyResult.LASTING_INJURY: "Player suffers permanent stat reduction and misses next game",
    CasualtyResult.DEAD: "Player is removed from the team permanently",
}
