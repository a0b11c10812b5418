"""Roll and outcome data structures.

This module defines the immutable values produced while resolving an action:

1. DieRoll (raw pips from the dice engine)
2. Tagged roll payloads (BlockDiceRoll, ArmourRoll, InjuryRoll, CasualtyRoll,
   ArgueTheCallRoll, ApothecaryOutcome) that carry only the fields relevant to
   their kind and travel through events into the action log.

Each structure is frozen once produced.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from .game_enums import (
    ArgueTheCallResult,
    BLOCK_FACE_NAMES,
    BlockFace,
    CASUALTY_RESULT_NAMES,
    CasualtyResult,
    DiceKind,
    INJURY_RESULT_NAMES,
    InjuryResult,
    LastingInjuryType,
)

# Highest pip value each kind of die can show
DIE_SIDES = {
    DiceKind.BLOCK: 6,
    DiceKind.PLAIN_D6: 6,
    DiceKind.TWO_D6: 6,
    DiceKind.CASUALTY_D16: 16,
}

# Number of dice each kind expects; block rolls use 1-3 dice
DIE_COUNTS = {
    DiceKind.PLAIN_D6: 1,
    DiceKind.TWO_D6: 2,
    DiceKind.CASUALTY_D16: 1,
}


@dataclass(frozen=True)
class DieRoll:
    """One or more pip values of a declared kind."""
    kind: DiceKind
    values: tuple[int, ...]

    def __post_init__(self):
        if not self.values:
            raise ValueError("A die roll needs at least one value")
        expected = DIE_COUNTS.get(self.kind)
        if expected is not None and len(self.values) != expected:
            raise ValueError(
                f"{self.kind.value} roll needs {expected} value(s), got {len(self.values)}"
            )
        sides = DIE_SIDES[self.kind]
        for value in self.values:
            if not 1 <= value <= sides:
                raise ValueError(f"{self.kind.value} pip value {value} outside 1-{sides}")

    @property
    def total(self) -> int:
        return sum(self.values)

    @property
    def is_double(self) -> bool:
        """True for a two-dice roll showing the same value twice."""
        return len(self.values) == 2 and self.values[0] == self.values[1]


@dataclass(frozen=True)
class RollModifiers:
    """Net modifier applied to a roll plus a description of each source."""
    total: int = 0
    descriptions: tuple[str, ...] = ()

    def format(self) -> str:
        """Signed modifier for display, empty when there is none."""
        if self.total == 0:
            return ""
        return f"{self.total:+d}"


@dataclass(frozen=True)
class LastingInjury:
    """A row of the lasting injury table."""
    injury_type: LastingInjuryType
    description: str
    stat: str


@dataclass(frozen=True)
class BlockDiceRoll:
    """Faces shown by the block dice."""
    kind: ClassVar[str] = "block"
    dice: DieRoll
    faces: tuple[BlockFace, ...]

    def describe(self) -> str:
        return "Rolled: " + ", ".join(BLOCK_FACE_NAMES[face] for face in self.faces)


@dataclass(frozen=True)
class ArmourRoll:
    """A 2d6 armour roll against the defender's armour value."""
    kind: ClassVar[str] = "armour"
    dice: DieRoll
    modifiers: RollModifiers
    armour_value: int
    effective_armour_value: int
    broken: bool

    @property
    def total(self) -> int:
        return self.dice.total + self.modifiers.total

    @property
    def natural_double(self) -> bool:
        return self.dice.is_double

    def describe(self) -> str:
        dice_text = " + ".join(str(v) for v in self.dice.values)
        modifier_text = f" {self.modifiers.format()}" if self.modifiers.total else ""
        verdict = "ARMOUR BROKEN!" if self.broken else "ARMOUR HOLDS"
        return (
            f"{dice_text}{modifier_text} = {self.total} vs AV "
            f"{self.effective_armour_value}+: {verdict}"
        )


@dataclass(frozen=True)
class InjuryRoll:
    """A 2d6 roll on the standard or stunty injury table."""
    kind: ClassVar[str] = "injury"
    dice: DieRoll
    modifiers: RollModifiers
    stunty: bool
    result: InjuryResult

    @property
    def total(self) -> int:
        return self.dice.total + self.modifiers.total

    @property
    def natural_double(self) -> bool:
        return self.dice.is_double

    def describe(self) -> str:
        dice_text = " + ".join(str(v) for v in self.dice.values)
        modifier_text = f" {self.modifiers.format()}" if self.modifiers.total else ""
        table = "Stunty" if self.stunty else "Standard"
        return f"{dice_text}{modifier_text} = {self.total} ({table}): {INJURY_RESULT_NAMES[self.result]}"


@dataclass(frozen=True)
class LastingInjuryRoll:
    """A d6 on the lasting injury table."""
    die: DieRoll
    injury: LastingInjury


@dataclass(frozen=True)
class CasualtyRoll:
    """A D16 roll on the casualty table."""
    kind: ClassVar[str] = "casualty"
    die: DieRoll
    modifiers: RollModifiers
    result: CasualtyResult
    lasting_injury: Optional[LastingInjuryRoll] = None

    @property
    def total(self) -> int:
        """Modified roll, capped at the top of the table."""
        return min(16, self.die.total + self.modifiers.total)

    def describe(self) -> str:
        modifier_text = f" {self.modifiers.format()}" if self.modifiers.total else ""
        text = f"D16 {self.die.total}{modifier_text} = {self.total}: {CASUALTY_RESULT_NAMES[self.result]}"
        if self.lasting_injury is not None:
            injury = self.lasting_injury.injury
            text += f" ({injury.injury_type.value}, {injury.description})"
        return text


@dataclass(frozen=True)
class ArgueTheCallRoll:
    """A d6 on the argue-the-call table after a foul send-off."""
    kind: ClassVar[str] = "argue-the-call"
    die: DieRoll
    result: ArgueTheCallResult
    description: str

    def describe(self) -> str:
        return f"Rolled {self.die.total}: {self.description}"


@dataclass(frozen=True)
class ApothecaryOutcome:
    """The coach's apothecary decision and, when used, the re-roll."""
    kind: ClassVar[str] = "apothecary"
    used: bool
    original: CasualtyResult
    reroll: Optional[CasualtyRoll] = None
    kept: Optional[CasualtyResult] = field(default=None)

    @property
    def final_result(self) -> CasualtyResult:
        return self.kept if self.kept is not None else self.original

    def describe(self) -> str:
        if not self.used or self.reroll is None:
            return f"Apothecary not used: {CASUALTY_RESULT_NAMES[self.original]} stands"
        return (
            f"Apothecary re-rolled {CASUALTY_RESULT_NAMES[self.reroll.result]}; "
            f"keeping {CASUALTY_RESULT_NAMES[self.final_result]}"
        )


RollPayload = Union[
    BlockDiceRoll,
    ArmourRoll,
    InjuryRoll,
    CasualtyRoll,
    ArgueTheCallRoll,
    ApothecaryOutcome,
]
