"""
Static rule tables converting roll totals into game outcomes.

Covers the armour check, the standard and stunty injury tables, the casualty
table, the lasting injury table and the argue-the-call table used after a foul
send-off. All functions are pure lookups.
"""
from ..core.data import (
    ArgueTheCallResult,
    CasualtyResult,
    InjuryResult,
    LastingInjury,
    LastingInjuryType,
)
from ..core.errors import InvalidArmourValue

MIN_ARMOUR_VALUE = 1
MAX_ARMOUR_VALUE = 12

CASUALTY_TABLE: dict[int, CasualtyResult] = {
    **{roll: CasualtyResult.BADLY_HURT for roll in range(1, 7)},
    **{roll: CasualtyResult.MISS_NEXT_GAME for roll in range(7, 10)},
    **{roll: CasualtyResult.NIGGLING_INJURY for roll in range(10, 13)},
    13: CasualtyResult.LASTING_INJURY,
    14: CasualtyResult.LASTING_INJURY,
    15: CasualtyResult.DEAD,
    16: CasualtyResult.DEAD,
}

# Lower is less severe; used to keep the better result after an apothecary re-roll
CASUALTY_SEVERITY: dict[CasualtyResult, int] = {
    CasualtyResult.BADLY_HURT: 0,
    CasualtyResult.MISS_NEXT_GAME: 1,
    CasualtyResult.NIGGLING_INJURY: 2,
    CasualtyResult.LASTING_INJURY: 3,
    CasualtyResult.DEAD: 4,
}

_HEAD_INJURY = LastingInjury(LastingInjuryType.HEAD_INJURY, "-1 AV", "av")

LASTING_INJURY_TABLE: dict[int, LastingInjury] = {
    1: _HEAD_INJURY,
    2: _HEAD_INJURY,
    3: LastingInjury(LastingInjuryType.SMASHED_KNEE, "-1 MA", "ma"),
    4: LastingInjury(LastingInjuryType.BROKEN_ARM, "-1 PA", "pa"),
    5: LastingInjury(LastingInjuryType.NECK_INJURY, "-1 AG", "ag"),
    6: LastingInjury(LastingInjuryType.DISLOCATED_SHOULDER, "-1 ST", "st"),
}

_EJECTED = (
    ArgueTheCallResult.EJECTED,
    '"You\'re Outta Here!" The referee is so enraged that the coach is ejected along with the player.',
)
_IGNORED = (
    ArgueTheCallResult.IGNORED,
    '"I Don\'t Care!" The referee is not interested in your argument.',
)
_SWAYED = (
    ArgueTheCallResult.SWAYED,
    '"Well, When You Put It Like That.." The referee is swayed by your argument.',
)

ARGUE_THE_CALL_TABLE: dict[int, tuple[ArgueTheCallResult, str]] = {
    1: _EJECTED,
    2: _IGNORED,
    3: _IGNORED,
    4: _IGNORED,
    5: _IGNORED,
    6: _SWAYED,
}


def validate_armour_value(armour_value: int) -> None:
    """Raise InvalidArmourValue unless 1 <= armour_value <= 12."""
    if (
        isinstance(armour_value, bool)
        or not isinstance(armour_value, int)
        or not MIN_ARMOUR_VALUE <= armour_value <= MAX_ARMOUR_VALUE
    ):
        raise InvalidArmourValue(armour_value)


def effective_armour_value(armour_value: int, thick_skull: bool = False) -> int:
    """Armour value the roll must meet, raised by one for Thick Skull."""
    validate_armour_value(armour_value)
    return armour_value + 1 if thick_skull else armour_value


def armour_broken(total: int, armour_value: int, thick_skull: bool = False) -> bool:
    """Check a modified 2d6 total against the defender's armour."""
    return total >= effective_armour_value(armour_value, thick_skull)


def injury_result(total: int, stunty: bool = False) -> InjuryResult:
    """Look up a modified 2d6 total on the standard or stunty injury table."""
    if stunty:
        if total <= 6:
            return InjuryResult.STUNNED
        if total <= 8:
            return InjuryResult.KO
        if total == 9:
            return InjuryResult.BADLY_HURT
        return InjuryResult.CASUALTY

    if total <= 7:
        return InjuryResult.STUNNED
    if total <= 9:
        return InjuryResult.KO
    return InjuryResult.CASUALTY


def clamp_casualty_roll(total: int) -> int:
    """Keep a modified casualty roll on the 1-16 table."""
    return max(1, min(16, total))


def casualty_result(total: int) -> CasualtyResult:
    """Look up a modified D16 total on the casualty table (capped at 16)."""
    return CASUALTY_TABLE[clamp_casualty_roll(total)]


def casualty_severity(result: CasualtyResult) -> int:
    return CASUALTY_SEVERITY[result]


def less_severe(first: CasualtyResult, second: CasualtyResult) -> CasualtyResult:
    """The milder of two casualty results; ties keep the first."""
    return second if casualty_severity(second) < casualty_severity(first) else first


def lasting_injury(roll: int) -> LastingInjury:
    """Look up a d6 on the lasting injury table."""
    if roll not in LASTING_INJURY_TABLE:
        raise ValueError(f"Lasting injury roll must be 1-6, got {roll}")
    return LASTING_INJURY_TABLE[roll]


def argue_the_call(roll: int) -> tuple[ArgueTheCallResult, str]:
    """Look up a d6 on the argue-the-call table."""
    if roll not in ARGUE_THE_CALL_TABLE:
        raise ValueError(f"Argue the call roll must be 1-6, got {roll}")
    return ARGUE_THE_CALL_TABLE[roll]


def is_natural_double(first: int, second: int) -> bool:
    """Natural doubles on a foul's armour or injury roll get the fouler sent off."""
    return first == second
