"""
Dice engine producing typed rolls from the seeded random source.

The engine is the session's holder of the current ``SeedState``: every roll
threads the state through ``roll_die`` and keeps the advanced state, so a
"re-roll" is always the next draw in the sequence, never a replay.
"""
from typing import Optional

from ..core.data import BlockDiceRoll, BlockFace, DiceKind, DieRoll
from ..core.errors import InvalidDiceCount, NotInitialized
from ..core.random_source import SeedState, init_seed, roll_die

# d6 pip value -> block face; push appears on two sides
BLOCK_DICE_FACES: dict[int, BlockFace] = {
    1: BlockFace.SKULL,
    2: BlockFace.BOTH_DOWN,
    3: BlockFace.POW,
    4: BlockFace.STUMBLE,
    5: BlockFace.PUSH,
    6: BlockFace.PUSH,
}

VALID_BLOCK_DICE_COUNTS = (1, 2, 3)


def validate_dice_count(count: int) -> None:
    """Raise InvalidDiceCount unless count is 1, 2 or 3."""
    if isinstance(count, bool) or count not in VALID_BLOCK_DICE_COUNTS:
        raise InvalidDiceCount(count)


class DiceEngine:
    """Rolls block dice, d6, 2d6 and the casualty D16."""

    def __init__(self, state: Optional[SeedState] = None):
        self._state = state

    @property
    def state(self) -> Optional[SeedState]:
        """Current generator state, None until seeded."""
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    def seed(self, seed_text: str) -> SeedState:
        """Replace the generator state with one derived from a seed word."""
        self._state = init_seed(seed_text)
        return self._state

    def restore(self, state: SeedState) -> None:
        """Continue rolling from a previously captured state."""
        self._state = state

    def _roll(self, sides: int) -> int:
        if self._state is None:
            raise NotInitialized()
        value, self._state = roll_die(self._state, sides)
        return value

    def _roll_many(self, count: int, sides: int) -> tuple[int, ...]:
        if self._state is None:
            raise NotInitialized()
        values = []
        state = self._state
        for _ in range(count):
            value, state = roll_die(state, sides)
            values.append(value)
        self._state = state
        return tuple(values)

    def roll_block_dice(self, count: int) -> BlockDiceRoll:
        """Roll ``count`` block dice.

        Raises:
            InvalidDiceCount: If count is not 1, 2 or 3 (nothing is drawn)
            NotInitialized: If no seed word has been set
        """
        validate_dice_count(count)
        values = self._roll_many(count, 6)
        return BlockDiceRoll(
            dice=DieRoll(kind=DiceKind.BLOCK, values=values),
            faces=tuple(BLOCK_DICE_FACES[value] for value in values),
        )

    def roll_d6(self) -> DieRoll:
        """Roll a single d6 (lasting injury, argue the call)."""
        return DieRoll(kind=DiceKind.PLAIN_D6, values=(self._roll(6),))

    def roll_two_d6(self) -> DieRoll:
        """Roll two independent d6 (armour and injury)."""
        return DieRoll(kind=DiceKind.TWO_D6, values=self._roll_many(2, 6))

    def roll_casualty(self) -> DieRoll:
        """Roll a uniform D16 for the casualty table."""
        return DieRoll(kind=DiceKind.CASUALTY_D16, values=(self._roll(16),))
