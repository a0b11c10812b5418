"""
Seeded random source for reproducible dice.

The generator is a Lehmer (minimal standard) linear congruential generator
keyed by a seed word. State is an explicit immutable ``SeedState`` value:
every draw takes the current state and returns the drawn value together with
the next state, so identical seed words always reproduce identical sequences.

This is for game-flavour reproducibility only, not security.
"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import InvalidSeedText, NotInitialized

MULTIPLIER = 16807
MODULUS = 2147483647  # 2**31 - 1

_INT32_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    """Truncate an integer to a signed 32-bit value."""
    value &= _INT32_MASK
    return value - 0x100000000 if value & 0x80000000 else value


def string_to_seed(text: str) -> int:
    """Hash a seed word into a non-negative integer seed.

    Rolling polynomial hash over code points (``hash * 31 + code``),
    truncated to signed 32 bits after every character, then made absolute.
    """
    hash_value = 0
    for char in text:
        hash_value = _to_int32(hash_value * 31 + ord(char))
    return abs(hash_value)


@dataclass(frozen=True)
class SeedState:
    """Current generator seed. Replaced, never mutated, by each draw."""
    seed: int
    seed_text: str = ""

    def __post_init__(self):
        if not 0 < self.seed < MODULUS:
            raise ValueError(f"Seed must be in 1..{MODULUS - 1}, got {self.seed}")


def init_seed(seed_text: str) -> SeedState:
    """Create the generator state for a seed word.

    Raises:
        InvalidSeedText: If the seed word is empty or whitespace only
    """
    if not seed_text or not seed_text.strip():
        raise InvalidSeedText("Seed word must not be empty")
    # A seed of 0 mod M would make every draw 0
    seed = string_to_seed(seed_text) % MODULUS or 1
    return SeedState(seed=seed, seed_text=seed_text)


def draw(state: Optional[SeedState]) -> tuple[float, SeedState]:
    """Draw a float in [0, 1) and return it with the advanced state."""
    if state is None:
        raise NotInitialized()
    next_seed = (state.seed * MULTIPLIER) % MODULUS
    return next_seed / MODULUS, SeedState(seed=next_seed, seed_text=state.seed_text)


def roll_die(state: Optional[SeedState], sides: int) -> tuple[int, SeedState]:
    """Roll a die with the given number of sides (1..sides)."""
    if sides < 1:
        raise ValueError(f"A die needs at least one side, got {sides}")
    value, next_state = draw(state)
    return int(value * sides) + 1, next_state


def generate_seed_words(words: Sequence[str], count: int = 3) -> list[str]:
    """Suggest distinct seed words for a new session.

    Uses the process-wide random module: suggestions only pick which word the
    coach may choose, they never feed a roll.
    """
    count = max(0, min(count, len(set(words))))
    return random.sample(sorted(set(words)), count)
