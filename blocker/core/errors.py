"""
Error taxonomy for the resolution engine.

Every error here is local and recoverable: an operation that raises one of
these leaves the seed, the active action record and the statistics exactly as
they were before the call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .data.game_enums import BlockFace
    from .engine.game_state import Phase


class BlockerError(Exception):
    """Base class for all resolution engine errors."""


class NotInitialized(BlockerError):
    """A random draw was requested before a seed word was chosen."""

    def __init__(self, message: str = "Random generator not initialized. Start a session with a seed word first."):
        super().__init__(message)


class InvalidSeedText(BlockerError, ValueError):
    """The seed word is empty or whitespace only."""


class InvalidArmourValue(BlockerError, ValueError):
    """Armour value outside the 1-12 range."""

    def __init__(self, armour_value: object):
        self.armour_value = armour_value
        super().__init__(f"Armour value must be between 1 and 12, got {armour_value!r}")


class InvalidDiceCount(BlockerError, ValueError):
    """Block dice count outside {1, 2, 3}."""

    def __init__(self, count: object):
        self.count = count
        super().__init__(f"Block dice count must be 1, 2 or 3, got {count!r}")


class InvalidResultSelection(BlockerError, ValueError):
    """The chosen block face is not among the rolled faces."""

    def __init__(self, face: "BlockFace", rolled: Iterable["BlockFace"]):
        self.face = face
        self.rolled = tuple(rolled)
        rolled_names = ", ".join(f.value for f in self.rolled) or "nothing"
        super().__init__(f"Cannot select {face.value}: rolled {rolled_names}")


class IllegalPhaseTransition(BlockerError):
    """An operation was requested that the current phase does not accept."""

    def __init__(self, phase: "Phase", operation: str, reason: Optional[str] = None):
        self.phase = phase
        self.operation = operation
        message = f"Cannot {operation} during {phase.value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConflictingSkillTransform(BlockerError):
    """More than one skill wants to transform the same rolled face."""

    def __init__(self, face: "BlockFace", skills: Iterable[str]):
        self.face = face
        self.skills = tuple(skills)
        super().__init__(
            f"Skills {', '.join(self.skills)} all transform {face.value}; resolve manually"
        )


class SkillUnavailable(BlockerError):
    """A skill application was requested that the acting side cannot make."""


class ApothecaryUnavailable(BlockerError):
    """The apothecary has already been used this game."""
