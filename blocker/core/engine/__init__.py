"""Core engine state.

- game_state.py: Phase enum, phase sequences, ActionRecord and GameState
"""

from .game_state import ActionRecord, GameState, Phase, PHASE_ICONS, PHASE_SEQUENCES

__all__ = [
    "ActionRecord",
    "GameState",
    "Phase",
    "PHASE_ICONS",
    "PHASE_SEQUENCES",
]
