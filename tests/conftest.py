"""
Shared fixtures for the blocker test suite.

Provides event plumbing, a dice engine whose rolls are scripted by the test,
and session factories wired to that engine.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from blocker.core.config_loader import BlockerConfig
from blocker.core.engine.game_state import GameState
from blocker.core.events.event_manager import EventManager
from blocker.game.dice import DiceEngine
from blocker.game.session import Session
from blocker.game.statistics_store import MemoryStatisticsStore


class ScriptedDiceEngine(DiceEngine):
    """Dice engine that returns pre-arranged pip values in order."""

    def __init__(self, values=()):
        super().__init__()
        self.values = list(values)

    def push(self, *values: int) -> None:
        self.values.extend(values)

    def _roll(self, sides: int) -> int:
        if not self.values:
            raise AssertionError("Scripted dice ran out of values")
        value = self.values.pop(0)
        assert 1 <= value <= sides, f"Scripted value {value} does not fit a d{sides}"
        return value

    def _roll_many(self, count: int, sides: int) -> tuple[int, ...]:
        return tuple(self._roll(sides) for _ in range(count))


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def game_state():
    """Create a fresh game state for testing."""
    return GameState()


@pytest.fixture
def config():
    """Default configuration, independent of the config file on disk."""
    return BlockerConfig()


@pytest.fixture
def scripted_dice():
    return ScriptedDiceEngine()


@pytest.fixture
def memory_store():
    return MemoryStatisticsStore()


@pytest.fixture
def make_session(config, tmp_path):
    """Factory for started sessions whose dice follow a script."""
    def _make(*values: int, store=None, seed: str = "test") -> Session:
        dice = ScriptedDiceEngine(values)
        session = Session(config=config, store=store, dice=dice, log_dir=str(tmp_path / "logs"))
        session.start_session(seed)
        return session
    return _make


@pytest.fixture
def session(make_session):
    """A started session with no scripted rolls yet (push values onto session.dice)."""
    return make_session()
