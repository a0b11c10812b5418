"""
Edge case and error handling tests.

Tests boundary values, invalid inputs, error recovery and graceful
degradation across the engine.
"""
import pytest

from blocker.core.data import (
    ActionType,
    BlockFace,
    CasualtyResult,
    InjuryResult,
)
from blocker.core.engine.game_state import Phase
from blocker.core.errors import (
    BlockerError,
    IllegalPhaseTransition,
    InvalidArmourValue,
    InvalidDiceCount,
    InvalidResultSelection,
    InvalidSeedText,
    NotInitialized,
)
from blocker.core.events.events import EventType, LogMessage
from blocker.core.random_source import init_seed, roll_die
from blocker.game import rule_tables
from blocker.game.managers.statistics_manager import RollStatistics
from blocker.game.skills import Skills, casualty_modifiers
from blocker.game.statistics_store import YamlStatisticsStore


class TestSeedBoundaryConditions:
    """Test unusual seed words."""

    def test_unicode_seed(self):
        state = init_seed("Grüßgott ☠")
        assert 0 < state.seed < 2147483647

    def test_very_long_seed(self):
        state = init_seed("x" * 10000)
        value, _ = roll_die(state, 6)
        assert 1 <= value <= 6

    def test_seed_hashing_to_zero_is_usable(self):
        """A seed word whose hash is a multiple of the modulus still rolls."""
        state = init_seed("\x00")
        assert state.seed == 1
        value, next_state = roll_die(state, 6)
        assert 1 <= value <= 6
        assert next_state.seed != 0

    def test_whitespace_seed(self):
        with pytest.raises(InvalidSeedText):
            init_seed("\t\n")

    def test_roll_without_state(self):
        with pytest.raises(NotInitialized):
            roll_die(None, 6)


class TestTableBoundaries:
    """Test the edges of each rule table."""

    def test_armour_value_bounds(self):
        rule_tables.validate_armour_value(1)
        rule_tables.validate_armour_value(12)
        with pytest.raises(InvalidArmourValue):
            rule_tables.validate_armour_value(0)
        with pytest.raises(InvalidArmourValue):
            rule_tables.validate_armour_value(13)

    def test_lowest_armour_always_breaks(self):
        assert rule_tables.armour_broken(2, 1)

    def test_highest_armour_breaks_on_twelve(self):
        assert rule_tables.armour_broken(12, 12)
        assert not rule_tables.armour_broken(11, 12)

    def test_modified_injury_beyond_twelve(self):
        assert rule_tables.injury_result(14) == InjuryResult.CASUALTY
        assert rule_tables.injury_result(14, stunty=True) == InjuryResult.CASUALTY

    def test_heavily_modified_casualty_is_capped(self):
        modifiers = casualty_modifiers(Skills.of(["Mighty Blow", "Decay"]), niggling_injuries=10)
        total = 16 + modifiers.total

        assert rule_tables.clamp_casualty_roll(total) == 16
        assert rule_tables.casualty_result(total) == CasualtyResult.DEAD

    def test_errors_are_value_errors_where_inputs_are_bad(self):
        """Input errors can be caught as ValueError by callers that do not know the taxonomy."""
        for error_type in (InvalidArmourValue, InvalidDiceCount, InvalidResultSelection, InvalidSeedText):
            assert issubclass(error_type, ValueError)
            assert issubclass(error_type, BlockerError)


class TestSessionRecovery:
    """A session keeps working after any rejected call."""

    def test_session_usable_after_errors(self, make_session):
        session = make_session(3, 5, 6)

        for bad_call in (
            lambda: session.roll_block_dice(),
            lambda: session.select_action("sprint"),
            lambda: session.choose_apothecary(True),
        ):
            with pytest.raises((BlockerError, ValueError)):
                bad_call()

        session.select_action(ActionType.BLOCK)
        session.select_dice_count(1)
        assert session.roll_block_dice().faces == (BlockFace.POW,)
        assert session.dice.values == [5, 6]

    def test_every_phase_rejects_unrelated_rolls(self, make_session):
        """Casualty rolls are refused everywhere except the casualty phase."""
        session = make_session(3, 1, 2)
        session.select_action(ActionType.BLOCK)
        while session.phase != Phase.COMPLETE:
            with pytest.raises(IllegalPhaseTransition):
                session.roll_casualty()
            if session.phase == Phase.DICE_SELECT:
                session.select_dice_count(1)
            elif session.phase == Phase.DICE_ROLL:
                session.roll_block_dice()
            elif session.phase == Phase.RESULT_SELECT:
                session.select_result(BlockFace.POW)
            elif session.phase == Phase.ARMOUR_VALUE:
                session.set_armour_value(8)
            elif session.phase == Phase.ARMOUR_ROLL:
                session.roll_armour()

        assert session.statistics.casualty_total == 0


class TestEventSystemRobustness:
    """Test that misbehaving subscribers do not break the bus."""

    def test_failing_subscriber_does_not_stop_others(self, event_manager):
        received = []

        def broken(event):
            raise RuntimeError("subscriber failure")

        event_manager.subscribe(EventType.LOG_MESSAGE, broken)
        event_manager.subscribe(EventType.LOG_MESSAGE, received.append)

        event_manager.publish(LogMessage(action_number=0, message="hello", category="SYSTEM"))
        event_manager.drain()

        assert len(received) == 1
        assert event_manager.get_statistics()['subscriber_errors'] == 1

    def test_drain_stops_on_runaway_feedback(self, event_manager):
        def echo(event):
            event_manager.publish(LogMessage(action_number=0, message="again", category="SYSTEM"))

        event_manager.subscribe(EventType.LOG_MESSAGE, echo)
        event_manager.publish(LogMessage(action_number=0, message="start", category="SYSTEM"))

        processed = event_manager.drain(max_rounds=5)

        assert processed == 5
        assert event_manager.get_statistics()['events_queued'] == 1


class TestPersistenceDegradation:
    """Test recovery from damaged statistics files."""

    def test_garbage_record_values(self):
        stats = RollStatistics.from_record({
            "block.push": 3.0,
            "block.pow": True,
            "armour.breaks": "7",
            "total_rolls": [1, 2],
        })

        assert stats.block_faces[BlockFace.PUSH] == 3
        assert stats.block_faces[BlockFace.POW] == 0
        assert stats.armour_breaks == 7
        assert stats.total_rolls == 0

    def test_corrupt_store_starts_from_zero(self, make_session, tmp_path):
        path = tmp_path / "stats.yaml"
        path.write_text("{{{ not yaml", encoding="utf-8")

        session = make_session(store=YamlStatisticsStore(path))

        assert session.statistics.total_rolls == 0
        warnings = [m.text for m in session.log_manager.messages if m.level.name == "WARNING"]
        assert any("Could not load statistics" in text for text in warnings)
