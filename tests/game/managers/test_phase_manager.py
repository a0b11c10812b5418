"""
Unit tests for the PhaseManager state machine.

Drives the manager with events directly, without a session, to check the
transition table, validation and going back.
"""

import pytest
from unittest.mock import Mock

from blocker.core.data import (
    ActionType,
    ArmourRoll,
    DiceKind,
    DieRoll,
    InjuryResult,
    InjuryRoll,
    RollModifiers,
)
from blocker.core.engine.game_state import Phase
from blocker.core.errors import IllegalPhaseTransition
from blocker.core.events.events import (
    ActionCompleted,
    ActionSelected,
    ArmourRolled,
    ArmourValueSet,
    DiceCountSelected,
    EventType,
    InjuryRolled,
    SessionStarted,
)
from blocker.game.managers.phase_manager import PhaseManager, PhaseTransitionRule


def armour_roll(broken: bool) -> ArmourRoll:
    return ArmourRoll(
        dice=DieRoll(kind=DiceKind.TWO_D6, values=(5, 6) if broken else (1, 2)),
        modifiers=RollModifiers(),
        armour_value=8,
        effective_armour_value=8,
        broken=broken,
    )


def injury_roll(result: InjuryResult) -> InjuryRoll:
    return InjuryRoll(
        dice=DieRoll(kind=DiceKind.TWO_D6, values=(5, 6)),
        modifiers=RollModifiers(),
        stunty=False,
        result=result,
    )


class TestPhaseTransitionRule:
    """Test PhaseTransitionRule matching."""

    def test_rule_matches(self):
        rule = PhaseTransitionRule(
            from_phase=Phase.DICE_SELECT,
            event_type=EventType.DICE_COUNT_SELECTED,
            to_phase=Phase.DICE_ROLL,
            description="Roll",
            action_type=ActionType.BLOCK,
        )

        assert rule.matches(Phase.DICE_SELECT, EventType.DICE_COUNT_SELECTED, ActionType.BLOCK)
        assert not rule.matches(Phase.DICE_ROLL, EventType.DICE_COUNT_SELECTED, ActionType.BLOCK)
        assert not rule.matches(Phase.DICE_SELECT, EventType.ARMOUR_ROLLED, ActionType.BLOCK)
        assert not rule.matches(Phase.DICE_SELECT, EventType.DICE_COUNT_SELECTED, ActionType.FOUL)

    def test_rule_condition(self):
        rule = PhaseTransitionRule(
            from_phase=Phase.ARMOUR_ROLL,
            event_type=EventType.ARMOUR_ROLLED,
            to_phase=Phase.INJURY_ROLL,
            description="Broken",
            condition=lambda event: event.roll.broken,
        )

        assert rule.accepts(ArmourRolled(action_number=1, roll=armour_roll(True)))
        assert not rule.accepts(ArmourRolled(action_number=1, roll=armour_roll(False)))


class TestPhaseManager:
    """Test PhaseManager transitions."""

    @pytest.fixture
    def phase_manager(self, game_state, event_manager):
        return PhaseManager(game_state, event_manager)

    def publish(self, event_manager, event):
        event_manager.publish(event)
        event_manager.drain()

    def start_action(self, game_state, event_manager, action_type):
        self.publish(event_manager, SessionStarted(action_number=0, seed_text="a"))
        record = game_state.start_action(action_type)
        self.publish(event_manager, ActionSelected(action_number=record.number, action_type=action_type))
        return record

    def test_session_start(self, phase_manager, game_state, event_manager):
        assert game_state.phase == Phase.GAME_START

        self.publish(event_manager, SessionStarted(action_number=0, seed_text="a"))

        assert game_state.phase == Phase.ACTION_SELECT

    def test_block_enters_dice_select(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.BLOCK)
        assert game_state.phase == Phase.DICE_SELECT

    def test_foul_skips_block_dice(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.FOUL)
        assert game_state.phase == Phase.ARMOUR_VALUE

    def test_armour_holds_completes_action(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.FOUL)
        self.publish(event_manager, ArmourValueSet(action_number=1, armour_value=8, stunty=False))
        self.publish(event_manager, ArmourRolled(action_number=1, roll=armour_roll(False)))

        assert game_state.phase == Phase.COMPLETE

    def test_broken_armour_then_injury(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.FOUL)
        self.publish(event_manager, ArmourValueSet(action_number=1, armour_value=8, stunty=False))
        self.publish(event_manager, ArmourRolled(action_number=1, roll=armour_roll(True)))
        assert game_state.phase == Phase.INJURY_ROLL

        self.publish(event_manager, InjuryRolled(action_number=1, roll=injury_roll(InjuryResult.CASUALTY)))
        assert game_state.phase == Phase.CASUALTY_ROLL

    def test_non_casualty_injury_completes(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.FOUL)
        self.publish(event_manager, ArmourValueSet(action_number=1, armour_value=8, stunty=False))
        self.publish(event_manager, ArmourRolled(action_number=1, roll=armour_roll(True)))
        self.publish(event_manager, InjuryRolled(action_number=1, roll=injury_roll(InjuryResult.KO)))

        assert game_state.phase == Phase.COMPLETE

    def test_completion_returns_to_action_select(self, phase_manager, game_state, event_manager):
        self.start_action(game_state, event_manager, ActionType.FOUL)
        self.publish(event_manager, ArmourValueSet(action_number=1, armour_value=8, stunty=False))
        self.publish(event_manager, ArmourRolled(action_number=1, roll=armour_roll(False)))
        self.publish(event_manager, ActionCompleted(action_number=1, action_type=ActionType.FOUL))

        assert game_state.phase == Phase.ACTION_SELECT
        assert game_state.action is None

    def test_phase_changed_published(self, phase_manager, game_state, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.PHASE_CHANGED, subscriber)

        self.publish(event_manager, SessionStarted(action_number=0, seed_text="a"))

        event = subscriber.call_args[0][0]
        assert event.old_phase == Phase.GAME_START
        assert event.new_phase == Phase.ACTION_SELECT


class TestValidation:
    """Test that operations are checked against the current phase."""

    @pytest.fixture
    def phase_manager(self, game_state, event_manager):
        return PhaseManager(game_state, event_manager)

    def test_validate_rejects_out_of_phase(self, phase_manager, game_state):
        with pytest.raises(IllegalPhaseTransition) as excinfo:
            phase_manager.validate(EventType.ARMOUR_ROLLED, "roll armour")

        assert excinfo.value.phase == Phase.GAME_START
        assert excinfo.value.operation == "roll armour"
        assert game_state.phase == Phase.GAME_START

    def test_validate_accepts_action_type_override(self, phase_manager, game_state, event_manager):
        event_manager.publish(SessionStarted(action_number=0, seed_text="a"))
        event_manager.drain()

        phase_manager.validate(EventType.ACTION_SELECTED, "select", ActionType.FOUL)
        assert not phase_manager.can_accept(EventType.ACTION_SELECTED)

    def test_block_only_rules_reject_fouls(self, phase_manager, game_state, event_manager):
        game_state.phase = Phase.DICE_SELECT
        game_state.start_action(ActionType.FOUL)

        assert not phase_manager.can_accept(EventType.DICE_COUNT_SELECTED)

    def test_require_phase(self, phase_manager, game_state):
        phase_manager.require_phase(Phase.GAME_START, "start")
        with pytest.raises(IllegalPhaseTransition):
            phase_manager.require_phase(Phase.COMPLETE, "complete")


class TestGoBack:
    """Test stepping back through visited phases."""

    @pytest.fixture
    def phase_manager(self, game_state, event_manager):
        return PhaseManager(game_state, event_manager)

    def advance_block(self, game_state, event_manager):
        event_manager.publish(SessionStarted(action_number=0, seed_text="a"))
        event_manager.drain()
        record = game_state.start_action(ActionType.BLOCK)
        event_manager.publish(ActionSelected(action_number=1, action_type=ActionType.BLOCK))
        event_manager.publish(DiceCountSelected(action_number=1, count=2))
        event_manager.drain()
        return record

    def test_go_back_one_step(self, phase_manager, game_state, event_manager):
        self.advance_block(game_state, event_manager)
        assert game_state.phase == Phase.DICE_ROLL

        assert phase_manager.go_back() == Phase.DICE_SELECT
        assert game_state.action is not None

    def test_go_back_to_action_select_discards_record(self, phase_manager, game_state, event_manager):
        self.advance_block(game_state, event_manager)

        phase_manager.go_back()
        phase_manager.go_back()

        assert game_state.phase == Phase.ACTION_SELECT
        assert game_state.action is None

    def test_go_back_is_noop_at_start(self, phase_manager, game_state, event_manager):
        assert phase_manager.go_back() == Phase.GAME_START

        event_manager.publish(SessionStarted(action_number=0, seed_text="a"))
        event_manager.drain()
        assert phase_manager.go_back() == Phase.ACTION_SELECT

    def test_go_back_over_skipped_phases(self, phase_manager, game_state, event_manager):
        """From complete after armour held, going back lands on the armour roll."""
        event_manager.publish(SessionStarted(action_number=0, seed_text="a"))
        event_manager.drain()
        game_state.start_action(ActionType.FOUL)
        event_manager.publish(ActionSelected(action_number=1, action_type=ActionType.FOUL))
        event_manager.publish(ArmourValueSet(action_number=1, armour_value=8, stunty=False))
        event_manager.publish(ArmourRolled(action_number=1, roll=armour_roll(False)))
        event_manager.drain()
        assert game_state.phase == Phase.COMPLETE

        assert phase_manager.go_back() == Phase.ARMOUR_ROLL

    def test_force_transition(self, phase_manager, game_state):
        game_state.start_action(ActionType.BLOCK)
        game_state.phase = Phase.DICE_ROLL

        phase_manager.force_transition(Phase.ACTION_SELECT, "test")

        assert game_state.phase == Phase.ACTION_SELECT
        assert game_state.action is None
