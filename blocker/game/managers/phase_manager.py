"""
Phase Management System with Event-Driven State Machine.

This module implements the action state machine. Phase changes for a block or
foul are driven by events according to a table of transition rules; the same
table decides which operations are legal in the current phase, so every
inbound request is validated before it touches the dice or the action record.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from ...core.events.event_manager import EventManager
    from ...core.engine.game_state import GameState

from ...core.data import ActionType, InjuryResult
from ...core.engine.game_state import PHASE_SEQUENCES, Phase
from ...core.errors import IllegalPhaseTransition
from ...core.events.events import (
    EventType,
    GameEvent,
    LogMessage,
    PhaseChanged,
)

EventCondition = Callable[[GameEvent], bool]


@dataclass
class PhaseTransitionRule:
    """Defines a phase transition rule."""

    from_phase: Phase
    event_type: EventType
    to_phase: Phase
    description: str
    action_type: Optional[ActionType] = None  # None applies to both actions
    condition: Optional[EventCondition] = None

    def matches(
        self,
        current_phase: Phase,
        event_type: EventType,
        action_type: Optional[ActionType] = None,
    ) -> bool:
        """Check if this rule matches the current conditions."""
        if self.from_phase != current_phase or self.event_type != event_type:
            return False
        return self.action_type is None or self.action_type == action_type

    def accepts(self, event: GameEvent) -> bool:
        """Check the rule's condition against the event payload."""
        return self.condition is None or self.condition(event)


def _armour_broke(event: GameEvent) -> bool:
    return event.roll.broken


def _armour_held(event: GameEvent) -> bool:
    return not event.roll.broken


def _is_casualty(event: GameEvent) -> bool:
    return event.roll.result == InjuryResult.CASUALTY


def _is_not_casualty(event: GameEvent) -> bool:
    return event.roll.result != InjuryResult.CASUALTY


class PhaseManager:
    """Centralized phase management with event-driven state machine.

    This manager listens to action events and transitions the current phase
    according to predefined rules. It is the only component that assigns
    ``GameState.phase``.
    """

    def __init__(self, game_state: "GameState", event_manager: "EventManager"):
        self.state = game_state
        self.event_manager = event_manager

        self.rules: List[PhaseTransitionRule] = []
        self._setup_transitions()
        self._subscribe_to_events()

    def _emit_log(self, message: str, category: str = "PHASE", level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                action_number=self.state.action_number,
                message=message,
                category=category,
                level=level,
                source="PhaseManager",
            ),
            source="PhaseManager",
        )

    def _setup_transitions(self) -> None:
        """Define the phase transition rules for both action types."""
        self.rules = [
            PhaseTransitionRule(
                from_phase=Phase.GAME_START,
                event_type=EventType.SESSION_STARTED,
                to_phase=Phase.ACTION_SELECT,
                description="Seed chosen: ready for the first action",
            ),
            # Action selection
            PhaseTransitionRule(
                from_phase=Phase.ACTION_SELECT,
                event_type=EventType.ACTION_SELECTED,
                to_phase=Phase.DICE_SELECT,
                description="Choose block dice after selecting a block",
                action_type=ActionType.BLOCK,
            ),
            PhaseTransitionRule(
                from_phase=Phase.ACTION_SELECT,
                event_type=EventType.ACTION_SELECTED,
                to_phase=Phase.ARMOUR_VALUE,
                description="Fouls go straight to the armour value",
                action_type=ActionType.FOUL,
            ),
            # Block dice flow
            PhaseTransitionRule(
                from_phase=Phase.DICE_SELECT,
                event_type=EventType.DICE_COUNT_SELECTED,
                to_phase=Phase.DICE_ROLL,
                description="Roll once the dice count is chosen",
                action_type=ActionType.BLOCK,
            ),
            PhaseTransitionRule(
                from_phase=Phase.DICE_ROLL,
                event_type=EventType.BLOCK_DICE_ROLLED,
                to_phase=Phase.RESULT_SELECT,
                description="Pick a result after rolling block dice",
                action_type=ActionType.BLOCK,
            ),
            PhaseTransitionRule(
                from_phase=Phase.RESULT_SELECT,
                event_type=EventType.RESULT_SELECTED,
                to_phase=Phase.ARMOUR_VALUE,
                description="Enter armour value after choosing the block result",
                action_type=ActionType.BLOCK,
            ),
            # Armour
            PhaseTransitionRule(
                from_phase=Phase.ARMOUR_VALUE,
                event_type=EventType.ARMOUR_VALUE_SET,
                to_phase=Phase.ARMOUR_ROLL,
                description="Roll armour once the armour value is known",
            ),
            PhaseTransitionRule(
                from_phase=Phase.ARMOUR_ROLL,
                event_type=EventType.ARMOUR_ROLLED,
                to_phase=Phase.INJURY_ROLL,
                description="Armour broken: proceed to injury roll",
                condition=_armour_broke,
            ),
            PhaseTransitionRule(
                from_phase=Phase.ARMOUR_ROLL,
                event_type=EventType.ARMOUR_ROLLED,
                to_phase=Phase.COMPLETE,
                description="Armour holds: action complete",
                condition=_armour_held,
            ),
            # Injury
            PhaseTransitionRule(
                from_phase=Phase.INJURY_ROLL,
                event_type=EventType.INJURY_ROLLED,
                to_phase=Phase.CASUALTY_ROLL,
                description="Casualty: proceed to casualty table",
                condition=_is_casualty,
            ),
            PhaseTransitionRule(
                from_phase=Phase.INJURY_ROLL,
                event_type=EventType.INJURY_ROLLED,
                to_phase=Phase.COMPLETE,
                description="No casualty: action complete",
                condition=_is_not_casualty,
            ),
            # Casualty and apothecary
            PhaseTransitionRule(
                from_phase=Phase.CASUALTY_ROLL,
                event_type=EventType.CASUALTY_ROLLED,
                to_phase=Phase.APOTHECARY,
                description="Offer the apothecary after a casualty roll",
                condition=lambda event: not event.is_reroll,
            ),
            PhaseTransitionRule(
                from_phase=Phase.APOTHECARY,
                event_type=EventType.APOTHECARY_CHOSEN,
                to_phase=Phase.COMPLETE,
                description="Action complete after the apothecary decision",
            ),
            # Completion
            PhaseTransitionRule(
                from_phase=Phase.COMPLETE,
                event_type=EventType.ACTION_COMPLETED,
                to_phase=Phase.ACTION_SELECT,
                description="Ready for the next action",
            ),
        ]

    def _subscribe_to_events(self) -> None:
        """Subscribe to every event type that appears in a rule."""
        for event_type in sorted({rule.event_type for rule in self.rules}, key=lambda e: e.value):
            self.event_manager.subscribe(
                event_type,
                self._handle_phase_transition_event,
                subscriber_name=f"PhaseManager.{event_type.name.lower()}",
            )

    def _matching_rules(
        self, event_type: EventType, action_type: Optional[ActionType] = None
    ) -> List[PhaseTransitionRule]:
        action_type = action_type or self.state.action_type
        return [
            rule for rule in self.rules
            if rule.matches(self.state.phase, event_type, action_type)
        ]

    def can_accept(self, event_type: EventType, action_type: Optional[ActionType] = None) -> bool:
        """Whether an event of this type is legal in the current phase.

        ``action_type`` stands in for the current action's type when the
        event is the one that will start the action.
        """
        return bool(self._matching_rules(event_type, action_type))

    def validate(
        self,
        event_type: EventType,
        operation: str,
        action_type: Optional[ActionType] = None,
    ) -> None:
        """Reject an operation the current phase does not accept.

        Raises:
            IllegalPhaseTransition: If no rule accepts the event from the current phase
        """
        if not self.can_accept(event_type, action_type):
            raise IllegalPhaseTransition(self.state.phase, operation)

    def require_phase(self, phase: Phase, operation: str, reason: Optional[str] = None) -> None:
        """Reject an operation unless the machine is in ``phase``."""
        if self.state.phase != phase:
            raise IllegalPhaseTransition(self.state.phase, operation, reason)

    def _handle_phase_transition_event(self, event: GameEvent) -> None:
        """Handle events that might trigger phase transitions."""
        for rule in self._matching_rules(event.event_type):
            if rule.accepts(event):
                self._transition(rule.to_phase, rule.description)
                return

        # Apothecary re-rolls and session restarts leave the phase alone
        self._emit_log(f"No transition for {event.event_type.name} during {self.state.phase.value}")

    def _transition(self, new_phase: Phase, description: str) -> None:
        """Move to a new phase and record it in the action's history."""
        old_phase = self.state.phase
        if old_phase == new_phase:
            return

        self.state.phase = new_phase

        action = self.state.action
        if action is not None:
            if not action.phase_history:
                action.phase_history.append(old_phase)
            action.phase_history.append(new_phase)

        if new_phase == Phase.ACTION_SELECT:
            self.state.clear_action()

        self._publish_change(old_phase, new_phase, description)

    def _publish_change(self, old_phase: Phase, new_phase: Phase, reason: str) -> None:
        self.event_manager.publish(
            PhaseChanged(
                action_number=self.state.action_number,
                old_phase=old_phase,
                new_phase=new_phase,
                reason=reason,
            ),
            source="PhaseManager",
        )
        self._emit_log(f"Phase: {old_phase.value} -> {new_phase.value} ({reason})")

    def go_back(self) -> Phase:
        """Return to the phase entered before the current one.

        Follows the phases actually visited in this action, which matches the
        action's sequence whenever nothing was skipped. Going back from the
        first phase is a no-op; going back to action selection discards the
        action record.

        Returns:
            The phase after the move
        """
        action = self.state.action
        if self.state.phase in (Phase.GAME_START, Phase.ACTION_SELECT) or action is None:
            return self.state.phase

        history = action.phase_history
        if len(history) >= 2:
            history.pop()
            previous = history[-1]
        else:
            previous = self._sequence_predecessor(action.action_type, self.state.phase)

        old_phase = self.state.phase
        self.state.phase = previous
        if previous == Phase.ACTION_SELECT:
            self.state.clear_action()

        self._publish_change(old_phase, previous, "Went back")
        return previous

    @staticmethod
    def _sequence_predecessor(action_type: ActionType, phase: Phase) -> Phase:
        sequence = PHASE_SEQUENCES[action_type]
        if phase not in sequence:
            return Phase.ACTION_SELECT
        index = sequence.index(phase)
        return sequence[max(0, index - 1)]

    def force_transition(self, new_phase: Phase, reason: str = "Manual override") -> None:
        """Force a phase without an event trigger.

        Used for session start, abandoning an action and other resets. Any
        move to action selection discards the action record.
        """
        old_phase = self.state.phase
        if new_phase == Phase.ACTION_SELECT:
            self.state.clear_action()
        if old_phase == new_phase:
            return

        self.state.phase = new_phase
        self._publish_change(old_phase, new_phase, f"FORCED: {reason}")
