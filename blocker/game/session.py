"""
Session facade for resolving blocks and fouls.

The ``Session`` wires the event bus, the game state, the dice engine and the
managers together and exposes one method per coach decision. Each method
checks that the current phase accepts it, validates its arguments, rolls, and
only then publishes events; the event queue is drained before the method
returns, so callers always observe a settled state.
"""
import dataclasses
import functools
import itertools
from typing import Callable, Optional, TypeVar, Union

from ..core.config_loader import BlockerConfig, load_config
from ..core.data import (
    ACTION_TYPE_ICONS,
    ACTION_TYPE_NAMES,
    ActionType,
    ApothecaryOutcome,
    ArgueTheCallRoll,
    ArmourRoll,
    BLOCK_FACE_NAMES,
    BlockDiceRoll,
    BlockFace,
    CASUALTY_RESULT_NAMES,
    CasualtyResult,
    CasualtyRoll,
    InjuryRoll,
    LastingInjuryRoll,
    RollModifiers,
    RollPayload,
    Skill,
    SkillSide,
)
from ..core.engine.game_state import PHASE_ICONS, ActionRecord, GameState, Phase
from ..core.errors import (
    ApothecaryUnavailable,
    BlockerError,
    IllegalPhaseTransition,
    InvalidResultSelection,
)
from ..core.events.event_manager import EventManager
from ..core.events.events import (
    ActionAbandoned,
    ActionCompleted,
    ActionLogged,
    ActionSelected,
    ApothecaryChosen,
    ArgueTheCallRolled,
    ArmourRolled,
    ArmourValueSet,
    BlockDiceRolled,
    CasualtyRolled,
    DiceCountSelected,
    EventType,
    InjuryRolled,
    LogMessage,
    ResultSelected,
    SessionStarted,
    StatisticsReset,
)
from ..core.random_source import generate_seed_words, init_seed
from . import rule_tables
from .dice import DiceEngine, validate_dice_count
from .managers.log_manager import ActionLogEntry, LogLevel, LogManager
from .managers.phase_manager import PhaseManager
from .managers.statistics_manager import RollStatistics, StatisticsManager
from .skills import (
    NO_SKILLS,
    Skills,
    apply_skill_transforms,
    armour_modifiers,
    casualty_modifiers,
    check_piling_on,
    injury_modifiers,
)
from .statistics_store import StatisticsStore

T = TypeVar("T")


def session_operation(name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Report rejected calls to the log and settle the event queue afterwards."""
    def decorator(method: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(method)
        def wrapper(self: "Session", *args, **kwargs) -> T:
            try:
                result = method(self, *args, **kwargs)
            except (BlockerError, ValueError) as e:
                self._emit_log(f"Rejected {name}: {e}", category="WARNING", level="WARNING")
                self.event_manager.drain()
                raise
            self.event_manager.drain()
            return result
        return wrapper
    return decorator


class Session:
    """One coach's dice session: a seed, the action in progress and statistics."""

    def __init__(
        self,
        config: Optional[BlockerConfig] = None,
        store: Optional[StatisticsStore] = None,
        dice: Optional[DiceEngine] = None,
        config_path: Optional[str] = None,
        log_dir: str = "logs",
    ):
        """Build a session and its managers.

        Args:
            config: Settings to use; loaded from ``config_path`` when omitted
            store: Where statistics are loaded from and saved to (None keeps them in memory)
            dice: Dice engine to roll with; a fresh unseeded engine when omitted
            config_path: Configuration file to read when no config is given
            log_dir: Directory for saved session logs
        """
        warnings: list[str] = []
        if config is None:
            config, warnings = load_config(config_path)
        self.config = config

        self.event_manager = EventManager(enable_debug_logging=config.debug_events)
        self.state = GameState()
        self.dice = dice or DiceEngine()
        self.skills = NO_SKILLS

        self.log_manager = LogManager(
            self.event_manager,
            max_messages=config.max_log_messages,
            default_level=LogLevel.parse(config.log_level),
            log_dir=log_dir,
        )
        self.event_manager.set_debug_callback(self.log_manager.debug)
        self.phase_manager = PhaseManager(self.state, self.event_manager)
        self.statistics_manager = StatisticsManager(self.event_manager, self.state, store=store)

        self._last_roll: Optional[RollPayload] = None
        self._last_outcome: str = ""
        self._entry_ids = itertools.count(1)

        for warning in warnings:
            self._emit_log(warning, category="WARNING", level="WARNING")
        self.event_manager.drain()

    # Outbound state

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def action(self) -> Optional[ActionRecord]:
        """Record of the action in progress, None between actions."""
        return self.state.action

    @property
    def last_roll(self) -> Optional[RollPayload]:
        return self._last_roll

    @property
    def last_outcome(self) -> str:
        return self._last_outcome

    @property
    def statistics(self) -> RollStatistics:
        """Snapshot of the statistics; later rolls do not change it."""
        return self.statistics_manager.snapshot()

    @property
    def action_log(self) -> list[ActionLogEntry]:
        return list(self.log_manager.action_log)

    @property
    def seed_text(self) -> Optional[str]:
        return self.state.seed_text

    @property
    def apothecary_available(self) -> bool:
        return not self.state.apothecary_used

    # Helpers

    def _emit_log(self, message: str, category: str = "SYSTEM", level: str = "INFO") -> None:
        self.event_manager.publish(
            LogMessage(
                action_number=self.state.action_number,
                message=message,
                category=category,
                level=level,
                source="Session",
            ),
            source="Session",
        )

    def _log_action(
        self,
        description: str,
        payload: Optional[RollPayload] = None,
        icon: Optional[str] = None,
    ) -> None:
        """Add an entry to the action log for the phase the action is in now."""
        phase = self.state.phase
        entry = ActionLogEntry(
            entry_id=next(self._entry_ids),
            phase=phase,
            action_type=self.state.action_type,
            description=description,
            icon=icon or PHASE_ICONS[phase],
            payload=payload,
        )
        self.event_manager.publish(
            ActionLogged(action_number=self.state.action_number, entry=entry),
            source="Session",
        )
        self._last_outcome = description
        if payload is not None:
            self._last_roll = payload

    def _record(self) -> ActionRecord:
        # Every phase past action-select has a record; the phase check runs first
        assert self.state.action is not None
        return self.state.action

    def _check_send_off(self, record: ActionRecord) -> None:
        """A natural double on a foul's armour or injury roll gets the fouler sent off."""
        if record.action_type != ActionType.FOUL:
            return
        rolls = [roll for roll in (record.armour_roll, record.injury_roll) if roll is not None]
        sent_off = any(rule_tables.is_natural_double(*roll.dice.values) for roll in rolls)
        if sent_off and not record.sent_off:
            self._emit_log("Natural double on a foul: the fouler is sent off", category="ACTION")
        record.sent_off = sent_off

    def _piling_on(self, record: ActionRecord, roll_phase: Phase, requested: bool) -> bool:
        """Validate a Piling On request for the roll about to be made."""
        if requested:
            spent_elsewhere = record.piling_on_roll not in (None, roll_phase)
            check_piling_on(self.skills, spent_elsewhere)
        return requested

    def _roll_casualty_table(self, modifiers: RollModifiers) -> CasualtyRoll:
        die = self.dice.roll_casualty()
        result = rule_tables.casualty_result(die.total + modifiers.total)
        lasting = None
        if result == CasualtyResult.LASTING_INJURY:
            injury_die = self.dice.roll_d6()
            lasting = LastingInjuryRoll(die=injury_die, injury=rule_tables.lasting_injury(injury_die.total))
        return CasualtyRoll(die=die, modifiers=modifiers, result=result, lasting_injury=lasting)

    # Inbound operations

    @session_operation("start session")
    def start_session(self, seed_text: str) -> None:
        """Seed the dice and get ready for the first action.

        Statistics are loaded from the store on the first start only.
        Starting again with a new seed word abandons any action in progress;
        statistics and the action log carry over.

        Raises:
            InvalidSeedText: If the seed word is empty
        """
        seed_state = init_seed(seed_text)

        if self.state.action is not None:
            self.event_manager.publish(
                ActionAbandoned(
                    action_number=self.state.action_number,
                    action_type=self.state.action_type,
                    phase=self.state.phase,
                ),
                source="Session",
            )

        self.dice.restore(seed_state)
        self.state.seed_text = seed_text
        if self.state.phase == Phase.GAME_START:
            self.statistics_manager.load()
        else:
            # In-memory counters win over the store, which may be behind
            self.phase_manager.force_transition(Phase.ACTION_SELECT, "Session restarted")

        self.event_manager.publish(
            SessionStarted(action_number=self.state.action_number, seed_text=seed_text),
            source="Session",
        )
        self._emit_log(f"Session started with seed word '{seed_text}'")
        self._log_action(f"Session started with seed '{seed_text}'", icon=PHASE_ICONS[Phase.GAME_START])

    @session_operation("set skills")
    def set_skills(self, skills: Skills) -> None:
        """Choose the skills that apply to the current and following actions."""
        if not isinstance(skills, Skills):
            raise ValueError(f"Expected Skills, got {type(skills).__name__}")
        self.skills = skills
        self._emit_log(f"Skills set ({skills.describe()})", category="ACTION", level="DEBUG")

    @session_operation("select an action")
    def select_action(self, action_type: Union[ActionType, str]) -> ActionRecord:
        """Start a block or a foul."""
        self.phase_manager.require_phase(Phase.ACTION_SELECT, "select an action")
        action_type = ActionType(action_type)
        self.phase_manager.validate(EventType.ACTION_SELECTED, "select an action", action_type)

        record = self.state.start_action(action_type)
        self.event_manager.publish(
            ActionSelected(action_number=record.number, action_type=action_type),
            source="Session",
        )
        self._log_action(
            f"{ACTION_TYPE_NAMES[action_type]} action selected",
            icon=ACTION_TYPE_ICONS[action_type],
        )
        return record

    @session_operation("select dice count")
    def select_dice_count(self, count: int) -> None:
        """Choose how many block dice to roll (1, 2 or 3)."""
        self.phase_manager.validate(EventType.DICE_COUNT_SELECTED, "select dice count")
        validate_dice_count(count)

        record = self._record()
        record.dice_count = count
        self.event_manager.publish(
            DiceCountSelected(action_number=record.number, count=count),
            source="Session",
        )
        self._log_action(f"{count} block {'die' if count == 1 else 'dice'} selected")

    @session_operation("roll block dice")
    def roll_block_dice(self) -> BlockDiceRoll:
        """Roll the chosen number of block dice."""
        self.phase_manager.validate(EventType.BLOCK_DICE_ROLLED, "roll block dice")
        record = self._record()

        roll = self.dice.roll_block_dice(record.dice_count)
        record.block_faces = roll.faces
        record.chosen_face = None
        record.resolved_face = None

        self.event_manager.publish(
            BlockDiceRolled(action_number=record.number, roll=roll),
            source="Session",
        )
        self._emit_log(roll.describe(), category="DICE")
        self._log_action(roll.describe(), payload=roll)
        return roll

    @session_operation("select a result")
    def select_result(
        self,
        face: Union[BlockFace, str],
        skills: Optional[Skills] = None,
    ) -> BlockFace:
        """Commit to one of the rolled faces and resolve it against the skills.

        Args:
            face: One of the faces just rolled
            skills: Skills to apply; the session's current skills when omitted

        Returns:
            The face after skill transforms

        Raises:
            InvalidResultSelection: If the face was not rolled
            ConflictingSkillTransform: If two skills transform the face
        """
        self.phase_manager.validate(EventType.RESULT_SELECTED, "select a result")
        record = self._record()
        face = BlockFace(face)
        if face not in record.block_faces:
            raise InvalidResultSelection(face, record.block_faces)
        skills = skills if skills is not None else self.skills
        resolved = apply_skill_transforms(face, skills)

        self.skills = skills
        record.chosen_face = face
        record.resolved_face = resolved
        self.event_manager.publish(
            ResultSelected(
                action_number=record.number,
                chosen_face=face,
                resolved_face=resolved,
                skills=skills,
            ),
            source="Session",
        )

        description = f"Selected {BLOCK_FACE_NAMES[face]}"
        if resolved != face:
            description += f" -> {BLOCK_FACE_NAMES[resolved]} ({skills.describe()})"
        self._log_action(description)
        return resolved

    @session_operation("set armour value")
    def set_armour_value(self, armour_value: int, stunty: bool = False) -> None:
        """Enter the defender's armour value (1-12) and whether it is a stunty."""
        self.phase_manager.validate(EventType.ARMOUR_VALUE_SET, "set armour value")
        rule_tables.validate_armour_value(armour_value)

        record = self._record()
        record.armour_value = armour_value
        record.stunty = bool(stunty)
        self.event_manager.publish(
            ArmourValueSet(action_number=record.number, armour_value=armour_value, stunty=record.stunty),
            source="Session",
        )
        self._log_action(f"Armour value {armour_value}+{' (stunty)' if record.stunty else ''}")

    @session_operation("roll armour")
    def roll_armour(self, piling_on: bool = False) -> ArmourRoll:
        """Roll 2d6 against the armour value.

        Raises:
            SkillUnavailable: If Piling On is requested but cannot be used
        """
        self.phase_manager.validate(EventType.ARMOUR_ROLLED, "roll armour")
        record = self._record()
        piling_on = self._piling_on(record, Phase.ARMOUR_ROLL, piling_on)

        thick_skull = self.skills.has(SkillSide.DEFENDER, Skill.THICK_SKULL)
        modifiers = armour_modifiers(self.skills, piling_on)
        dice = self.dice.roll_two_d6()
        effective = rule_tables.effective_armour_value(record.armour_value, thick_skull)
        roll = ArmourRoll(
            dice=dice,
            modifiers=modifiers,
            armour_value=record.armour_value,
            effective_armour_value=effective,
            broken=rule_tables.armour_broken(dice.total + modifiers.total, record.armour_value, thick_skull),
        )

        record.armour_roll = roll
        record.injury_roll = None
        record.casualty_roll = None
        record.apothecary = None
        if piling_on:
            record.piling_on_roll = Phase.ARMOUR_ROLL
        elif record.piling_on_roll == Phase.ARMOUR_ROLL:
            record.piling_on_roll = None
        self._check_send_off(record)

        self.event_manager.publish(ArmourRolled(action_number=record.number, roll=roll), source="Session")
        self._emit_log(roll.describe(), category="ARMOUR")
        self._log_action(roll.describe(), payload=roll)
        return roll

    @session_operation("roll injury")
    def roll_injury(self, piling_on: bool = False) -> InjuryRoll:
        """Roll 2d6 on the standard or stunty injury table."""
        self.phase_manager.validate(EventType.INJURY_ROLLED, "roll injury")
        record = self._record()
        piling_on = self._piling_on(record, Phase.INJURY_ROLL, piling_on)

        modifiers = injury_modifiers(self.skills, piling_on)
        dice = self.dice.roll_two_d6()
        roll = InjuryRoll(
            dice=dice,
            modifiers=modifiers,
            stunty=record.stunty,
            result=rule_tables.injury_result(dice.total + modifiers.total, record.stunty),
        )

        record.injury_roll = roll
        record.casualty_roll = None
        record.apothecary = None
        if piling_on:
            record.piling_on_roll = Phase.INJURY_ROLL
        elif record.piling_on_roll == Phase.INJURY_ROLL:
            record.piling_on_roll = None
        self._check_send_off(record)

        self.event_manager.publish(InjuryRolled(action_number=record.number, roll=roll), source="Session")
        self._emit_log(roll.describe(), category="INJURY")
        self._log_action(roll.describe(), payload=roll)
        return roll

    @session_operation("roll casualty")
    def roll_casualty(self, niggling_injuries: int = 0) -> CasualtyRoll:
        """Roll the D16 casualty table.

        A Lasting Injury also rolls its d6 on the lasting injury table.

        Args:
            niggling_injuries: Niggling injuries the defender already carries
        """
        self.phase_manager.validate(EventType.CASUALTY_ROLLED, "roll casualty")
        modifiers = casualty_modifiers(self.skills, niggling_injuries)
        record = self._record()

        roll = self._roll_casualty_table(modifiers)
        record.niggling_injuries = niggling_injuries
        record.casualty_roll = roll
        record.apothecary = None

        self.event_manager.publish(CasualtyRolled(action_number=record.number, roll=roll), source="Session")
        self._emit_log(roll.describe(), category="CASUALTY")
        self._log_action(roll.describe(), payload=roll)
        return roll

    @session_operation("choose apothecary")
    def choose_apothecary(self, use: bool) -> ApothecaryOutcome:
        """Decide whether the apothecary treats the casualty.

        Using the apothecary re-rolls the casualty table with the same
        modifiers and keeps the less severe result until the coach picks the
        other one with keep_apothecary_result. It is available once per
        session.

        Raises:
            ApothecaryUnavailable: If the apothecary has already been used
        """
        self.phase_manager.validate(EventType.APOTHECARY_CHOSEN, "choose apothecary")
        if use and self.state.apothecary_used:
            raise ApothecaryUnavailable("The apothecary has already been used this game")
        record = self._record()
        original = record.casualty_roll

        if use:
            reroll = self._roll_casualty_table(original.modifiers)
            outcome = ApothecaryOutcome(
                used=True,
                original=original.result,
                reroll=reroll,
                kept=rule_tables.less_severe(original.result, reroll.result),
            )
            self.state.apothecary_used = True
            self.event_manager.publish(
                CasualtyRolled(action_number=record.number, roll=reroll, is_reroll=True),
                source="Session",
            )
        else:
            outcome = ApothecaryOutcome(used=False, original=original.result)

        record.apothecary = outcome
        self.event_manager.publish(ApothecaryChosen(action_number=record.number, outcome=outcome), source="Session")
        self._emit_log(outcome.describe(), category="CASUALTY")
        self._log_action(outcome.describe(), payload=outcome)
        return outcome

    @session_operation("keep apothecary result")
    def keep_apothecary_result(self, result: Union[CasualtyResult, str]) -> ApothecaryOutcome:
        """Apply the original casualty or the apothecary re-roll, as the coach chooses.

        Only possible once the apothecary has been used on the current action
        and before the action is completed.
        """
        self.phase_manager.require_phase(Phase.COMPLETE, "keep an apothecary result")
        record = self._record()
        outcome = record.apothecary
        if outcome is None or not outcome.used:
            raise IllegalPhaseTransition(
                self.state.phase, "keep an apothecary result", "the apothecary was not used"
            )

        result = CasualtyResult(result)
        if result not in (outcome.original, outcome.reroll.result):
            raise ValueError(
                f"Cannot keep {CASUALTY_RESULT_NAMES[result]}: the choice is "
                f"{CASUALTY_RESULT_NAMES[outcome.original]} or {CASUALTY_RESULT_NAMES[outcome.reroll.result]}"
            )

        outcome = dataclasses.replace(outcome, kept=result)
        record.apothecary = outcome
        self._emit_log(outcome.describe(), category="CASUALTY")
        self._log_action(f"Coach keeps {CASUALTY_RESULT_NAMES[result]}", payload=outcome)
        return outcome

    @session_operation("argue the call")
    def argue_the_call(self) -> ArgueTheCallRoll:
        """Argue a foul send-off with the referee (one d6)."""
        record = self.state.action
        if record is None or record.action_type != ActionType.FOUL:
            raise IllegalPhaseTransition(self.state.phase, "argue the call", "no foul in progress")
        if not record.sent_off:
            raise IllegalPhaseTransition(self.state.phase, "argue the call", "the fouler was not sent off")
        if record.argue_the_call is not None:
            raise IllegalPhaseTransition(self.state.phase, "argue the call", "the call was already argued")

        die = self.dice.roll_d6()
        result, description = rule_tables.argue_the_call(die.total)
        roll = ArgueTheCallRoll(die=die, result=result, description=description)
        record.argue_the_call = roll

        self.event_manager.publish(ArgueTheCallRolled(action_number=record.number, roll=roll), source="Session")
        self._emit_log(roll.describe(), category="ACTION")
        self._log_action(roll.describe(), payload=roll, icon="🗣️")
        return roll

    @session_operation("complete the action")
    def complete_action(self) -> None:
        """Close a finished action and return to action selection."""
        self.phase_manager.validate(EventType.ACTION_COMPLETED, "complete the action")
        record = self._record()

        summary = self._summarize(record)
        self._log_action(summary)
        self.event_manager.publish(
            ActionCompleted(action_number=record.number, action_type=record.action_type),
            source="Session",
        )
        self._emit_log(f"Action {record.number} complete: {summary}", category="ACTION")

    @session_operation("abandon the action")
    def abandon_action(self) -> None:
        """Discard the action in progress. Rolls already counted stay counted."""
        record = self.state.action
        if record is None:
            raise IllegalPhaseTransition(self.state.phase, "abandon the action", "no action in progress")

        self.event_manager.publish(
            ActionAbandoned(action_number=record.number, action_type=record.action_type, phase=self.state.phase),
            source="Session",
        )
        self._log_action(f"{ACTION_TYPE_NAMES[record.action_type]} abandoned")
        self.phase_manager.force_transition(Phase.ACTION_SELECT, "Action abandoned")

    @session_operation("go back")
    def go_back(self) -> Phase:
        """Step back to the previous phase of the action in progress."""
        return self.phase_manager.go_back()

    @session_operation("reset statistics")
    def reset_statistics(self) -> None:
        self.event_manager.publish(StatisticsReset(action_number=self.state.action_number), source="Session")

    def suggest_seed_words(self) -> list[str]:
        """Random seed words the coach can pick from."""
        return generate_seed_words(self.config.seed_words, self.config.seed_word_count)

    def save_log(self) -> Optional[str]:
        """Write the action log and diagnostics to a file under the log directory."""
        path = self.log_manager.save_log_to_file()
        self.event_manager.drain()
        return path

    @staticmethod
    def _summarize(record: ActionRecord) -> str:
        parts = [ACTION_TYPE_NAMES[record.action_type]]
        if record.resolved_face is not None:
            parts.append(BLOCK_FACE_NAMES[record.resolved_face])
        if record.armour_roll is not None:
            parts.append("armour broken" if record.armour_roll.broken else "armour held")
        if record.injury_roll is not None:
            parts.append(record.injury_roll.result.value)
        if record.casualty_roll is not None:
            final = record.apothecary.final_result if record.apothecary else record.casualty_roll.result
            parts.append(CASUALTY_RESULT_NAMES[final])
        if record.sent_off:
            parts.append("sent off" if record.send_off_stands else "send-off overturned")
        return ", ".join(parts)
