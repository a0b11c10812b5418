"""
Roll statistics aggregation.

``RollStatistics`` holds the cumulative counters; ``StatisticsManager`` folds
roll events into it, persists it through an optional store and announces
every change with a ``StatisticsUpdated`` event.

Counters only ever grow. The single way back to zero is ``reset()``, which
swaps in a freshly zeroed record.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TYPE_CHECKING

import numpy as np

from ...core.data import BlockFace, CasualtyResult, Deviation, InjuryResult
from ...core.events.events import (
    ActionCompleted,
    ActionSelected,
    ArgueTheCallRolled,
    ArmourRolled,
    BlockDiceRolled,
    CasualtyRolled,
    EventType,
    GameEvent,
    InjuryRolled,
    LogMessage,
    StatisticsUpdated,
)

if TYPE_CHECKING:
    from ...core.events.event_manager import EventManager
    from ...core.engine.game_state import GameState
    from ..statistics_store import StatisticsStore

D6_FACES = tuple(range(1, 7))
TWO_D6_SUMS = tuple(range(2, 13))

# Percent chance of each face on one block die (push shows on two sides)
THEORETICAL_BLOCK_PERCENTAGES: dict[BlockFace, float] = {
    BlockFace.SKULL: 16.67,
    BlockFace.BOTH_DOWN: 16.67,
    BlockFace.POW: 16.67,
    BlockFace.STUMBLE: 16.67,
    BlockFace.PUSH: 33.33,
}

DEFAULT_DEVIATION_THRESHOLD = 10.0


def deviation(
    theoretical: float,
    actual: float,
    threshold: float = DEFAULT_DEVIATION_THRESHOLD,
) -> Deviation:
    """Classify how far an observed percentage strays from the expected one.

    Args:
        theoretical: Expected percentage
        actual: Observed percentage
        threshold: Difference in percentage points tolerated as normal

    Returns:
        HIGH or LOW when the difference exceeds the threshold, otherwise NORMAL
    """
    if abs(theoretical - actual) > threshold:
        return Deviation.HIGH if actual > theoretical else Deviation.LOW
    return Deviation.NORMAL


def _percent(counts: np.ndarray, total: float) -> np.ndarray:
    if total <= 0:
        return np.zeros_like(counts, dtype=np.float64)
    return counts.astype(np.float64) / total * 100.0


def _zero_counts(keys) -> dict:
    return {key: 0 for key in keys}


def _count_from(record: Mapping[str, Any], key: str) -> int:
    """Non-negative integer counter from a stored record; anything else is zero."""
    value = record.get(key, 0)
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class BlockFaceStat:
    """One row of the theoretical-versus-actual block dice report."""
    face: BlockFace
    count: int
    theoretical: float
    actual: float
    deviation: Deviation


@dataclass
class RollStatistics:
    """Cumulative roll counters for a session or a stored history."""
    block_faces: dict[BlockFace, int] = field(default_factory=lambda: _zero_counts(BlockFace))
    d6_faces: dict[int, int] = field(default_factory=lambda: _zero_counts(D6_FACES))
    two_d6_sums: dict[int, int] = field(default_factory=lambda: _zero_counts(TWO_D6_SUMS))
    injury_results: dict[InjuryResult, int] = field(default_factory=lambda: _zero_counts(InjuryResult))
    casualty_results: dict[CasualtyResult, int] = field(default_factory=lambda: _zero_counts(CasualtyResult))
    armour_breaks: int = 0
    armour_holds: int = 0
    total_rolls: int = 0

    # Action counters are not rolls and leave total_rolls alone
    actions_started: int = 0
    actions_completed: int = 0

    # Recording

    def record_block_face(self, face: BlockFace) -> None:
        if not isinstance(face, BlockFace):
            raise ValueError(f"Not a block face: {face!r}")
        self.block_faces[face] += 1
        self.total_rolls += 1

    def record_plain_die(self, value: int) -> None:
        if value not in self.d6_faces or isinstance(value, bool):
            raise ValueError(f"d6 value must be 1-6, got {value!r}")
        self.d6_faces[value] += 1
        self.total_rolls += 1

    def record_two_die(self, first: int, second: int) -> None:
        """Count the sum of a 2d6 roll."""
        for value in (first, second):
            if value not in self.d6_faces or isinstance(value, bool):
                raise ValueError(f"d6 value must be 1-6, got {value!r}")
        self.two_d6_sums[first + second] += 1
        self.total_rolls += 1

    def record_armour(self, broken: bool) -> None:
        if broken:
            self.armour_breaks += 1
        else:
            self.armour_holds += 1
        self.total_rolls += 1

    def record_injury(self, result: InjuryResult) -> None:
        if not isinstance(result, InjuryResult):
            raise ValueError(f"Not an injury result: {result!r}")
        self.injury_results[result] += 1
        self.total_rolls += 1

    def record_casualty(self, result: CasualtyResult) -> None:
        if not isinstance(result, CasualtyResult):
            raise ValueError(f"Not a casualty result: {result!r}")
        self.casualty_results[result] += 1
        self.total_rolls += 1

    # Totals

    @property
    def block_dice_total(self) -> int:
        return sum(self.block_faces.values())

    @property
    def armour_total(self) -> int:
        return self.armour_breaks + self.armour_holds

    @property
    def injury_total(self) -> int:
        return sum(self.injury_results.values())

    @property
    def casualty_total(self) -> int:
        return sum(self.casualty_results.values())

    # Derived figures

    def percentages(self) -> dict[BlockFace, float]:
        """Share of each block face among all block dice rolled, in percent.

        Every face reads 0 before any block dice have been recorded.
        """
        faces = list(BlockFace)
        counts = np.array([self.block_faces[face] for face in faces], dtype=np.int64)
        actual = _percent(counts, float(counts.sum()))
        return {face: float(value) for face, value in zip(faces, actual)}

    def block_face_report(
        self, threshold: float = DEFAULT_DEVIATION_THRESHOLD
    ) -> list[BlockFaceStat]:
        """Theoretical and actual percentage with a deviation flag per face."""
        actual = self.percentages()
        return [
            BlockFaceStat(
                face=face,
                count=self.block_faces[face],
                theoretical=THEORETICAL_BLOCK_PERCENTAGES[face],
                actual=actual[face],
                deviation=deviation(THEORETICAL_BLOCK_PERCENTAGES[face], actual[face], threshold),
            )
            for face in BlockFace
        ]

    def success_rates(self) -> dict[str, float]:
        """Armour break, injury, casualty and completion rates in percent.

        The armour rate is relative to armour rolls; the others are relative to
        actions started.
        """
        numerators = np.array(
            [self.armour_breaks, self.injury_total, self.casualty_total, self.actions_completed],
            dtype=np.float64,
        )
        denominators = np.array(
            [self.armour_total, self.actions_started, self.actions_started, self.actions_started],
            dtype=np.float64,
        )
        rates = np.divide(
            numerators * 100.0,
            denominators,
            out=np.zeros_like(numerators),
            where=denominators > 0,
        )
        return {
            "armour_break_rate": float(rates[0]),
            "injury_rate": float(rates[1]),
            "casualty_rate": float(rates[2]),
            "completion_rate": float(rates[3]),
        }

    def most_common_rolls(self) -> dict[str, tuple[int, int]]:
        """Most frequent d6 face and 2d6 sum as ``(value, count)``.

        Ties go to the lowest value. With nothing recorded the d6 reports 1
        and the 2d6 reports 7, both with a count of 0.
        """
        result = {}
        for name, counts, default in (
            ("d6", self.d6_faces, 1),
            ("2d6", self.two_d6_sums, 7),
        ):
            values = np.array(list(counts.keys()))
            tallies = np.array(list(counts.values()))
            best = int(np.argmax(tallies))
            if tallies[best] == 0:
                result[name] = (default, 0)
            else:
                result[name] = (int(values[best]), int(tallies[best]))
        return result

    # Persistence format

    def to_record(self) -> dict[str, int]:
        """Flatten the counters into named keys such as ``"block.skull"``."""
        record: dict[str, int] = {}
        for face, count in self.block_faces.items():
            record[f"block.{face.value}"] = count
        for value, count in self.d6_faces.items():
            record[f"d6.{value}"] = count
        for total, count in self.two_d6_sums.items():
            record[f"2d6.{total}"] = count
        record["armour.breaks"] = self.armour_breaks
        record["armour.holds"] = self.armour_holds
        for injury, count in self.injury_results.items():
            record[f"injury.{injury.value}"] = count
        for casualty, count in self.casualty_results.items():
            record[f"casualty.{casualty.value}"] = count
        record["total_rolls"] = self.total_rolls
        record["actions.started"] = self.actions_started
        record["actions.completed"] = self.actions_completed
        return record

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "RollStatistics":
        """Rebuild statistics from a flat record.

        Missing keys count as zero and unknown keys are ignored, so records
        written by older or newer versions still load.
        """
        record = record or {}
        stats = cls()
        for face in BlockFace:
            stats.block_faces[face] = _count_from(record, f"block.{face.value}")
        for value in D6_FACES:
            stats.d6_faces[value] = _count_from(record, f"d6.{value}")
        for total in TWO_D6_SUMS:
            stats.two_d6_sums[total] = _count_from(record, f"2d6.{total}")
        stats.armour_breaks = _count_from(record, "armour.breaks")
        stats.armour_holds = _count_from(record, "armour.holds")
        for injury in InjuryResult:
            stats.injury_results[injury] = _count_from(record, f"injury.{injury.value}")
        for casualty in CasualtyResult:
            stats.casualty_results[casualty] = _count_from(record, f"casualty.{casualty.value}")
        stats.total_rolls = _count_from(record, "total_rolls")
        stats.actions_started = _count_from(record, "actions.started")
        stats.actions_completed = _count_from(record, "actions.completed")
        return stats

    def copy(self) -> "RollStatistics":
        """Independent snapshot of the counters."""
        return RollStatistics.from_record(self.to_record())


class StatisticsManager:
    """Folds roll events into the session's RollStatistics."""

    def __init__(
        self,
        event_manager: "EventManager",
        game_state: "GameState",
        store: Optional["StatisticsStore"] = None,
        statistics: Optional[RollStatistics] = None,
    ):
        self.event_manager = event_manager
        self.state = game_state
        self.store = store
        self.statistics = statistics or RollStatistics()

        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        handlers = {
            EventType.BLOCK_DICE_ROLLED: self._handle_block_dice_rolled,
            EventType.ARMOUR_ROLLED: self._handle_armour_rolled,
            EventType.INJURY_ROLLED: self._handle_injury_rolled,
            EventType.CASUALTY_ROLLED: self._handle_casualty_rolled,
            EventType.ARGUE_THE_CALL_ROLLED: self._handle_argue_the_call_rolled,
            EventType.ACTION_SELECTED: self._handle_action_selected,
            EventType.ACTION_COMPLETED: self._handle_action_completed,
            EventType.STATISTICS_RESET: self._handle_statistics_reset,
        }
        for event_type, handler in handlers.items():
            self.event_manager.subscribe(
                event_type,
                handler,
                subscriber_name=f"StatisticsManager.{event_type.name.lower()}",
            )

    def _emit_log(self, message: str, level: str = "DEBUG", category: str = "STATISTICS") -> None:
        self.event_manager.publish(
            LogMessage(
                action_number=self.state.action_number,
                message=message,
                category=category,
                level=level,
                source="StatisticsManager",
            ),
            source="StatisticsManager",
        )

    # Event handlers

    def _handle_block_dice_rolled(self, event: GameEvent) -> None:
        if isinstance(event, BlockDiceRolled):
            for face in event.roll.faces:
                self.statistics.record_block_face(face)
            self._changed()

    def _handle_armour_rolled(self, event: GameEvent) -> None:
        if isinstance(event, ArmourRolled):
            self.statistics.record_two_die(*event.roll.dice.values)
            self.statistics.record_armour(event.roll.broken)
            self._changed()

    def _handle_injury_rolled(self, event: GameEvent) -> None:
        if isinstance(event, InjuryRolled):
            self.statistics.record_two_die(*event.roll.dice.values)
            self.statistics.record_injury(event.roll.result)
            self._changed()

    def _handle_casualty_rolled(self, event: GameEvent) -> None:
        if isinstance(event, CasualtyRolled):
            self.statistics.record_casualty(event.roll.result)
            if event.roll.lasting_injury is not None:
                self.statistics.record_plain_die(event.roll.lasting_injury.die.total)
            self._changed()

    def _handle_argue_the_call_rolled(self, event: GameEvent) -> None:
        if isinstance(event, ArgueTheCallRolled):
            self.statistics.record_plain_die(event.roll.die.total)
            self._changed()

    def _handle_action_selected(self, event: GameEvent) -> None:
        if isinstance(event, ActionSelected):
            self.statistics.actions_started += 1
            self._changed()

    def _handle_action_completed(self, event: GameEvent) -> None:
        if isinstance(event, ActionCompleted):
            self.statistics.actions_completed += 1
            self._changed()

    def _handle_statistics_reset(self, event: GameEvent) -> None:
        self.reset()

    # Operations

    def reset(self) -> None:
        """Replace the statistics with a freshly zeroed record."""
        self.statistics = RollStatistics()
        if self.store is not None:
            self._clear_store()
        self._emit_log("Statistics reset", level="INFO")
        self._publish_update()

    def load(self) -> RollStatistics:
        """Replace the statistics with what the store holds, if there is a store."""
        if self.store is None:
            return self.statistics
        try:
            self.statistics = self.store.load()
        except (OSError, ValueError) as e:
            self._emit_log(f"Could not load statistics, starting from zero: {e}", "WARNING", "WARNING")
            self.statistics = RollStatistics()
        else:
            self._emit_log(f"Loaded statistics ({self.statistics.total_rolls} rolls)", level="INFO")
        return self.statistics

    def snapshot(self) -> RollStatistics:
        return self.statistics.copy()

    def _changed(self) -> None:
        self._save()
        self._publish_update()

    def _publish_update(self) -> None:
        self.event_manager.publish(
            StatisticsUpdated(
                action_number=self.state.action_number,
                total_rolls=self.statistics.total_rolls,
            ),
            source="StatisticsManager",
        )

    def _save(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.statistics)
        except (OSError, ValueError) as e:
            self._emit_log(f"Failed to save statistics: {e}", "ERROR", "ERROR")

    def _clear_store(self) -> None:
        try:
            self.store.clear()
        except OSError as e:
            self._emit_log(f"Failed to clear stored statistics: {e}", "ERROR", "ERROR")
