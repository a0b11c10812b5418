"""
Log management for diagnostics and the player-facing action log.

Components never print or use a logger directly: they publish ``LogMessage``
events, and this manager buffers them with categorization, level filtering
and on-demand saving. The action log (what the coach sees after each roll)
arrives through ``ActionLogged`` events and is kept append-only.
"""
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

from ...core.data import ActionType, RollPayload
from ...core.engine.game_state import Phase
from ...core.events.events import (
    ActionLogged,
    EventType,
    LogMessage as LogEvent,
)

if TYPE_CHECKING:
    from ...core.events.event_manager import EventManager


class LogCategory(Enum):
    """Categories for log messages."""
    SYSTEM = auto()      # Session start, configuration, persistence
    ACTION = auto()      # Action selection and completion
    DICE = auto()        # Block dice and plain dice
    ARMOUR = auto()      # Armour rolls
    INJURY = auto()      # Injury rolls
    CASUALTY = auto()    # Casualty table and apothecary
    STATISTICS = auto()  # Statistics updates and resets
    PHASE = auto()       # Phase transitions
    DEBUG = auto()
    WARNING = auto()
    ERROR = auto()


CATEGORY_TAGS = {
    LogCategory.SYSTEM: "SYS",
    LogCategory.ACTION: "ACT",
    LogCategory.DICE: "DIC",
    LogCategory.ARMOUR: "ARM",
    LogCategory.INJURY: "INJ",
    LogCategory.CASUALTY: "CAS",
    LogCategory.STATISTICS: "STA",
    LogCategory.PHASE: "PHS",
    LogCategory.DEBUG: "DBG",
    LogCategory.WARNING: "WRN",
    LogCategory.ERROR: "ERR",
}


class LogLevel(Enum):
    """Log levels for filtering."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def parse(cls, name: Optional[str], default: Optional["LogLevel"] = None) -> "LogLevel":
        """Level from its name, falling back to ``default`` (INFO) when unknown."""
        try:
            return cls[(name or "").upper()]
        except KeyError:
            return default or cls.INFO


@dataclass
class LogMessage:
    """A single diagnostic message with metadata."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    source: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        """Format the message for display."""
        parts = []

        if include_timestamp:
            parts.append(f"[{self.timestamp.strftime('%H:%M:%S')}]")

        if include_category:
            parts.append(f"[{CATEGORY_TAGS.get(self.category, '???')}]")

        parts.append(self.text)
        return " ".join(parts)


@dataclass(frozen=True)
class ActionLogEntry:
    """One line of the action log shown to the coach."""
    entry_id: int
    phase: Phase
    action_type: Optional[ActionType]
    description: str
    icon: str
    payload: Optional[RollPayload] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return f"{self.icon} {self.description}"


class LogManager:
    """Buffers diagnostic messages and keeps the action log."""

    def __init__(
        self,
        event_manager: "EventManager",
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO,
        log_dir: str = "logs",
    ):
        """Initialize the log manager.

        Args:
            event_manager: Event manager delivering log events (required)
            max_messages: Maximum number of diagnostic messages kept in the buffer
            default_level: Minimum level returned by ``get_messages``
            log_dir: Directory that ``save_log_to_file`` writes into
        """
        self.event_manager = event_manager
        self.messages: deque[LogMessage] = deque(maxlen=max_messages)
        self.action_log: list[ActionLogEntry] = []
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)
        self.log_dir = log_dir

        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        """Set up event subscriptions for centralized logging."""
        self.event_manager.subscribe(
            EventType.LOG_MESSAGE,
            self._handle_log_message_event,
            subscriber_name="LogManager.log_message"
        )
        self.event_manager.subscribe(
            EventType.ACTION_LOGGED,
            self._handle_action_logged_event,
            subscriber_name="LogManager.action_logged"
        )

    def _handle_log_message_event(self, event) -> None:
        """Handle log message events from the event system."""
        if isinstance(event, LogEvent):
            try:
                category = LogCategory[event.category.upper()]
            except (KeyError, AttributeError):
                category = LogCategory.SYSTEM

            self.messages.append(
                LogMessage(
                    text=event.message,
                    category=category,
                    level=LogLevel.parse(event.level),
                    source=event.source,
                )
            )

    def _handle_action_logged_event(self, event) -> None:
        if isinstance(event, ActionLogged):
            self.action_log.append(event.entry)

    def log(
        self,
        text: str,
        category: LogCategory = LogCategory.SYSTEM,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        """Add a message to the buffer directly."""
        self.messages.append(LogMessage(text=text, category=category, level=level))

    def system(self, text: str) -> None:
        self.log(text, LogCategory.SYSTEM)

    def debug(self, text: str) -> None:
        self.log(text, LogCategory.DEBUG, LogLevel.DEBUG)

    def warning(self, text: str) -> None:
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def recent_entries(self, count: int = 10) -> list[ActionLogEntry]:
        """Most recent action log entries, oldest first."""
        if count <= 0:
            return []
        return self.action_log[-count:]

    def get_messages(
        self,
        count: Optional[int] = None,
        categories: Optional[set[LogCategory]] = None,
    ) -> list[LogMessage]:
        """Get recent messages filtered by category and level.

        Args:
            count: Maximum number of messages to return (None for all)
            categories: Set of categories to include (None for all enabled)

        Returns:
            List of recent messages
        """
        wanted = categories or self.enabled_categories
        filtered = [
            msg for msg in self.messages
            if msg.category in wanted
            and msg.category in self.enabled_categories
            and msg.level.value >= self.log_level.value
        ]

        if count is not None and count < len(filtered):
            return filtered[-count:]
        return filtered

    def clear(self) -> None:
        """Clear diagnostic messages. The action log is kept."""
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        self.log_level = level

    def is_debug_enabled(self) -> bool:
        """Check if debug messages are currently returned."""
        return LogCategory.DEBUG in self.enabled_categories and self.log_level == LogLevel.DEBUG

    def toggle_debug(self) -> None:
        """Toggle debug message visibility."""
        if self.is_debug_enabled():
            self.disable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.INFO)
        else:
            self.enable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.DEBUG)

    def save_log_to_file(self) -> Optional[str]:
        """Save the action log and all buffered messages to a timestamped file.

        Filters are ignored: every buffered message is written.

        Returns:
            Path of the written file, or None if writing failed
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(self.log_dir, f"blocker_{timestamp}.log")

        try:
            os.makedirs(self.log_dir, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Blocker - Session Log\n")
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 60 + "\n\n")

                f.write("Action log\n")
                f.write("-" * 60 + "\n")
                if not self.action_log:
                    f.write("No actions logged.\n")
                for entry in self.action_log:
                    f.write(f"#{entry.entry_id} [{entry.phase.value}] {entry.format()}\n")

                f.write("\nDiagnostics\n")
                f.write("-" * 60 + "\n")
                if not self.messages:
                    f.write("No messages to save.\n")
                for msg in self.messages:
                    timestamp_str = msg.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                    f.write(f"[{timestamp_str}] [{msg.category.name}] [{msg.level.name}] {msg.text}\n")
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return None

        self.system(f"Session log saved to {filepath}")
        return filepath
