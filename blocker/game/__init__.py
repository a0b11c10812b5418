"""Rules and orchestration.

- dice.py: Dice engine over the seeded random source
- rule_tables.py: Armour, injury, casualty, lasting injury and argue-the-call tables
- skills.py: Skill transforms and roll modifiers
- statistics_store.py: Statistics persistence
- managers/: Phase, statistics and log managers
- session.py: Session facade exposing the coach's operations
"""

from .dice import DiceEngine
from .session import Session
from .skills import NO_SKILLS, Skills
from .statistics_store import MemoryStatisticsStore, StatisticsStore, YamlStatisticsStore

__all__ = [
    "DiceEngine",
    "Session",
    "NO_SKILLS",
    "Skills",
    "MemoryStatisticsStore",
    "StatisticsStore",
    "YamlStatisticsStore",
]
