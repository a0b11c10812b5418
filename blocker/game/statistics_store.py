"""
Persistence for roll statistics.

Statistics are stored as a flat mapping of named counters, so adding a counter
later never breaks an existing file: missing keys load as zero and unknown
keys are ignored.
"""
from pathlib import Path
from typing import Optional, Protocol, Union

import yaml

from .managers.statistics_manager import RollStatistics


class StatisticsStore(Protocol):
    """Anything that can load, save and clear a RollStatistics record."""

    def load(self) -> RollStatistics: ...

    def save(self, statistics: RollStatistics) -> None: ...

    def clear(self) -> None: ...


class YamlStatisticsStore:
    """Keeps statistics in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> RollStatistics:
        """Read the stored statistics.

        Returns:
            The stored counters, or zeroed statistics when the file does not exist

        Raises:
            ValueError: If the file is not valid YAML or does not hold a mapping
        """
        if not self.path.exists():
            return RollStatistics()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                record = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid statistics file {self.path}: {e}") from e

        if record is None:
            return RollStatistics()
        if not isinstance(record, dict):
            raise ValueError(f"Statistics file {self.path} must contain a mapping")
        return RollStatistics.from_record(record)

    def save(self, statistics: RollStatistics) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(statistics.to_record(), f, sort_keys=False)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class MemoryStatisticsStore:
    """Keeps the last saved record in memory."""

    def __init__(self, record: Optional[dict] = None):
        self.record: Optional[dict] = dict(record) if record is not None else None
        self.saves = 0

    def load(self) -> RollStatistics:
        return RollStatistics.from_record(self.record)

    def save(self, statistics: RollStatistics) -> None:
        self.record = statistics.to_record()
        self.saves += 1

    def clear(self) -> None:
        self.record = None
