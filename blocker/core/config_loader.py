"""
Configuration loader for the resolution engine.

This module handles loading and parsing of the YAML configuration file that
holds seed-word suggestions, log settings, the statistics deviation threshold
and the statistics file location.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

DEFAULT_CONFIG_PATH = "assets/config/blocker.yaml"

DEFAULT_SEED_WORDS = [
    'brave', 'storm', 'flame', 'stone', 'swift', 'honor', 'might', 'glory',
    'fierce', 'noble', 'strong', 'valor', 'power', 'grace', 'force', 'pride',
    'steel', 'blade', 'shield', 'crown', 'heart', 'soul', 'wind', 'light',
    'shadow', 'frost', 'thunder', 'crystal', 'diamond', 'golden', 'silver',
    'crimson', 'azure', 'emerald', 'ivory', 'obsidian', 'amber', 'jade'
]

LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR")

PROJECT_ROOT = Path(__file__).parent.parent.parent


def resolve_project_path(path: str) -> Path:
    """Absolute paths are kept; relative ones are taken from the project root."""
    if os.path.isabs(path):
        return Path(path)
    return PROJECT_ROOT / path


@dataclass
class BlockerConfig:
    """Settings read from the configuration file."""
    seed_words: list[str] = field(default_factory=lambda: list(DEFAULT_SEED_WORDS))
    seed_word_count: int = 3
    max_log_messages: int = 1000
    log_level: str = "INFO"
    debug_events: bool = False
    deviation_threshold: float = 10.0
    statistics_path: Optional[str] = None


class ConfigLoader:
    """Loads engine configuration from a YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._raw: dict[str, Any] = {}
        self.warnings: list[str] = []

    def resolve_path(self) -> Path:
        """Resolve the config path; relative paths are taken from the project root."""
        return resolve_project_path(self.config_path)

    def load_config(self) -> BlockerConfig:
        """
        Load configuration from the YAML file.

        Missing files, unreadable YAML and bad values fall back to defaults;
        each fallback is recorded in ``warnings``.

        Returns:
            BlockerConfig: The loaded configuration
        """
        self.warnings.clear()
        config_file = self.resolve_path()

        if not config_file.exists():
            self.warnings.append(f"Config file not found: {config_file}, using defaults")
            return BlockerConfig()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self._raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.warnings.append(f"Error loading config {config_file}: {e}")
            return BlockerConfig()

        if not isinstance(self._raw, dict):
            self.warnings.append(f"Config {config_file} is not a mapping, using defaults")
            return BlockerConfig()

        return self._parse(self._raw)

    def _parse(self, data: dict[str, Any]) -> BlockerConfig:
        """Parse a configuration mapping, keeping defaults for bad entries."""
        config = BlockerConfig()

        session_section = data.get('session', {}) or {}
        words = session_section.get('seed_words')
        if words is not None:
            if isinstance(words, list) and all(isinstance(w, str) and w.strip() for w in words) and words:
                config.seed_words = list(words)
            else:
                self.warnings.append("session.seed_words must be a non-empty list of words")
        config.seed_word_count = self._positive_int(
            session_section, 'seed_word_count', config.seed_word_count, "session"
        )

        log_section = data.get('logging', {}) or {}
        config.max_log_messages = self._positive_int(
            log_section, 'max_messages', config.max_log_messages, "logging"
        )
        level = log_section.get('level', config.log_level)
        if isinstance(level, str) and level.upper() in LOG_LEVEL_NAMES:
            config.log_level = level.upper()
        else:
            self.warnings.append(f"Unknown log level '{level}', using {config.log_level}")
        config.debug_events = bool(log_section.get('debug_events', config.debug_events))

        stats_section = data.get('statistics', {}) or {}
        threshold = stats_section.get('deviation_threshold', config.deviation_threshold)
        if isinstance(threshold, (int, float)) and not isinstance(threshold, bool) and threshold >= 0:
            config.deviation_threshold = float(threshold)
        else:
            self.warnings.append(f"Invalid deviation_threshold '{threshold}'")
        path = stats_section.get('path')
        if path is not None:
            config.statistics_path = str(path)

        return config

    def _positive_int(self, section: dict[str, Any], key: str, default: int, section_name: str) -> int:
        value = section.get(key, default)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        self.warnings.append(f"{section_name}.{key} must be a positive integer, got {value!r}")
        return default


def load_config(config_path: Optional[str] = None) -> tuple[BlockerConfig, list[str]]:
    """Load configuration and return it with any warnings raised on the way."""
    loader = ConfigLoader(config_path)
    config = loader.load_config()
    return config, list(loader.warnings)
