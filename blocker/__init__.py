"""Blocker: seeded dice and rule tables for resolving blocks and fouls."""

from .game.session import Session

__all__ = ["Session"]
