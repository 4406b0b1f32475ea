"""Storage backends for gameify."""

from gameify.storage.base import GameStore
from gameify.storage.memory import InMemoryGameStore

__all__ = ["GameStore", "InMemoryGameStore"]
