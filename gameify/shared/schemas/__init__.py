"""Shared schemas."""

from gameify.shared.schemas.base import BaseSchema, FrozenSchema

__all__ = ["BaseSchema", "FrozenSchema"]
