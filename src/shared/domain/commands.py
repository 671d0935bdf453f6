"""Command primitives for the modular monolith.

A command is an immutable request to change state.  Unlike domain
events (facts), commands may be rejected by their handler.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class Command(BaseModel):
    """Base command (immutable, rejects unknown fields).

    Optional fields are *sparse*: whether the caller supplied a field is
    tracked separately from its value, so ``None`` or ``""`` can be real
    new values instead of meaning "leave unchanged".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def command_name(self) -> str:
        return self.__class__.__name__

    def is_set(self, field: str) -> bool:
        """``True`` when the caller explicitly supplied ``field``."""
        return field in self.model_fields_set

    def changes(self) -> Dict[str, Any]:
        """Explicitly supplied fields and their values."""
        return {name: getattr(self, name) for name in self.model_fields_set}
