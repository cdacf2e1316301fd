"""
Exceptions raised by cowboy_ble.

Nothing in the package catches these; they always reach the caller.
"""

from __future__ import annotations

from typing import Any


class CowboyError(Exception):
    """Base class for all cowboy_ble errors."""


class ValidationError(CowboyError, ValueError):
    """A value cannot be represented on the wire."""


class InvalidRangeError(ValidationError):
    """A bounded value was constructed outside ``[min, max]``."""

    def __init__(self, value: int, min: int, max: int) -> None:
        self.value = value
        self.min = min
        self.max = max
        super().__init__(f"Value {value} out of range [{min}, {max}]")


class EncodeError(CowboyError):
    """A command cannot be turned into a packet."""


class StrictlyReadError(EncodeError):
    """The command is only ever read via GATT read, never written."""

    def __init__(self, command: Any) -> None:
        self.command = command
        super().__init__(
            f"{type(command).__name__} is strictly read, no instruction to encode"
        )
