"""
Base types shared by every effect module.

Effects are plain frozen dataclasses. A value is recognised as an effect by
the ``__effectmock_io__`` marker field, which every subclass inherits.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from effectmock.utils import create_effect_with_trace

E = TypeVar("E", bound="EffectBase")

IO_MARKER = "__effectmock_io__"


@dataclass(frozen=True)
class EffectCreationContext:
    """Context information about where an effect was created."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: list[dict[str, Any]] = field(default_factory=list)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_full(self) -> str:
        """Format the full creation context with stack trace."""
        lines = [f"Effect created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
        return "\n".join(lines)


@dataclass(frozen=True, kw_only=True)
class EffectBase:
    """Base dataclass for effect descriptors yielded by tasks."""

    created_at: EffectCreationContext | None = field(default=None, compare=False, repr=False)
    __effectmock_io__: bool = field(default=True, init=False, repr=False, compare=False)

    def with_created_at(self: E, created_at: EffectCreationContext | None) -> E:
        if created_at is self.created_at:
            return self
        return replace(self, created_at=created_at)


Effect = Any
"""Anything a task may yield: an EffectBase, a list/tuple of effects, or an opaque value."""


__all__ = [
    "IO_MARKER",
    "Effect",
    "EffectBase",
    "EffectCreationContext",
    "create_effect_with_trace",
]
