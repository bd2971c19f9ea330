"""Effects that wait for a dispatched message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from ._validators import ensure_pattern
from .base import EffectBase, create_effect_with_trace

Pattern = Union[str, Callable[[Any], bool], list, tuple]


@dataclass(frozen=True)
class TakeEffect(EffectBase):
    """Suspend until a message matching ``pattern`` is dispatched."""

    pattern: Pattern = "*"

    def __post_init__(self) -> None:
        ensure_pattern(self.pattern, name="pattern")


def take(pattern: Pattern = "*") -> TakeEffect:
    return create_effect_with_trace(TakeEffect(pattern=pattern))


def Take(pattern: Pattern = "*") -> TakeEffect:
    return create_effect_with_trace(TakeEffect(pattern=pattern))


__all__ = ["Pattern", "TakeEffect", "Take", "take"]
