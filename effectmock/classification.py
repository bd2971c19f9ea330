"""Effect classification.

Every value a task yields is one of four shapes: a recognised leaf effect, a
parallel composite (list or tuple), a race composite, or an opaque value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from effectmock.effects import CallEffect, ForkEffect, PutEffect, RaceEffect, TakeEffect
from effectmock.effects.base import IO_MARKER, EffectBase


class EffectKind(Enum):
    PUT = "put"
    TAKE = "take"
    CALL = "call"
    FORK = "fork"


_LEAF_KINDS: tuple[tuple[type[EffectBase], EffectKind], ...] = (
    (PutEffect, EffectKind.PUT),
    (TakeEffect, EffectKind.TAKE),
    (CallEffect, EffectKind.CALL),
    (ForkEffect, EffectKind.FORK),
)


@dataclass(frozen=True)
class Leaf:
    kind: EffectKind
    effect: EffectBase


@dataclass(frozen=True)
class Parallel:
    items: list[Any] | tuple[Any, ...]


@dataclass(frozen=True)
class RaceSet:
    effect: RaceEffect


@dataclass(frozen=True)
class Opaque:
    value: Any


Shape = Leaf | Parallel | RaceSet | Opaque


def _has_marker(value: Any) -> bool:
    return isinstance(value, EffectBase) and getattr(value, IO_MARKER, False) is True


def leaf_kind(value: Any) -> EffectKind | None:
    if not _has_marker(value):
        return None
    for effect_type, kind in _LEAF_KINDS:
        if isinstance(value, effect_type):
            return kind
    return None


def is_put(value: Any) -> bool:
    return leaf_kind(value) is EffectKind.PUT


def is_take(value: Any) -> bool:
    return leaf_kind(value) is EffectKind.TAKE


def is_call(value: Any) -> bool:
    return leaf_kind(value) is EffectKind.CALL


def is_fork(value: Any) -> bool:
    return leaf_kind(value) is EffectKind.FORK


def is_race(value: Any) -> bool:
    return (
        _has_marker(value)
        and isinstance(value, RaceEffect)
        and isinstance(value.effects, Mapping)
    )


def is_parallel(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def classify(value: Any) -> Shape:
    """Tag ``value`` with its effect shape. Pure and total."""
    kind = leaf_kind(value)
    if kind is not None:
        return Leaf(kind=kind, effect=value)
    if is_race(value):
        return RaceSet(effect=value)
    if is_parallel(value):
        return Parallel(items=value)
    return Opaque(value=value)


__all__ = [
    "EffectKind",
    "Leaf",
    "Opaque",
    "Parallel",
    "RaceSet",
    "Shape",
    "classify",
    "is_call",
    "is_fork",
    "is_parallel",
    "is_put",
    "is_race",
    "is_take",
    "leaf_kind",
]
