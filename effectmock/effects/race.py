"""Race and parallel composites."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Hashable

from ._validators import ensure_non_empty_mapping
from .base import Effect, EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class RaceEffect(EffectBase):
    """Run every entry concurrently; the first to settle wins.

    The runner resumes the task with ``{winning_key: value}``.
    """

    effects: Mapping[Hashable, Effect]

    def __post_init__(self) -> None:
        ensure_non_empty_mapping(self.effects, name="effects")


def _race_mapping(mapping: Mapping[Hashable, Effect] | None, named: dict[str, Effect]) -> dict:
    effects: dict[Hashable, Effect] = dict(mapping or {})
    effects.update(named)
    return effects


def race(mapping: Mapping[Hashable, Effect] | None = None, /, **effects: Effect) -> RaceEffect:
    return create_effect_with_trace(RaceEffect(effects=_race_mapping(mapping, effects)))


def Race(mapping: Mapping[Hashable, Effect] | None = None, /, **effects: Effect) -> RaceEffect:
    return create_effect_with_trace(RaceEffect(effects=_race_mapping(mapping, effects)))


def all_(*effects: Effect) -> list[Effect]:
    """Parallel composite; equivalent to yielding a list literal."""
    return list(effects)


def All(*effects: Effect) -> list[Effect]:
    return list(effects)


__all__ = ["All", "Race", "RaceEffect", "all_", "race"]
