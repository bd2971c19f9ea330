"""Nested task spawning effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ._validators import ensure_callable, ensure_dict_str_any, ensure_tuple
from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class ForkEffect(EffectBase):
    """Start ``fn(*args, **kwargs)`` as a concurrent task and resume with its handle.

    Attached forks are awaited by the runner before the parent task settles;
    detached ones (``Spawn``) are not.
    """

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    detached: bool = False

    def __post_init__(self) -> None:
        ensure_callable(self.fn, name="fn")
        ensure_tuple(self.args, name="args")
        ensure_dict_str_any(self.kwargs, name="kwargs")


def fork(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> ForkEffect:
    return create_effect_with_trace(ForkEffect(fn=fn, args=args, kwargs=kwargs))


def Fork(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> ForkEffect:
    return create_effect_with_trace(ForkEffect(fn=fn, args=args, kwargs=kwargs))


def spawn(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> ForkEffect:
    return create_effect_with_trace(
        ForkEffect(fn=fn, args=args, kwargs=kwargs, detached=True)
    )


def Spawn(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> ForkEffect:
    return create_effect_with_trace(
        ForkEffect(fn=fn, args=args, kwargs=kwargs, detached=True)
    )


__all__ = ["ForkEffect", "Fork", "Spawn", "fork", "spawn"]
