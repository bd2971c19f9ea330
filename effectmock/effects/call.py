"""Function invocation effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ._validators import ensure_callable, ensure_dict_str_any, ensure_tuple
from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class CallEffect(EffectBase):
    """Invoke ``fn(*args, **kwargs)`` and resume with its result."""

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ensure_callable(self.fn, name="fn")
        ensure_tuple(self.args, name="args")
        ensure_dict_str_any(self.kwargs, name="kwargs")


def call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> CallEffect:
    return create_effect_with_trace(CallEffect(fn=fn, args=args, kwargs=kwargs))


def Call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> CallEffect:
    return create_effect_with_trace(CallEffect(fn=fn, args=args, kwargs=kwargs))


__all__ = ["CallEffect", "Call", "call"]
