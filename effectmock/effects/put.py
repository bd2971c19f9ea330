"""Dispatch effects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class PutEffect(EffectBase):
    """Dispatch ``action`` to the runner's message channel."""

    action: Any

    @property
    def action_type(self) -> Any:
        return message_type(self.action)


def message_type(message: Any) -> Any:
    """Return the ``type`` of a message given as a mapping or an object."""
    if isinstance(message, dict):
        return message.get("type")
    return getattr(message, "type", None)


def put(action: Any) -> PutEffect:
    return create_effect_with_trace(PutEffect(action=action))


def Put(action: Any) -> PutEffect:
    return create_effect_with_trace(PutEffect(action=action))


__all__ = ["PutEffect", "Put", "message_type", "put"]
