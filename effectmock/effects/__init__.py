"""Public effect API for effectmock."""

from __future__ import annotations

from .base import IO_MARKER, Effect, EffectBase, EffectCreationContext
from .call import Call, CallEffect, call
from .fork import Fork, ForkEffect, Spawn, fork, spawn
from .put import Put, PutEffect, message_type, put
from .race import All, Race, RaceEffect, all_, race
from .take import Pattern, Take, TakeEffect, take

__all__ = [
    "IO_MARKER",
    "All",
    "Call",
    "CallEffect",
    "Effect",
    "EffectBase",
    "EffectCreationContext",
    "Fork",
    "ForkEffect",
    "Pattern",
    "Put",
    "PutEffect",
    "Race",
    "RaceEffect",
    "Spawn",
    "Take",
    "TakeEffect",
    "all_",
    "call",
    "fork",
    "message_type",
    "put",
    "race",
    "spawn",
    "take",
]
