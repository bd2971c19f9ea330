"""Effect matchers and the recursive matcher/rewriter.

Leaf matchers are frozen dataclasses so that two matchers built from the same
arguments compare equal; stub replacement relies on that equality.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, replace
from typing import Any, Callable

from effectmock.classification import (
    Leaf,
    Opaque,
    Parallel,
    RaceSet,
    classify,
    is_call,
    is_fork,
    is_put,
    is_take,
)
from effectmock.effects import CallEffect, message_type
from effectmock.utils import is_match

Matcher = Callable[[Any], bool]
Replacement = Callable[[Any], Any]


@dataclass(frozen=True)
class EffectMatcher:
    """Matches an effect deep-equal to ``effect``."""

    effect: Any

    def __call__(self, effect: Any) -> bool:
        return effect == self.effect


@dataclass(frozen=True)
class PutActionMatcher:
    """Matches a dispatch of ``action``, or of any message of that type when given a str."""

    action: Any

    def __call__(self, effect: Any) -> bool:
        if not is_put(effect):
            return False
        if isinstance(self.action, str):
            return message_type(effect.action) == self.action
        return effect.action == self.action


@dataclass(frozen=True)
class TakeActionMatcher:
    pattern: Any

    def __call__(self, effect: Any) -> bool:
        return is_take(effect) and effect.pattern == self.pattern


@dataclass(frozen=True)
class CallMatcher:
    fn: Callable[..., Any]

    def __call__(self, effect: Any) -> bool:
        return is_call(effect) and effect.fn == self.fn


@dataclass(frozen=True)
class CallWithArgsMatcher:
    """Matches a call whose positional arguments start with ``args`` (compared partially)."""

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()

    def __call__(self, effect: Any) -> bool:
        return is_call(effect) and effect.fn == self.fn and is_match(effect.args, self.args)


@dataclass(frozen=True)
class CallWithExactArgsMatcher:
    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()

    def __call__(self, effect: Any) -> bool:
        return (
            is_call(effect)
            and effect.fn == self.fn
            and tuple(effect.args) == tuple(self.args)
        )


@dataclass(frozen=True)
class ForkGeneratorMatcher:
    """Matches a fork whose routine is a generator function."""

    def __call__(self, effect: Any) -> bool:
        return is_fork(effect) and inspect.isgeneratorfunction(effect.fn)


def put_action(action: Any) -> PutActionMatcher:
    return PutActionMatcher(action)


def take_action(pattern: Any) -> TakeActionMatcher:
    return TakeActionMatcher(pattern)


def effect(effect_to_match: Any) -> EffectMatcher:
    return EffectMatcher(effect_to_match)


def call(fn: Callable[..., Any]) -> CallMatcher:
    return CallMatcher(fn)


def call_with_args(fn: Callable[..., Any], args: Any = ()) -> CallWithArgsMatcher:
    return CallWithArgsMatcher(fn, tuple(args))


def call_with_exact_args(fn: Callable[..., Any], args: Any = ()) -> CallWithExactArgsMatcher:
    return CallWithExactArgsMatcher(fn, tuple(args))


def fork_generator_fn() -> ForkGeneratorMatcher:
    return ForkGeneratorMatcher()


@dataclass(frozen=True)
class RecursiveMatcher:
    """Matches when ``leaf`` matches the effect or anything nested in its composites.

    Race entries are scanned in insertion order and parallel items in sequence
    order. Forked routines are matched only as leaves, never by what they will
    yield later.
    """

    leaf: Matcher

    def __call__(self, effect: Any) -> bool:
        if self.leaf(effect):
            return True
        shape = classify(effect)
        if isinstance(shape, RaceSet):
            return any(self(entry) for entry in shape.effect.effects.values())
        if isinstance(shape, Parallel):
            return any(self(item) for item in shape.items)
        if isinstance(shape, (Leaf, Opaque)):
            return False
        raise AssertionError(f"unhandled effect shape {type(shape).__name__}")


def recursive(matcher: Matcher) -> RecursiveMatcher:
    if isinstance(matcher, RecursiveMatcher):
        return matcher
    return RecursiveMatcher(matcher)


def rewrite(matcher: Matcher, effect: Any, replacement: Replacement) -> Any:
    """Replace every sub-effect matched by ``matcher`` with ``replacement(sub_effect)``.

    Composites on the path to a match are rebuilt; ``effect`` itself is never
    mutated. A composite with no match below it is returned as is.
    """
    if matcher(effect):
        return replacement(effect)
    shape = classify(effect)
    if isinstance(shape, RaceSet):
        entries = shape.effect.effects
        rewritten = {key: rewrite(matcher, entry, replacement) for key, entry in entries.items()}
        if all(rewritten[key] is entries[key] for key in entries):
            return effect
        return replace(shape.effect, effects=rewritten)
    if isinstance(shape, Parallel):
        items = [rewrite(matcher, item, replacement) for item in shape.items]
        if all(new is old for new, old in zip(items, shape.items)):
            return effect
        return tuple(items) if isinstance(shape.items, tuple) else items
    return effect


def replace_call_target(new_fn: Callable[..., Any]) -> Replacement:
    """Replacement producing a copy of the matched call effect that invokes ``new_fn``."""

    def _replace(matched: CallEffect) -> CallEffect:
        return replace(matched, fn=new_fn)

    return _replace


__all__ = [
    "CallMatcher",
    "CallWithArgsMatcher",
    "CallWithExactArgsMatcher",
    "EffectMatcher",
    "ForkGeneratorMatcher",
    "Matcher",
    "PutActionMatcher",
    "RecursiveMatcher",
    "Replacement",
    "TakeActionMatcher",
    "call",
    "call_with_args",
    "call_with_exact_args",
    "effect",
    "fork_generator_fn",
    "put_action",
    "recursive",
    "replace_call_target",
    "rewrite",
]
