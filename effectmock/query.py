"""Queries over recorded traces.

Results are computed from the trace at call time and are never cached; only
the matched positions of an already built ``QueryResult`` are fixed.
"""

from __future__ import annotations

from functools import cached_property
from typing import Any, Callable, NamedTuple, Sequence

from effectmock import matchers
from effectmock.matchers import Matcher, recursive

Bounds = Callable[[Sequence[Any]], "tuple[int, int | None]"]


class Hit(NamedTuple):
    """A matched position, tagged with the trace it indexes into."""

    trace: Sequence[Any]
    index: int
    effect: Any


def find_all_indexes(
    effects: Sequence[Any],
    matcher: Matcher,
    start: int = 0,
    last: int | None = None,
) -> list[int]:
    """Indexes of ``effects`` matched by ``matcher`` within ``[start, last]``."""
    if last is None or last > len(effects) - 1:
        last = len(effects) - 1
    return [index for index in range(max(start, 0), last + 1) if matcher(effects[index])]


class TraceView:
    """Live view over a single trace."""

    def __init__(self, get_effects: Callable[[], Sequence[Any]]) -> None:
        self._get_effects = get_effects

    def search(self, matcher: Matcher, bounds: Bounds) -> list[Hit]:
        effects = self._get_effects()
        start, last = bounds(effects)
        return [
            Hit(effects, index, effects[index])
            for index in find_all_indexes(effects, matcher, start, last)
        ]


class GroupTraceView:
    """Concatenation of several task views; indexes stay local to each task."""

    def __init__(self, get_views: Callable[[], Sequence[TraceView]]) -> None:
        self._get_views = get_views

    def search(self, matcher: Matcher, bounds: Bounds) -> list[Hit]:
        hits: list[Hit] = []
        for view in self._get_views():
            hits.extend(view.search(matcher, bounds))
        return hits


View = TraceView | GroupTraceView


def _everything(effect: Any) -> bool:
    return True


class Queries:
    """Base queries restricted to the inclusive window ``[start, last]``.

    ``bounds`` overrides the window per trace; navigation uses it so that each
    task of a group is windowed by its own matches.
    """

    def __init__(
        self,
        view: View,
        start: int = 0,
        last: int | None = None,
        *,
        bounds: Bounds | None = None,
    ) -> None:
        self._view = view
        self._bounds: Bounds = bounds or (lambda trace: (start, last))

    def _query(self, matcher: Matcher) -> QueryResult:
        return QueryResult(self._view, self._view.search(recursive(matcher), self._bounds))

    def all(self) -> QueryResult:
        return QueryResult(self._view, self._view.search(_everything, self._bounds))

    def effect(self, effect: Any) -> QueryResult:
        return self._query(matchers.effect(effect))

    def put_action(self, action: Any) -> QueryResult:
        return self._query(matchers.put_action(action))

    def take_action(self, pattern: Any) -> QueryResult:
        return self._query(matchers.take_action(pattern))

    def call(self, fn: Callable[..., Any]) -> QueryResult:
        return self._query(matchers.call(fn))

    def call_with_args(self, fn: Callable[..., Any], *args: Any) -> QueryResult:
        return self._query(matchers.call_with_args(fn, args))

    def call_with_exact_args(self, fn: Callable[..., Any], *args: Any) -> QueryResult:
        return self._query(matchers.call_with_exact_args(fn, args))


class QueryResult(Queries):
    """Matched trace positions, with navigation relative to them.

    The inherited base queries search the whole trace; ``followed_by`` and
    ``preceded_by`` search only after the last match or before the first one
    of each trace. A trace without matches is searched from index 0 by
    ``followed_by`` and up to index 0 by ``preceded_by``.
    """

    def __init__(self, view: View, hits: Sequence[Hit]) -> None:
        super().__init__(view)
        self._hits = list(hits)
        self.indexes = [hit.index for hit in self._hits]
        self.effects = [hit.effect for hit in self._hits]
        self.count = len(self._hits)
        self.is_present = self.count > 0
        self.not_present = not self.is_present

    def __repr__(self) -> str:
        return f"QueryResult(indexes={self.indexes!r})"

    def number(self, position: int) -> QueryResult:
        if 0 <= position < self.count:
            return QueryResult(self._view, [self._hits[position]])
        return QueryResult(self._view, [])

    def first(self) -> QueryResult:
        return self.number(0)

    def last(self) -> QueryResult:
        return self.number(self.count - 1)

    @cached_property
    def followed_by(self) -> Queries:
        latest: dict[int, int] = {}
        for hit in self._hits:
            key = id(hit.trace)
            latest[key] = max(hit.index, latest.get(key, hit.index))

        def bounds(trace: Sequence[Any]) -> tuple[int, int | None]:
            if id(trace) in latest:
                return latest[id(trace)] + 1, None
            return 0, None

        return Queries(self._view, bounds=bounds)

    @cached_property
    def preceded_by(self) -> Queries:
        earliest: dict[int, int] = {}
        for hit in self._hits:
            key = id(hit.trace)
            earliest[key] = min(hit.index, earliest.get(key, hit.index))

        def bounds(trace: Sequence[Any]) -> tuple[int, int | None]:
            if id(trace) in earliest:
                return 0, earliest[id(trace)] - 1
            return 0, 0

        return Queries(self._view, bounds=bounds)


__all__ = [
    "GroupTraceView",
    "Hit",
    "Queries",
    "QueryResult",
    "TraceView",
    "find_all_indexes",
]
