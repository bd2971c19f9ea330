"""Cooperative driver that records, observes and rewrites a task's effects.

A ``Driver`` sits between a generator task and the runner that executes its
effects. Each step resumes the task, records what it yields into the shared
trace, schedules matching listeners for a later turn, folds every stub over
the effect and hands the result to the runner.
"""

from __future__ import annotations

import asyncio
import functools
from collections import deque
from collections.abc import Generator as GeneratorABC
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Generator, cast

from loguru import logger

from effectmock.effects import ForkEffect
from effectmock.errors import InvalidStubError
from effectmock.matchers import Matcher, Replacement, fork_generator_fn, recursive, rewrite

_logger = logger.bind(component="driver")


@dataclass(frozen=True)
class Resumed:
    value: Any = None


@dataclass(frozen=True)
class Failed:
    error: BaseException


StepOutcome = Resumed | Failed


@dataclass(frozen=True)
class Yielded:
    effect: Any


@dataclass(frozen=True)
class Done:
    value: Any


StepResult = Yielded | Done


class DriverState(Enum):
    READY = "ready"
    STEPPING = "stepping"
    WAITING = "waiting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Listener:
    matcher: Matcher
    callback: Callable[[Any], Any]


@dataclass(frozen=True)
class Stub:
    matcher: Matcher
    replacement: Replacement


class MockContext:
    """State shared by a mocked task and every subtask it forks.

    Holds the trace, the listeners and the stubs. Position 0 of ``stubs`` is
    always the fork interceptor, so forked generator functions are driven over
    this same context.
    """

    def __init__(self, defer: Callable[..., None] | None = None) -> None:
        self.trace: list[Any] = []
        self.listeners: list[Listener] = []
        self.stubs: list[Stub] = []
        self.pending: deque[Callable[[], Any]] = deque()
        self._defer = defer
        self.stubs.append(Stub(fork_generator_fn(), self.intercept_fork))

    def add_listener(self, matcher: Matcher, callback: Callable[[Any], Any]) -> Listener:
        listener = Listener(matcher, callback)
        self.listeners.append(listener)
        _logger.debug("Registered listener {}", matcher)
        return listener

    def add_stub(self, matcher: Matcher, replacement: Replacement) -> int:
        """Register a stub and return its position in the stub list.

        A stub whose matcher equals an existing one takes its place.
        """
        if not callable(replacement):
            raise InvalidStubError(replacement)
        stub = Stub(matcher, replacement)
        for position, existing in enumerate(self.stubs):
            if existing.matcher == matcher:
                self.stubs[position] = stub
                _logger.debug("Replaced stub {} at position {}", matcher, position)
                return position
        self.stubs.append(stub)
        _logger.debug("Registered stub {} at position {}", matcher, len(self.stubs) - 1)
        return len(self.stubs) - 1

    def reset_stubs(self) -> None:
        del self.stubs[1:]

    def clear_trace(self) -> None:
        self.trace.clear()

    def defer(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback(*args)`` on a later turn, never inline."""
        if self._defer is not None:
            self._defer(callback, *args)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.pending.append(functools.partial(callback, *args))
            return
        loop.call_soon(callback, *args)

    def run_pending_listeners(self) -> int:
        """Run callbacks deferred while no event loop was running."""
        count = 0
        while self.pending:
            self.pending.popleft()()
            count += 1
        return count

    def wrap(self, routine: Callable[..., Any]) -> Callable[..., Generator[Any, Any, Any]]:
        """Return a routine that drives ``routine`` over this context."""
        context = self

        @functools.wraps(routine)
        def mocked_routine(*args: Any, **kwargs: Any) -> Generator[Any, Any, Any]:
            return Driver(routine, context, args, kwargs).run()

        return mocked_routine

    def intercept_fork(self, effect: ForkEffect) -> ForkEffect:
        return replace(effect, fn=self.wrap(effect.fn))


def _to_generator(task: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Generator[Any, Any, Any]:
    if isinstance(task, GeneratorABC):
        return cast(Generator[Any, Any, Any], task)
    if callable(task):
        result = task(*args, **kwargs)
        if isinstance(result, GeneratorABC):
            return cast(Generator[Any, Any, Any], result)
        raise TypeError(f"Callable did not return a generator, got {type(result).__name__}")
    raise TypeError(f"Cannot convert {type(task).__name__} to generator")


class Driver:
    """Steps one task, one suspension at a time, over a shared ``MockContext``."""

    def __init__(
        self,
        task: Any,
        context: MockContext,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.context = context
        self.state = DriverState.READY
        self._task = task
        self._args = args
        self._kwargs = kwargs or {}
        self._generator: Generator[Any, Any, Any] | None = None

    def step(self, outcome: StepOutcome | None = None) -> StepResult:
        """Resume the task with ``outcome`` and return what to forward to the runner.

        A stub that raises while rewriting throws its error into the task at
        the same suspension point. Errors the task does not handle propagate.
        """
        if self._generator is None:
            self._generator = _to_generator(self._task, self._args, self._kwargs)
        generator = self._generator

        while True:
            self.state = DriverState.STEPPING
            try:
                if isinstance(outcome, Failed):
                    yielded = generator.throw(outcome.error)
                else:
                    yielded = generator.send(outcome.value if outcome is not None else None)
            except StopIteration as stop:
                self.state = DriverState.DONE
                return Done(stop.value)
            except BaseException:
                self.state = DriverState.FAILED
                raise

            self._record(yielded)
            try:
                forwarded = self._apply_stubs(yielded)
            except Exception as error:
                _logger.debug("Stub raised {!r}; throwing into task", error)
                outcome = Failed(error)
                continue

            self.state = DriverState.WAITING
            return Yielded(forwarded)

    def run(self) -> Generator[Any, Any, Any]:
        """Generator the real runner drives in place of the wrapped task."""
        outcome: StepOutcome | None = None
        try:
            while True:
                result = self.step(outcome)
                if isinstance(result, Done):
                    return result.value
                try:
                    value = yield result.effect
                except Exception as error:
                    outcome = Failed(error)
                else:
                    outcome = Resumed(value)
        finally:
            self.close()

    def close(self) -> None:
        if self._generator is not None:
            self._generator.close()

    def _record(self, effect: Any) -> None:
        context = self.context
        context.trace.append(effect)
        _logger.debug("Recorded effect #{}: {!r}", len(context.trace) - 1, effect)
        for listener in list(context.listeners):
            if recursive(listener.matcher)(effect):
                _logger.debug("Listener {} fires on {!r}", listener.matcher, effect)
                context.defer(listener.callback, effect)

    def _apply_stubs(self, effect: Any) -> Any:
        for stub in list(self.context.stubs):
            rewritten = rewrite(stub.matcher, effect, stub.replacement)
            if rewritten is not effect:
                _logger.debug("Stub {} rewrote {!r}", stub.matcher, effect)
            effect = rewritten
        return effect


__all__ = [
    "Done",
    "Driver",
    "DriverState",
    "Failed",
    "Listener",
    "MockContext",
    "Resumed",
    "StepOutcome",
    "StepResult",
    "Stub",
    "Yielded",
]
