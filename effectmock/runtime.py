"""Asyncio runner for the effectmock effect vocabulary.

The mocking layer only forwards effects; this module is the runner that
executes them, so mocked tasks can be exercised end to end. Each effect
either resumes the task with a value or throws an error into it.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from collections.abc import Generator as GeneratorABC
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar, cast

from loguru import logger

from effectmock.classification import Leaf, Opaque, Parallel, RaceSet, classify
from effectmock.effects import CallEffect, ForkEffect, PutEffect, TakeEffect, message_type

_logger = logger.bind(component="runtime")

T = TypeVar("T")


@dataclass
class RunResult(Generic[T]):
    value: T | None = None
    error: BaseException | None = None
    dispatched: list[Any] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return cast(T, self.value)


def matches_pattern(pattern: Any, message: Any) -> bool:
    """``"*"`` matches everything, a str matches the message type, a callable is a predicate."""
    if isinstance(pattern, (list, tuple)):
        return any(matches_pattern(item, message) for item in pattern)
    if pattern == "*":
        return True
    if isinstance(pattern, str):
        return message_type(message) == pattern
    if callable(pattern):
        return bool(pattern(message))
    return False


class Channel:
    """Message bus connecting dispatches to waiting takers.

    A take only sees messages dispatched after it started waiting.
    """

    def __init__(self) -> None:
        self.dispatched: list[Any] = []
        self._takers: list[tuple[Any, asyncio.Future[Any]]] = []

    def put(self, message: Any) -> None:
        self.dispatched.append(message)
        waiting, self._takers = self._takers, []
        for pattern, future in waiting:
            if future.done():
                continue
            if matches_pattern(pattern, message):
                future.set_result(message)
            else:
                self._takers.append((pattern, future))

    def take(self, pattern: Any) -> asyncio.Future[Any]:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._takers.append((pattern, future))
        return future

    @property
    def waiting(self) -> int:
        return sum(1 for _, future in self._takers if not future.done())


class Runtime:
    """Runs generator tasks, executing every effect they yield."""

    def __init__(self, channel: Channel | None = None) -> None:
        self.channel = channel or Channel()
        self._attached: list[asyncio.Task[Any]] = []

    def dispatch(self, message: Any) -> None:
        """Dispatch ``message`` from outside any task."""
        self.channel.put(message)

    async def run(self, task: Any, *args: Any, **kwargs: Any) -> RunResult[Any]:
        """Run ``task`` and its attached forks to completion."""
        _logger.debug("Running task {!r}", task)
        try:
            value = await self.run_task(task, *args, **kwargs)
            while self._attached:
                pending, self._attached = self._attached, []
                await asyncio.gather(*pending)
        except Exception as error:
            _logger.debug("Task failed: {!r}", error)
            return RunResult(error=error, dispatched=list(self.channel.dispatched))
        return RunResult(value=value, dispatched=list(self.channel.dispatched))

    async def run_task(self, task: Any, *args: Any, **kwargs: Any) -> Any:
        if isinstance(task, GeneratorABC):
            return await self._drive(task)
        if callable(task):
            return await self._resolve(task(*args, **kwargs))
        raise TypeError(f"Cannot run {type(task).__name__} as a task")

    async def _resolve(self, result: Any) -> Any:
        if isinstance(result, GeneratorABC):
            return await self._drive(result)
        if inspect.isawaitable(result):
            return await result
        return result

    async def _drive(self, generator: GeneratorABC) -> Any:
        value: Any = None
        error: BaseException | None = None
        try:
            while True:
                try:
                    if error is not None:
                        effect = generator.throw(error)
                    else:
                        effect = generator.send(value)
                except StopIteration as stop:
                    return stop.value
                try:
                    value = await self.execute(effect)
                    error = None
                except Exception as exc:
                    value, error = None, exc
        finally:
            generator.close()

    async def execute(self, effect: Any) -> Any:
        shape = classify(effect)
        if isinstance(shape, Parallel):
            return list(await asyncio.gather(*(self.execute(item) for item in shape.items)))
        if isinstance(shape, RaceSet):
            return await self._race(shape.effect.effects)
        if isinstance(shape, Leaf):
            return await self._execute_leaf(shape.effect)
        if isinstance(shape, Opaque):
            if inspect.isawaitable(shape.value):
                return await cast(Awaitable[Any], shape.value)
            return shape.value
        raise AssertionError(f"unhandled effect shape {type(shape).__name__}")

    async def _execute_leaf(self, effect: Any) -> Any:
        if isinstance(effect, PutEffect):
            self.channel.put(effect.action)
            return effect.action
        if isinstance(effect, TakeEffect):
            return await self.channel.take(effect.pattern)
        if isinstance(effect, CallEffect):
            return await self._resolve(effect.fn(*effect.args, **effect.kwargs))
        if isinstance(effect, ForkEffect):
            return self._fork(effect)
        raise TypeError(f"Unsupported effect {type(effect).__name__}")

    def _fork(self, effect: ForkEffect) -> asyncio.Task[Any]:
        routine: Callable[..., Any] = effect.fn
        task = asyncio.ensure_future(self.run_task(routine, *effect.args, **effect.kwargs))
        if not effect.detached:
            self._attached.append(task)
        _logger.debug("Forked {} (detached={})", getattr(routine, "__name__", routine), effect.detached)
        return task

    async def _race(self, entries: Any) -> dict[Any, Any]:
        keys = list(entries)
        tasks = [asyncio.ensure_future(self.execute(entries[key])) for key in keys]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        for key, task in zip(keys, tasks):
            if task in done:
                return {key: task.result()}
        raise AssertionError("race finished without a winner")


async def run(task: Any, *args: Any, channel: Channel | None = None, **kwargs: Any) -> RunResult[Any]:
    return await Runtime(channel).run(task, *args, **kwargs)


__all__ = [
    "Channel",
    "RunResult",
    "Runtime",
    "matches_pattern",
    "run",
]
