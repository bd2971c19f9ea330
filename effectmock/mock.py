"""Public mocking facade.

``mock_task`` wraps a generator, a generator function, or a list of them so
that every effect they yield is recorded, observable and stubbable, while the
real runner still executes it.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Generator as GeneratorABC
from typing import Any, Callable, Generator, Iterable, TypeVar

from loguru import logger

from effectmock import matchers
from effectmock.driver import Driver, DriverState, MockContext
from effectmock.errors import InvalidInputError, InvalidStubError
from effectmock.matchers import Matcher, replace_call_target
from effectmock.query import GroupTraceView, Queries, QueryResult, TraceView

_logger = logger.bind(component="mock")

M = TypeVar("M", bound="MockedTask")


class TraceQueries:
    """Read-only queries shared by single mocks and groups."""

    view: TraceView | GroupTraceView

    def query(self) -> QueryResult:
        return Queries(self.view).all()

    def all_effects(self) -> QueryResult:
        return self.query()

    def generated_effect(self, effect: Any) -> QueryResult:
        return Queries(self.view).effect(effect)

    def putted_action(self, action: Any) -> QueryResult:
        return Queries(self.view).put_action(action)

    def taken_action(self, pattern: Any) -> QueryResult:
        return Queries(self.view).take_action(pattern)

    def called(self, fn: Callable[..., Any]) -> QueryResult:
        return Queries(self.view).call(fn)

    def called_with_args(self, fn: Callable[..., Any], *args: Any) -> QueryResult:
        return Queries(self.view).call_with_args(fn, *args)

    def called_with_exact_args(self, fn: Callable[..., Any], *args: Any) -> QueryResult:
        return Queries(self.view).call_with_exact_args(fn, *args)


class MockedTask(TraceQueries):
    """Configuration and queries for one wrapped task and the subtasks it forks."""

    def __init__(self) -> None:
        self.context = MockContext()
        self.view = TraceView(lambda: self.context.trace)

    @property
    def effects(self) -> list[Any]:
        """The live trace of recorded effects."""
        return self.context.trace

    def _listen(self: M, matcher: Matcher, callback: Callable[[Any], Any]) -> M:
        self.context.add_listener(matcher, callback)
        return self

    def _stub(self: M, matcher: Matcher, stub: Callable[..., Any]) -> M:
        if not callable(stub):
            raise InvalidStubError(stub)
        self.context.add_stub(matcher, replace_call_target(stub))
        return self

    def on_effect(self: M, effect: Any, callback: Callable[[Any], Any]) -> M:
        return self._listen(matchers.effect(effect), callback)

    def on_take_action(self: M, pattern: Any, callback: Callable[[Any], Any]) -> M:
        return self._listen(matchers.take_action(pattern), callback)

    def on_putted_action(self: M, action: Any, callback: Callable[[Any], Any]) -> M:
        return self._listen(matchers.put_action(action), callback)

    def on_call(self: M, fn: Callable[..., Any], callback: Callable[[Any], Any]) -> M:
        return self._listen(matchers.call(fn), callback)

    def on_call_with_args(
        self: M, fn: Callable[..., Any], args: Iterable[Any], callback: Callable[[Any], Any]
    ) -> M:
        return self._listen(matchers.call_with_args(fn, args), callback)

    def on_call_with_exact_args(
        self: M, fn: Callable[..., Any], args: Iterable[Any], callback: Callable[[Any], Any]
    ) -> M:
        return self._listen(matchers.call_with_exact_args(fn, args), callback)

    def stub_call(self: M, fn: Callable[..., Any], stub: Callable[..., Any]) -> M:
        return self._stub(matchers.call(fn), stub)

    def stub_call_with_args(
        self: M, fn: Callable[..., Any], args: Iterable[Any], stub: Callable[..., Any]
    ) -> M:
        return self._stub(matchers.call_with_args(fn, args), stub)

    def stub_call_with_exact_args(
        self: M, fn: Callable[..., Any], args: Iterable[Any], stub: Callable[..., Any]
    ) -> M:
        return self._stub(matchers.call_with_exact_args(fn, args), stub)

    def reset_stubs(self: M) -> M:
        self.context.reset_stubs()
        return self

    def clear_stored_effects(self: M) -> M:
        self.context.clear_trace()
        return self

    def run_pending_listeners(self: M) -> M:
        self.context.run_pending_listeners()
        return self


class MockedGenerator(MockedTask, GeneratorABC):
    """A generator instance under mock; the runner drives it like the original."""

    def __init__(self, generator: Generator[Any, Any, Any]) -> None:
        super().__init__()
        self._driver = Driver(generator, self.context)
        self._running = self._driver.run()

    @property
    def state(self) -> DriverState:
        return self._driver.state

    def send(self, value: Any) -> Any:
        return self._running.send(value)

    def throw(self, typ: Any, val: Any = None, tb: Any = None) -> Any:
        if val is None and tb is None:
            return self._running.throw(typ)
        return self._running.throw(typ, val, tb)

    def close(self) -> None:
        self._running.close()


class MockedGeneratorFunction(MockedTask):
    """A task factory under mock; every call shares the same trace and configuration."""

    def __init__(self, factory: Callable[..., Any]) -> None:
        super().__init__()
        self._factory = factory
        functools.update_wrapper(self, factory)

    def __call__(self, *args: Any, **kwargs: Any) -> Generator[Any, Any, Any]:
        return Driver(self._factory, self.context, args, kwargs).run()


class MockedTaskGroup(list, TraceQueries):
    """Several independently mocked tasks configured and queried together.

    Configuration is broadcast to every task. Query results concatenate each
    task's matches; their indexes refer to that task's own trace.
    """

    def __init__(self, tasks: Iterable[Any]) -> None:
        super().__init__(mock_task(task) for task in tasks)
        self.view = GroupTraceView(lambda: [mocked.view for mocked in self])

    def _broadcast(self, name: str, *args: Any) -> MockedTaskGroup:
        for mocked in self:
            getattr(mocked, name)(*args)
        return self

    def on_effect(self, effect: Any, callback: Callable[[Any], Any]) -> MockedTaskGroup:
        return self._broadcast("on_effect", effect, callback)

    def on_take_action(self, pattern: Any, callback: Callable[[Any], Any]) -> MockedTaskGroup:
        return self._broadcast("on_take_action", pattern, callback)

    def on_putted_action(self, action: Any, callback: Callable[[Any], Any]) -> MockedTaskGroup:
        return self._broadcast("on_putted_action", action, callback)

    def on_call(self, fn: Callable[..., Any], callback: Callable[[Any], Any]) -> MockedTaskGroup:
        return self._broadcast("on_call", fn, callback)

    def on_call_with_args(
        self, fn: Callable[..., Any], args: Iterable[Any], callback: Callable[[Any], Any]
    ) -> MockedTaskGroup:
        return self._broadcast("on_call_with_args", fn, args, callback)

    def on_call_with_exact_args(
        self, fn: Callable[..., Any], args: Iterable[Any], callback: Callable[[Any], Any]
    ) -> MockedTaskGroup:
        return self._broadcast("on_call_with_exact_args", fn, args, callback)

    def stub_call(self, fn: Callable[..., Any], stub: Callable[..., Any]) -> MockedTaskGroup:
        if not callable(stub):
            raise InvalidStubError(stub)
        return self._broadcast("stub_call", fn, stub)

    def stub_call_with_args(
        self, fn: Callable[..., Any], args: Iterable[Any], stub: Callable[..., Any]
    ) -> MockedTaskGroup:
        if not callable(stub):
            raise InvalidStubError(stub)
        return self._broadcast("stub_call_with_args", fn, args, stub)

    def stub_call_with_exact_args(
        self, fn: Callable[..., Any], args: Iterable[Any], stub: Callable[..., Any]
    ) -> MockedTaskGroup:
        if not callable(stub):
            raise InvalidStubError(stub)
        return self._broadcast("stub_call_with_exact_args", fn, args, stub)

    def reset_stubs(self) -> MockedTaskGroup:
        return self._broadcast("reset_stubs")

    def clear_stored_effects(self) -> MockedTaskGroup:
        return self._broadcast("clear_stored_effects")

    def run_pending_listeners(self) -> MockedTaskGroup:
        return self._broadcast("run_pending_listeners")


def _reject_invalid(task: Any) -> None:
    if isinstance(task, (list, tuple)):
        for item in task:
            _reject_invalid(item)
    elif not (isinstance(task, GeneratorABC) or inspect.isgeneratorfunction(task)):
        raise InvalidInputError(task)


def mock_task(task: Any) -> MockedGenerator | MockedGeneratorFunction | MockedTaskGroup:
    """Wrap ``task`` for recording, listening and stubbing.

    Accepts a generator instance, a generator function, or a list/tuple of
    either. Anything else raises ``InvalidInputError`` before any mock is built.
    """
    _reject_invalid(task)
    if isinstance(task, (list, tuple)):
        group = MockedTaskGroup(task)
        _logger.debug("Mocked task group of {} tasks", len(group))
        return group
    if isinstance(task, GeneratorABC):
        return MockedGenerator(task)
    return MockedGeneratorFunction(task)


__all__ = [
    "MockedGenerator",
    "MockedGeneratorFunction",
    "MockedTask",
    "MockedTaskGroup",
    "TraceQueries",
    "mock_task",
]
