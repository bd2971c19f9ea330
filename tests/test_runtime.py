import asyncio

import pytest

from effectmock.effects import Call, Fork, Put, Race, Spawn, Take
from effectmock.runtime import Channel, RunResult, matches_pattern, run


class TestRunResult:
    def test_is_ok_when_value_present(self):
        result: RunResult[int] = RunResult(value=42)
        assert result.is_ok is True
        assert result.is_error is False
        assert result.unwrap() == 42

    def test_unwrap_raises_error(self):
        result: RunResult[int] = RunResult(error=ValueError("test error"))
        assert result.is_error
        with pytest.raises(ValueError, match="test error"):
            result.unwrap()


class TestPatterns:
    @pytest.mark.parametrize(
        ("pattern", "expected"),
        [
            ("*", True),
            ("X", True),
            ("Y", False),
            (["Y", "X"], True),
            (lambda message: message["arg"] == 1, True),
            (lambda message: message["arg"] == 2, False),
        ],
    )
    def test_matches_pattern(self, pattern, expected):
        assert matches_pattern(pattern, {"type": "X", "arg": 1}) is expected


class TestChannel:
    @pytest.mark.asyncio
    async def test_take_resolves_on_matching_put(self):
        channel = Channel()
        future = channel.take("X")
        channel.put({"type": "Y"})
        assert not future.done()
        channel.put({"type": "X"})
        assert future.result() == {"type": "X"}
        assert channel.dispatched == [{"type": "Y"}, {"type": "X"}]

    @pytest.mark.asyncio
    async def test_take_ignores_earlier_messages(self):
        channel = Channel()
        channel.put({"type": "X"})
        future = channel.take("X")
        assert not future.done()
        assert channel.waiting == 1

    @pytest.mark.asyncio
    async def test_one_put_resolves_every_matching_taker(self):
        channel = Channel()
        first, second = channel.take("*"), channel.take("X")
        channel.put({"type": "X"})
        assert first.done() and second.done()
        assert channel.waiting == 0


class TestRuntime:
    @pytest.mark.asyncio
    async def test_resumes_with_effect_results(self, runtime):
        async def fetch(value):
            return value * 2

        def subtask(value):
            return (yield Call(fetch, value)) + 1

        def task():
            put = yield Put({"type": "X"})
            called = yield Call(lambda a, b=0: a + b, 1, b=2)
            awaited = yield Call(fetch, 5)
            nested = yield Call(subtask, 10)
            opaque = yield "opaque"
            return [put, called, awaited, nested, opaque]

        result = await runtime.run(task)

        assert result.unwrap() == [{"type": "X"}, 3, 10, 21, "opaque"]
        assert result.dispatched == [{"type": "X"}]

    @pytest.mark.asyncio
    async def test_errors_are_thrown_into_task(self, runtime):
        def fail():
            raise KeyError("missing")

        def task():
            try:
                yield Call(fail)
            except KeyError:
                return "recovered"

        assert (await runtime.run(task)).unwrap() == "recovered"

    @pytest.mark.asyncio
    async def test_unhandled_error_fails_run(self, runtime):
        def task():
            yield Put({"type": "X"})
            raise RuntimeError("task failed")

        result = await runtime.run(task)
        assert isinstance(result.error, RuntimeError)

    @pytest.mark.asyncio
    async def test_parallel_effects(self, runtime):
        def task():
            return (yield [Put({"type": "A"}), Call(len, "abc"), [Call(abs, -1)]])

        assert (await runtime.run(task)).unwrap() == [{"type": "A"}, 3, [1]]

    @pytest.mark.asyncio
    async def test_race_resolves_with_winner(self, runtime):
        def task():
            return (yield Race(slow=Take("NEVER"), fast=Call(abs, -2)))

        result = await runtime.run(task)

        assert result.unwrap() == {"fast": 2}
        assert runtime.channel.waiting == 0

    @pytest.mark.asyncio
    async def test_take_waits_for_dispatch(self, runtime):
        def task():
            return (yield Take("GO"))

        running = asyncio.ensure_future(runtime.run(task))
        await asyncio.sleep(0)
        assert not running.done()
        runtime.dispatch({"type": "GO"})

        assert (await running).unwrap() == {"type": "GO"}

    @pytest.mark.asyncio
    async def test_attached_fork_is_awaited(self, runtime):
        seen = []

        def child(value):
            seen.append((yield Call(abs, value)))

        def task():
            handle = yield Fork(child, -3)
            return isinstance(handle, asyncio.Task)

        result = await runtime.run(task)

        assert result.unwrap() is True
        assert seen == [3]

    @pytest.mark.asyncio
    async def test_detached_spawn_is_not_awaited(self, runtime):
        release = asyncio.Event()
        seen = []

        async def wait_for_release():
            await release.wait()
            return "released"

        def child():
            seen.append((yield Call(wait_for_release)))

        def task():
            yield Spawn(child)
            return "parent done"

        assert (await runtime.run(task)).unwrap() == "parent done"
        assert seen == []

        release.set()
        for _ in range(3):
            await asyncio.sleep(0)
        assert seen == ["released"]

    @pytest.mark.asyncio
    async def test_module_level_run(self):
        def task(value):
            return (yield Call(abs, value))

        assert (await run(task, -4)).unwrap() == 4

    @pytest.mark.asyncio
    async def test_rejects_non_task(self, runtime):
        result = await runtime.run(42)
        assert isinstance(result.error, TypeError)
