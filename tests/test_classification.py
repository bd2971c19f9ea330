import asyncio
from dataclasses import dataclass

import pytest

from effectmock.classification import (
    EffectKind,
    Leaf,
    Opaque,
    Parallel,
    RaceSet,
    classify,
    is_call,
    is_fork,
    is_parallel,
    is_put,
    is_race,
    is_take,
)
from effectmock.effects import Call, EffectBase, Fork, Put, Race, Take


def helper():
    return 1


def child():
    yield Put({"type": "CHILD"})


@dataclass(frozen=True)
class SelectEffect(EffectBase):
    selector: object


class TestClassifyLeaves:
    @pytest.mark.parametrize(
        ("effect", "kind"),
        [
            (Put({"type": "X"}), EffectKind.PUT),
            (Take("X"), EffectKind.TAKE),
            (Call(helper, 1, 2), EffectKind.CALL),
            (Fork(child), EffectKind.FORK),
        ],
    )
    def test_leaf_kind(self, effect, kind):
        shape = classify(effect)
        assert isinstance(shape, Leaf)
        assert shape.kind is kind
        assert shape.effect is effect

    def test_predicates(self):
        assert is_put(Put({"type": "X"}))
        assert is_take(Take("X"))
        assert is_call(Call(helper))
        assert is_fork(Fork(child))
        assert not is_put(Take("X"))
        assert not is_call({"fn": helper})


class TestClassifyComposites:
    def test_list_is_parallel(self):
        items = [Put({"type": "A"}), Call(helper)]
        shape = classify(items)
        assert isinstance(shape, Parallel)
        assert shape.items is items

    def test_tuple_is_parallel(self):
        assert is_parallel((Call(helper),))
        assert isinstance(classify(()), Parallel)

    def test_race(self):
        race = Race(a=Take("A"), b=Call(helper))
        shape = classify(race)
        assert isinstance(shape, RaceSet)
        assert is_race(race)
        assert list(shape.effect.effects) == ["a", "b"]

    def test_race_accepts_positional_mapping(self):
        race = Race({1: Take("A")}, b=Take("B"))
        assert list(race.effects) == [1, "b"]

    def test_empty_race_rejected(self):
        with pytest.raises(ValueError, match="effects must not be empty"):
            Race()


class TestClassifyOpaque:
    @pytest.mark.parametrize("value", ["test", b"bytes", None, 42, {"type": "X"}])
    def test_plain_values(self, value):
        shape = classify(value)
        assert isinstance(shape, Opaque)
        assert shape.value == value

    def test_unknown_effect_subclass_is_opaque(self):
        assert isinstance(classify(SelectEffect(selector=len)), Opaque)

    def test_awaitable_is_opaque(self):
        async def fetch():
            return 1

        coro = fetch()
        try:
            assert isinstance(classify(coro), Opaque)
        finally:
            coro.close()

    def test_future_is_opaque(self):
        loop = asyncio.new_event_loop()
        try:
            assert isinstance(classify(loop.create_future()), Opaque)
        finally:
            loop.close()


class TestClassifyStability:
    @pytest.mark.parametrize(
        "value",
        [
            Put({"type": "X"}),
            [Take("A"), [Call(helper)]],
            Race(a=Take("A")),
            "opaque",
        ],
    )
    def test_classify_is_stable(self, value):
        assert classify(value) == classify(value)
