import pytest

from effectmock.effects import (
    All,
    Call,
    CallEffect,
    EffectBase,
    Fork,
    ForkEffect,
    Put,
    PutEffect,
    Race,
    Spawn,
    Take,
    TakeEffect,
    all_,
    call,
    message_type,
    put,
)
from effectmock.effects.base import IO_MARKER


def helper(*args, **kwargs):
    return args


class TestConstructors:
    def test_put(self):
        effect = Put({"type": "X"})
        assert isinstance(effect, PutEffect)
        assert effect.action == {"type": "X"}
        assert effect.action_type == "X"
        assert put({"type": "X"}) == effect

    def test_take_defaults_to_everything(self):
        assert Take().pattern == "*"
        assert isinstance(Take("X"), TakeEffect)

    def test_call_collects_arguments(self):
        effect = Call(helper, 1, 2, key="value")
        assert isinstance(effect, CallEffect)
        assert effect.args == (1, 2)
        assert effect.kwargs == {"key": "value"}
        assert call(helper, 1, 2, key="value") == effect

    def test_fork_and_spawn(self):
        assert isinstance(Fork(helper), ForkEffect)
        assert Fork(helper).detached is False
        assert Spawn(helper, 1).detached is True
        assert Spawn(helper, 1).args == (1,)

    def test_all_builds_parallel_list(self):
        effects = All(Take("A"), Take("B"))
        assert effects == [Take("A"), Take("B")]
        assert all_(Take("A")) == [Take("A")]

    def test_every_effect_carries_marker(self):
        for effect in (Put({}), Take(), Call(helper), Fork(helper), Race(a=Take())):
            assert isinstance(effect, EffectBase)
            assert getattr(effect, IO_MARKER) is True


class TestValidation:
    def test_call_requires_callable(self):
        with pytest.raises(TypeError, match="fn must be callable, got str"):
            Call("not callable")

    def test_fork_requires_callable(self):
        with pytest.raises(TypeError, match="fn must be callable, got int"):
            Fork(42)

    def test_take_pattern_type(self):
        with pytest.raises(TypeError, match="pattern must be str, callable, or a list of them"):
            Take(42)
        with pytest.raises(TypeError, match=r"pattern\[1\] must be str or callable"):
            Take(["A", 1])

    def test_race_requires_mapping_entries(self):
        with pytest.raises(ValueError):
            Race()


class TestCreationContext:
    def test_created_at_points_at_caller(self):
        effect = Put({"type": "X"})
        assert effect.created_at is not None
        assert effect.created_at.function == "test_created_at_points_at_caller"
        assert effect.created_at.filename.endswith("test_vocabulary.py")
        assert "Put" in effect.created_at.format_full()

    def test_created_at_ignored_by_equality(self):
        first = Take("X")
        second = Take("X")
        assert first.created_at != second.created_at
        assert first == second


class TestMessageType:
    def test_mapping(self):
        assert message_type({"type": "X"}) == "X"

    def test_object(self):
        class Message:
            type = "Y"

        assert message_type(Message()) == "Y"

    def test_missing(self):
        assert message_type("plain") is None
