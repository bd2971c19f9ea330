"""
effectmock - record, observe and stub the effects of generator tasks.

A task is a generator that yields effect descriptors (``Put``, ``Take``,
``Call``, ``Fork``, ``Race``, lists of effects, or any other value) and is
resumed with their results. ``mock_task`` wraps such a task so that tests can
assert on what it intended to do and control what actually happens:

    mocked = mock_task(checkout).stub_call(charge_card, lambda *args: "ok")
    result = await run(mocked)
    assert mocked.putted_action("ORDER_PLACED").is_present
"""

from loguru import logger

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
    RaceEffect,
    Spawn,
    Take,
    TakeEffect,
)
from effectmock.errors import EffectMockError, InvalidInputError, InvalidStubError
from effectmock.mock import (
    MockedGenerator,
    MockedGeneratorFunction,
    MockedTask,
    MockedTaskGroup,
    mock_task,
)
from effectmock.query import Queries, QueryResult
from effectmock.runtime import Channel, RunResult, Runtime, run
from effectmock.utils import DEBUG_MOCK

if not DEBUG_MOCK:
    logger.disable("effectmock")

__version__ = "0.1.0"

__all__ = [
    "All",
    "Call",
    "CallEffect",
    "Channel",
    "EffectBase",
    "EffectMockError",
    "Fork",
    "ForkEffect",
    "InvalidInputError",
    "InvalidStubError",
    "MockedGenerator",
    "MockedGeneratorFunction",
    "MockedTask",
    "MockedTaskGroup",
    "Put",
    "PutEffect",
    "Queries",
    "QueryResult",
    "Race",
    "RaceEffect",
    "RunResult",
    "Runtime",
    "Spawn",
    "Take",
    "TakeEffect",
    "mock_task",
    "run",
]
