"""
Pytest configuration for effectmock tests.

Provides a fresh runtime per test plus the sample messages and callables the
scenario tests share.
"""

from typing import Any

import pytest
from loguru import logger

from effectmock.driver import MockContext
from effectmock.runtime import Runtime

SOME_ACTION_TYPE = "SOME_ACTION_TYPE"
OTHER_ACTION_TYPE = "OTHER_ACTION_TYPE"


class SomeObj:
    field = "test"

    def method(self, arg1: Any = 0, arg2: Any = 0) -> Any:
        return (arg1 or 0) + (arg2 or 0)


@pytest.fixture
def runtime() -> Runtime:
    """A runtime with its own message channel."""
    return Runtime()


@pytest.fixture
def context() -> MockContext:
    return MockContext()


@pytest.fixture
def some_action() -> dict[str, Any]:
    return {"type": SOME_ACTION_TYPE, "arg": 1}


@pytest.fixture
def some_action2() -> dict[str, Any]:
    return {"type": SOME_ACTION_TYPE, "arg": 2}


@pytest.fixture
def other_action() -> dict[str, Any]:
    return {"type": OTHER_ACTION_TYPE}


@pytest.fixture
def some_obj() -> SomeObj:
    return SomeObj()


@pytest.fixture
def log_records():
    """Capture effectmock's DEBUG log records for the duration of a test."""
    records = []
    logger.enable("effectmock")
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
    logger.disable("effectmock")
