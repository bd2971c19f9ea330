from __future__ import annotations

from typing import Any


class EffectMockError(Exception):
    """Base class for errors raised by effectmock itself."""


class InvalidInputError(EffectMockError, TypeError):
    """Raised when mock_task receives something that is not a task."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            "task must be a generator, a generator function or a list of them, "
            f"got {type(value).__name__}\n"
            "Hint: pass `my_task` or `my_task()` where `my_task` is defined with `def ...: yield ...`"
        )


class InvalidStubError(EffectMockError, TypeError):
    """Raised when a stub is registered without a callable replacement."""

    def __init__(self, replacement: Any) -> None:
        self.replacement = replacement
        super().__init__(
            f"stub function required, got {type(replacement).__name__}"
        )


__all__ = ["EffectMockError", "InvalidInputError", "InvalidStubError"]
