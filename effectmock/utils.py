"""
Utility functions for the effectmock library.
"""

from __future__ import annotations

import linecache
import os
import sys
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional, TypeVar

if TYPE_CHECKING:
    from effectmock.effects.base import EffectBase, EffectCreationContext


def _is_site_package(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/site-packages/" in normalized


def _is_stdlib(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    if normalized.startswith("<"):
        return False
    return (
        "/lib/python" in normalized
        or "/frameworks/python.framework" in normalized
        or "/.local/share/uv/python" in normalized
    )


def _is_effectmock_internal(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/effectmock/" in normalized and "/tests/" not in normalized


def _is_user_frame(path: str) -> bool:
    if path.startswith("<"):
        return True
    return not (_is_site_package(path) or _is_stdlib(path) or _is_effectmock_internal(path))


# Environment variable to control debug mode
DEBUG_MOCK = os.environ.get("EFFECTMOCK_DEBUG", "").lower() in ("1", "true", "yes")


def capture_creation_context(skip_frames: int = 2) -> Optional["EffectCreationContext"]:
    """
    Capture the stack context where an effect was built.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        EffectCreationContext for the first user frame, or None when frames
        cannot be inspected on this interpreter.
    """
    from effectmock.effects.base import EffectCreationContext

    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        return None

    # Walk out of library frames so the context points at the task body.
    while frame is not None and not _is_user_frame(frame.f_code.co_filename):
        frame = frame.f_back
    if frame is None:
        return None

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data = []
    current_frame = frame.f_back
    max_depth = 12 if DEBUG_MOCK else 0
    while current_frame is not None and len(stack_data) < max_depth:
        stack_data.append(
            {
                "filename": current_frame.f_code.co_filename,
                "line": current_frame.f_lineno,
                "function": current_frame.f_code.co_name,
            }
        )
        current_frame = current_frame.f_back

    return EffectCreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=stack_data,
    )


E = TypeVar("E", bound="EffectBase")


def create_effect_with_trace(effect: E, skip_frames: int = 3) -> E:
    """Attach creation context metadata to an effect instance."""

    from effectmock.effects.base import EffectBase

    if not isinstance(effect, EffectBase):
        raise TypeError(f"Expected EffectBase, got {type(effect)!r}")

    created_at = capture_creation_context(skip_frames=skip_frames)
    return effect.with_created_at(created_at)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_match(value: Any, source: Any) -> bool:
    """Partial deep comparison.

    Mappings in ``source`` match when every key is present in ``value`` and
    its entry matches; sequences match position by position over the length
    of ``source``; everything else compares with ``==``.
    """
    if isinstance(source, Mapping):
        if not isinstance(value, Mapping):
            return False
        return all(key in value and is_match(value[key], item) for key, item in source.items())
    if _is_sequence(source):
        if not _is_sequence(value) or len(value) < len(source):
            return False
        return all(is_match(value[index], item) for index, item in enumerate(source))
    return value == source


__all__ = [
    "DEBUG_MOCK",
    "capture_creation_context",
    "create_effect_with_trace",
    "is_match",
]
