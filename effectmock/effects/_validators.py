"""Runtime validators for effect attribute type checking."""

from __future__ import annotations

from collections.abc import Mapping


def _type_name(value: object) -> str:
    return type(value).__name__


def ensure_callable(value: object, *, name: str) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {_type_name(value)}")


def ensure_tuple(value: object, *, name: str) -> None:
    if not isinstance(value, tuple):
        raise TypeError(f"{name} must be tuple, got {_type_name(value)}")


def ensure_dict_str_any(value: object, *, name: str) -> None:
    if not isinstance(value, dict):
        raise TypeError(f"{name} must be dict, got {_type_name(value)}")
    for key in value.keys():
        if not isinstance(key, str):
            raise TypeError(f"{name} keys must be str, got {_type_name(key)}")


def ensure_mapping(value: object, *, name: str) -> None:
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be mapping, got {_type_name(value)}")


def ensure_non_empty_mapping(value: object, *, name: str) -> None:
    ensure_mapping(value, name=name)
    if not value:
        raise ValueError(f"{name} must not be empty")


def ensure_pattern(value: object, *, name: str) -> None:
    """A take pattern is a string, a predicate, or a list/tuple of those."""
    if isinstance(value, str) or callable(value):
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            if not (isinstance(item, str) or callable(item)):
                raise TypeError(
                    f"{name}[{index}] must be str or callable, got {_type_name(item)}"
                )
        return
    raise TypeError(f"{name} must be str, callable, or a list of them, got {_type_name(value)}")


__all__ = [
    "ensure_callable",
    "ensure_dict_str_any",
    "ensure_mapping",
    "ensure_non_empty_mapping",
    "ensure_pattern",
    "ensure_tuple",
]
