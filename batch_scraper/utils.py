"""Shared helpers for batch scraping."""

from __future__ import annotations

from typing import Any, Sequence, TypeVar

T = TypeVar("T")

# Sentinel for a key missing from a JSON body (JavaScript's `undefined`).
MISSING = object()


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into contiguous chunks of at most `size`, keeping order.

    >>> chunked(["a", "b", "c", "d", "e"], 2)
    [['a', 'b'], ['c', 'd'], ['e']]
    """
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def js_typeof(value: Any) -> str:
    """Name a decoded JSON value the way JavaScript's `typeof` would."""
    if value is MISSING:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    # null, arrays and objects are all "object".
    return "object"


def error_message(exc: BaseException) -> str:
    """Readable message for an exception, never empty."""
    return str(exc).strip() or exc.__class__.__name__
