"""Reading the cart service's response envelope.

The service wraps payloads inconsistently: the same endpoint may answer
with fields at the top level, under ``data``, or under ``data.data``.
Until the contract is tightened upstream, every level is checked rather
than assuming one canonical shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _levels(response: Any) -> list[Mapping[str, Any]]:
    """The candidate payload mappings, innermost first."""
    if not isinstance(response, Mapping):
        return []
    levels: list[Mapping[str, Any]] = [response]
    data = response.get("data")
    if isinstance(data, Mapping):
        levels.insert(0, data)
        nested = data.get("data")
        if isinstance(nested, Mapping):
            levels.insert(0, nested)
    return levels


def unwrap(response: Any) -> Mapping[str, Any]:
    """Return the innermost non-empty payload mapping (``{}`` if none)."""
    for level in _levels(response):
        if level:
            return level
    return {}


def is_success(response: Any) -> bool:
    """True when ``success`` is literally true at any of the three levels."""
    return any(level.get("success") is True for level in _levels(response))


def lookup(response: Any, key: str) -> Any:
    """The first truthy ``key`` found, innermost level first."""
    for level in _levels(response):
        value = level.get(key)
        if value:
            return value
    return None
