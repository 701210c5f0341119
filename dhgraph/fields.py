"""Typed accessors for nested, loosely-typed manifest trees.

Every detector reads manifest fields through these helpers. A missing key,
a value of the wrong shape, or a scalar of the wrong type all collapse into
the same "not found" result (``None``), so detectors never have to guard
against malformed input themselves.

    >>> obj = {"spec": {"template": {"spec": {"serviceAccountName": "web"}}}}
    >>> nested_str(obj, "spec", "template", "spec", "serviceAccountName")
    'web'
    >>> nested_str(obj, "spec", "template", "metadata", "name") is None
    True
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


def nested_value(obj: Any, *path: str) -> Any:
    """Return the value at *path*, or None if any step is missing or not a mapping."""
    current = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def nested_str(obj: Any, *path: str) -> str | None:
    """Return the string at *path*; None when absent or not a string."""
    value = nested_value(obj, *path)
    return value if isinstance(value, str) else None


def nested_name(obj: Any, *path: str) -> str | None:
    """Like nested_str, but an empty string also counts as absent."""
    value = nested_str(obj, *path)
    return value or None


def nested_map(obj: Any, *path: str) -> dict[str, Any] | None:
    value = nested_value(obj, *path)
    return value if isinstance(value, dict) else None


def nested_list(obj: Any, *path: str) -> list[Any] | None:
    value = nested_value(obj, *path)
    return value if isinstance(value, list) else None


def nested_str_map(obj: Any, *path: str) -> dict[str, str] | None:
    """Return a string-to-string map at *path*.

    A map holding any non-string key or value is malformed and reported as
    absent, mirroring how label maps are decoded by the API server.
    """
    value = nested_map(obj, *path)
    if value is None:
        return None
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        return None
    return dict(value)


def iter_maps(obj: Any, *path: str) -> Iterator[dict[str, Any]]:
    """Yield every mapping element of the list at *path*, skipping other shapes."""
    for item in nested_list(obj, *path) or ():
        if isinstance(item, dict):
            yield item
