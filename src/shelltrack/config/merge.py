"""Layered merge of configuration dictionaries.

Later layers win. Nested mappings merge key by key, lists and scalars are
replaced, and a ``None`` in a later layer leaves the earlier value in place.
"""

from __future__ import annotations

from functools import reduce
from typing import Any


def _merge_value(base_value: Any, override_value: Any) -> Any:
    if isinstance(base_value, dict) and isinstance(override_value, dict):
        return deep_merge(base_value, override_value)
    return override_value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Args:
        base: Lower-priority layer.
        override: Higher-priority layer.

    Returns:
        A new dict; neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        merged[key] = _merge_value(merged[key], value) if key in merged else value
    return merged


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Fold config layers from lowest to highest priority."""
    return reduce(deep_merge, (c for c in configs if c), {})
