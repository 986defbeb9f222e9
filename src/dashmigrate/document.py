"""Defensive access helpers for dashboard documents.

A dashboard document is a plain JSON tree: dicts, lists and scalars. Nothing
about its shape is guaranteed, so migration steps never index into it
directly. Instead they narrow one level at a time with the accessors below,
each of which returns ``None`` when the key is missing or holds a value of
the wrong type.

Typical step body::

    timepicker = get_mapping(dashboard, "timepicker")
    if timepicker is not None:
        timepicker.pop("time_options", None)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

Document = dict[str, Any]

SCHEMA_VERSION_KEY = "schemaVersion"


# =============================================================================
# Type-narrowing accessors
# =============================================================================


def get_mapping(container: Any, key: str) -> dict[str, Any] | None:
    """Return ``container[key]`` if both are mappings, else None."""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, dict) else None


def get_list(container: Any, key: str) -> list[Any] | None:
    """Return ``container[key]`` if container is a mapping and the value a list."""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, list) else None


def get_str(container: Any, key: str) -> str | None:
    """Return ``container[key]`` if it is a string."""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, str) else None


def get_number(container: Any, key: str) -> int | float | None:
    """Return ``container[key]`` if it is an int or float.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    """
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def mappings(items: Any) -> Iterator[dict[str, Any]]:
    """Yield only the mapping entries of a list, skipping anything else."""
    if not isinstance(items, list):
        return
    for item in items:
        if isinstance(item, dict):
            yield item


# =============================================================================
# Schema version
# =============================================================================


def read_schema_version(document: Any) -> int | None:
    """Read ``schemaVersion`` as an integer.

    Accepts ints, integral floats (JSON decoders may produce ``41.0``) and
    strings of digits. Anything else, including booleans, yields None.
    """
    if not isinstance(document, dict):
        return None
    value = document.get(SCHEMA_VERSION_KEY)

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


# =============================================================================
# Walkers
# =============================================================================


def iter_panels(dashboard: Any) -> Iterator[dict[str, Any]]:
    """Yield every panel, including panels nested in collapsed rows.

    Top-level panels come first in document order; a row's nested panels
    are yielded right after the row itself.
    """
    for panel in mappings(get_list(dashboard, "panels")):
        yield panel
        yield from mappings(get_list(panel, "panels"))


def iter_variables(dashboard: Any) -> Iterator[dict[str, Any]]:
    """Yield every template variable in ``templating.list``."""
    yield from mappings(get_list(get_mapping(dashboard, "templating"), "list"))


def iter_annotations(dashboard: Any) -> Iterator[dict[str, Any]]:
    """Yield every annotation query in ``annotations.list``."""
    yield from mappings(get_list(get_mapping(dashboard, "annotations"), "list"))
