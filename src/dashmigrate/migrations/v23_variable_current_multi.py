"""Make a variable's current selection agree with its multi flag.

Multi-value variables store their selection as lists; single-value ones as
scalars. Older dashboards could have either shape regardless of the flag.
"""

from __future__ import annotations

from typing import Any

from dashmigrate.document import Document, get_mapping, iter_variables

VERSION = 23
DESCRIPTION = "Align variable current value shape with the multi flag"


def _to_multi(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


def _to_single(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else ""
    return value


def upgrade(dashboard: Document) -> None:
    for variable in iter_variables(dashboard):
        multi = variable.get("multi")
        if not isinstance(multi, bool):
            continue

        current = get_mapping(variable, "current")
        if not current:
            continue

        is_list = isinstance(current.get("value"), list)
        if multi and not is_list:
            convert = _to_multi
        elif not multi and is_list:
            convert = _to_single
        else:
            continue

        for key in ("value", "text"):
            if key in current:
                current[key] = convert(current[key])
