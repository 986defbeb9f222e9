"""Caller-side policy for reading and saving dashboards.

Reading always shows the current format: the stored document is copied and
migrated to the latest version. Saving keeps whatever the caller supplied
(including an explicit older ``schemaVersion``, or none at all) unless the
caller asks for migration. The engine itself has no notion of either path.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from dashmigrate.document import Document
from dashmigrate.logging import get_logger
from dashmigrate.migrations.runner import DEFAULT_ENGINE, MigrationEngine, MigrationResult

log = get_logger("dashboards")


class DashboardFileError(ValueError):
    """Raised when a file does not hold a dashboard JSON object."""

    pass


def for_read(document: Document, engine: MigrationEngine = DEFAULT_ENGINE) -> MigrationResult:
    """Migrate a copy of a stored dashboard to the latest version.

    The stored document is left untouched.
    """
    return engine.migrate(copy.deepcopy(document), engine.latest_version)


def for_save(
    document: Document,
    engine: MigrationEngine = DEFAULT_ENGINE,
    *,
    preserve_schema_version: bool = True,
) -> Document:
    """Prepare a dashboard for storage.

    Args:
        document: Dashboard as submitted by the caller.
        engine: Engine used when migration is requested.
        preserve_schema_version: Store the document as supplied. When False,
            the document is migrated in place to the engine's default target.

    Returns:
        The document to store.
    """
    if preserve_schema_version:
        return document
    return engine.migrate(document).document


def read_dashboard(path: Path | str) -> Document:
    """Load a dashboard from a JSON file.

    Accepts either a bare dashboard or an export envelope of the form
    ``{"dashboard": {...}, "meta": {...}}``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DashboardFileError: If the file isn't JSON or isn't an object.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data: Any = json.load(f)
        except json.JSONDecodeError as e:
            raise DashboardFileError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DashboardFileError(f"{path}: expected a JSON object, got {type(data).__name__}")

    dashboard = data.get("dashboard")
    if isinstance(dashboard, dict):
        log.debug("dashboard_envelope_unwrapped", path=str(path))
        return dashboard
    return data


def write_dashboard(path: Path | str, document: Document) -> None:
    """Write a dashboard as indented JSON.

    The file is written beside its destination and moved into place, so an
    existing dashboard is never left half-written.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
