"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from dashmigrate.datasources import DataSourceIndex
from dashmigrate.config import DataSourceConfig
from dashmigrate.migrations import MigrationEngine, MigrationStep


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging configuration a test (or CLI invocation) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def engine() -> MigrationEngine:
    """A migration engine over the full step catalog."""
    return MigrationEngine()


@pytest.fixture
def datasources() -> DataSourceIndex:
    """An index with a default Prometheus and a non-default Loki."""
    return DataSourceIndex([
        DataSourceConfig(name="prom", uid="prom-uid", type="prometheus", default=True),
        DataSourceConfig(name="loki", uid="loki-uid", type="loki"),
    ])


@pytest.fixture
def apply_step():
    """Run a single step module against a document, the way the engine would."""

    def run(module, document: dict, datasources: DataSourceIndex | None = None) -> dict:
        MigrationStep.from_module(module, datasources).upgrade(document)
        return document

    return run


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document into tmp_path and return its path."""

    def write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return write
