"""Dashboard schema migrations.

Migrations are forward-only Python modules that evolve the dashboard JSON
format one version at a time. Each step module follows the pattern
vNN_description.py and is listed in ``catalog.STEP_MODULES``.

Step module structure:
    VERSION = N  # Version a document is at once the step has run
    DESCRIPTION = "What this migration does"

    def upgrade(dashboard):
        '''Edit the dashboard dict in place.'''

Steps never touch ``schemaVersion``; the engine stamps it after each step.
A step that needs data source lookups sets ``USES_DATASOURCES = True`` and
accepts a ``datasources`` keyword argument.
"""

from dashmigrate.migrations.runner import (
    MIN_VERSION,
    MigrationEngine,
    MigrationError,
    MigrationRegistry,
    MigrationResult,
    MigrationStep,
    RegistryError,
    VersionRegressionError,
    build_engine,
    build_registry,
    get_current_version,
    get_migrations,
    get_pending_migrations,
    migrate,
)
from dashmigrate.migrations.catalog import LATEST_VERSION

__all__ = [
    "LATEST_VERSION",
    "MIN_VERSION",
    "MigrationEngine",
    "MigrationError",
    "MigrationRegistry",
    "MigrationResult",
    "MigrationStep",
    "RegistryError",
    "VersionRegressionError",
    "build_engine",
    "build_registry",
    "get_current_version",
    "get_migrations",
    "get_pending_migrations",
    "migrate",
]
