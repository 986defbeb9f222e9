"""Migration runner for dashboard schema evolution.

This module provides the core migration functionality:
- Building the immutable step registry
- Resolving a document's current schema version
- Applying pending steps in strict version order
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType, ModuleType
from typing import TYPE_CHECKING, Any

from dashmigrate.datasources import EMPTY_INDEX, DataSourceIndex
from dashmigrate.document import SCHEMA_VERSION_KEY, Document, read_schema_version
from dashmigrate.logging import get_logger

if TYPE_CHECKING:
    from dashmigrate.config import Config

log = get_logger("migrations")

# Oldest version still accepted; documents without a version start here
MIN_VERSION = 13


# =============================================================================
# Custom Exceptions
# =============================================================================


class MigrationError(Exception):
    """Base class for migration engine errors."""

    pass


class RegistryError(MigrationError):
    """Raised when the step registry is misconfigured."""

    pass


class VersionRegressionError(MigrationError):
    """Raised when asked to migrate a document to an older version."""

    def __init__(self, current: int, target: int) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot migrate from version {current} down to {target}; migrations are forward-only"
        )


# =============================================================================
# Steps and results
# =============================================================================


@dataclass(frozen=True)
class MigrationStep:
    """A single registered transformation.

    Attributes:
        version: The version a document is at after this step runs.
        description: Human-readable summary of the format change.
        upgrade: Callable editing a document in place.
    """

    version: int
    description: str
    upgrade: Callable[[Document], Any] = field(repr=False, compare=False)

    @classmethod
    def from_module(
        cls,
        module: ModuleType,
        datasources: DataSourceIndex | None = None,
    ) -> "MigrationStep":
        """Wrap a step module, binding the data source index if it needs one.

        Raises:
            RegistryError: If the module is missing VERSION or upgrade.
        """
        if not hasattr(module, "VERSION") or not callable(getattr(module, "upgrade", None)):
            raise RegistryError(f"Step module {module.__name__} must define VERSION and upgrade")

        upgrade = module.upgrade
        if getattr(module, "USES_DATASOURCES", False):
            if datasources is None:
                datasources = EMPTY_INDEX
            upgrade = functools.partial(upgrade, datasources=datasources)

        return cls(
            version=module.VERSION,
            description=getattr(module, "DESCRIPTION", "No description"),
            upgrade=upgrade,
        )


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of migrating one document.

    Attributes:
        document: The migrated document (the same object that was passed in).
        version: Version reached.
        from_version: Version the migration started from.
        applied: Versions whose steps ran, in order.
    """

    document: Document
    version: int
    from_version: int
    applied: tuple[int, ...] = ()

    @property
    def changed(self) -> bool:
        """Whether the version stamp advanced."""
        return self.version != self.from_version


# =============================================================================
# Registry
# =============================================================================


class MigrationRegistry:
    """Immutable, ordered table of migration steps keyed by version.

    Built once and read-only afterwards, so a single registry can back any
    number of concurrent migrations.

    Attributes:
        baseline: Oldest accepted version. Steps must target a version above it.
        latest_version: Version every migration converges to.
        gaps: Versions in (baseline, latest_version] with no step.
    """

    def __init__(
        self,
        steps: Iterable[MigrationStep],
        *,
        baseline: int = MIN_VERSION,
        latest_version: int | None = None,
        allowed_gaps: Iterable[int] = (),
    ) -> None:
        """Build and validate the registry.

        Args:
            steps: Steps to register, in any order.
            baseline: Oldest accepted version.
            latest_version: Ceiling; defaults to the highest step version.
            allowed_gaps: Versions intentionally left without a step.

        Raises:
            RegistryError: On duplicate versions, steps at or below the
                baseline, a ceiling below the highest step, or gaps not
                listed in allowed_gaps.
        """
        table: dict[int, MigrationStep] = {}
        for step in steps:
            if step.version in table:
                raise RegistryError(f"Duplicate migration step for version {step.version}")
            if step.version <= baseline:
                raise RegistryError(
                    f"Step for version {step.version} is at or below baseline {baseline}"
                )
            table[step.version] = step

        highest = max(table, default=baseline)
        if latest_version is None:
            latest_version = highest
        elif latest_version < highest:
            raise RegistryError(
                f"Latest version {latest_version} is below registered step {highest}"
            )

        allowed = frozenset(allowed_gaps)
        for version in allowed:
            if version in table:
                raise RegistryError(f"Version {version} is declared a gap but has a step")

        gaps = tuple(
            v for v in range(baseline + 1, latest_version + 1) if v not in table
        )
        unexpected = [v for v in gaps if v not in allowed]
        if unexpected:
            raise RegistryError(f"Missing migration steps for versions: {unexpected}")

        self._steps = MappingProxyType(dict(sorted(table.items())))
        self._baseline = baseline
        self._latest = latest_version
        self._gaps = gaps

    @property
    def baseline(self) -> int:
        return self._baseline

    @property
    def latest_version(self) -> int:
        return self._latest

    @property
    def gaps(self) -> tuple[int, ...]:
        return self._gaps

    def get(self, version: int) -> MigrationStep | None:
        """Get the step registered for a version, if any."""
        return self._steps.get(version)

    def steps_between(self, start: int, end: int) -> list[MigrationStep]:
        """Steps with ``start < version <= end``, in version order."""
        return [step for v, step in self._steps.items() if start < v <= end]

    def __iter__(self) -> Iterator[MigrationStep]:
        return iter(self._steps.values())

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, version: object) -> bool:
        return version in self._steps


def build_registry(
    datasources: DataSourceIndex | None = None,
    modules: Iterable[ModuleType] | None = None,
) -> MigrationRegistry:
    """Build the registry from the step catalog.

    Args:
        datasources: Index bound into steps that resolve data source names.
        modules: Step modules to register. Defaults to the full catalog.

    Returns:
        Registry ending at the catalog's latest version.
    """
    from dashmigrate.migrations import catalog

    if modules is None:
        modules = catalog.STEP_MODULES

    return MigrationRegistry(
        (MigrationStep.from_module(module, datasources) for module in modules),
        latest_version=catalog.LATEST_VERSION,
        allowed_gaps=catalog.SKIPPED_VERSIONS,
    )


# =============================================================================
# Engine
# =============================================================================


class MigrationEngine:
    """Drives documents through the registry.

    The engine holds no per-call state. Each ``migrate`` call works on the
    document it is given and nothing else, so independent documents can be
    migrated from many threads at once.
    """

    def __init__(
        self,
        registry: MigrationRegistry | None = None,
        *,
        default_target: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Step registry. Defaults to the full catalog.
            default_target: Version used when migrate() is called without
                one. Defaults to the registry's latest version.

        Raises:
            RegistryError: If default_target lies outside the registry range.
        """
        self.registry = registry if registry is not None else build_registry()

        if default_target is not None and not (
            self.registry.baseline <= default_target <= self.registry.latest_version
        ):
            raise RegistryError(
                f"Default target {default_target} outside supported range "
                f"{self.registry.baseline}..{self.registry.latest_version}"
            )
        self.default_target = default_target

    @property
    def latest_version(self) -> int:
        """Highest version this engine can migrate to."""
        return self.registry.latest_version

    @property
    def baseline(self) -> int:
        return self.registry.baseline

    def current_version(self, document: Document) -> int:
        """Resolve the version a document is at.

        Missing, non-numeric and below-baseline versions resolve to the
        baseline.
        """
        version = read_schema_version(document)
        if version is None:
            return self.baseline
        if version < self.baseline:
            log.warning(
                "schema_version_below_baseline",
                version=version,
                baseline=self.baseline,
            )
            return self.baseline
        return version

    def resolve_target(self, target_version: int | None = None) -> int:
        """Pick the effective target, clamping anything past the latest version."""
        if target_version is None:
            target_version = self.default_target
        if target_version is None:
            return self.latest_version
        if target_version > self.latest_version:
            log.warning(
                "target_version_clamped",
                requested=target_version,
                latest=self.latest_version,
            )
            return self.latest_version
        return target_version

    def pending(
        self, document: Document, target_version: int | None = None
    ) -> list[MigrationStep]:
        """Steps a migration of this document would run."""
        start = self.current_version(document)
        target = self.resolve_target(target_version)
        return self.registry.steps_between(start, target)

    def migrate(
        self, document: Document, target_version: int | None = None
    ) -> MigrationResult:
        """Migrate a document forward, in place.

        Args:
            document: Dashboard document. Mutated in place.
            target_version: Version to stop at. Defaults to the engine's
                default target, else the latest version.

        Returns:
            MigrationResult wrapping the same document.

        Raises:
            TypeError: If document is not a mapping.
            VersionRegressionError: If an explicit target is below the
                document's version. The document is left untouched.
            MigrationError: If a step raises.
        """
        if not isinstance(document, dict):
            raise TypeError(f"Dashboard must be a JSON object, got {type(document).__name__}")

        start = self.current_version(document)
        target = self.resolve_target(target_version)

        if target < start:
            if target_version is None:
                # Written by a newer format revision; leave it alone
                log.info("document_ahead_of_target", version=start, target=target)
                return MigrationResult(document=document, version=start, from_version=start)
            raise VersionRegressionError(start, target)

        applied: list[int] = []

        for version in range(start + 1, target + 1):
            step = self.registry.get(version)
            if step is not None:
                log.debug("applying_migration", version=version, description=step.description)
                try:
                    step.upgrade(document)
                except Exception as e:
                    log.error("migration_failed", version=version, error=str(e))
                    raise MigrationError(f"Migration to version {version} failed: {e}") from e
                applied.append(version)
                log.debug("migration_applied", version=version)

            document[SCHEMA_VERSION_KEY] = version

        # A missing or sub-baseline stamp resolves to the baseline without any step
        if read_schema_version(document) != target:
            document[SCHEMA_VERSION_KEY] = target

        if start != target:
            log.info(
                "migrations_complete",
                from_version=start,
                to_version=target,
                count=len(applied),
            )

        return MigrationResult(
            document=document,
            version=target,
            from_version=start,
            applied=tuple(applied),
        )


def build_engine(config: Config) -> MigrationEngine:
    """Create an engine from configuration.

    Args:
        config: Loaded configuration (data sources, pinned target).
    """
    registry = build_registry(DataSourceIndex.from_config(config))
    return MigrationEngine(registry, default_target=config.migration.target_version)


# =============================================================================
# Default engine
# =============================================================================


DEFAULT_ENGINE = MigrationEngine()


def get_migrations() -> list[MigrationStep]:
    """All registered steps, sorted by version."""
    return list(DEFAULT_ENGINE.registry)


def get_current_version(document: Document) -> int:
    """Resolve the schema version of a document.

    Args:
        document: Dashboard document.

    Returns:
        Current version, or the baseline if the document carries none.
    """
    return DEFAULT_ENGINE.current_version(document)


def get_pending_migrations(
    document: Document, target_version: int | None = None
) -> list[MigrationStep]:
    """Get the steps that haven't been applied to a document yet."""
    return DEFAULT_ENGINE.pending(document, target_version)


def migrate(document: Document, target_version: int | None = None) -> MigrationResult:
    """Apply pending migrations up to target_version.

    Args:
        document: Dashboard document, mutated in place.
        target_version: Maximum version to apply. If None, apply all.

    Returns:
        MigrationResult with the version reached.
    """
    return DEFAULT_ENGINE.migrate(document, target_version)

