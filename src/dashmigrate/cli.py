"""Command-line interface for dashmigrate."""

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import click

from dashmigrate import __version__
from dashmigrate.config import Config
from dashmigrate.logging import get_logger, setup_logging

log = get_logger("cli")


@click.group()
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to configuration file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Set logging level (overrides config).",
)
@click.option(
    "--log-json/--no-log-json",
    default=None,
    help="Output logs as JSON or human-readable format (overrides config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    log_level: str | None,
    log_json: bool | None,
) -> None:
    """dashmigrate - dashboard schema migrations.

    Upgrades dashboard JSON documents to the current schema version.
    """
    ctx.ensure_object(dict)

    # Load configuration
    try:
        config = Config.load_or_default(config_file)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)
    ctx.obj["config"] = config
    ctx.obj["config_file"] = config_file

    # Determine logging settings (CLI overrides config)
    effective_log_level = log_level or config.log_level
    effective_log_json = log_json if log_json is not None else config.log_json

    setup_logging(json_output=effective_log_json, level=effective_log_level)


def _engine(ctx: click.Context):
    """Build the migration engine for the loaded configuration."""
    from dashmigrate.migrations import MigrationError, build_engine

    try:
        return build_engine(ctx.obj["config"])
    except (MigrationError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@cli.command()
def version() -> None:
    """Print version information."""
    from dashmigrate.migrations import LATEST_VERSION

    click.echo(f"dashmigrate {__version__} (schema version {LATEST_VERSION})")


@cli.command()
@click.pass_context
def steps(ctx: click.Context) -> None:
    """List registered migration steps."""
    engine = _engine(ctx)
    registry = engine.registry

    click.echo(f"Baseline version: {registry.baseline}")
    click.echo(f"Latest version: {registry.latest_version}")
    click.echo(f"Registered steps: {len(registry)}")
    for step in registry:
        click.echo(f"  {step.version}: {step.description}")
    if registry.gaps:
        click.echo(f"Skipped versions: {', '.join(str(v) for v in registry.gaps)}")


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def status(ctx: click.Context, files: tuple[Path, ...]) -> None:
    """Show the schema version and pending steps of dashboard files."""
    from dashmigrate.dashboards import read_dashboard

    engine = _engine(ctx)
    failed = False

    for path in files:
        try:
            document = read_dashboard(path)
        except (OSError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            failed = True
            continue

        current = engine.current_version(document)
        pending = engine.pending(document)

        click.echo(f"{path}: version {current}")
        if pending:
            click.echo(f"  Pending migrations: {len(pending)}")
            for step in pending:
                click.echo(f"    {step.version}: {step.description}")
        else:
            click.echo("  No pending migrations")

    if failed:
        raise SystemExit(1)


@cli.command(name="migrate")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--target",
    type=int,
    default=None,
    help="Target version (default: configured target, else latest).",
)
@click.option("--write", is_flag=True, help="Rewrite each file in place.")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the migrated dashboard here (single input file only).",
)
@click.option(
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of files to migrate in parallel.",
)
@click.pass_context
def migrate_files(
    ctx: click.Context,
    files: tuple[Path, ...],
    target: int | None,
    write: bool,
    output: Path | None,
    jobs: int,
) -> None:
    """Migrate dashboard files to a newer schema version.

    Without --write or --output the migrated dashboard is printed to
    stdout, which requires exactly one input file.
    """
    from dashmigrate.dashboards import read_dashboard, write_dashboard
    from dashmigrate.migrations import MigrationError

    if write and output is not None:
        raise click.UsageError("--write and --output are mutually exclusive")
    if not write and len(files) > 1:
        raise click.UsageError("Multiple files require --write")

    engine = _engine(ctx)

    def run(path: Path):
        document = read_dashboard(path)
        result = engine.migrate(document, target)
        if write:
            write_dashboard(path, result.document)
        elif output is not None:
            write_dashboard(output, result.document)
        return result

    def attempt(path: Path):
        try:
            return run(path), None
        except (OSError, ValueError, MigrationError) as e:
            log.error("dashboard_migration_failed", path=str(path), error=str(e))
            return None, e

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        outcomes = list(pool.map(attempt, files))

    failed = False
    for path, (result, error) in zip(files, outcomes):
        if error is not None:
            click.echo(f"Error: {error}", err=True)
            failed = True
        elif not write and output is None:
            click.echo(json.dumps(result.document, indent=2))
        elif result.changed:
            click.echo(f"Migrated {path} from version {result.from_version} to {result.version}")
        else:
            click.echo(f"{path} already at version {result.version}")

    if failed:
        raise SystemExit(1)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command(name="check")
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    default="config.yaml",
    help="Path to configuration file.",
)
def config_check(config_file: Path) -> None:
    """Validate configuration file."""
    try:
        cfg = Config.load(config_file)
        click.echo(f"Configuration valid: {config_file}")
        click.echo(f"  Log level: {cfg.log_level}")

        target = cfg.migration.target_version
        click.echo(f"  Target version: {target if target is not None else 'latest'}")

        if cfg.datasources:
            click.echo(f"  Data sources: {len(cfg.datasources)}")
            default = cfg.default_datasource
            if default is not None:
                click.echo(f"  Default data source: {default.name}")
        else:
            click.echo("  Data sources: not configured")

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)
