"""CLI entrypoint for running dashmigrate as a module."""

from dashmigrate.cli import cli
from dashmigrate.logging import setup_logging

if __name__ == "__main__":
    setup_logging()
    cli()
