"""dashmigrate - forward-only schema migrations for dashboard documents."""

__version__ = "0.1.0"
