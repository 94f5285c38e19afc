"""Kindle command line interface."""

from kindle.cli import commands  # noqa: F401  (registers commands on app)
from kindle.cli.main import app

__all__ = ["app"]
