"""jsonshred command line interface."""

from jsonshred.cli.app import app

__all__ = ["app"]
