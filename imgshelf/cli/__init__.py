"""Command-line interface for imgshelf."""

from imgshelf.cli.main import cli, main

__all__ = ["cli", "main"]
