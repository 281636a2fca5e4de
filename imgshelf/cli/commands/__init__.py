"""CLI commands for imgshelf."""
