"""Incremental backup of ~/.claude configuration into a Git repository."""

__version__ = "0.1.0"
