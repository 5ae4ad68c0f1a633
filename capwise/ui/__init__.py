"""Command line interface for the capital project engine."""

from .cli import app, main

__all__ = ["app", "main"]
