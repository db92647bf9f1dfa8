"""
Command-line interface for minimax_image.

This package contains CLI implementations using Click.
"""

from minimax_image.cli.commands import cli, main

__all__ = ["cli", "main"]
