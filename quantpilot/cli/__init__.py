"""CLI commands for QuantPilot.

This package provides the command-line presentation layer: the live
feed, AI analysis, code generation, wallet figures and the chat.
"""

from quantpilot.cli.main import cli, main

__all__ = ["cli", "main"]
