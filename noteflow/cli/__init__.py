"""
Command-Line Interface.

Typer application over the note and account stores. Commands are a thin
presentation layer: they resolve the session, call one store operation,
and render the result with Rich.

Usage:
    noteflow --help
    python cli.py auth login test@example.com
"""
