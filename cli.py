#!/usr/bin/env python3
"""
NoteFlow CLI entry point.

Runs the Typer application from a source checkout without installing it.

Usage:
    python cli.py --help
    python cli.py auth login test@example.com
    python cli.py notes list
"""

import sys
from pathlib import Path

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from noteflow.cli.app import app

if __name__ == "__main__":
    app()
