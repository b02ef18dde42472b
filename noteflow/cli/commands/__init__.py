"""
CLI Commands.

Organized by domain/feature area.
"""

from noteflow.cli.commands.auth import app as auth_app
from noteflow.cli.commands.categories import app as categories_app
from noteflow.cli.commands.notes import app as notes_app
from noteflow.cli.commands.stats import stats
from noteflow.cli.commands.system import app as system_app
from noteflow.cli.commands.todo import app as todo_app

__all__ = [
    "auth_app",
    "categories_app",
    "notes_app",
    "stats",
    "system_app",
    "todo_app",
]
