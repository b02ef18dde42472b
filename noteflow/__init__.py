"""
Noteflow.

Personal note-taking core: notes, categories, and a local credential store.

- core/: Configuration, logging, exceptions, security helpers
- models/: Note, user, session, and category entities
- repositories/: Key-value persistence adapters
- services/: Note, auth, and category stores, statistics
- cli/: Command-line client (Typer + Rich)
"""

__version__ = "1.0.0"
