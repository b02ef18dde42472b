"""
System Commands.

Commands for application information and configuration.
"""

from typing import Any, Optional

import typer
from rich.panel import Panel
from rich.tree import Tree

from noteflow.cli.context import console
from noteflow.core.config import get_app_config, get_settings

app = typer.Typer(help="System information commands")


@app.command()
def info() -> None:
    """
    Display application information.

    Shows app name, version, and the active storage backend.
    """
    try:
        app_config = get_app_config()
        settings = get_settings()
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1) from e

    application = app_config.application
    console.print(Panel(
        f"[bold]{application.name}[/bold]\n"
        f"Version: {application.version}\n"
        f"Description: {application.description}\n"
        f"Environment: {application.environment}\n"
        f"Storage: {settings.storage_backend or app_config.storage.backend}",
        title="Application Info",
    ))


@app.command()
def config(
    section: Optional[str] = typer.Argument(
        None, help="Config section to show (application, storage, security, notes, logging)",
    ),
) -> None:
    """
    Display configuration settings.

    Shows all configuration or a specific section.
    """
    try:
        app_config = get_app_config()
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1) from e

    sections = {
        "application": app_config.application,
        "storage": app_config.storage,
        "security": app_config.security,
        "notes": app_config.notes,
        "logging": app_config.logging,
    }

    if section:
        if section not in sections:
            console.print(f"[red]Unknown section: {section}[/red]")
            console.print(f"Available sections: {', '.join(sections.keys())}")
            raise typer.Exit(1)
        _display_config_section(section, sections[section].model_dump())
    else:
        for name, data in sections.items():
            _display_config_section(name, data.model_dump())
            console.print()


def _display_config_section(name: str, data: dict[str, Any]) -> None:
    """Display a configuration section as a tree."""
    tree = Tree(f"[bold cyan]{name}[/bold cyan]")

    def add_items(parent: Tree, items: Any) -> None:
        if isinstance(items, dict):
            for key, value in items.items():
                if isinstance(value, (dict, list)):
                    add_items(parent.add(f"[cyan]{key}[/cyan]"), value)
                else:
                    parent.add(f"[cyan]{key}[/cyan]: {value}")
        else:
            for index, value in enumerate(items):
                if isinstance(value, (dict, list)):
                    add_items(parent.add(f"[dim]{index}[/dim]"), value)
                else:
                    parent.add(str(value))

    add_items(tree, data)
    console.print(tree)
