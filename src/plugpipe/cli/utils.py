"""
CLI Utilities

Console helpers, configuration loading and error display shared by the CLI
commands.
"""

from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.padding import Padding
from rich.panel import Panel
from rich.text import Text

from plugpipe.core.config import AppConfig, ConfigManager
from plugpipe.core.exceptions import ConfigurationError, PlugPipeError
from plugpipe.utils import setup_logging

console = Console()
error_console = Console(stderr=True)


def print_header(title: str, subtitle: Optional[str] = None) -> None:
    """Print a formatted header for CLI output."""
    if subtitle:
        header_text = f"[bold cyan]{title}[/bold cyan]\n[dim]{subtitle}[/dim]"
    else:
        header_text = f"[bold cyan]{title}[/bold cyan]"

    console.print(Panel(header_text, border_style="cyan"))


def load_config_from_cli(
    config_file: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> AppConfig:
    """
    Load configuration and set up logging from it.

    Raises:
        typer.Exit: If configuration is invalid
    """
    try:
        app_config = ConfigManager(config_file=config_file).load_config(cli_args=cli_args or {})
    except ConfigurationError as e:
        handle_error(e)

    setup_logging(app_config.get_log_level())
    return app_config


def handle_error(err: PlugPipeError) -> None:
    """Print a PlugPipeError with its suggestions and exit with status 1."""
    error_console.print()
    error_console.print(Panel(
        Text(err.message),
        title=f"[bold red]Error: {type(err).__name__}[/bold red]",
        border_style="red",
        expand=False
    ))

    cause = err.cause
    while cause is not None:
        error_console.print(f"  [dim]caused by {type(cause).__name__}: {cause}[/dim]")
        cause = getattr(cause, 'cause', None)

    if err.suggestions:
        error_console.print("\n[bold green]Suggested solutions:[/bold green]")
        for i, suggestion in enumerate(err.suggestions, 1):
            suggestion_text = Text(f"{i}. {suggestion.action}: {suggestion.description}\n")
            if suggestion.command:
                suggestion_text.append("   Run: ", style="bold")
                suggestion_text.append(suggestion.command, style="cyan")
            error_console.print(Padding(suggestion_text, (0, 1)))

    if err.context.correlation_id:
        error_console.print(Padding(f"Trace ID: [yellow]{err.context.correlation_id}[/yellow]", (1, 0, 0, 0)))

    raise typer.Exit(code=1)
