#!/usr/bin/env python3
"""
plugpipe CLI Main Application

Typer-based command-line interface for running the example chatbot and
moderation pipelines, inspecting the plugin registry, serving the pipelines
over HTTP and managing configuration.
"""

from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from plugpipe.cli import __version__
from plugpipe.cli.commands import config as config_commands
from plugpipe.cli.commands import serve as serve_commands
from plugpipe.cli.utils import console, handle_error, load_config_from_cli, print_header
from plugpipe.chatbot import Message, Response, build_chatbot_pipeline, register_chatbot_plugins
from plugpipe.core.exceptions import PlugPipeError
from plugpipe.core.pipeline import PluginContext
from plugpipe.core.plugins import PluginRegistry
from plugpipe.moderation import Content, ModerationResult, build_moderation_pipeline, register_moderation_plugins

app = typer.Typer(
    name="plugpipe",
    help="Sequential plugin pipelines with example chatbot and moderation plugins",
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(serve_commands.app, name="serve", help="Serve a pipeline over HTTP")
app.add_typer(config_commands.app, name="config", help="Create and inspect configuration files")


def version_callback(value: bool):
    """Show version information."""
    if value:
        console.print(f"[bold cyan]plugpipe[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit"
    ),
):
    """
    plugpipe - sequential plugin pipelines

    [bold]Quick Start:[/bold]

    • Chat: [cyan]plugpipe chat "Hello!" "Can you help me?"[/cyan]
    • Moderate: [cyan]plugpipe moderate "This is a great product!"[/cyan]
    • List plugins: [cyan]plugpipe plugins[/cyan]
    • Serve: [cyan]plugpipe serve chatbot[/cyan]
    """
    pass


@app.command()
def chat(
    messages: List[str] = typer.Argument(..., help="Messages to send, in conversation order"),
    session: str = typer.Option("cli-session", "--session", "-s", help="Conversation session id"),
    user: str = typer.Option("cli-user", "--user", "-u", help="User id"),
    strategy: Optional[str] = typer.Option(None, "--strategy", help="Error strategy: abort or continue"),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Run the chatbot pipeline over one or more messages of a conversation."""
    config = load_config_from_cli(config_file, {"chatbot_strategy": strategy, "debug": debug or None})

    try:
        pipeline = build_chatbot_pipeline(config.chatbot)
    except PlugPipeError as e:
        handle_error(e)

    bot_name = escape(config.chatbot.personality.name)
    # One state dict for the whole conversation; each message gets a fresh context.
    state = {}

    for text in messages:
        context = PluginContext(Message(text=text, user_id=user, session_id=session), state=state)
        try:
            pipeline.execute(context)
        except PlugPipeError as e:
            handle_error(e)

        console.print(f"[bold]You:[/bold] {escape(text)}")
        response = context.get_data()
        if isinstance(response, Response):
            console.print(f"[bold cyan]{bot_name}:[/bold cyan] {escape(response.text)}")
            console.print(f"[dim]intent={response.intent.type} confidence={response.intent.confidence:.2f}[/dim]")
        for error in context.errors:
            console.print(f"[yellow]warning:[/yellow] {escape(str(error))}")
        console.print()


@app.command()
def moderate(
    texts: List[str] = typer.Argument(..., help="Content to moderate"),
    author: str = typer.Option("anonymous", "--author", "-a", help="Author id"),
    strategy: Optional[str] = typer.Option(None, "--strategy", help="Error strategy: abort or continue"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON lines"),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Run the moderation pipeline over one or more pieces of content."""
    config = load_config_from_cli(config_file, {"moderation_strategy": strategy, "debug": debug or None})

    try:
        pipeline = build_moderation_pipeline(config.moderation)
    except PlugPipeError as e:
        handle_error(e)

    results: List[ModerationResult] = []
    for i, text in enumerate(texts, 1):
        context = PluginContext(Content(id=f"content-{i:03d}", text=text, author_id=author))
        try:
            pipeline.execute(context)
        except PlugPipeError as e:
            handle_error(e)

        for error in context.errors:
            console.print(f"[yellow]warning:[/yellow] {escape(str(error))}")

        result = context.get_data()
        if isinstance(result, ModerationResult):
            results.append(result)

    if json_output:
        for result in results:
            typer.echo(result.model_dump_json())
        return

    table = Table(title="Moderation Results")
    table.add_column("ID", style="cyan")
    table.add_column("Action", style="bold")
    table.add_column("Overall", justify="right")
    table.add_column("Profanity", justify="right")
    table.add_column("Spam", justify="right")
    table.add_column("Toxicity", justify="right")
    table.add_column("Reason")

    colors = {"approve": "green", "review": "yellow", "reject": "red"}
    for result in results:
        decision = result.decision
        color = colors.get(decision.action, "white")
        table.add_row(
            result.content.id,
            f"[{color}]{decision.action}[/{color}]",
            f"{decision.score.overall_score:.2f}",
            f"{decision.score.profanity_score:.2f}",
            f"{decision.score.spam_score:.2f}",
            f"{decision.score.toxicity_score:.2f}",
            decision.reason,
        )

    console.print(table)


@app.command()
def plugins(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file"),
):
    """List the registered example plugins."""
    config = load_config_from_cli(config_file)

    registry = PluginRegistry()
    register_chatbot_plugins(registry, config.chatbot)
    register_moderation_plugins(registry, config.moderation)

    print_header("Registered Plugins", f"{len(registry)} plugins")

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Plugin")
    for name in registry.names():
        table.add_row(name, type(registry.get(name)).__name__)
    console.print(table)


def main():
    """Entry point for the plugpipe console script."""
    app()


if __name__ == "__main__":
    main()
