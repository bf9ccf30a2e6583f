"""
Serve Command

Runs the example chatbot or moderation pipeline behind a uvicorn HTTP server.
"""

from typing import Annotated, Optional

import typer
import uvicorn

from plugpipe.cli.utils import console, handle_error, load_config_from_cli, print_header
from plugpipe.core.exceptions import PlugPipeError
from plugpipe.http import create_chatbot_app, create_moderation_app

app = typer.Typer(no_args_is_help=True)


@app.command("chatbot")
def serve_chatbot(
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to listen on")] = None,
    config_file: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file")] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
):
    """Serve the chatbot pipeline at POST /chat."""
    config = load_config_from_cli(config_file, {"host": host, "chatbot_port": port, "debug": debug or None})

    try:
        api = create_chatbot_app(config)
    except PlugPipeError as e:
        handle_error(e)

    print_header("Chatbot server", f"http://{config.server.host}:{config.server.chatbot_port}")
    console.print("  [cyan]POST /chat[/cyan]    send a message")
    console.print("  [cyan]GET  /health[/cyan]  health check")
    uvicorn.run(api, host=config.server.host, port=config.server.chatbot_port,
                log_level=config.get_log_level().lower())


@app.command("moderation")
def serve_moderation(
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to listen on")] = None,
    config_file: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file")] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
):
    """Serve the moderation pipeline at POST /moderate."""
    config = load_config_from_cli(config_file, {"host": host, "moderation_port": port, "debug": debug or None})

    try:
        api = create_moderation_app(config)
    except PlugPipeError as e:
        handle_error(e)

    print_header("Moderation server", f"http://{config.server.host}:{config.server.moderation_port}")
    console.print("  [cyan]POST /moderate[/cyan]  moderate content")
    console.print("  [cyan]GET  /health[/cyan]    health check")
    uvicorn.run(api, host=config.server.host, port=config.server.moderation_port,
                log_level=config.get_log_level().lower())
