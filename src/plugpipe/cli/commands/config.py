"""
Config Command

Creates example configuration files and prints the configuration schema or
the effective configuration.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from plugpipe.cli.utils import console, handle_error, load_config_from_cli
from plugpipe.core.config import ConfigManager
from plugpipe.core.exceptions import ConfigurationError

app = typer.Typer(no_args_is_help=True)


@app.command("init")
def config_init(
    path: Annotated[Path, typer.Argument(help="Where to write the configuration file")] = Path("plugpipe.yaml"),
    profile: Annotated[str, typer.Option("--profile", help="default, lenient or strict")] = "default",
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
):
    """Write an example configuration file."""
    if path.exists() and not force:
        console.print(f"[red]{path} already exists[/red] (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        ConfigManager().create_example_config(path, profile=profile)
    except ConfigurationError as e:
        handle_error(e)

    console.print(f"[green]Wrote {profile} configuration to {path}[/green]")


@app.command("schema")
def config_schema(
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the schema to a file")] = None,
):
    """Print the JSON schema of the configuration file."""
    schema = ConfigManager().generate_schema(output)
    if output:
        console.print(f"[green]Wrote schema to {output}[/green]")
    else:
        typer.echo(json.dumps(schema, indent=2))


@app.command("show")
def config_show(
    config_file: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file")] = None,
):
    """Print the effective configuration after files and environment are applied."""
    config = load_config_from_cli(config_file)
    typer.echo(yaml.dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False))
