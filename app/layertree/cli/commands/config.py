"""Config command implementation.

Shows and initializes the view configuration file.
"""

from typing import Annotated

import typer

from layertree.cli.types import require_config
from layertree.core.config import ConfigError, ViewConfig, dump_config, save_config
from layertree.core.paths import get_config_path
from layertree.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the view configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration."""
    config_path = get_config_path()
    config = require_config()

    if config_path.exists():
        print_info(f"Config file: {config_path}")
    else:
        print_info(f"No config file at {config_path}, showing defaults.")
    console.print(dump_config(config), markup=False, highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(ViewConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
