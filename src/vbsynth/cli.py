"""vbsynth CLI - code block synthesis for VBA refactorings."""

import typer

app = typer.Typer(
    name="vbsynth",
    help="Code block synthesis for VBA refactorings - signatures, property accessors and user-defined types",
    no_args_is_help=True,
)


@app.callback()
def main(ctx: typer.Context) -> None:
    """vbsynth - code block synthesis for VBA refactorings."""
    from .logging import log_from_cli
    try:
        log_from_cli()
    except OSError:
        # Don't let logging failures break the CLI
        pass


# Import and register command modules
from .commands import init as init_cmd
from .commands import config_cmd
from .commands import symbols_cmd
from .commands import generate as generate_cmd
from .commands import logs as logs_cmd

# Register init as a direct command (not a subcommand)
app.command(name="init")(init_cmd.init)

# Register config commands as a subcommand group
app.add_typer(config_cmd.app, name="config")

# Register symbol table commands as a subcommand group
app.add_typer(symbols_cmd.app, name="symbols")

# Register generation commands as a subcommand group
app.add_typer(generate_cmd.app, name="generate")

# Register logs commands as a subcommand group
app.add_typer(logs_cmd.app, name="logs")


if __name__ == "__main__":
    app()
