"""Configuration management commands for vbsynth."""
import typer
from pathlib import Path
from pydantic import ValidationError
from ..config import get_vbsynth_path, load_config, CONFIG_FILE
from ..storage import write_json, read_json
from ..models import VbsynthConfig

app = typer.Typer()


def _require_initialized(base: Path) -> Path:
    vbsynth_path = get_vbsynth_path(base)
    if not vbsynth_path.exists():
        typer.echo("Error: vbsynth not initialized. Run 'vbsynth init' first.", err=True)
        raise typer.Exit(1)
    return vbsynth_path


def load_config_or_exit(base: Path) -> VbsynthConfig:
    """Load the effective config, exiting with an error message if it is invalid."""
    try:
        return load_config(base)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"])
        typer.echo(f"Error: Invalid value for {key}: {error['msg']}", err=True)
        raise typer.Exit(1)


@app.command("show")
def config_show(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output"),
) -> None:
    """Show the effective configuration.

    Marks which values are defaults and which are custom (from config.json
    or VBSYNTH_* environment variables).

    Example:
        vbsynth config show
    """
    from rich.console import Console
    from rich.table import Table
    from rich import box

    vbsynth_path = _require_initialized(base)
    console = Console(force_terminal=not plain, no_color=plain)

    config = load_config_or_exit(base)
    defaults = VbsynthConfig()

    console.print(f"[dim]Config file: {vbsynth_path / CONFIG_FILE}[/dim]")
    console.print()

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Status", justify="center")

    for name, value in config.model_dump().items():
        if value == getattr(defaults, name):
            status = "[dim]default[/dim]"
        else:
            status = "[green]custom[/green]"
        table.add_row(name, str(value), status)

    console.print(table)


@app.command("reset")
def config_reset(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Reset configuration to defaults."""
    vbsynth_path = _require_initialized(base)

    write_json(vbsynth_path / CONFIG_FILE, VbsynthConfig().model_dump())
    typer.echo("Configuration reset to defaults.")


@app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key to set"),
    value: str = typer.Argument(..., help="Value to set"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Set a configuration value.

    Examples:
        vbsynth config set indent_width 2
        vbsynth config set line_terminator lf
        vbsynth config set property_value_parameter value
    """
    vbsynth_path = _require_initialized(base)

    if key not in VbsynthConfig.model_fields:
        typer.echo(f"Error: '{key}' is not a config key.", err=True)
        raise typer.Exit(1)

    config = read_json(vbsynth_path / CONFIG_FILE)

    # Parse value
    if value.lower() == "true":
        parsed_value = True
    elif value.lower() == "false":
        parsed_value = False
    else:
        parsed_value = value

    config[key] = parsed_value
    try:
        validated = VbsynthConfig.model_validate(config)
    except ValidationError as e:
        typer.echo(f"Error: Invalid value for {key}: {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(1)

    write_json(vbsynth_path / CONFIG_FILE, validated.model_dump())
    typer.echo(f"Set {key} = {getattr(validated, key)}")
