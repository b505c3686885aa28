"""Initialize vbsynth in a project."""

import typer
from pathlib import Path
from ..config import get_vbsynth_path, CONFIG_FILE
from ..logging import VBSYNTH_LOGS_DIR
from ..models import VbsynthConfig
from ..storage import write_json


def _ensure_gitignore(base_path: Path) -> bool:
    """Add .vbsynth-logs/ to .gitignore if not already present.

    Returns True if the file was modified.
    """
    gitignore = base_path / ".gitignore"
    entry = f"{VBSYNTH_LOGS_DIR}/"

    existing_lines = []
    if gitignore.exists():
        existing_lines = gitignore.read_text().splitlines()

    if entry in existing_lines:
        return False

    with open(gitignore, "a") as f:
        # Add a newline separator if file doesn't end with one
        if existing_lines and existing_lines[-1].strip():
            f.write("\n")
        f.write(f"{entry}\n")

    return True


def init(
    path: Path = typer.Argument(
        Path("."),
        help="Path to initialize vbsynth in"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration"
    ),
    line_terminator: str = typer.Option(
        "crlf",
        "--line-terminator",
        "-l",
        help="Line terminator for generated code: crlf or lf"
    ),
) -> None:
    """Initialize vbsynth with a default configuration.

    Creates .vbsynth/config.json and adds .vbsynth-logs/ to .gitignore.

    Example:
        vbsynth init
        vbsynth init --line-terminator lf
    """
    vbsynth_path = get_vbsynth_path(path)

    if vbsynth_path.exists() and not force:
        typer.echo(f"vbsynth already initialized at {vbsynth_path}")
        typer.echo("Use --force to reinitialize")
        raise typer.Exit(1)

    if line_terminator not in ("crlf", "lf"):
        typer.echo(f"Error: Unknown line terminator '{line_terminator}' (use crlf or lf)", err=True)
        raise typer.Exit(1)

    vbsynth_path.mkdir(parents=True, exist_ok=True)
    config = VbsynthConfig(line_terminator=line_terminator)
    write_json(vbsynth_path / CONFIG_FILE, config.model_dump())

    typer.echo(f"Initialized vbsynth at {vbsynth_path}")

    if _ensure_gitignore(path):
        typer.echo(f"  Added {VBSYNTH_LOGS_DIR}/ to .gitignore")
