"""Symbol table inspection commands for vbsynth."""
import typer
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..models import DeclarationType, ModuleBodyElementDeclaration
from ..symbols import SymbolTable

app = typer.Typer(help="Inspect declaration dumps.")
console = Console()


def load_symbol_table(symbols_file: Path) -> SymbolTable:
    """Load a symbol table, exiting with an error message if it is invalid."""
    try:
        return SymbolTable.load(symbols_file)
    except ValidationError as e:
        typer.echo(f"Error: Invalid declaration record in {symbols_file}: {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("list")
def symbols_list(
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    kind: Optional[DeclarationType] = typer.Option(None, "--kind", "-k", help="Only show this kind"),
) -> None:
    """List declarations in a dump.

    Example:
        vbsynth symbols list declarations.jsonl
        vbsynth symbols list declarations.jsonl --kind Variable
    """
    table_data = load_symbol_table(symbols_file)

    rows = [
        (declaration_id, declaration)
        for declaration_id, declaration in table_data.items()
        if kind is None or declaration.declaration_type == kind
    ]

    if not rows:
        console.print("[yellow]No declarations found.[/yellow]")
        return

    table = Table(title=f"Declarations ({len(rows)})")
    table.add_column("Id", style="cyan")
    table.add_column("Kind")
    table.add_column("Accessibility")
    table.add_column("Type")
    table.add_column("Params", justify="right")

    for declaration_id, declaration in rows:
        as_type = declaration.as_type_name
        if declaration.is_array:
            as_type = f"{as_type}()"
        params = ""
        if isinstance(declaration, ModuleBodyElementDeclaration):
            params = str(len(declaration.parameters))
        table.add_row(
            declaration_id,
            declaration.declaration_type.value,
            declaration.accessibility.value,
            as_type,
            params,
        )

    console.print(table)
