"""Code generation commands for vbsynth."""
import typer
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..builder import CodeBuilder
from ..models import Accessibility, Declaration, DeclarationType, ModuleBodyElementDeclaration
from ..symbols import SymbolTable
from .config_cmd import load_config_or_exit
from .symbols_cmd import load_symbol_table

app = typer.Typer(help="Generate code blocks from a declaration dump.")


class PropertyKind(str, Enum):
    """Property accessor to generate."""

    GET = "get"
    LET = "let"
    SET = "set"


PROPERTY_KIND_TYPES = {
    PropertyKind.GET: DeclarationType.PROPERTY_GET,
    PropertyKind.LET: DeclarationType.PROPERTY_LET,
    PropertyKind.SET: DeclarationType.PROPERTY_SET,
}


def _get_builder(base: Path) -> CodeBuilder:
    return CodeBuilder.from_config(load_config_or_exit(base))


def _find_declaration(table: SymbolTable, declaration_id: str) -> Declaration:
    """Look up a declaration by id, falling back to a unique name match."""
    declaration = table.get(declaration_id)
    if declaration is not None:
        return declaration

    matches = table.find(declaration_id)
    if len(matches) == 1:
        return matches[0]
    if not matches:
        typer.echo(f"Error: Declaration not found: {declaration_id}", err=True)
    else:
        typer.echo(f"Error: '{declaration_id}' is ambiguous ({len(matches)} matches), use its id", err=True)
    raise typer.Exit(1)


def _find_member(table: SymbolTable, declaration_id: str) -> ModuleBodyElementDeclaration:
    declaration = _find_declaration(table, declaration_id)
    if not isinstance(declaration, ModuleBodyElementDeclaration):
        typer.echo(
            f"Error: {declaration_id} is a {declaration.declaration_type.value}, "
            "not a procedure, function or property",
            err=True,
        )
        raise typer.Exit(1)
    return declaration


def _read_content(content: Optional[str], content_file: Optional[Path]) -> Optional[str]:
    if content_file is not None:
        if not content_file.exists():
            typer.echo(f"Error: File not found: {content_file}", err=True)
            raise typer.Exit(1)
        return content_file.read_text().rstrip("\r\n")
    return content


@app.command("signature")
def generate_signature(
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    declaration_id: str = typer.Argument(..., help="Id (or unique name) of the member"),
    accessibility: Optional[Accessibility] = typer.Option(
        None, "--accessibility", "-a", case_sensitive=False, help="Override accessibility"
    ),
    rename: Optional[str] = typer.Option(None, "--rename", "-r", help="Override identifier"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Print the improved signature of a member.

    Example:
        vbsynth generate signature declarations.jsonl Module1.DoWork
    """
    table = load_symbol_table(symbols_file)
    member = _find_member(table, declaration_id)
    builder = _get_builder(base)

    try:
        typer.echo(builder.improved_full_member_signature(member, accessibility, rename))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("args")
def generate_args(
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    declaration_id: str = typer.Argument(..., help="Id (or unique name) of the member"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Print the improved argument list of a member.

    Example:
        vbsynth generate args declarations.jsonl Class1.Value
    """
    table = load_symbol_table(symbols_file)
    member = _find_member(table, declaration_id)
    typer.echo(_get_builder(base).improved_argument_list(member))


@app.command("member")
def generate_member(
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    declaration_id: str = typer.Argument(..., help="Id (or unique name) of the member"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Body of the member"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", help="Read the body from a file"),
    accessibility: Optional[Accessibility] = typer.Option(
        None, "--accessibility", "-a", case_sensitive=False, help="Override accessibility"
    ),
    rename: Optional[str] = typer.Option(None, "--rename", "-r", help="Override identifier"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Print a member block built from an existing member.

    Example:
        vbsynth generate member declarations.jsonl Module1.DoWork --rename DoMoreWork
    """
    table = load_symbol_table(symbols_file)
    member = _find_member(table, declaration_id)
    builder = _get_builder(base)
    body = _read_content(content, content_file)

    try:
        block = builder.build_member_block_from_prototype(member, body, accessibility, rename)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(block, nl=False)


@app.command("property")
def generate_property(
    kind: PropertyKind = typer.Argument(..., case_sensitive=False, help="get, let or set"),
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    declaration_id: str = typer.Argument(..., help="Id (or unique name) of the field"),
    property_name: str = typer.Argument(..., help="Name of the property"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Body of the property"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", help="Read the body from a file"),
    accessibility: Optional[Accessibility] = typer.Option(
        None, "--accessibility", "-a", case_sensitive=False, help="Accessibility (default Public)"
    ),
    parameter: Optional[str] = typer.Option(
        None, "--parameter", "-p", help="Name of the Let/Set value parameter"
    ),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Print a property accessor for a field.

    Example:
        vbsynth generate property get declarations.jsonl Class1.mName Name
        vbsynth generate property let declarations.jsonl Class1.mName Name -c "    mName = RHS"
    """
    table = load_symbol_table(symbols_file)
    prototype = _find_declaration(table, declaration_id)
    builder = _get_builder(base)
    body = _read_content(content, content_file)

    success, code_block = builder.try_build_property_block(
        prototype,
        PROPERTY_KIND_TYPES[kind],
        property_name,
        content=body,
        accessibility=accessibility,
        parameter_identifier=parameter,
    )
    if not success:
        typer.echo(
            f"Error: Cannot build a property from {prototype.declaration_type.value} "
            f"'{prototype.identifier_name}' (needs a variable or type member)",
            err=True,
        )
        raise typer.Exit(1)
    typer.echo(code_block)


@app.command("udt")
def generate_udt(
    symbols_file: Path = typer.Argument(..., help="JSONL declaration dump"),
    type_name: str = typer.Argument(..., help="Name of the new type"),
    members: List[str] = typer.Argument(
        ..., help="Fields as FIELD_ID or FIELD_ID=MEMBER_NAME"
    ),
    accessibility: Accessibility = typer.Option(
        Accessibility.PRIVATE, "--accessibility", "-a", case_sensitive=False, help="Accessibility of the type"
    ),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Print a user-defined type built from fields.

    Example:
        vbsynth generate udt declarations.jsonl TState Module1.mName=Name Module1.mValues=Values
    """
    table = load_symbol_table(symbols_file)
    builder = _get_builder(base)

    prototypes = []
    for member in members:
        field_id, _, member_name = member.partition("=")
        field = _find_declaration(table, field_id)
        prototypes.append((field, member_name or field.identifier_name))

    try:
        typer.echo(builder.build_user_defined_type_declaration(type_name, prototypes, accessibility))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
