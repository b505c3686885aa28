"""Tests for vbsynth CLI."""

import pytest
from pathlib import Path
import tempfile
from typer.testing import CliRunner
from vbsynth.cli import app
from vbsynth.config import CONFIG_FILE, VBSYNTH_DIR
from vbsynth.storage import read_json, write_jsonl


runner = CliRunner()

RECORDS = [
    {"id": "Module1", "kind": "ProceduralModule", "name": "Module1"},
    {"id": "Module1.Color", "kind": "Enumeration", "name": "Color",
     "accessibility": "Private", "parent": "Module1"},
    {"id": "Module1.TPoint", "kind": "UserDefinedType", "name": "TPoint",
     "accessibility": "Private", "parent": "Module1"},
    {"id": "Module1.mColor", "kind": "Variable", "name": "mColor", "accessibility": "Private",
     "as_type_name": "Color", "as_type": "Module1.Color", "parent": "Module1"},
    {"id": "Module1.mValues", "kind": "Variable", "name": "mValues", "accessibility": "Private",
     "as_type_name": "Long", "is_array": True, "array_bounds": "1 To 5", "parent": "Module1"},
    {"id": "Module1.DoWork", "kind": "Procedure", "name": "DoWork", "parent": "Module1"},
    {"id": "Module1.Point", "kind": "PropertyLet", "name": "Point", "parent": "Module1",
     "parameters": [
         {"name": "index", "as_type_name": "Long", "selection": [10, 20, 10, 25]},
         {"name": "value", "as_type_name": "TPoint", "as_type": "Module1.TPoint",
          "passing_mode": "ByRef", "selection": [10, 40, 10, 45]},
     ]},
]


@pytest.fixture(autouse=True)
def no_command_log(monkeypatch):
    """Keep test runs out of the command log."""
    monkeypatch.setattr("vbsynth.logging.log_from_cli", lambda: None)


@pytest.fixture
def project():
    """Initialized project (LF line terminator) with a declaration dump."""
    with tempfile.TemporaryDirectory() as tmpdir:
        runner.invoke(app, ["init", tmpdir, "--line-terminator", "lf"])
        symbols_file = Path(tmpdir) / "declarations.jsonl"
        write_jsonl(symbols_file, RECORDS)
        yield Path(tmpdir), str(symbols_file)


class TestInitCommand:
    """Tests for the init command."""

    def test_init_creates_config(self) -> None:
        """Test that init writes config.json and updates .gitignore."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["init", tmpdir])

            assert result.exit_code == 0
            assert "Initialized vbsynth" in result.stdout

            config = read_json(Path(tmpdir) / VBSYNTH_DIR / CONFIG_FILE)
            assert config["line_terminator"] == "crlf"
            assert ".vbsynth-logs/" in (Path(tmpdir) / ".gitignore").read_text()

    def test_init_fails_if_already_exists(self) -> None:
        """Test that init fails if .vbsynth already exists."""
        with tempfile.TemporaryDirectory() as tmpdir:
            runner.invoke(app, ["init", tmpdir])
            result = runner.invoke(app, ["init", tmpdir])

            assert result.exit_code == 1
            assert "already initialized" in result.stdout

    def test_init_force_overwrites(self) -> None:
        """Test that init --force rewrites the config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            runner.invoke(app, ["init", tmpdir])
            result = runner.invoke(app, ["init", tmpdir, "--force", "-l", "lf"])

            assert result.exit_code == 0
            assert read_json(Path(tmpdir) / VBSYNTH_DIR / CONFIG_FILE)["line_terminator"] == "lf"

    def test_init_rejects_unknown_line_terminator(self) -> None:
        """Test line terminator validation."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["init", tmpdir, "-l", "cr"])

            assert result.exit_code == 1
            assert "Unknown line terminator" in result.output


class TestConfigCommands:
    """Tests for config commands."""

    def test_set_and_show(self, project) -> None:
        """Test setting a value and showing it."""
        base, _ = project

        result = runner.invoke(app, ["config", "set", "indent_width", "2", "--base", str(base)])
        assert result.exit_code == 0
        assert "Set indent_width = 2" in result.stdout
        assert read_json(base / VBSYNTH_DIR / CONFIG_FILE)["indent_width"] == 2

        result = runner.invoke(app, ["config", "show", "--base", str(base), "--plain"])
        assert result.exit_code == 0
        assert "indent_width" in result.stdout

    def test_set_unknown_key(self, project) -> None:
        """Test that unknown keys are rejected."""
        base, _ = project
        result = runner.invoke(app, ["config", "set", "colour", "blue", "--base", str(base)])

        assert result.exit_code == 1
        assert "not a config key" in result.output

    def test_set_invalid_value(self, project) -> None:
        """Test that invalid values are rejected and not written."""
        base, _ = project
        result = runner.invoke(app, ["config", "set", "line_terminator", "cr", "--base", str(base)])

        assert result.exit_code == 1
        assert read_json(base / VBSYNTH_DIR / CONFIG_FILE)["line_terminator"] == "lf"

    def test_reset(self, project) -> None:
        """Test resetting to defaults."""
        base, _ = project
        result = runner.invoke(app, ["config", "reset", "--base", str(base)])

        assert result.exit_code == 0
        assert read_json(base / VBSYNTH_DIR / CONFIG_FILE)["line_terminator"] == "crlf"

    def test_requires_init(self) -> None:
        """Test config commands before init."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["config", "reset", "--base", tmpdir])

            assert result.exit_code == 1
            assert "not initialized" in result.output


class TestSymbolsCommands:
    """Tests for symbol table commands."""

    def test_list(self, project) -> None:
        """Test listing declarations."""
        _, symbols_file = project
        result = runner.invoke(app, ["symbols", "list", symbols_file])

        assert result.exit_code == 0
        assert "mColor" in result.stdout
        assert "DoWork" in result.stdout

    def test_list_by_kind(self, project) -> None:
        """Test filtering by kind."""
        _, symbols_file = project
        result = runner.invoke(app, ["symbols", "list", symbols_file, "--kind", "Procedure"])

        assert result.exit_code == 0
        assert "DoWork" in result.stdout
        assert "mColor" not in result.stdout

    def test_invalid_dump(self) -> None:
        """Test that a broken dump reports an error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            symbols_file = Path(tmpdir) / "declarations.jsonl"
            write_jsonl(symbols_file, [{"id": "x", "kind": "Variable", "name": "x", "parent": "Nowhere"}])

            result = runner.invoke(app, ["symbols", "list", str(symbols_file)])

            assert result.exit_code == 1
            assert "unknown declaration" in result.output


class TestGenerateCommands:
    """Tests for code generation commands."""

    def test_signature(self, project) -> None:
        """Test printing an improved signature."""
        base, symbols_file = project
        result = runner.invoke(app, ["generate", "signature", symbols_file, "Module1.Point", "-b", str(base)])

        assert result.exit_code == 0
        assert result.stdout.strip() == "Public Property Let Point(index As Long, ByRef value As TPoint)"

    def test_signature_overrides(self, project) -> None:
        """Test accessibility and rename overrides."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "signature", symbols_file, "DoWork",
            "--accessibility", "private", "--rename", "DoMoreWork", "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout.strip() == "Private Sub DoMoreWork()"

    def test_signature_of_non_member(self, project) -> None:
        """Test that fields have no signature."""
        base, symbols_file = project
        result = runner.invoke(app, ["generate", "signature", symbols_file, "Module1.mColor", "-b", str(base)])

        assert result.exit_code == 1
        assert "not a procedure" in result.output

    def test_args(self, project) -> None:
        """Test printing an argument list."""
        base, symbols_file = project
        result = runner.invoke(app, ["generate", "args", symbols_file, "Module1.Point", "-b", str(base)])

        assert result.exit_code == 0
        assert result.stdout.strip() == "index As Long, ByRef value As TPoint"

    def test_member(self, project) -> None:
        """Test printing a member block with content."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "member", symbols_file, "Module1.DoWork", "-c", "    Beep", "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout == "Public Sub DoWork()\n    Beep\nEnd Sub\n"

    def test_member_content_file(self, project) -> None:
        """Test reading the body from a file."""
        base, symbols_file = project
        body = base / "body.bas"
        body.write_text("    Dim x As Long\n    x = 1\n")

        result = runner.invoke(app, [
            "generate", "member", symbols_file, "Module1.DoWork", "--content-file", str(body), "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout == "Public Sub DoWork()\n    Dim x As Long\n    x = 1\nEnd Sub\n"

    def test_property_get_enum_field(self, project) -> None:
        """Test a Property Get for a private enum field."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "property", "get", symbols_file, "Module1.mColor", "Color",
            "-c", "    Color = mColor", "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout == "Public Property Get Color() As Long\n    Color = mColor\nEnd Property\n"

    def test_property_let_by_name(self, project) -> None:
        """Test lookup by unique name and parameter override."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "property", "let", symbols_file, "mvalues", "Values", "-p", "value", "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout.splitlines()[0] == "Public Property Let Values(ByVal value As Variant)"

    def test_property_not_applicable(self, project) -> None:
        """Test that non-field prototypes fail with a message."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "property", "get", symbols_file, "Module1.DoWork", "Work", "-b", str(base),
        ])

        assert result.exit_code == 1
        assert "Cannot build a property" in result.output

    def test_udt(self, project) -> None:
        """Test building a type from fields."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "udt", symbols_file, "TState",
            "Module1.mValues=Values", "Module1.mColor", "-b", str(base),
        ])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "Private Type TState",
            "    Values(1 To 5) As Long",
            "    mColor As Color",
            "End Type",
        ]

    def test_udt_duplicate_members(self, project) -> None:
        """Test that duplicate member names are an error."""
        base, symbols_file = project
        result = runner.invoke(app, [
            "generate", "udt", symbols_file, "TState",
            "Module1.mValues=Item", "Module1.mColor=ITEM", "-b", str(base),
        ])

        assert result.exit_code == 1
        assert "Duplicate" in result.output

    def test_unknown_declaration(self, project) -> None:
        """Test that unknown ids are reported."""
        base, symbols_file = project
        result = runner.invoke(app, ["generate", "args", symbols_file, "Module1.Nope", "-b", str(base)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_config_override(self, project, monkeypatch) -> None:
        """Test that an invalid VBSYNTH_* override is reported, not raised."""
        base, symbols_file = project
        monkeypatch.setenv("VBSYNTH_INDENT_WIDTH", "wide")
        result = runner.invoke(app, ["generate", "args", symbols_file, "Module1.Point", "-b", str(base)])

        assert result.exit_code == 1
        assert "Invalid value for indent_width" in result.output


class TestLogsCommands:
    """Tests for logs commands."""

    def test_show_empty(self, monkeypatch) -> None:
        """Test showing an empty log."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.chdir(tmpdir)
            result = runner.invoke(app, ["logs", "show"])

            assert result.exit_code == 0
            assert "No log entries found" in result.stdout

    def test_clear_missing(self, monkeypatch) -> None:
        """Test clearing when there is no log."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.chdir(tmpdir)
            result = runner.invoke(app, ["logs", "clear", "--force"])

            assert result.exit_code == 0
            assert "No log file" in result.stdout


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_main_help(self) -> None:
        """Test that main help displays."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Code block synthesis" in result.stdout

    def test_generate_help(self) -> None:
        """Test that generate help displays."""
        result = runner.invoke(app, ["generate", "--help"])

        assert result.exit_code == 0
