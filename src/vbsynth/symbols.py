"""Symbol table - loads a resolved declaration dump into immutable models.

The resolver that analyzes source code lives outside vbsynth. It exports its
declarations as JSONL, one record per declaration:

    {"id": "Module1.mColor", "kind": "Variable", "name": "mColor",
     "accessibility": "Private", "as_type_name": "Color",
     "as_type": "Module1.Color", "parent": "Module1", "selection": [3, 1, 3, 24]}

"parent" and "as_type" reference other records by id. Members carry their
parameters inline under "parameters"; an inline parameter's "parent", when
present, must be its member and is left unresolved. References are resolved once, here,
so the builder never sees dangling ids.
"""
from pathlib import Path
from typing import Any, Iterator, Optional

from .models import (
    Declaration,
    DeclarationType,
    ModuleBodyElementDeclaration,
    ParameterDeclaration,
    Selection,
    MEMBER_TYPES,
    VARIABLE_TYPES,
)
from .storage import read_jsonl

# Record keys copied as-is onto the models
DECLARATION_FIELDS = ("accessibility", "as_type_name", "is_array", "array_bounds")
PARAMETER_FIELDS = ("passing_mode", "is_optional", "is_param_array", "default_value")


def parse_selection(value: Any) -> Selection:
    """Parse a selection given as [start_line, start_col, end_line, end_col] or a dict."""
    if isinstance(value, Selection):
        return value
    if isinstance(value, (list, tuple)):
        if len(value) != 4:
            raise ValueError(f"Selection must have 4 elements, got {len(value)}")
        start_line, start_column, end_line, end_column = value
        return Selection(
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
        )
    return Selection.model_validate(value)


class _Resolver:
    """Resolves flat records into declarations, references first."""

    def __init__(self, records: list[dict]):
        self.records: dict[str, dict] = {}
        for record in records:
            record_id = record.get("id")
            if not record_id:
                raise ValueError(f"Declaration record without an id: {record}")
            if record_id in self.records:
                raise ValueError(f"Duplicate declaration id '{record_id}'")
            self.records[record_id] = record
        self.resolved: dict[str, Declaration] = {}
        self._in_progress: list[str] = []

    def resolve_all(self) -> dict[str, Declaration]:
        for record_id in self.records:
            self.resolve(record_id)
        return self.resolved

    def resolve(self, record_id: str) -> Declaration:
        if record_id in self.resolved:
            return self.resolved[record_id]
        if record_id in self._in_progress:
            cycle = " -> ".join(self._in_progress + [record_id])
            raise ValueError(f"Reference cycle between declarations: {cycle}")
        if record_id not in self.records:
            raise ValueError(f"Reference to unknown declaration '{record_id}'")

        self._in_progress.append(record_id)
        try:
            declaration = self._build(self.records[record_id])
        finally:
            self._in_progress.pop()

        self.resolved[record_id] = declaration
        return declaration

    def _reference(self, record: dict, key: str) -> Optional[Declaration]:
        ref = record.get(key)
        return self.resolve(ref) if ref else None

    def _common_fields(self, record: dict, field_names: tuple[str, ...], resolve_parent: bool = True) -> dict:
        if "name" not in record:
            raise ValueError(f"Declaration record without a name: {record}")
        data = {
            "identifier_name": record["name"],
            "as_type_declaration": self._reference(record, "as_type"),
        }
        if resolve_parent:
            data["parent_declaration"] = self._reference(record, "parent")
        for name in field_names:
            if name in record:
                data[name] = record[name]
        if "selection" in record:
            data["selection"] = parse_selection(record["selection"])
        return data

    def _build(self, record: dict) -> Declaration:
        if "kind" not in record:
            raise ValueError(f"Declaration record without a kind: {record}")
        kind = DeclarationType(record["kind"])

        if kind == DeclarationType.PARAMETER:
            return self._build_parameter(record)

        data = self._common_fields(record, DECLARATION_FIELDS)
        data["declaration_type"] = kind

        if kind in MEMBER_TYPES:
            data["parameters"] = tuple(
                self._build_parameter(parameter, owner_id=record["id"])
                for parameter in record.get("parameters", [])
            )
            return ModuleBodyElementDeclaration.model_validate(data)
        return Declaration.model_validate(data)

    def _build_parameter(self, record: dict, owner_id: Optional[str] = None) -> ParameterDeclaration:
        if owner_id is None:
            data = self._common_fields(record, DECLARATION_FIELDS + PARAMETER_FIELDS)
            return ParameterDeclaration.model_validate(data)

        # Inline parameters belong to the member being built, which cannot be
        # referenced until all of its parameters exist.
        parent = record.get("parent")
        if parent and parent != owner_id:
            raise ValueError(
                f"Parameter '{record.get('name')}' of '{owner_id}' names another parent '{parent}'"
            )
        data = self._common_fields(record, DECLARATION_FIELDS + PARAMETER_FIELDS, resolve_parent=False)
        return ParameterDeclaration.model_validate(data)


class SymbolTable:
    """Read-only lookup over resolved declarations."""

    def __init__(self, declarations: dict[str, Declaration]):
        self._declarations = dict(declarations)

    @classmethod
    def from_records(cls, records: list[dict]) -> "SymbolTable":
        """Build a symbol table from declaration records.

        Raises:
            ValueError: On duplicate or missing ids, unknown references,
                reference cycles, or unknown kinds.
            pydantic.ValidationError: On records that do not fit the model.
        """
        return cls(_Resolver(list(records)).resolve_all())

    @classmethod
    def load(cls, path: Path) -> "SymbolTable":
        """Load a symbol table from a JSONL declaration dump."""
        if not path.exists():
            raise ValueError(f"Symbol file not found: {path}")
        return cls.from_records(list(read_jsonl(path)))

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._declarations.values())

    def items(self) -> Iterator[tuple[str, Declaration]]:
        return iter(self._declarations.items())

    def get(self, declaration_id: str) -> Optional[Declaration]:
        """Get a declaration by its id."""
        return self._declarations.get(declaration_id)

    def find(self, name: str, kind: Optional[DeclarationType] = None) -> list[Declaration]:
        """Find declarations by identifier, ignoring case."""
        key = name.upper()
        return [
            d for d in self._declarations.values()
            if d.identifier_name.upper() == key and (kind is None or d.declaration_type == kind)
        ]

    def members(self) -> list[ModuleBodyElementDeclaration]:
        """All functions, procedures and properties."""
        return [d for d in self._declarations.values() if isinstance(d, ModuleBodyElementDeclaration)]

    def variables(self) -> list[Declaration]:
        """All variables and user-defined type members."""
        return [d for d in self._declarations.values() if d.declaration_type in VARIABLE_TYPES]
