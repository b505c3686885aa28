"""Pydantic models for the declaration model and vbsynth configuration."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
from enum import Enum


# === Declaration Enums ===

class Accessibility(str, Enum):
    """Accessibility of a declaration. Values are the rendered keyword tokens."""

    PRIVATE = "Private"
    PUBLIC = "Public"
    FRIEND = "Friend"
    GLOBAL = "Global"
    STATIC = "Static"
    IMPLICIT = "Implicit"


class DeclarationType(str, Enum):
    """Kind of a declaration."""

    PROJECT = "Project"
    PROCEDURAL_MODULE = "ProceduralModule"
    CLASS_MODULE = "ClassModule"
    FUNCTION = "Function"
    PROCEDURE = "Procedure"
    PROPERTY_GET = "PropertyGet"
    PROPERTY_LET = "PropertyLet"
    PROPERTY_SET = "PropertySet"
    LIBRARY_FUNCTION = "LibraryFunction"
    LIBRARY_PROCEDURE = "LibraryProcedure"
    PARAMETER = "Parameter"
    VARIABLE = "Variable"
    CONSTANT = "Constant"
    ENUMERATION = "Enumeration"
    ENUMERATION_MEMBER = "EnumerationMember"
    USER_DEFINED_TYPE = "UserDefinedType"
    USER_DEFINED_TYPE_MEMBER = "UserDefinedTypeMember"


PROPERTY_TYPES = frozenset({
    DeclarationType.PROPERTY_GET,
    DeclarationType.PROPERTY_LET,
    DeclarationType.PROPERTY_SET,
})

PROPERTY_MUTATOR_TYPES = frozenset({
    DeclarationType.PROPERTY_LET,
    DeclarationType.PROPERTY_SET,
})

MEMBER_TYPES = frozenset({
    DeclarationType.FUNCTION,
    DeclarationType.PROCEDURE,
    DeclarationType.LIBRARY_FUNCTION,
    DeclarationType.LIBRARY_PROCEDURE,
}) | PROPERTY_TYPES

# UDT members are fields, so they count as variables
VARIABLE_TYPES = frozenset({
    DeclarationType.VARIABLE,
    DeclarationType.USER_DEFINED_TYPE_MEMBER,
})


class PassingMode(str, Enum):
    """Parameter passing convention."""

    BY_VAL = "ByVal"
    BY_REF = "ByRef"
    IMPLICIT_BY_REF = "ImplicitByRef"


# === Declarations ===

class Selection(BaseModel):
    """Source position of a declaration (1-based)."""

    model_config = ConfigDict(frozen=True)

    start_line: int = 1
    start_column: int = 1
    end_line: int = 1
    end_column: int = 1

    @property
    def sort_key(self) -> tuple[int, int, int, int]:
        return (self.start_line, self.start_column, self.end_line, self.end_column)


class Declaration(BaseModel):
    """A resolved declaration, as supplied by the upstream resolver.

    Instances are immutable and shared; references to other declarations
    (as_type_declaration, parent_declaration) are resolved before the
    declaration is handed to the builder.
    """

    model_config = ConfigDict(frozen=True)

    identifier_name: str
    declaration_type: DeclarationType
    accessibility: Accessibility = Accessibility.IMPLICIT
    as_type_name: str = ""
    is_array: bool = False
    array_bounds: Optional[str] = None  # Subscript text as written, e.g. "1 To 5"
    as_type_declaration: Optional["Declaration"] = None
    parent_declaration: Optional["Declaration"] = None
    selection: Selection = Field(default_factory=Selection)


class ParameterDeclaration(Declaration):
    """A parameter of a procedure, function or property."""

    declaration_type: DeclarationType = DeclarationType.PARAMETER
    passing_mode: PassingMode = PassingMode.IMPLICIT_BY_REF
    is_optional: bool = False
    is_param_array: bool = False
    default_value: Optional[str] = None

    @field_validator("declaration_type")
    @classmethod
    def _must_be_parameter(cls, value: DeclarationType) -> DeclarationType:
        if value != DeclarationType.PARAMETER:
            raise ValueError(f"parameter declarations must be of type Parameter, got {value.value}")
        return value

    @property
    def is_by_ref(self) -> bool:
        return self.passing_mode != PassingMode.BY_VAL

    @property
    def is_implicit_by_ref(self) -> bool:
        return self.passing_mode == PassingMode.IMPLICIT_BY_REF


class ModuleBodyElementDeclaration(Declaration):
    """A procedure, function or property member with its parameters."""

    parameters: tuple[ParameterDeclaration, ...] = ()

    @field_validator("declaration_type")
    @classmethod
    def _must_be_member(cls, value: DeclarationType) -> DeclarationType:
        if value not in MEMBER_TYPES:
            raise ValueError(f"{value.value} is not a module body element type")
        return value


Declaration.model_rebuild()
ParameterDeclaration.model_rebuild()
ModuleBodyElementDeclaration.model_rebuild()


# === Config ===

class VbsynthConfig(BaseModel):
    """Configuration for vbsynth."""

    version: str = "0.1.0"
    indent_width: int = 4  # Indent of UDT member lines
    line_terminator: Literal["crlf", "lf"] = "crlf"
    property_value_parameter: str = "RHS"  # Let/Set value parameter name
    command_logging: bool = True  # Log command invocations to .vbsynth-logs/
