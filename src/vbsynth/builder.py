"""Code builder - synthesizes member, property and user-defined type blocks.

Every operation is a pure function of its arguments: the builder keeps only
read-only formatting settings and never retains the declarations it reads.
"""
from typing import Iterable, Optional, Union

from .models import (
    Accessibility,
    Declaration,
    DeclarationType,
    ModuleBodyElementDeclaration,
    ParameterDeclaration,
    MEMBER_TYPES,
    PROPERTY_MUTATOR_TYPES,
    PROPERTY_TYPES,
    VARIABLE_TYPES,
    VbsynthConfig,
)
from .config import LINE_TERMINATORS

# Language tokens
AS = "As"
BY_REF = "ByRef"
BY_VAL = "ByVal"
OPTIONAL = "Optional"
PARAM_ARRAY = "ParamArray"
VARIANT = "Variant"
LONG = "Long"

# Type rendered for property values of privately declared enums
ENUM_UNDERLYING_TYPE = LONG

DEFAULT_INDENT = "    "
DEFAULT_NEWLINE = "\r\n"
DEFAULT_PROPERTY_VALUE_PARAMETER = "RHS"

# Keyword and closing statement for each kind of code block
DECLARATION_TYPE_TOKENS: dict[DeclarationType, tuple[str, str]] = {
    DeclarationType.FUNCTION: ("Function", "End Function"),
    DeclarationType.PROCEDURE: ("Sub", "End Sub"),
    DeclarationType.PROPERTY_GET: ("Property Get", "End Property"),
    DeclarationType.PROPERTY_LET: ("Property Let", "End Property"),
    DeclarationType.PROPERTY_SET: ("Property Set", "End Property"),
}

UDT_END_STATEMENT = "End Type"

AccessibilityOverride = Optional[Union[Accessibility, str]]


def type_token(declaration_type: DeclarationType) -> str:
    """Get the declaring keyword(s) for a kind of member, e.g. "Property Get".

    Raises:
        ValueError: If the kind has no code block template.
    """
    return _lookup_tokens(declaration_type)[0]


def end_statement(declaration_type: DeclarationType) -> str:
    """Get the closing statement for a kind of member, e.g. "End Sub".

    Raises:
        ValueError: If the kind has no code block template.
    """
    return _lookup_tokens(declaration_type)[1]


def _lookup_tokens(declaration_type: DeclarationType) -> tuple[str, str]:
    try:
        return DECLARATION_TYPE_TOKENS[declaration_type]
    except KeyError:
        raise ValueError(
            f"No code block template for {declaration_type.value} declarations"
        ) from None


def is_user_defined_type(declaration: Declaration) -> bool:
    """Check if a declaration's type resolves to a user-defined type."""
    as_type = declaration.as_type_declaration
    return as_type is not None and as_type.declaration_type == DeclarationType.USER_DEFINED_TYPE


def is_member_variable(declaration: Declaration) -> bool:
    """Check if a declaration is a module-level field rather than a local.

    Only variables qualify; user-defined type members never do. A variable
    without a parent declaration is treated as module-level.
    """
    if declaration.declaration_type != DeclarationType.VARIABLE:
        return False
    parent = declaration.parent_declaration
    return parent is None or parent.declaration_type not in MEMBER_TYPES


def is_enum_field(declaration: Declaration) -> bool:
    """Check if a declaration is a module-level field typed as an enumeration."""
    as_type = declaration.as_type_declaration
    return (
        is_member_variable(declaration)
        and as_type is not None
        and as_type.declaration_type == DeclarationType.ENUMERATION
    )


def _accessibility_token(accessibility: Union[Accessibility, str]) -> str:
    if isinstance(accessibility, Accessibility):
        if accessibility == Accessibility.IMPLICIT:
            return Accessibility.PUBLIC.value
        return accessibility.value
    return accessibility


def _format_optional_element(element: str) -> str:
    return f"{element} " if element else ""


def _format_as_type_name(as_type_name: Optional[str]) -> str:
    return f"{AS} {as_type_name} " if as_type_name else ""


def _format_default_value(default_value: Optional[str]) -> str:
    return f"= {default_value}" if default_value else ""


def build_parameter_declaration(parameter: ParameterDeclaration, force_explicit_by_val: bool) -> str:
    """Render a single parameter, e.g. "Optional ByVal count As Long = 1".

    Args:
        parameter: The parameter to render.
        force_explicit_by_val: Render ByVal even when the parameter is ByRef
            or implicitly ByRef. Ignored for user-defined type parameters,
            which can only be passed by reference.

    Returns:
        The parameter fragment, trimmed.
    """
    if parameter.is_param_array:
        qualifier = PARAM_ARRAY
    elif parameter.is_optional:
        qualifier = OPTIONAL
    else:
        qualifier = ""

    if parameter.is_implicit_by_ref:
        mechanism = ""
    else:
        mechanism = BY_REF if parameter.is_by_ref else BY_VAL

    if force_explicit_by_val and mechanism != BY_VAL and not is_user_defined_type(parameter):
        mechanism = BY_VAL

    name = f"{parameter.identifier_name}()" if parameter.is_array else parameter.identifier_name

    elements = [
        _format_optional_element(qualifier),
        _format_optional_element(mechanism),
        f"{name} ",
        _format_as_type_name(parameter.as_type_name),
        _format_default_value(parameter.default_value),
    ]
    return "".join(elements).strip()


def _udt_member_identifier(field: Declaration, member_identifier: str) -> str:
    if not field.is_array:
        return member_identifier
    if field.array_bounds:
        return f"{member_identifier}({field.array_bounds})"
    return f"{member_identifier}()"


class CodeBuilder:
    """Builds code blocks from declaration prototypes."""

    def __init__(
        self,
        indent: str = DEFAULT_INDENT,
        newline: str = DEFAULT_NEWLINE,
        property_value_parameter: str = DEFAULT_PROPERTY_VALUE_PARAMETER,
    ):
        self.indent = indent
        self.newline = newline
        self.property_value_parameter = property_value_parameter

    @classmethod
    def from_config(cls, config: VbsynthConfig) -> "CodeBuilder":
        """Create a builder using the formatting settings of a config."""
        return cls(
            indent=" " * config.indent_width,
            newline=LINE_TERMINATORS[config.line_terminator],
            property_value_parameter=config.property_value_parameter,
        )

    # === Members ===

    def improved_full_member_signature(
        self,
        declaration: ModuleBodyElementDeclaration,
        accessibility: AccessibilityOverride = None,
        new_identifier: Optional[str] = None,
    ) -> str:
        """Build a member signature with an improved argument list.

        Implicit accessibility is rendered as Public. The As clause is left
        out when the declaration has no type name (Sub, Property Let/Set).

        Args:
            declaration: The member to build the signature for.
            accessibility: Accessibility to render instead of the member's own.
            new_identifier: Identifier to render instead of the member's own.

        Returns:
            The signature line, e.g. "Public Function Foo(ByVal arg As Long) As String".

        Raises:
            ValueError: If the declaration is not a Function, Sub or Property.
        """
        if accessibility is None:
            accessibility = declaration.accessibility
        identifier = new_identifier if new_identifier is not None else declaration.identifier_name

        as_type_name = f" {AS} {declaration.as_type_name}" if declaration.as_type_name else ""

        elements = [
            _accessibility_token(accessibility),
            f" {type_token(declaration.declaration_type)} ",
            identifier,
            f"({self.improved_argument_list(declaration)})",
            as_type_name,
        ]
        return "".join(elements).strip()

    def improved_argument_list(self, declaration: Declaration) -> str:
        """Build the argument list of a member, ordered by source position.

        The value parameter of a Property Let/Set (the last one) is made
        explicitly ByVal unless its type is a user-defined type.

        Args:
            declaration: The member whose parameters to render. Declarations
                without parameters yield an empty string.

        Returns:
            Comma separated parameter fragments.
        """
        if not isinstance(declaration, ModuleBodyElementDeclaration):
            return ""

        parameters = sorted(declaration.parameters, key=lambda p: p.selection.sort_key)
        is_mutator = declaration.declaration_type in PROPERTY_MUTATOR_TYPES
        last_index = len(parameters) - 1

        arguments = [
            build_parameter_declaration(parameter, is_mutator and index == last_index)
            for index, parameter in enumerate(parameters)
        ]
        return ", ".join(arguments)

    def build_member_block_from_prototype(
        self,
        declaration: ModuleBodyElementDeclaration,
        content: Optional[str] = None,
        accessibility: AccessibilityOverride = None,
        new_identifier: Optional[str] = None,
    ) -> str:
        """Build a complete member block: signature, body and end statement.

        Args:
            declaration: The member used as prototype.
            content: Body of the member, inserted verbatim. Formatting is the
                responsibility of the caller.
            accessibility: Accessibility to render instead of the member's own.
            new_identifier: Identifier to render instead of the member's own.

        Returns:
            The member block, terminated by a line break.
        """
        elements = [
            self.improved_full_member_signature(declaration, accessibility, new_identifier),
            self.newline,
            f"{content}{self.newline}" if content else "",
            end_statement(declaration.declaration_type),
            self.newline,
        ]
        return "".join(elements)

    # === Properties ===

    def try_build_property_get_code_block(
        self,
        prototype: Declaration,
        property_identifier: str,
        accessibility: AccessibilityOverride = None,
        content: Optional[str] = None,
    ) -> tuple[bool, str]:
        """Build a Property Get block for a field. See try_build_property_block."""
        return self.try_build_property_block(
            prototype, DeclarationType.PROPERTY_GET, property_identifier,
            content=content, accessibility=accessibility,
        )

    def try_build_property_let_code_block(
        self,
        prototype: Declaration,
        property_identifier: str,
        accessibility: AccessibilityOverride = None,
        content: Optional[str] = None,
        parameter_identifier: Optional[str] = None,
    ) -> tuple[bool, str]:
        """Build a Property Let block for a field. See try_build_property_block."""
        return self.try_build_property_block(
            prototype, DeclarationType.PROPERTY_LET, property_identifier,
            content=content, accessibility=accessibility,
            parameter_identifier=parameter_identifier,
        )

    def try_build_property_set_code_block(
        self,
        prototype: Declaration,
        property_identifier: str,
        accessibility: AccessibilityOverride = None,
        content: Optional[str] = None,
        parameter_identifier: Optional[str] = None,
    ) -> tuple[bool, str]:
        """Build a Property Set block for a field. See try_build_property_block."""
        return self.try_build_property_block(
            prototype, DeclarationType.PROPERTY_SET, property_identifier,
            content=content, accessibility=accessibility,
            parameter_identifier=parameter_identifier,
        )

    def try_build_property_block(
        self,
        prototype: Declaration,
        property_type: DeclarationType,
        property_identifier: str,
        content: Optional[str] = None,
        accessibility: AccessibilityOverride = None,
        parameter_identifier: Optional[str] = None,
    ) -> tuple[bool, str]:
        """Build a property accessor block using a field as prototype.

        The property type is Variant for array fields, Long for fields typed
        as a Private enum, and the field's own type otherwise. Let/Set take a
        single value parameter, passed ByRef for user-defined types and ByVal
        for everything else.

        Args:
            prototype: A variable or user-defined type member.
            property_type: PropertyGet, PropertyLet or PropertySet.
            property_identifier: Name of the property.
            content: Body of the property, inserted verbatim.
            accessibility: Defaults to Public.
            parameter_identifier: Name of the Let/Set value parameter.
                Defaults to the builder's property_value_parameter.

        Returns:
            (True, code block) on success, (False, "") when the prototype is
            not a variable or user-defined type member.

        Raises:
            ValueError: If property_type is not a property kind.
        """
        if property_type not in PROPERTY_TYPES:
            raise ValueError(f"{property_type.value} is not a property declaration type")

        if prototype.declaration_type not in VARIABLE_TYPES:
            return False, ""

        if prototype.is_array:
            as_type = VARIANT
        elif is_enum_field(prototype) and prototype.as_type_declaration.accessibility == Accessibility.PRIVATE:
            as_type = ENUM_UNDERLYING_TYPE
        else:
            as_type = prototype.as_type_name or VARIANT

        as_type_clause = f"{AS} {as_type}"
        accessibility_token = _accessibility_token(
            accessibility if accessibility is not None else Accessibility.PUBLIC
        )

        if property_type == DeclarationType.PROPERTY_GET:
            signature = f"{accessibility_token} {type_token(property_type)} {property_identifier}() {as_type_clause}"
        else:
            value_parameter = parameter_identifier or self.property_value_parameter
            mechanism = BY_REF if is_user_defined_type(prototype) else BY_VAL
            signature = (
                f"{accessibility_token} {type_token(property_type)} {property_identifier}"
                f"({mechanism} {value_parameter} {as_type_clause})"
            )

        code_block = self.newline.join([signature, content or "", end_statement(property_type)])
        return True, code_block

    # === User-defined types ===

    def build_user_defined_type_declaration(
        self,
        udt_identifier: str,
        member_prototypes: Iterable[tuple[Declaration, str]],
        accessibility: Accessibility = Accessibility.PRIVATE,
        indent: Optional[str] = None,
    ) -> str:
        """Build a Type ... End Type block from field prototypes.

        Each member takes the type of its prototype field. Array fields keep
        their original subscripts when known, e.g. "Values(1 To 5) As Long".

        Args:
            udt_identifier: Name of the new type.
            member_prototypes: (field, member identifier) pairs, in order.
            accessibility: Accessibility of the type. Implicit renders none.
            indent: Indent of member lines. Defaults to the builder's indent.

        Returns:
            The type declaration, lines joined by the builder's newline.

        Raises:
            ValueError: If there are no members, a prototype is not a
                variable, or two member identifiers differ only by case.
        """
        members = list(member_prototypes)
        if not members:
            raise ValueError(f"Type {udt_identifier} requires at least one member")

        seen: dict[str, str] = {}
        for field, member_identifier in members:
            if field.declaration_type not in VARIABLE_TYPES:
                raise ValueError(
                    f"Cannot create a member of Type {udt_identifier} from "
                    f"{field.declaration_type.value} '{field.identifier_name}'"
                )
            key = member_identifier.upper()
            if key in seen:
                raise ValueError(
                    f"Duplicate member '{member_identifier}' in Type {udt_identifier} "
                    f"(conflicts with '{seen[key]}')"
                )
            seen[key] = member_identifier

        if accessibility == Accessibility.IMPLICIT:
            header = f"Type {udt_identifier}"
        else:
            header = f"{accessibility.value} Type {udt_identifier}"

        lines = [header]
        lines.extend(
            self.udt_member_declaration(
                _udt_member_identifier(field, member_identifier), field.as_type_name, indent
            )
            for field, member_identifier in members
        )
        lines.append(UDT_END_STATEMENT)
        return self.newline.join(lines)

    def udt_member_declaration(self, identifier: str, type_name: str, indent: Optional[str] = None) -> str:
        """Build a single member line of a Type block, e.g. "    Count As Long"."""
        if indent is None:
            indent = self.indent
        return f"{indent}{identifier} {AS} {type_name}"

