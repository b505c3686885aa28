"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError
from vbsynth.models import (
    Accessibility,
    Declaration,
    DeclarationType,
    ModuleBodyElementDeclaration,
    ParameterDeclaration,
    PassingMode,
    Selection,
    VbsynthConfig,
    MEMBER_TYPES,
    PROPERTY_MUTATOR_TYPES,
    PROPERTY_TYPES,
    VARIABLE_TYPES,
)


class TestDeclarationTypeSets:
    """Tests for composite declaration kinds."""

    def test_property_types(self) -> None:
        """Test property kind membership."""
        assert PROPERTY_TYPES == {
            DeclarationType.PROPERTY_GET,
            DeclarationType.PROPERTY_LET,
            DeclarationType.PROPERTY_SET,
        }
        assert PROPERTY_MUTATOR_TYPES < PROPERTY_TYPES
        assert DeclarationType.PROPERTY_GET not in PROPERTY_MUTATOR_TYPES

    def test_member_types(self) -> None:
        """Test that properties are members and variables are not."""
        assert PROPERTY_TYPES < MEMBER_TYPES
        assert DeclarationType.FUNCTION in MEMBER_TYPES
        assert DeclarationType.VARIABLE not in MEMBER_TYPES

    def test_variable_types(self) -> None:
        """Test that UDT members count as variables."""
        assert DeclarationType.USER_DEFINED_TYPE_MEMBER in VARIABLE_TYPES
        assert DeclarationType.CONSTANT not in VARIABLE_TYPES


class TestSelection:
    """Tests for source positions."""

    def test_defaults(self) -> None:
        """Test default selection."""
        assert Selection().sort_key == (1, 1, 1, 1)

    def test_ordering_key(self) -> None:
        """Test that line orders before column."""
        early = Selection(start_line=1, start_column=50, end_line=1, end_column=60)
        late = Selection(start_line=2, start_column=1, end_line=2, end_column=5)
        assert early.sort_key < late.sort_key


class TestDeclaration:
    """Tests for declaration models."""

    def test_defaults(self) -> None:
        """Test Declaration defaults."""
        declaration = Declaration(identifier_name="mName", declaration_type=DeclarationType.VARIABLE)

        assert declaration.accessibility == Accessibility.IMPLICIT
        assert declaration.as_type_name == ""
        assert declaration.is_array is False
        assert declaration.array_bounds is None
        assert declaration.as_type_declaration is None
        assert declaration.parent_declaration is None

    def test_parses_enum_values(self) -> None:
        """Test that enum fields accept their token values."""
        declaration = Declaration.model_validate({
            "identifier_name": "Foo",
            "declaration_type": "PropertyLet",
            "accessibility": "Private",
        })

        assert declaration.declaration_type == DeclarationType.PROPERTY_LET
        assert declaration.accessibility == Accessibility.PRIVATE

    def test_is_immutable(self) -> None:
        """Test that declarations cannot be modified."""
        declaration = Declaration(identifier_name="mName", declaration_type=DeclarationType.VARIABLE)
        with pytest.raises(ValidationError):
            declaration.identifier_name = "mOther"

    def test_keeps_subclass_references(self) -> None:
        """Test that back-references keep their concrete type."""
        member = ModuleBodyElementDeclaration(
            identifier_name="DoWork", declaration_type=DeclarationType.PROCEDURE
        )
        local = Declaration(
            identifier_name="x", declaration_type=DeclarationType.VARIABLE, parent_declaration=member
        )

        assert isinstance(local.parent_declaration, ModuleBodyElementDeclaration)


class TestParameterDeclaration:
    """Tests for parameter models."""

    def test_defaults(self) -> None:
        """Test parameter defaults."""
        param = ParameterDeclaration(identifier_name="value")

        assert param.declaration_type == DeclarationType.PARAMETER
        assert param.passing_mode == PassingMode.IMPLICIT_BY_REF
        assert param.is_by_ref
        assert param.is_implicit_by_ref

    def test_by_val(self) -> None:
        """Test ByVal flags."""
        param = ParameterDeclaration(identifier_name="value", passing_mode=PassingMode.BY_VAL)

        assert not param.is_by_ref
        assert not param.is_implicit_by_ref

    def test_explicit_by_ref(self) -> None:
        """Test explicit ByRef flags."""
        param = ParameterDeclaration(identifier_name="value", passing_mode="ByRef")

        assert param.is_by_ref
        assert not param.is_implicit_by_ref

    def test_rejects_other_kinds(self) -> None:
        """Test that parameters must be of kind Parameter."""
        with pytest.raises(ValidationError):
            ParameterDeclaration(identifier_name="value", declaration_type=DeclarationType.VARIABLE)


class TestModuleBodyElementDeclaration:
    """Tests for member models."""

    def test_parameters(self) -> None:
        """Test member with parameters."""
        member = ModuleBodyElementDeclaration(
            identifier_name="Add",
            declaration_type=DeclarationType.FUNCTION,
            as_type_name="Long",
            parameters=[ParameterDeclaration(identifier_name="a")],
        )

        assert len(member.parameters) == 1
        assert isinstance(member.parameters, tuple)

    def test_rejects_non_member_kinds(self) -> None:
        """Test that only member kinds are accepted."""
        with pytest.raises(ValidationError):
            ModuleBodyElementDeclaration(identifier_name="mName", declaration_type=DeclarationType.VARIABLE)


class TestVbsynthConfig:
    """Tests for the config model."""

    def test_defaults(self) -> None:
        """Test config defaults."""
        config = VbsynthConfig()

        assert config.indent_width == 4
        assert config.line_terminator == "crlf"
        assert config.property_value_parameter == "RHS"
        assert config.command_logging is True

    def test_rejects_unknown_line_terminator(self) -> None:
        """Test line terminator validation."""
        with pytest.raises(ValidationError):
            VbsynthConfig(line_terminator="cr")
