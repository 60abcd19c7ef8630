"""Checkers for arrays, structs, enums, events and constants."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solengine.checking import checker, match
from solengine.features import nodes
from solengine.patterns import leaf, within
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode

# Node types that declare a variable together with its type.
_DECLARATIONS = (
    "StateVariableDeclaration",
    "FileLevelConstant",
    "VariableDeclaration",
    "Parameter",
    "StructMember",
)


def _has_type(declaration: SyntaxNode, *types: str) -> bool:
    declared = nodes.declared_type(declaration)
    return declared is not None and declared.type in types


@checker(FeatureType.ARRAY)
async def check_array(context: AnalysisContext) -> list[FeatureSite]:
    """Declarations whose type is an array."""
    is_array = leaf(lambda declaration: _has_type(declaration, "ArrayTypeName"))
    return match(context, {node_type: is_array for node_type in _DECLARATIONS})


@checker(FeatureType.STRUCT)
async def check_struct(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "StructDefinition")


def _is_nested_array(array_type: SyntaxNode) -> bool:
    base = nodes.array_base(array_type)
    return base is not None and base.type in ("ArrayTypeName", "UserDefinedTypeName")


@checker(FeatureType.NESTED_ARRAY_OR_STRUCT)
async def check_nested_array_or_struct(context: AnalysisContext) -> list[FeatureSite]:
    """Arrays of arrays or of user-defined types, then struct members of user-defined type."""
    nested_arrays = match(context, {"ArrayTypeName": leaf(_is_nested_array)})
    nested_structs = match(
        context,
        {"StructDefinition": within({"StructMember": leaf(lambda member: _has_type(member, "UserDefinedTypeName"))})},
    )
    return [*nested_arrays, *nested_structs]


@checker(FeatureType.ENUM)
async def check_enum(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "EnumDefinition")


@checker(FeatureType.EVENT)
async def check_event(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "EventDefinition")


@checker(FeatureType.CONSTANT_AND_IMMUTABLE_STATE_VARIABLE)
async def check_constant_and_immutable_state_variable(context: AnalysisContext) -> list[FeatureSite]:
    """File-level constants, then ``constant``/``immutable`` state variables."""
    file_level = match(context, "FileLevelConstant")
    state_variables = match(context, {"StateVariableDeclaration": leaf(nodes.is_constant_or_immutable)})
    return [*file_level, *state_variables]
