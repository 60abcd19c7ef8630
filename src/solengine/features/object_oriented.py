"""Checkers for inheritance, contract kinds and visibility."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solengine.checking import checker, match
from solengine.features import nodes
from solengine.patterns import leaf
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode
    from solengine.patterns import Final


@checker(FeatureType.SINGLE_INHERITANCE)
async def check_single_inheritance(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ContractDefinition": leaf(lambda contract: len(nodes.base_contracts(contract)) == 1)})


@checker(FeatureType.MULTIPLE_INHERITANCE)
async def check_multiple_inheritance(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ContractDefinition": leaf(lambda contract: len(nodes.base_contracts(contract)) > 1)})


def _is_super_call(call: SyntaxNode) -> bool:
    target = nodes.callee(call)
    if target is None or target.type != "MemberAccess":
        return False
    receiver = nodes.member_object(target)
    return receiver is not None and receiver.text == "super"


@checker(FeatureType.SUPER_VIRTUAL_METHOD_LOOKUP)
async def check_super_virtual_method_lookup(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionCall": leaf(_is_super_call)})


@checker(FeatureType.FUNCTION_OVERRIDING)
async def check_function_overriding(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(nodes.is_overriding)})


@checker(FeatureType.FUNCTION_MODIFIER_OVERRIDING)
async def check_function_modifier_overriding(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ModifierDefinition": leaf(nodes.is_overriding)})


def _contract_of_kind(kind: str) -> Final:
    return leaf(lambda contract: nodes.contract_kind(contract) == kind)


@checker(FeatureType.ABSTRACT_CONTRACT)
async def check_abstract_contract(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ContractDefinition": _contract_of_kind("abstract")})


@checker(FeatureType.INTERFACE)
async def check_interface(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ContractDefinition": _contract_of_kind("interface")})


@checker(FeatureType.LIBRARY)
async def check_library(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"ContractDefinition": _contract_of_kind("library")})


@checker(FeatureType.FUNCTION_VISIBILITY)
async def check_function_visibility(context: AnalysisContext) -> list[FeatureSite]:
    """Functions with an explicit visibility keyword."""
    return match(context, {"FunctionDefinition": leaf(nodes.has_visibility)})


@checker(FeatureType.STATE_VARIABLE_VISIBILITY)
async def check_state_variable_visibility(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"StateVariableDeclaration": leaf(nodes.has_visibility)})
