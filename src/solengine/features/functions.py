"""Checkers for function semantics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from solengine.checking import capture_site, checker, match, match_primitive
from solengine.features import nodes
from solengine.patterns import Final, leaf, within
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode


@checker(FeatureType.RETURNING_MULTIPLE_VALUE)
async def check_returning_multiple_value(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: len(nodes.return_parameters(fn)) > 1)})


@checker(FeatureType.RECURSION)
async def check_recursion(context: AnalysisContext) -> list[FeatureSite]:
    """A call naming the function it appears in."""
    return match(
        context,
        {
            "FunctionDefinition": within(
                {
                    "FunctionCall": within(
                        {
                            "Identifier": Final(
                                lambda identifier, ancestors: identifier.text == ancestors["FunctionDefinition"].name
                            ),
                        }
                    ),
                }
            ),
        },
    )


@checker(FeatureType.FIRST_CLASS_FUNCTION)
async def check_first_class_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "FunctionTypeName")


@checker(FeatureType.PURE_FUNCTION)
async def check_pure_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: nodes.state_mutability(fn) == "pure")})


@checker(FeatureType.VIEW_FUNCTION)
async def check_view_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: nodes.state_mutability(fn) == "view")})


@checker(FeatureType.CONSTANT_FUNCTION)
async def check_constant_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: nodes.state_mutability(fn) == "constant")})


@checker(FeatureType.FUNCTION_MODIFIER)
async def check_function_modifier(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "ModifierDefinition")


@checker(FeatureType.NAMED_CALL)
async def check_named_call(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionCall": leaf(nodes.has_named_arguments)})


# ---------------------------------------------------------------------------
# Free functions
# ---------------------------------------------------------------------------


@dataclass
class _ContainerState:
    """Nesting depth of contract-like definitions during one walk."""

    context: AnalysisContext
    depth: int = 0
    sites: list[FeatureSite] = field(default_factory=list)


def _enter_container(_node: SyntaxNode, state: _ContainerState) -> None:
    state.depth += 1


def _leave_container(_node: SyntaxNode, state: _ContainerState) -> None:
    state.depth -= 1


def _visit_free_function(node: SyntaxNode, state: _ContainerState) -> None:
    if state.depth == 0:
        state.sites.append(capture_site(state.context, node))


@checker(FeatureType.FREE_FUNCTION)
async def check_free_function(context: AnalysisContext) -> list[FeatureSite]:
    """Function defined at file level, outside any contract, interface or library."""
    state = match_primitive(
        context,
        {
            "ContractDefinition": _enter_container,
            "ContractDefinition:exit": _leave_container,
            "FunctionDefinition": _visit_free_function,
        },
        _ContainerState(context),
    )
    return state.sites


@checker(FeatureType.RETURN_VARIABLE)
async def check_return_variable(context: AnalysisContext) -> list[FeatureSite]:
    return match(
        context,
        {
            "FunctionDefinition": leaf(
                lambda fn: any(nodes.parameter_name(param) for param in nodes.return_parameters(fn))
            ),
        },
    )


@checker(FeatureType.FALLBACK_FUNCTION)
async def check_fallback_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: nodes.function_kind(fn) == "fallback")})


@checker(FeatureType.RECEIVE_ETHER_FUNCTION)
async def check_receive_ether_function(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionDefinition": leaf(lambda fn: nodes.function_kind(fn) == "receive")})


# ---------------------------------------------------------------------------
# Overloading
# ---------------------------------------------------------------------------


@dataclass
class _OverloadState:
    """Qualified function names seen so far in one walk."""

    context: AnalysisContext
    contract: str | None = None
    seen: set[str] = field(default_factory=set)
    sites: list[FeatureSite] = field(default_factory=list)


def _enter_contract(node: SyntaxNode, state: _OverloadState) -> None:
    state.contract = node.name


def _leave_contract(_node: SyntaxNode, state: _OverloadState) -> None:
    state.contract = None


def _visit_function(node: SyntaxNode, state: _OverloadState) -> None:
    if state.contract is None or node.name is None:
        return
    qualified = f"{state.contract}.{node.name}"
    if qualified in state.seen:
        state.sites.append(capture_site(state.context, node))
    else:
        state.seen.add(qualified)


@checker(FeatureType.FUNCTION_OVERLOADING)
async def check_function_overloading(context: AnalysisContext) -> list[FeatureSite]:
    """Every definition after the first of a name within one contract."""
    state = match_primitive(
        context,
        {
            "ContractDefinition": _enter_contract,
            "ContractDefinition:exit": _leave_contract,
            "FunctionDefinition": _visit_function,
        },
        _OverloadState(context),
    )
    return state.sites
