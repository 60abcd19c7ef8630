"""Checkers for control flow: loops, external calls, contract creation and exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solengine.checking import checker, match
from solengine.features import nodes
from solengine.patterns import Final, always, leaf, within
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode
    from solengine.patterns import Ancestors

# Members that are not calls into another contract's code.
_NOT_HIGH_LEVEL = frozenset({"call", "delegatecall", "staticcall", "send", "transfer", "gas", "value"})

_EXCEPTION_FUNCTIONS = frozenset({"require", "assert", "revert"})


@checker(FeatureType.LOOP)
async def check_loop(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, ["ForStatement", "WhileStatement", "DoWhileStatement"])


def _is_high_level_call(access: SyntaxNode, ancestors: Ancestors) -> bool:
    if not nodes.is_callee(ancestors["FunctionCall"], access):
        return False
    target = nodes.member_object(access)
    if target is None or target.text in ("super", "this", ancestors["ContractDefinition"].name):
        return False
    return nodes.member_name(access) not in _NOT_HIGH_LEVEL


@checker(FeatureType.CROSS_CONTRACT_INVOCATION_HIGH_LEVEL)
async def check_cross_contract_invocation_high_level(context: AnalysisContext) -> list[FeatureSite]:
    """``other.method(...)`` inside a contract, excluding ``super``, ``this`` and the contract itself."""
    return match(
        context,
        {"ContractDefinition": within({"FunctionCall": within({"MemberAccess": Final(_is_high_level_call)})})},
    )


@checker(FeatureType.CROSS_CONTRACT_INVOCATION_LOW_LEVEL)
async def check_cross_contract_invocation_low_level(context: AnalysisContext) -> list[FeatureSite]:
    """``addr.call(...)``, ``addr.delegatecall(...)`` and ``addr.staticcall(...)``.

    Calls with options (``addr.call{value: 1}(...)``) are matched through
    the options expression.
    """
    return match(
        context,
        {
            "FunctionCall": within(
                {
                    "MemberAccess": Final(
                        lambda access, ancestors: nodes.is_callee(ancestors["FunctionCall"], access)
                        and nodes.member_name(access) in nodes.LOW_LEVEL_CALLS
                    ),
                }
            ),
            "NameValueExpression": within(
                {
                    "MemberAccess": Final(
                        lambda access, ancestors: nodes.value_expression_target(ancestors["NameValueExpression"])
                        is access
                        and nodes.member_name(access) in nodes.LOW_LEVEL_CALLS
                    ),
                }
            ),
        },
    )


def _member_call(name: str) -> Final:
    return Final(
        lambda access, ancestors: nodes.is_callee(ancestors["FunctionCall"], access)
        and nodes.member_name(access) == name
    )


@checker(FeatureType.SEND)
async def check_send(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionCall": within({"MemberAccess": _member_call("send")})})


@checker(FeatureType.TRANSFER)
async def check_transfer(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"FunctionCall": within({"MemberAccess": _member_call("transfer")})})


def _creates_contract(expression: SyntaxNode) -> bool:
    created = expression.get_field("name") or (expression.children[0] if expression.children else None)
    return created is not None and created.type in ("UserDefinedTypeName", "Identifier")


@checker(FeatureType.CREATING_CONTRACT_VIA_NEW)
async def check_creating_contract_via_new(context: AnalysisContext) -> list[FeatureSite]:
    """``new C(...)`` for a contract type; ``new uint[](n)`` does not count."""
    return match(context, {"NewExpression": leaf(_creates_contract)})


def _is_exception_call(call: SyntaxNode) -> bool:
    target = nodes.callee(call)
    return target is not None and target.type == "Identifier" and target.text in _EXCEPTION_FUNCTIONS


@checker(FeatureType.EXCEPTION_REQUIRE_ASSERT_REVERT_THROW)
async def check_exception_require_assert_revert_throw(context: AnalysisContext) -> list[FeatureSite]:
    return match(
        context,
        {
            "FunctionCall": leaf(_is_exception_call),
            "RevertStatement": always(),
            "ThrowStatement": always(),
        },
    )


@checker(FeatureType.EXCEPTION_TRY_CATCH)
async def check_exception_try_catch(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "TryStatement")
