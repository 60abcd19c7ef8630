"""Checkers for special mechanisms: SMT pragma, gas control, assembly, literals and units."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from solengine.checking import checker, match, match_regex
from solengine.features import nodes
from solengine.patterns import leaf
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode

_PRAGMA_SMT_RE = re.compile(r"^pragma\s+experimental\s+[\"']?SMTChecker\b")
_UNICODE_RE = re.compile(r"unicode[\"']")


@checker(FeatureType.PRAGMA_SMT_CHECKER)
async def check_pragma_smt_checker(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"PragmaDirective": leaf(lambda pragma: bool(_PRAGMA_SMT_RE.match(pragma.text)))})


def _sets_gas_option(call: SyntaxNode) -> bool:
    target = nodes.callee(call)
    return target is not None and target.type == "NameValueExpression" and "gas" in nodes.named_argument_names(target)


def _calls_gas_member(call: SyntaxNode) -> bool:
    target = nodes.callee(call)
    return target is not None and target.type == "MemberAccess" and nodes.member_name(target) == "gas"


@checker(FeatureType.MANUAL_GAS_CONTROL)
async def check_manual_gas_control(context: AnalysisContext) -> list[FeatureSite]:
    """``f{gas: n}(...)`` calls, then legacy ``f.gas(n)(...)`` calls."""
    options = match(context, {"FunctionCall": leaf(_sets_gas_option)})
    legacy = match(context, {"FunctionCall": leaf(_calls_gas_member)})
    return [*options, *legacy]


@checker(FeatureType.INLINE_ASSEMBLY)
async def check_inline_assembly(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "InlineAssemblyStatement")


@checker(FeatureType.UNICODE_LITERAL)
async def check_unicode_literal(context: AnalysisContext) -> list[FeatureSite]:
    return match_regex(context, _UNICODE_RE)


@checker(FeatureType.HEXADECIMAL_LITERAL)
async def check_hexadecimal_literal(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, "HexLiteral")


@checker(FeatureType.ETHER_UNIT)
async def check_ether_unit(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"NumberLiteral": leaf(lambda literal: nodes.number_unit(literal) in nodes.ETHER_UNITS)})


@checker(FeatureType.TIME_UNIT)
async def check_time_unit(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"NumberLiteral": leaf(lambda literal: nodes.number_unit(literal) in nodes.TIME_UNITS)})
