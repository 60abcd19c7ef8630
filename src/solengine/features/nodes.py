"""Read-only accessors over lowered Solidity nodes.

The grammar stores most interesting parts of a node under field names; the
fallbacks here cover the shapes where it does not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from solengine.parsing.ast import SyntaxNode

VISIBILITY_KEYWORDS = ("public", "private", "internal", "external")

LOW_LEVEL_CALLS = frozenset({"call", "delegatecall", "staticcall"})

ETHER_UNITS = frozenset({"wei", "gwei", "szabo", "finney", "ether"})
TIME_UNITS = frozenset({"seconds", "minutes", "hours", "days", "weeks", "years"})


def callee(call: SyntaxNode) -> SyntaxNode | None:
    """Called expression of a ``FunctionCall``."""
    found = call.get_field("function")
    if found is not None:
        return found
    return call.children[0] if call.children else None


def member_name(access: SyntaxNode) -> str | None:
    """Name after the dot of a ``MemberAccess``."""
    prop = access.get_field("property")
    if prop is None:
        identifiers = access.children_of("Identifier")
        prop = identifiers[-1] if len(identifiers) > 1 else None
    return prop.text if prop is not None else None


def member_object(access: SyntaxNode) -> SyntaxNode | None:
    """Expression before the dot of a ``MemberAccess``."""
    found = access.get_field("object")
    if found is not None:
        return found
    return access.children[0] if access.children else None


def is_callee(call: SyntaxNode, node: SyntaxNode) -> bool:
    return callee(call) is node


def contract_kind(contract: SyntaxNode) -> str:
    """``contract``, ``abstract``, ``interface`` or ``library``."""
    if contract.has_token("abstract"):
        return "abstract"
    if contract.kind == "interface_declaration":
        return "interface"
    if contract.kind == "library_declaration":
        return "library"
    return "contract"


def base_contracts(contract: SyntaxNode) -> list[SyntaxNode]:
    return contract.children_of("InheritanceSpecifier")


def function_kind(function: SyntaxNode) -> str:
    """``function``, ``constructor``, ``fallback`` or ``receive``."""
    if function.kind == "constructor_definition":
        return "constructor"
    if function.kind == "fallback_receive_definition":
        return "receive" if function.has_token("receive") else "fallback"
    return "function"


def state_mutability(function: SyntaxNode) -> str | None:
    """``pure``, ``view``, ``payable`` or legacy ``constant``, if spelled out.

    The grammar no longer knows ``constant`` on functions and parses it as
    an argument-less modifier invocation.
    """
    found = function.children_of("StateMutability")
    if found:
        return found[0].text
    for invocation in function.children_of("ModifierInvocation"):
        if invocation.text.strip() == "constant":
            return "constant"
    return None


def has_visibility(declaration: SyntaxNode) -> bool:
    """True if a visibility keyword is spelled out on the declaration."""
    return bool(declaration.children_of("Visibility")) or declaration.has_token(*VISIBILITY_KEYWORDS)


def is_overriding(declaration: SyntaxNode) -> bool:
    return bool(declaration.children_of("OverrideSpecifier")) or declaration.has_token("override")


def return_parameters(function: SyntaxNode) -> list[SyntaxNode]:
    returns = function.get_field("return_type")
    if returns is None:
        found = function.children_of("ReturnParameters")
        returns = found[0] if found else None
    return returns.children_of("Parameter") if returns is not None else []


def parameter_name(parameter: SyntaxNode) -> str | None:
    name = parameter.name
    if name is not None:
        return name
    identifiers = parameter.children_of("Identifier")
    return identifiers[0].text if identifiers else None


def declared_type(declaration: SyntaxNode) -> SyntaxNode | None:
    """Type node of a variable, parameter, struct member or constant."""
    found = declaration.get_field("type")
    if found is not None:
        return found
    for child in declaration.children:
        if child.kind == "type_name":
            return child
    return None


def array_base(array_type: SyntaxNode) -> SyntaxNode | None:
    """Element type of an ``ArrayTypeName``."""
    found = array_type.get_field("base")
    if found is not None:
        return found
    return array_type.children[0] if array_type.children else None


def is_constant_or_immutable(declaration: SyntaxNode) -> bool:
    if declaration.has_token("constant", "immutable"):
        return True
    return bool(declaration.children_of("Constant", "Immutable"))


def has_named_arguments(call: SyntaxNode) -> bool:
    """True for ``f({a: 1, b: 2})`` style calls."""
    if call.children_of("NamedArgument"):
        return True
    return any(
        argument.children_of("NamedArgument") or argument.has_token("{")
        for argument in call.children_of("CallArgument")
    )


def named_argument_names(expression: SyntaxNode) -> list[str]:
    names: list[str] = []
    for argument in expression.children_of("NamedArgument"):
        name = argument.name
        if name is None:
            identifiers = argument.children_of("Identifier")
            name = identifiers[0].text if identifiers else None
        if name is not None:
            names.append(name)
    return names


def value_expression_target(expression: SyntaxNode) -> SyntaxNode | None:
    """Expression whose call options a ``NameValueExpression`` sets."""
    found = expression.get_field("type")
    if found is not None:
        return found
    return expression.children[0] if expression.children else None


def number_unit(literal: SyntaxNode) -> str | None:
    """Denomination of a ``NumberLiteral`` such as ``1 ether``."""
    units = literal.children_of("NumberUnit")
    if units:
        return units[0].text
    words = literal.text.split()
    return words[-1] if len(words) > 1 else None
