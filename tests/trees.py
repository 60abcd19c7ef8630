"""Helpers for building syntax trees by hand in tests."""

from __future__ import annotations

from solengine.locations import LineColumnFinder
from solengine.parsing.ast import CodeLocation, LineColumn, SyntaxNode


def span(code: str, fragment: str, occurrence: int = 0) -> CodeLocation:
    """Location of the *occurrence*-th appearance of *fragment* in *code* (0-based columns)."""
    start = -1
    for _ in range(occurrence + 1):
        start = code.index(fragment, start + 1)
    finder = LineColumnFinder(code)
    start_line, start_col = finder.from_index(start)
    end_line, end_col = finder.from_index(start + len(fragment) - 1)
    return CodeLocation(start=LineColumn(start_line, start_col - 1), end=LineColumn(end_line, end_col - 1))


def node(
    type_: str,
    *children: SyntaxNode,
    text: str = "",
    loc: CodeLocation | None = None,
    **fields: SyntaxNode,
) -> SyntaxNode:
    """Hand-built ``SyntaxNode``; keyword arguments become single-node fields."""
    return SyntaxNode(
        type=type_,
        text=text,
        loc=loc,
        children=children,
        fields={name: (value,) for name, value in fields.items()},
    )


def located(code: str, type_: str, fragment: str, *children: SyntaxNode, occurrence: int = 0, **fields) -> SyntaxNode:
    """Node whose text and location are taken from *fragment* within *code*."""
    return node(type_, *children, text=fragment, loc=span(code, fragment, occurrence), **fields)
