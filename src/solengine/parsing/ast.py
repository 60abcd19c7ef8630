"""Syntax tree data model shared by the parser and the matching engine.

The parser lowers tree-sitter's concrete syntax tree into ``SyntaxNode``
objects: type-tagged, location-optional nodes reachable by a depth-first
enter/exit walk.  Nothing downstream depends on tree-sitter directly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

S = TypeVar("S")

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SolidityParseError(ValueError):
    """Raised when source text cannot be parsed into a syntax tree."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineColumn:
    """A position in source text: 1-based line, 0-based character column."""

    line: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True)
class CodeLocation:
    """Start and end of a node.  ``end`` points at the node's last character."""

    start: LineColumn
    end: LineColumn

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """One typed node of a parsed source file.

    Nodes compare by identity: two ``Identifier`` nodes with the same text
    are still different occurrences.
    """

    type: str
    text: str = ""
    loc: CodeLocation | None = None
    children: tuple[SyntaxNode, ...] = ()
    fields: Mapping[str, tuple[SyntaxNode, ...]] = field(default_factory=dict)
    tokens: tuple[str, ...] = ()
    kind: str = ""

    def get_field(self, name: str) -> SyntaxNode | None:
        """First child stored under grammar field *name*, if any."""
        nodes = self.fields.get(name)
        return nodes[0] if nodes else None

    def get_fields(self, name: str) -> tuple[SyntaxNode, ...]:
        return tuple(self.fields.get(name, ()))

    @property
    def name(self) -> str | None:
        """Text of the ``name`` field (contract, function, struct names...)."""
        node = self.get_field("name")
        return node.text if node is not None else None

    def has_token(self, *tokens: str) -> bool:
        """True if any of *tokens* appears as an anonymous child of this node."""
        return any(token in self.tokens for token in tokens)

    def children_of(self, *types: str) -> list[SyntaxNode]:
        """Direct children whose type is one of *types*."""
        return [child for child in self.children if child.type in types]

    def iter_nodes(self) -> Iterator[SyntaxNode]:
        """Yield this node and all descendants in pre-order."""
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        return f"SyntaxNode({self.type!r}, {self.text[:40]!r})"


# ---------------------------------------------------------------------------
# Source files
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceFile:
    """Raw input of an analysis: a name used for caching plus source text."""

    filename: str
    code: str


@dataclass(frozen=True)
class ParsedFile:
    """A source file together with its parsed tree.  Shared read-only."""

    filename: str
    code: str
    ast: SyntaxNode


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

EXIT_SUFFIX = ":exit"

Handler = Callable[[SyntaxNode, S], Any]


def exit_key(node_type: str) -> str:
    """Handler key of the exit callback for *node_type*."""
    return f"{node_type}{EXIT_SUFFIX}"


def walk(root: SyntaxNode, handlers: Mapping[str, Handler[S]], state: S) -> S:
    """Depth-first enter/exit traversal of *root*.

    ``handlers["T"]`` runs when a node of type ``T`` is entered and
    ``handlers["T:exit"]`` after its subtree is done; both receive
    ``(node, state)``.  An enter callback returning ``False`` skips the
    node's subtree and its exit callback.  Returns *state*.
    """
    stack: list[tuple[SyntaxNode, bool]] = [(root, False)]
    while stack:
        node, leaving = stack.pop()
        if leaving:
            on_exit = handlers.get(exit_key(node.type))
            if on_exit is not None:
                on_exit(node, state)
            continue

        on_enter = handlers.get(node.type)
        if on_enter is not None and on_enter(node, state) is False:
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))
    return state
