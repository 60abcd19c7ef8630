"""Structured-visitor compiler.

A *pattern* is a nested mapping from node-type name to a handler.  A handler
is one of two explicit variants:

  - **Intermediate**: the node type must be an active ancestor; its nested
    pattern describes what must match among that node's descendants.
  - **Final**: a leaf predicate evaluated on each node of that type.  It
    receives the node plus the live ancestor nodes named on its path.

Example, a call to the enclosing function by its own name::

    {
        "FunctionDefinition": within({
            "FunctionCall": within({
                "Identifier": Final(lambda node, ancestors: node.text == ancestors["FunctionDefinition"].name),
            }),
        }),
    }

``compile_pattern()`` walks the pattern once and produces a table of
enter/exit callbacks for ``walk()``.  Every root-to-leaf chain becomes a
``CompiledPath``.  During traversal a ``TraversalContext`` records the most
recently entered node of each intermediate type; a leaf node is captured by
the first of its paths (in declaration order) whose ancestors are all active
and whose predicate returns true.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from solengine.parsing.ast import exit_key, walk

if TYPE_CHECKING:
    from solengine.parsing.ast import SyntaxNode

T = TypeVar("T")

Ancestors = Mapping[str, "SyntaxNode"]
MatchPredicate = Callable[["SyntaxNode", Ancestors], bool | None]
NodePredicate = Callable[["SyntaxNode"], bool | None]

# ---------------------------------------------------------------------------
# Pattern variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Final:
    """Leaf handler.  A ``None`` verdict counts as no match."""

    predicate: MatchPredicate


@dataclass(frozen=True)
class Intermediate:
    """Ancestor constraint with the pattern that must match beneath it."""

    pattern: Pattern


Handler = Intermediate | Final
Pattern = Mapping[str, Handler]


def within(pattern: Pattern) -> Intermediate:
    return Intermediate(pattern)


def leaf(predicate: NodePredicate) -> Final:
    """Final handler that only looks at the matched node itself."""
    return Final(lambda node, _ancestors: predicate(node))


def always() -> Final:
    """Final handler that matches every node of its type."""
    return Final(lambda _node, _ancestors: True)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompiledPath:
    """One root-to-leaf chain of a pattern."""

    ancestors: tuple[str, ...]
    leaf_type: str
    handler: Final


@dataclass
class TraversalContext(Generic[T]):
    """Mutable state of one traversal.

    ``active`` maps an intermediate node type to the most recently entered
    node of that type.  Re-entering a type while nested replaces the entry
    instead of stacking it, and exiting clears it.
    """

    capture: Callable[[SyntaxNode], T]
    active: dict[str, SyntaxNode] = field(default_factory=dict)
    captured: list[T] = field(default_factory=list)

    def enter(self, node_type: str, node: SyntaxNode) -> None:
        self.active[node_type] = node

    def leave(self, node_type: str) -> None:
        self.active.pop(node_type, None)

    def resolve(self, ancestor_types: tuple[str, ...]) -> dict[str, SyntaxNode] | None:
        """Live ancestor nodes for a path, or ``None`` if one is not active."""
        ancestors: dict[str, SyntaxNode] = {}
        for node_type in ancestor_types:
            node = self.active.get(node_type)
            if node is None:
                return None
            ancestors[node_type] = node
        return ancestors


@dataclass
class _TypeSlot:
    """What the compiled visitor does for one node type."""

    is_context: bool = False
    paths: list[CompiledPath] = field(default_factory=list)


class CompiledPattern:
    """Primitive visitor compiled from a pattern.

    Stateless: each ``run()`` creates its own ``TraversalContext``, so one
    compiled pattern can be run on any number of trees.
    """

    def __init__(self, paths: tuple[CompiledPath, ...], handlers: dict[str, Callable[..., Any]]) -> None:
        self.paths = paths
        self.handlers = handlers

    def run(self, root: SyntaxNode, capture: Callable[[SyntaxNode], T]) -> list[T]:
        """Traverse *root* once and return one captured value per matched node."""
        context: TraversalContext[T] = TraversalContext(capture=capture)
        walk(root, self.handlers, context)
        return context.captured


def _collect(pattern: Pattern, prefix: tuple[str, ...], slots: dict[str, _TypeSlot], paths: list[CompiledPath]) -> None:
    for node_type, handler in pattern.items():
        slot = slots.setdefault(node_type, _TypeSlot())
        if isinstance(handler, Final):
            path = CompiledPath(ancestors=prefix, leaf_type=node_type, handler=handler)
            slot.paths.append(path)
            paths.append(path)
        elif isinstance(handler, Intermediate):
            slot.is_context = True
            _collect(handler.pattern, (*prefix, node_type), slots, paths)
        else:
            msg = f"Pattern handler for {node_type!r} must be Intermediate or Final, got {type(handler).__name__}"
            raise TypeError(msg)


def _enter_handler(node_type: str, slot: _TypeSlot) -> Callable[[SyntaxNode, TraversalContext[Any]], None]:
    paths = tuple(slot.paths)
    is_context = slot.is_context

    def on_enter(node: SyntaxNode, context: TraversalContext[Any]) -> None:
        # Leaf paths are evaluated before the node becomes active, so a node
        # is never its own ancestor.
        for path in paths:
            ancestors = context.resolve(path.ancestors)
            if ancestors is None:
                continue
            if path.handler.predicate(node, ancestors):
                context.captured.append(context.capture(node))
                break
        if is_context:
            context.enter(node_type, node)

    return on_enter


def _exit_handler(node_type: str) -> Callable[[SyntaxNode, TraversalContext[Any]], None]:
    def on_exit(_node: SyntaxNode, context: TraversalContext[Any]) -> None:
        context.leave(node_type)

    return on_exit


def compile_pattern(pattern: Pattern) -> CompiledPattern:
    """Compile *pattern* into a single-pass primitive visitor.

    Each node type gets at most one enter callback and, if it is used as an
    intermediate anywhere in the pattern, one exit callback.
    """
    slots: dict[str, _TypeSlot] = {}
    paths: list[CompiledPath] = []
    _collect(pattern, (), slots, paths)

    handlers: dict[str, Callable[..., Any]] = {}
    for node_type, slot in slots.items():
        handlers[node_type] = _enter_handler(node_type, slot)
        if slot.is_context:
            handlers[exit_key(node_type)] = _exit_handler(node_type)
    return CompiledPattern(tuple(paths), handlers)
