"""Site capture and the feature-checker protocol.

A checker receives an ``AnalysisContext`` (the parsed file plus a location
cache) and returns the ``FeatureSite`` of every occurrence of its feature.
Checkers describe what to find with one of the matching entry points:

  - ``match(context, "ForStatement")``: every node of one type.
  - ``match(context, ["ForStatement", "WhileStatement"])``: every node whose
    type is in the list.
  - ``match(context, {...})``: a structured pattern (see ``patterns``).
  - ``match_primitive(context, handlers, state)``: a hand-written enter/exit
    visitor with explicit state, for order-sensitive checks.
  - ``match_regex(context, regex)``: a lexical scan of the raw source.

Checkers self-register at import time via the ``@checker`` decorator or
``register_checker()``.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from loguru import logger

from solengine.locations import DEFAULT_CACHE_SIZE, LocationCache, make_cache
from solengine.parsing.ast import walk
from solengine.patterns import always, compile_pattern

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from solengine.locations import LineColumnFinder
    from solengine.parsing.ast import CodeLocation, Handler, ParsedFile, SyntaxNode
    from solengine.patterns import Pattern

S = TypeVar("S")


# ---------------------------------------------------------------------------
# Feature sites
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeatureSite:
    """One occurrence of a feature.

    When ``location`` is present, ``index`` is the flat offset of its start
    and ``literal`` is the source text it spans (end inclusive).  Regex
    matches carry only ``literal`` and ``index``; nodes without location
    metadata produce a site with every field absent.
    """

    literal: str | None = None
    location: CodeLocation | None = None
    index: int | None = None

    @property
    def is_located(self) -> bool:
        return self.location is not None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible form with absent fields omitted."""
        data: dict[str, Any] = {}
        if self.literal is not None:
            data["literal"] = self.literal
        if self.location is not None:
            data["location"] = self.location.to_dict()
        if self.index is not None:
            data["index"] = self.index
        return data


# ---------------------------------------------------------------------------
# Analysis context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisContext:
    """Everything a checker may look at for one file.

    One context is built per ``check`` call and shared read-only by every
    checker of that call; only the location cache inside it is mutable.
    """

    parsed: ParsedFile
    cache: LocationCache

    @property
    def filename(self) -> str:
        return self.parsed.filename

    @property
    def code(self) -> str:
        return self.parsed.code

    @property
    def ast(self) -> SyntaxNode:
        return self.parsed.ast

    def finder(self) -> LineColumnFinder:
        return self.cache.get(self.filename, self.code)


def make_context(parsed: ParsedFile, cache_size: int = DEFAULT_CACHE_SIZE) -> AnalysisContext:
    return AnalysisContext(parsed=parsed, cache=make_cache(cache_size))


def capture_site(context: AnalysisContext, node: SyntaxNode) -> FeatureSite:
    """Convert a matched node into a ``FeatureSite``.

    Node columns are 0-based while the finder takes 1-based columns, hence
    the ``+ 1`` on both ends.
    """
    location = node.loc
    if location is None:
        logger.debug("Captured {} without location in {}", node.type, context.filename)
        return FeatureSite()
    finder = context.finder()
    start = finder.to_index(location.start.line, location.start.column + 1)
    end = finder.to_index(location.end.line, location.end.column + 1)
    return FeatureSite(literal=context.code[start : end + 1], location=location, index=start)


# ---------------------------------------------------------------------------
# Matching entry points
# ---------------------------------------------------------------------------


def _as_pattern(target: str | Sequence[str] | Pattern) -> Pattern:
    if isinstance(target, str):
        return {target: always()}
    if isinstance(target, Mapping):
        return target
    return {node_type: always() for node_type in target}


def match(context: AnalysisContext, target: str | Sequence[str] | Pattern) -> list[FeatureSite]:
    """Sites of every node matched by *target* in document order.

    *target* is a node-type name, a list of node-type names, or a
    structured pattern.  Each call compiles and runs its own visitor.
    """
    compiled = compile_pattern(_as_pattern(target))
    return compiled.run(context.ast, lambda node: capture_site(context, node))


def match_primitive(context: AnalysisContext, handlers: Mapping[str, Handler[S]], state: S) -> S:
    """Drive a hand-written enter/exit visitor over the file's tree.

    *state* is threaded through every callback and returned once the
    traversal completes.
    """
    return walk(context.ast, handlers, state)


def match_regex(context: AnalysisContext, regex: str | re.Pattern[str]) -> list[FeatureSite]:
    """One site per non-overlapping match of *regex* in the raw source.

    Only ``literal`` and ``index`` are populated.
    """
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    return [FeatureSite(literal=found.group(0), index=found.start()) for found in compiled.finditer(context.code)]


# ---------------------------------------------------------------------------
# Checker protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class FeatureChecker(Protocol):
    """Interface that all feature checkers must satisfy."""

    @property
    def name(self) -> str: ...

    async def check(self, context: AnalysisContext) -> list[FeatureSite]: ...


CheckFunction = Callable[[AnalysisContext], Awaitable[list[FeatureSite]]]


@dataclass(frozen=True)
class FunctionChecker:
    """A ``FeatureChecker`` backed by a plain async function."""

    name: str
    func: CheckFunction

    async def check(self, context: AnalysisContext) -> list[FeatureSite]:
        return await self.func(context)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_REGISTRY: dict[str, FeatureChecker] = {}


def register_checker(feature_checker: FeatureChecker) -> None:
    """Register a checker instance by name. Raises on duplicate."""
    if feature_checker.name in _REGISTRY:
        msg = f"Checker already registered: {feature_checker.name!r}"
        raise ValueError(msg)
    _REGISTRY[feature_checker.name] = feature_checker
    logger.debug("Registered checker: {}", feature_checker.name)


def checker(name: str) -> Callable[[CheckFunction], FunctionChecker]:
    """Decorator turning an async ``(context) -> sites`` function into a registered checker."""

    def decorate(func: CheckFunction) -> FunctionChecker:
        wrapped = FunctionChecker(name=str(name), func=func)
        register_checker(wrapped)
        return wrapped

    return decorate


def get_checker(name: str) -> FeatureChecker:
    """Registered checker called *name*.  Raises ``KeyError`` if unknown."""
    try:
        return _REGISTRY[name]
    except KeyError:
        msg = f"No checker registered for {name!r}"
        raise KeyError(msg) from None


def get_enabled_checkers(enabled: Iterable[str]) -> list[FeatureChecker]:
    """Return checker instances for the given enabled names.

    Unknown names are logged and skipped.
    """
    checkers: list[FeatureChecker] = []
    for name in enabled:
        found = _REGISTRY.get(name)
        if found is None:
            logger.debug("Checker {!r} not found in registry, skipping", name)
        else:
            checkers.append(found)
    return checkers


def registered_checkers() -> list[str]:
    return list(_REGISTRY)
