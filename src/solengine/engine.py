"""Checker engine: runs an ordered set of checkers against one source file.

Checkers run strictly one at a time in registration order, each performing
its own full traversal of the shared tree.  Features without any site are
left out of the result entirely.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from loguru import logger

from solengine.checking import FeatureSite, make_context
from solengine.locations import DEFAULT_CACHE_SIZE
from solengine.parsing.ast import ParsedFile, SourceFile
from solengine.parsing.solidity import parse_solidity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from solengine.checking import FeatureChecker
    from solengine.parsing.ast import SyntaxNode
    from solengine.settings import SolEngineSettings

CheckResult = dict[str, list[FeatureSite]]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class InvalidOutputFormatError(ValueError):
    """Raised when a result is rendered in an unsupported shape."""


class OutputFormat(StrEnum):
    MAP = "map"
    OBJECT = "object"
    JSON = "json"


@dataclass(frozen=True)
class CheckerConfig:
    """Engine configuration.

    ``output_format`` is only validated when a result is rendered.
    """

    output_format: str = OutputFormat.OBJECT
    cache_size: int = DEFAULT_CACHE_SIZE
    indent: int | None = None

    @classmethod
    def from_settings(cls, settings: SolEngineSettings, output_format: str = OutputFormat.OBJECT) -> CheckerConfig:
        return cls(output_format=output_format, cache_size=settings.cache_size, indent=settings.output.indent)


# ---------------------------------------------------------------------------
# Result rendering
# ---------------------------------------------------------------------------


def convert_result_to_object(result: Mapping[str, Iterable[FeatureSite | Mapping[str, Any]]]) -> dict[str, Any]:
    """Plain JSON-compatible form of a result; absent site fields are omitted."""
    return {
        name: [site.to_dict() if isinstance(site, FeatureSite) else dict(site) for site in sites]
        for name, sites in result.items()
    }


def dump_check_result(result: Mapping[str, Iterable[FeatureSite | Mapping[str, Any]]], indent: int | None = None) -> str:
    return json.dumps(convert_result_to_object(result), indent=indent, ensure_ascii=False)


def render_result(result: CheckResult, output_format: str, indent: int | None = None) -> Any:
    """Render *result* in one of the ``OutputFormat`` shapes.

    Raises ``InvalidOutputFormatError`` for any other selector.
    """
    if output_format == OutputFormat.MAP:
        return dict(result)
    if output_format == OutputFormat.OBJECT:
        return convert_result_to_object(result)
    if output_format == OutputFormat.JSON:
        return dump_check_result(result, indent=indent)
    choices = ", ".join(fmt.value for fmt in OutputFormat)
    msg = f"Unsupported output format {output_format!r} (expected one of: {choices})"
    raise InvalidOutputFormatError(msg)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class CheckerEngine:
    """Runs feature checkers against Solidity sources.

    The parser is injectable so the engine can be driven with hand-built
    trees; it must raise on malformed input.
    """

    def __init__(
        self,
        config: CheckerConfig | None = None,
        *,
        parser: Callable[[str], SyntaxNode] = parse_solidity,
    ) -> None:
        self.config = config or CheckerConfig()
        self._parser = parser
        self._checkers: list[FeatureChecker] = []

    @classmethod
    def new(cls, config: CheckerConfig | None = None) -> CheckerEngine:
        return cls(config)

    def with_config(self, **changes: Any) -> CheckerEngine:
        """Copy of this engine, with the same checkers, and *changes* applied to its config."""
        engine = CheckerEngine(replace(self.config, **changes), parser=self._parser)
        engine._checkers = list(self._checkers)
        return engine

    @property
    def checkers(self) -> tuple[FeatureChecker, ...]:
        return tuple(self._checkers)

    def add_checker(self, feature_checker: FeatureChecker) -> CheckerEngine:
        if any(existing.name == feature_checker.name for existing in self._checkers):
            logger.warning("Checker {!r} added twice; the later result replaces the earlier", feature_checker.name)
        self._checkers.append(feature_checker)
        return self

    def add_checkers(self, feature_checkers: Iterable[FeatureChecker]) -> CheckerEngine:
        for feature_checker in feature_checkers:
            self.add_checker(feature_checker)
        return self

    def parse(self, source: SourceFile | Mapping[str, str]) -> ParsedFile:
        """Parse *source* into a ``ParsedFile``.  Raises on malformed input."""
        if not isinstance(source, SourceFile):
            source = SourceFile(filename=source["filename"], code=source["code"])
        return ParsedFile(filename=source.filename, code=source.code, ast=self._parser(source.code))

    async def run(self, parsed: ParsedFile) -> CheckResult:
        """Run every checker on an already parsed file, unrendered."""
        context = make_context(parsed, self.config.cache_size)
        result: CheckResult = {}
        for feature_checker in self._checkers:
            sites = await feature_checker.check(context)
            logger.debug("{}: {} site(s) in {}", feature_checker.name, len(sites), parsed.filename)
            if sites:
                result[feature_checker.name] = sites
        return result

    async def check(self, source: SourceFile | Mapping[str, str]) -> Any:
        """Analyze one source file and render the result per ``config.output_format``.

        Parse errors and checker faults propagate; no partial result is
        returned.
        """
        parsed = self.parse(source)
        result = await self.run(parsed)
        return render_result(result, self.config.output_format, self.config.indent)


# ---------------------------------------------------------------------------
# Default bundle
# ---------------------------------------------------------------------------


def build_default_engine(config: CheckerConfig | None = None, features: Iterable[str] | None = None) -> CheckerEngine:
    """Engine with the built-in checkers, optionally limited to *features*."""
    from solengine.features import default_checkers

    return CheckerEngine(config).add_checkers(default_checkers(features))
