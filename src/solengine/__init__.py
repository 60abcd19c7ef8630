"""SolEngine: detect Solidity language features by matching patterns against syntax trees.

Importing the package registers the built-in checkers.
"""

from __future__ import annotations

from solengine.checking import (
    AnalysisContext,
    FeatureChecker,
    FeatureSite,
    FunctionChecker,
    capture_site,
    checker,
    get_checker,
    get_enabled_checkers,
    make_context,
    match,
    match_primitive,
    match_regex,
    register_checker,
    registered_checkers,
)
from solengine.engine import (
    CheckerConfig,
    CheckerEngine,
    InvalidOutputFormatError,
    OutputFormat,
    build_default_engine,
    convert_result_to_object,
    dump_check_result,
    render_result,
)
from solengine.features import default_checkers
from solengine.parsing import CodeLocation, LineColumn, ParsedFile, SolidityParseError, SourceFile, SyntaxNode
from solengine.patterns import Final, Intermediate, always, compile_pattern, leaf, within
from solengine.schema import FeatureCategory, FeatureType

__all__ = [
    "AnalysisContext",
    "CheckerConfig",
    "CheckerEngine",
    "CodeLocation",
    "FeatureCategory",
    "FeatureChecker",
    "FeatureSite",
    "FeatureType",
    "Final",
    "FunctionChecker",
    "Intermediate",
    "InvalidOutputFormatError",
    "LineColumn",
    "OutputFormat",
    "ParsedFile",
    "SolidityParseError",
    "SourceFile",
    "SyntaxNode",
    "always",
    "build_default_engine",
    "capture_site",
    "checker",
    "compile_pattern",
    "convert_result_to_object",
    "default_checkers",
    "dump_check_result",
    "get_checker",
    "get_enabled_checkers",
    "leaf",
    "make_context",
    "match",
    "match_primitive",
    "match_regex",
    "register_checker",
    "registered_checkers",
    "render_result",
    "within",
]
