"""Parsing package: Solidity syntax trees and their traversal."""

from __future__ import annotations

from solengine.parsing.ast import (
    CodeLocation,
    LineColumn,
    ParsedFile,
    SolidityParseError,
    SourceFile,
    SyntaxNode,
    exit_key,
    walk,
)
from solengine.parsing.solidity import parse_file, parse_solidity

__all__ = [
    "CodeLocation",
    "LineColumn",
    "ParsedFile",
    "SolidityParseError",
    "SourceFile",
    "SyntaxNode",
    "exit_key",
    "parse_file",
    "parse_solidity",
    "walk",
]
