"""Checkers for license headers, imports, comments and version pragmas."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from solengine.checking import checker, match, match_regex
from solengine.patterns import leaf
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from solengine.checking import AnalysisContext, FeatureSite
    from solengine.parsing.ast import SyntaxNode

_SPDX_RE = re.compile(r"//\s*SPDX-License-Identifier:")
_NATSPEC_RE = re.compile(r"///|/\*\*")
_PRAGMA_SOLIDITY_RE = re.compile(r"^pragma\s+solidity\b")


@checker(FeatureType.SPDX_LICENSE_IDENTIFIER)
async def check_spdx_license_identifier(context: AnalysisContext) -> list[FeatureSite]:
    return match_regex(context, _SPDX_RE)


def _renames(directive: SyntaxNode) -> bool:
    return any(node.has_token("as") for node in directive.iter_nodes())


@checker(FeatureType.IMPORT_RENAMING)
async def check_import_renaming(context: AnalysisContext) -> list[FeatureSite]:
    """``import "x.sol" as X``, ``import * as X from ...`` and ``import {a as b} from ...``."""
    return match(context, {"ImportDirective": leaf(_renames)})


@checker(FeatureType.NATSPEC_COMMENT)
async def check_natspec_comment(context: AnalysisContext) -> list[FeatureSite]:
    return match_regex(context, _NATSPEC_RE)


@checker(FeatureType.PRAGMA_SOLIDITY_VERSION)
async def check_pragma_solidity_version(context: AnalysisContext) -> list[FeatureSite]:
    return match(context, {"PragmaDirective": leaf(lambda pragma: bool(_PRAGMA_SOLIDITY_RE.match(pragma.text)))})
