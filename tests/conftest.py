"""Shared test fixtures for SolEngine."""

from __future__ import annotations

import pytest

from solengine.checking import make_context
from solengine.parsing.ast import ParsedFile


@pytest.fixture
def make_analysis():
    """Build an ``AnalysisContext`` for a code string and a hand-built tree."""

    def _make(code, ast, filename="Test.sol", cache_size=10):
        return make_context(ParsedFile(filename=filename, code=code, ast=ast), cache_size)

    return _make
