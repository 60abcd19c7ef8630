"""Tests for site capture, the matching entry points and the checker registry."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import pytest
from trees import located, node, span

from solengine.checking import (
    FeatureChecker,
    FeatureSite,
    FunctionChecker,
    capture_site,
    checker,
    get_checker,
    get_enabled_checkers,
    match,
    match_primitive,
    match_regex,
    register_checker,
    registered_checkers,
)
from solengine.patterns import leaf, within

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeChecker:
    """A concrete checker for testing."""

    def __init__(self, name: str, sites: list[FeatureSite] | None = None) -> None:
        self._name = name
        self._sites = sites or []

    @property
    def name(self) -> str:
        return self._name

    async def check(self, context):
        return self._sites


LOOPS = "contract C {\n  function f() {\n    for (;;) {}\n    while (x) {}\n  }\n}\n"


def _loop_tree():
    for_stmt = located(LOOPS, "ForStatement", "for (;;) {}")
    while_stmt = located(LOOPS, "WhileStatement", "while (x) {}", located(LOOPS, "Identifier", "x"))
    fn = located(LOOPS, "FunctionDefinition", "function f() {\n    for (;;) {}\n    while (x) {}\n  }", for_stmt, while_stmt)
    return node("SourceUnit", node("ContractDefinition", fn))


# ---------------------------------------------------------------------------
# FeatureSite
# ---------------------------------------------------------------------------


def test_feature_site_to_dict_omits_absent_fields():
    assert FeatureSite().to_dict() == {}
    assert FeatureSite(literal="x", index=3).to_dict() == {"literal": "x", "index": 3}


def test_feature_site_to_dict_with_location():
    loc = span("ab\ncd", "cd")
    site = FeatureSite(literal="cd", location=loc, index=3)
    assert site.is_located
    assert site.to_dict() == {
        "literal": "cd",
        "location": {"start": {"line": 2, "column": 0}, "end": {"line": 2, "column": 1}},
        "index": 3,
    }


def test_feature_site_frozen():
    site = FeatureSite(literal="x")
    with pytest.raises(AttributeError):
        site.literal = "y"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# capture_site
# ---------------------------------------------------------------------------


def test_capture_site_corrects_zero_based_columns(make_analysis):
    code = "x\n  foo\n"
    target = located(code, "Identifier", "foo")
    assert target.loc.start.column == 2

    site = capture_site(make_analysis(code, node("SourceUnit", target)), target)
    assert site.literal == "foo"
    assert site.index == 4
    assert site.location is target.loc


def test_capture_site_multiline_literal(make_analysis):
    target = _loop_tree().children[0].children[0]
    site = capture_site(make_analysis(LOOPS, _loop_tree()), target)
    assert site.literal == target.text
    assert site.index == LOOPS.index("function")


def test_capture_site_without_location(make_analysis):
    bare = node("Identifier", text="f")
    site = capture_site(make_analysis("f", node("SourceUnit", bare)), bare)
    assert site == FeatureSite()
    assert not site.is_located


def test_capture_site_caches_finder_per_file(make_analysis):
    context = make_analysis(LOOPS, _loop_tree())
    tree = context.ast
    for_stmt = tree.children[0].children[0].children[0]
    first = capture_site(context, for_stmt)
    second = capture_site(context, for_stmt)
    assert first == second
    assert first.index == LOOPS.index("for")
    assert len(context.cache) == 1


# ---------------------------------------------------------------------------
# match
# ---------------------------------------------------------------------------


def test_match_by_name(make_analysis):
    sites = match(make_analysis(LOOPS, _loop_tree()), "WhileStatement")
    assert [s.literal for s in sites] == ["while (x) {}"]


def test_match_by_name_list_in_document_order(make_analysis):
    sites = match(make_analysis(LOOPS, _loop_tree()), ["WhileStatement", "ForStatement", "DoWhileStatement"])
    assert [s.literal for s in sites] == ["for (;;) {}", "while (x) {}"]
    assert sites[0].index < sites[1].index


def test_match_by_pattern(make_analysis):
    sites = match(
        make_analysis(LOOPS, _loop_tree()),
        {"WhileStatement": within({"Identifier": leaf(lambda n: n.text == "x")})},
    )
    assert [s.literal for s in sites] == ["x"]
    assert sites[0].index == LOOPS.index("x)")


def test_match_nothing_found(make_analysis):
    assert match(make_analysis(LOOPS, _loop_tree()), "TryStatement") == []


def test_predicate_fault_propagates(make_analysis):
    def boom(_node):
        msg = "unexpected shape"
        raise RuntimeError(msg)

    with pytest.raises(RuntimeError, match="unexpected shape"):
        match(make_analysis(LOOPS, _loop_tree()), {"ForStatement": leaf(boom)})


# ---------------------------------------------------------------------------
# match_primitive
# ---------------------------------------------------------------------------


@dataclass
class _LoopDepth:
    depth: int = 0
    seen: list[tuple[str, int]] = field(default_factory=list)


def test_match_primitive_threads_state(make_analysis):
    def enter_fn(n, state):
        state.depth += 1

    def leave_fn(n, state):
        state.depth -= 1

    def visit(n, state):
        state.seen.append((n.type, state.depth))

    state = match_primitive(
        make_analysis(LOOPS, _loop_tree()),
        {
            "FunctionDefinition": enter_fn,
            "FunctionDefinition:exit": leave_fn,
            "ForStatement": visit,
            "WhileStatement": visit,
        },
        _LoopDepth(),
    )
    assert state.seen == [("ForStatement", 1), ("WhileStatement", 1)]
    assert state.depth == 0


# ---------------------------------------------------------------------------
# match_regex
# ---------------------------------------------------------------------------


def test_match_regex_populates_literal_and_index(make_analysis):
    code = "/// a\ncontract C {}\n/** b */"
    sites = match_regex(make_analysis(code, node("SourceUnit")), r"///|/\*\*")
    assert [s.literal for s in sites] == ["///", "/**"]
    assert [s.index for s in sites] == [0, code.index("/**")]
    assert all(s.location is None for s in sites)


def test_match_regex_accepts_compiled_pattern(make_analysis):
    sites = match_regex(make_analysis("aXbX", node("SourceUnit")), re.compile("X"))
    assert [s.index for s in sites] == [1, 3]


def test_match_regex_empty_matches_terminate(make_analysis):
    sites = match_regex(make_analysis("abc", node("SourceUnit")), r"x*")
    assert len(sites) == 4


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_register_and_get(monkeypatch):
    """register_checker adds to registry; get_enabled_checkers retrieves by name."""
    monkeypatch.setattr("solengine.checking._REGISTRY", {})

    a = FakeChecker("alpha")
    b = FakeChecker("beta")
    register_checker(a)
    register_checker(b)

    assert get_enabled_checkers(["beta", "alpha"]) == [b, a]
    assert get_checker("alpha") is a
    assert registered_checkers() == ["alpha", "beta"]


def test_register_duplicate_raises(monkeypatch):
    monkeypatch.setattr("solengine.checking._REGISTRY", {})

    register_checker(FakeChecker("dup"))
    with pytest.raises(ValueError, match="already registered"):
        register_checker(FakeChecker("dup"))


def test_get_enabled_skips_unknown(monkeypatch):
    """Unknown checker names are skipped, not errors."""
    monkeypatch.setattr("solengine.checking._REGISTRY", {})

    known = FakeChecker("known")
    register_checker(known)
    assert get_enabled_checkers(["known", "not_yet_written"]) == [known]


def test_get_checker_unknown_raises(monkeypatch):
    monkeypatch.setattr("solengine.checking._REGISTRY", {})
    with pytest.raises(KeyError, match="missing"):
        get_checker("missing")


async def test_checker_decorator_registers_function(monkeypatch, make_analysis):
    monkeypatch.setattr("solengine.checking._REGISTRY", {})

    @checker("Loops")
    async def check_loops(context):
        return match(context, ["ForStatement", "WhileStatement"])

    assert isinstance(check_loops, FunctionChecker)
    assert isinstance(check_loops, FeatureChecker)
    assert get_checker("Loops") is check_loops

    sites = await check_loops.check(make_analysis(LOOPS, _loop_tree()))
    assert len(sites) == 2
