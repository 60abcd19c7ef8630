"""Unit tests for the tree-sitter Solidity parser and its lowering."""

from __future__ import annotations

import pytest

from solengine.features import nodes
from solengine.parsing import ParsedFile, SolidityParseError, SourceFile, parse_file, parse_solidity
from solengine.parsing.ast import CodeLocation, LineColumn

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _all(root, type_: str):
    return [n for n in root.iter_nodes() if n.type == type_]


def _one(root, type_: str):
    found = _all(root, type_)
    assert len(found) == 1, f"Expected 1 {type_}, got {[n.text for n in found]}"
    return found[0]


# ---------------------------------------------------------------------------
# Tree shape
# ---------------------------------------------------------------------------


def test_root_is_source_unit():
    root = parse_solidity("contract C {}")
    assert root.type == "SourceUnit"
    assert root.kind == "source_file"


def test_contract_name_and_location():
    contract = _one(parse_solidity("contract C {}"), "ContractDefinition")
    assert contract.name == "C"
    assert contract.text == "contract C {}"
    assert contract.loc == CodeLocation(start=LineColumn(1, 0), end=LineColumn(1, 12))


@pytest.mark.parametrize(
    ("source", "kind"),
    [
        ("contract C {}", "contract"),
        ("abstract contract C {}", "abstract"),
        ("interface I {}", "interface"),
        ("library L {}", "library"),
    ],
)
def test_contract_kinds_share_one_type(source, kind):
    contract = _one(parse_solidity(source), "ContractDefinition")
    assert nodes.contract_kind(contract) == kind


def test_function_definition_name():
    fn = _one(parse_solidity("contract C { function f() public {} }"), "FunctionDefinition")
    assert fn.name == "f"
    assert fn.text == "function f() public {}"
    assert nodes.has_visibility(fn)


def test_call_callee_is_not_wrapped():
    root = parse_solidity("contract C { function f() public { g(); a.b(); } }")
    calls = _all(root, "FunctionCall")
    assert [nodes.callee(call).type for call in calls] == ["Identifier", "MemberAccess"]
    assert nodes.member_name(nodes.callee(calls[1])) == "b"
    assert _all(root, "Expression") == []


def test_loop_statement_types():
    root = parse_solidity("contract C { function f() public { for (uint i = 0; i < 2; i++) {} while (true) {} } }")
    assert len(_all(root, "ForStatement")) == 1
    assert len(_all(root, "WhileStatement")) == 1


def test_inheritance_specifiers():
    contract = _all(parse_solidity("contract A {} contract B {} contract C is A, B {}"), "ContractDefinition")[-1]
    assert [base.text for base in nodes.base_contracts(contract)] == ["A", "B"]


# ---------------------------------------------------------------------------
# Type names
# ---------------------------------------------------------------------------


def test_array_type_name():
    declaration = _one(parse_solidity("contract C { uint[] a; }"), "StateVariableDeclaration")
    assert nodes.declared_type(declaration).type == "ArrayTypeName"


def test_mapping_type_name():
    declaration = _one(parse_solidity("contract C { mapping(address => uint) m; }"), "StateVariableDeclaration")
    assert nodes.declared_type(declaration).type == "Mapping"


def test_elementary_type_name():
    declaration = _one(parse_solidity("contract C { uint a; }"), "StateVariableDeclaration")
    assert nodes.declared_type(declaration).type == "ElementaryTypeName"


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


def test_locations_are_one_based_lines_and_inclusive_ends():
    code = "pragma solidity ^0.8.0;\n\ncontract C {\n}\n"
    contract = _one(parse_solidity(code), "ContractDefinition")
    assert contract.loc.start == LineColumn(3, 0)
    assert contract.loc.end == LineColumn(4, 0)


def test_columns_count_characters_not_bytes():
    code = '/* é */ contract C {}'
    contract = _one(parse_solidity(code), "ContractDefinition")
    assert contract.loc.start == LineColumn(1, 8)
    assert contract.loc.end == LineColumn(1, 20)


def test_iter_nodes_is_preorder():
    root = parse_solidity("contract A {} contract B {}")
    assert [c.name for c in _all(root, "ContractDefinition")] == ["A", "B"]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_malformed_source_raises():
    with pytest.raises(SolidityParseError) as excinfo:
        parse_solidity("contract C {\n  function f( {\n}\n")
    assert excinfo.value.line is not None
    assert "line" in str(excinfo.value)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_solidity("contract {")


def test_parse_file_keeps_source():
    source = SourceFile(filename="C.sol", code="contract C {}")
    parsed = parse_file(source)
    assert isinstance(parsed, ParsedFile)
    assert parsed.filename == "C.sol"
    assert parsed.code == "contract C {}"
    assert parsed.ast.type == "SourceUnit"


def test_legacy_constant_function_reads_as_state_mutability():
    fn = _one(parse_solidity("contract C { function f() constant returns (uint) { return 1; } }"), "FunctionDefinition")
    assert nodes.state_mutability(fn) == "constant"


def test_named_modifier_is_not_state_mutability():
    code = "contract C { modifier m() { _; } function f() public m {} }"
    fn = _one(parse_solidity(code), "FunctionDefinition")
    assert nodes.state_mutability(fn) is None
