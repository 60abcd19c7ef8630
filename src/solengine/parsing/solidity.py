"""Solidity parser: tree-sitter parse plus lowering into ``SyntaxNode`` trees.

The grammar's node kinds are renamed into the PascalCase vocabulary that
feature patterns are written against (``contract_declaration`` becomes
``ContractDefinition``, ``call_expression`` becomes ``FunctionCall`` and so
on).  Kinds without an entry keep their grammar name in CamelCase.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import tree_sitter_solidity as tssolidity
from tree_sitter import Language, Parser

from solengine.parsing.ast import CodeLocation, LineColumn, ParsedFile, SolidityParseError, SyntaxNode

if TYPE_CHECKING:
    from tree_sitter import Node

    from solengine.parsing.ast import SourceFile

SOLIDITY_LANGUAGE = Language(tssolidity.language())

# ---------------------------------------------------------------------------
# Grammar kind -> node type
# ---------------------------------------------------------------------------

_NODE_TYPES: dict[str, str] = {
    "source_file": "SourceUnit",
    "pragma_directive": "PragmaDirective",
    "import_directive": "ImportDirective",
    # Contracts
    "contract_declaration": "ContractDefinition",
    "interface_declaration": "ContractDefinition",
    "library_declaration": "ContractDefinition",
    "inheritance_specifier": "InheritanceSpecifier",
    "contract_body": "ContractBody",
    "using_directive": "UsingForDeclaration",
    # Declarations
    "state_variable_declaration": "StateVariableDeclaration",
    "constant_variable_declaration": "FileLevelConstant",
    "struct_declaration": "StructDefinition",
    "struct_member": "StructMember",
    "enum_declaration": "EnumDefinition",
    "enum_value": "EnumValue",
    "event_definition": "EventDefinition",
    "error_declaration": "CustomErrorDefinition",
    "modifier_definition": "ModifierDefinition",
    "modifier_invocation": "ModifierInvocation",
    "function_definition": "FunctionDefinition",
    "constructor_definition": "FunctionDefinition",
    "fallback_receive_definition": "FunctionDefinition",
    "return_type_definition": "ReturnParameters",
    "parameter": "Parameter",
    "variable_declaration": "VariableDeclaration",
    "visibility": "Visibility",
    "state_mutability": "StateMutability",
    "override_specifier": "OverrideSpecifier",
    "user_defined_type": "UserDefinedTypeName",
    # Statements
    "function_body": "Block",
    "block_statement": "Block",
    "variable_declaration_statement": "VariableDeclarationStatement",
    "expression_statement": "ExpressionStatement",
    "if_statement": "IfStatement",
    "for_statement": "ForStatement",
    "while_statement": "WhileStatement",
    "do_while_statement": "DoWhileStatement",
    "continue_statement": "ContinueStatement",
    "break_statement": "BreakStatement",
    "try_statement": "TryStatement",
    "return_statement": "ReturnStatement",
    "emit_statement": "EmitStatement",
    "revert_statement": "RevertStatement",
    "assembly_statement": "InlineAssemblyStatement",
    # Expressions
    "call_expression": "FunctionCall",
    "call_struct_argument": "NamedArgument",
    "struct_field_assignment": "NamedArgument",
    "struct_expression": "NameValueExpression",
    "member_expression": "MemberAccess",
    "array_access": "IndexAccess",
    "slice_access": "IndexRangeAccess",
    "new_expression": "NewExpression",
    "binary_expression": "BinaryOperation",
    "assignment_expression": "BinaryOperation",
    "augmented_assignment_expression": "BinaryOperation",
    "unary_expression": "UnaryOperation",
    "update_expression": "UnaryOperation",
    "ternary_expression": "Conditional",
    "tuple_expression": "TupleExpression",
    "inline_array_expression": "TupleExpression",
    # Literals
    "identifier": "Identifier",
    "number_literal": "NumberLiteral",
    "boolean_literal": "BooleanLiteral",
    "string_literal": "StringLiteral",
    "hex_string_literal": "HexLiteral",
    "unicode_string_literal": "UnicodeStringLiteral",
}

# Wrapper kinds that are replaced by their only named child.
_TRANSPARENT_KINDS = frozenset({"expression"})

_ERROR_KIND = "ERROR"


def _camel_case(kind: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in kind.split("_") if part)


def _type_name_kind(node: Node) -> str:
    """Refine a grammar ``type_name`` by its shape."""
    tokens = {child.type for child in node.children if not child.is_named}
    if "mapping" in tokens:
        return "Mapping"
    if "function" in tokens:
        return "FunctionTypeName"
    if "[" in tokens:
        return "ArrayTypeName"
    named = [child for child in node.named_children if child.type != "comment"]
    if named and named[0].type in ("user_defined_type", "identifier"):
        return "UserDefinedTypeName"
    return "ElementaryTypeName"


def node_type_for(node: Node) -> str:
    """Map a tree-sitter node onto the node-type vocabulary used by patterns."""
    if node.type == "type_name":
        return _type_name_kind(node)
    mapped = _NODE_TYPES.get(node.type)
    return mapped if mapped is not None else _camel_case(node.type)


# ---------------------------------------------------------------------------
# Lowering
# ---------------------------------------------------------------------------


class _Lowering:
    """Converts one tree-sitter tree into ``SyntaxNode`` objects.

    Tree-sitter reports byte columns and exclusive ends; the node model uses
    character columns and inclusive ends, so positions are recomputed
    against the UTF-8 source.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._lines = source.split(b"\n")

    def _column(self, row: int, byte_column: int) -> int:
        return len(self._lines[row][:byte_column].decode("utf-8", errors="replace"))

    def location(self, node: Node) -> CodeLocation | None:
        if node.end_byte <= node.start_byte:
            return None
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        if end_col == 0 and end_row > start_row:
            # Node ends with a newline: its last character closes the previous line.
            end_row -= 1
            last_column = len(self._lines[end_row].decode("utf-8", errors="replace"))
        else:
            last_column = self._column(end_row, end_col) - 1
        return CodeLocation(
            start=LineColumn(line=start_row + 1, column=self._column(start_row, start_col)),
            end=LineColumn(line=end_row + 1, column=last_column),
        )

    def lower(self, node: Node) -> SyntaxNode:
        children: list[SyntaxNode] = []
        fields: dict[str, list[SyntaxNode]] = {}
        tokens: list[str] = []

        cursor = node.walk()
        if cursor.goto_first_child():
            while True:
                child = cursor.node
                if child is not None:
                    if child.is_named:
                        lowered = self.lower(_unwrap(child))
                        children.append(lowered)
                        field_name = cursor.field_name
                        if field_name:
                            fields.setdefault(field_name, []).append(lowered)
                    else:
                        tokens.append(child.type)
                if not cursor.goto_next_sibling():
                    break

        return SyntaxNode(
            type=node_type_for(node),
            text=self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace"),
            loc=self.location(node),
            children=tuple(children),
            fields={name: tuple(nodes) for name, nodes in fields.items()},
            tokens=tuple(tokens),
            kind=node.type,
        )


def _unwrap(node: Node) -> Node:
    while node.type in _TRANSPARENT_KINDS and node.named_child_count == 1:
        inner = node.named_children[0]
        if inner.end_byte - inner.start_byte != node.end_byte - node.start_byte:
            break
        node = inner
    return node


def _first_error(root: Node) -> Node | None:
    """Locate the first ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == _ERROR_KIND or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_solidity(code: str) -> SyntaxNode:
    """Parse Solidity source text into a lowered syntax tree.

    Raises ``SolidityParseError`` if the grammar reports any syntax error;
    no partially recovered tree is returned.
    """
    source = code.encode("utf-8")
    parser = Parser(SOLIDITY_LANGUAGE)
    tree = parser.parse(source)
    root = tree.root_node

    if root.has_error:
        error = _first_error(root) or root
        row, byte_column = error.start_point
        lowering = _Lowering(source)
        reason = f"missing {error.type!r}" if error.is_missing else "syntax error"
        raise SolidityParseError(reason, line=row + 1, column=lowering._column(row, byte_column))

    return _Lowering(source).lower(root)


def parse_file(source: SourceFile) -> ParsedFile:
    """Parse a ``SourceFile`` into a ``ParsedFile``."""
    return ParsedFile(filename=source.filename, code=source.code, ast=parse_solidity(source.code))
