"""Syntax tree model: ESTree-shaped nodes produced by the frontends."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal as Tag

from pydantic import BaseModel


class SourceLocation(BaseModel):
    """Structured source span from tree-sitter AST nodes."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def is_unknown(self) -> bool:
        return (
            self.start_line == 0
            and self.start_col == 0
            and self.end_line == 0
            and self.end_col == 0
        )

    def __str__(self) -> str:
        if self.is_unknown():
            return "<unknown>"
        return f"{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


NO_SOURCE_LOCATION = SourceLocation(start_line=0, start_col=0, end_line=0, end_col=0)


class CommentKind(str, Enum):
    LINE = "Line"
    BLOCK = "Block"


class Comment(BaseModel):
    kind: CommentKind
    value: str
    loc: SourceLocation = NO_SOURCE_LOCATION


class Node(BaseModel):
    type: str
    loc: SourceLocation = NO_SOURCE_LOCATION


class UnsupportedNode(Node):
    """A construct the frontend recognises but the interpreter does not run.

    ``type`` carries the raw tree-sitter node type.
    """

    text: str = ""


# ── statements ───────────────────────────────────────────────────


class Program(Node):
    type: Tag["Program"] = "Program"
    body: list[Node] = []
    comments: list[Comment] = []


class BlockStatement(Node):
    type: Tag["BlockStatement"] = "BlockStatement"
    body: list[Node] = []


class FunctionDeclaration(Node):
    type: Tag["FunctionDeclaration"] = "FunctionDeclaration"
    id: Identifier | None = None
    params: list[Node] = []
    body: BlockStatement


class VariableDeclarator(Node):
    type: Tag["VariableDeclarator"] = "VariableDeclarator"
    id: Node
    init: Node | None = None


class VariableDeclaration(Node):
    type: Tag["VariableDeclaration"] = "VariableDeclaration"
    kind: str = "let"
    declarations: list[VariableDeclarator] = []


class IfStatement(Node):
    type: Tag["IfStatement"] = "IfStatement"
    test: Node
    consequent: Node
    alternate: Node | None = None


class WhileStatement(Node):
    type: Tag["WhileStatement"] = "WhileStatement"
    test: Node
    body: Node


class ForStatement(Node):
    type: Tag["ForStatement"] = "ForStatement"
    init: Node | None = None
    test: Node | None = None
    update: Node | None = None
    body: Node


class ExpressionStatement(Node):
    type: Tag["ExpressionStatement"] = "ExpressionStatement"
    expression: Node


class ReturnStatement(Node):
    type: Tag["ReturnStatement"] = "ReturnStatement"
    argument: Node | None = None


class ContinueStatement(Node):
    type: Tag["ContinueStatement"] = "ContinueStatement"
    label: str | None = None


# ── expressions ──────────────────────────────────────────────────


class Identifier(Node):
    type: Tag["Identifier"] = "Identifier"
    name: str


class ThisExpression(Node):
    type: Tag["ThisExpression"] = "ThisExpression"


class Literal(Node):
    type: Tag["Literal"] = "Literal"
    value: Any = None
    raw: str = ""


class ArrayExpression(Node):
    type: Tag["ArrayExpression"] = "ArrayExpression"
    elements: list[Node | None] = []


class Property(Node):
    type: Tag["Property"] = "Property"
    key: Node
    value: Node | None = None
    kind: str = "init"
    computed: bool = False
    shorthand: bool = False


class ObjectExpression(Node):
    type: Tag["ObjectExpression"] = "ObjectExpression"
    properties: list[Property] = []


class NewExpression(Node):
    type: Tag["NewExpression"] = "NewExpression"
    callee: Node
    arguments: list[Node] = []


class UpdateExpression(Node):
    type: Tag["UpdateExpression"] = "UpdateExpression"
    operator: str
    prefix: bool
    argument: Node


class UnaryExpression(Node):
    type: Tag["UnaryExpression"] = "UnaryExpression"
    operator: str
    argument: Node


class BinaryExpression(Node):
    type: Tag["BinaryExpression"] = "BinaryExpression"
    operator: str
    left: Node
    right: Node


class AssignmentExpression(Node):
    type: Tag["AssignmentExpression"] = "AssignmentExpression"
    operator: str = "="
    left: Node
    right: Node


class MemberExpression(Node):
    type: Tag["MemberExpression"] = "MemberExpression"
    object: Node
    property: Node
    computed: bool = False


class CallExpression(Node):
    type: Tag["CallExpression"] = "CallExpression"
    callee: Node
    arguments: list[Node] = []


class FunctionExpression(Node):
    type: Tag["FunctionExpression"] = "FunctionExpression"
    id: Identifier | None = None
    params: list[Node] = []
    body: BlockStatement


class ArrowFunctionExpression(Node):
    type: Tag["ArrowFunctionExpression"] = "ArrowFunctionExpression"
    params: list[Node] = []
    body: Node
    expression: bool = False


for _model in (
    Program,
    BlockStatement,
    FunctionDeclaration,
    VariableDeclarator,
    VariableDeclaration,
    IfStatement,
    WhileStatement,
    ForStatement,
    ExpressionStatement,
    ReturnStatement,
    ArrayExpression,
    Property,
    ObjectExpression,
    NewExpression,
    UpdateExpression,
    UnaryExpression,
    BinaryExpression,
    AssignmentExpression,
    MemberExpression,
    CallExpression,
    FunctionExpression,
    ArrowFunctionExpression,
):
    _model.model_rebuild()
