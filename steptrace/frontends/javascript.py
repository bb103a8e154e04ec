"""JavaScriptFrontend: tree-sitter JavaScript AST → ESTree-shaped syntax nodes."""

from __future__ import annotations

import re
from typing import Callable

from ._base import BaseFrontend
from ..syntax import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    ContinueStatement,
    ExpressionStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    Literal,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    Property,
    ReturnStatement,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
)
from ..values import UNDEFINED, normalize_number

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)


def _decode_escape(match: re.Match) -> str:
    body = match.group(1)
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[0] in "ux" and len(body) > 1:
        return chr(int(body[1:], 16))
    if body in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def decode_string(raw: str) -> str:
    """Resolve JavaScript escape sequences in a string body."""
    return _ESCAPE_RE.sub(_decode_escape, raw)


def parse_number(text: str) -> int | float:
    """Parse a JavaScript numeric literal."""
    cleaned = text.replace("_", "").removesuffix("n")
    if cleaned[:2].lower() in ("0x", "0o", "0b"):
        return int(cleaned, 0)
    try:
        return int(cleaned)
    except ValueError:
        return normalize_number(float(cleaned))


class JavaScriptFrontend(BaseFrontend):
    """Converts a JavaScript tree-sitter AST into syntax nodes."""

    UPDATE_FIELDS: tuple[str, ...] = ("increment", "update")

    def __init__(self):
        super().__init__()
        self._EXPR_DISPATCH: dict[str, Callable[..., Node]] = {
            "identifier": self._convert_identifier,
            "undefined": self._convert_undefined,
            "number": self._convert_number,
            "string": self._convert_string,
            "template_string": self._convert_template_string,
            "true": self._convert_keyword_literal,
            "false": self._convert_keyword_literal,
            "null": self._convert_keyword_literal,
            "this": self._convert_this,
            "parenthesized_expression": self._convert_paren,
            "array": self._convert_array,
            "object": self._convert_object,
            "binary_expression": self._convert_binary,
            "unary_expression": self._convert_unary,
            "update_expression": self._convert_update,
            "assignment_expression": self._convert_assignment,
            "augmented_assignment_expression": self._convert_augmented_assignment,
            "member_expression": self._convert_member,
            "subscript_expression": self._convert_subscript,
            "call_expression": self._convert_call,
            "new_expression": self._convert_new,
            "function": self._convert_function_expression,
            "function_expression": self._convert_function_expression,
            "arrow_function": self._convert_arrow_function,
        }
        self._STMT_DISPATCH: dict[str, Callable[..., Node]] = {
            "expression_statement": self._convert_expression_statement,
            "lexical_declaration": self._convert_var_declaration,
            "variable_declaration": self._convert_var_declaration,
            "if_statement": self._convert_if,
            "while_statement": self._convert_while,
            "for_statement": self._convert_for,
            "return_statement": self._convert_return,
            "continue_statement": self._convert_continue,
            "statement_block": self._convert_block,
            "function_declaration": self._convert_function_declaration,
        }

    # ── literals ─────────────────────────────────────────────────

    def _convert_identifier(self, node) -> Node:
        name = self._node_text(node)
        if name == "undefined":
            return self._convert_undefined(node)
        return Identifier(name=name, loc=self._source_loc(node))

    def _convert_undefined(self, node) -> Literal:
        return Literal(value=UNDEFINED, raw="undefined", loc=self._source_loc(node))

    def _convert_number(self, node) -> Literal:
        raw = self._node_text(node)
        return Literal(value=parse_number(raw), raw=raw, loc=self._source_loc(node))

    def _convert_string(self, node) -> Literal:
        raw = self._node_text(node)
        return Literal(
            value=decode_string(raw[1:-1]), raw=raw, loc=self._source_loc(node)
        )

    def _convert_keyword_literal(self, node) -> Literal:
        raw = self._node_text(node)
        value = {"true": True, "false": False, "null": None}[raw]
        return Literal(value=value, raw=raw, loc=self._source_loc(node))

    def _convert_this(self, node) -> ThisExpression:
        return ThisExpression(loc=self._source_loc(node))

    def _convert_template_string(self, node) -> Node:
        """Template literals become a left-nested chain of text concatenations."""
        loc = self._source_loc(node)
        parts: list[Node] = []
        pending = ""
        cursor = node.start_byte + 1
        for child in node.children:
            if child.type not in ("template_substitution", "escape_sequence"):
                continue
            pending += self._source[cursor : child.start_byte].decode("utf-8")
            cursor = child.end_byte
            if child.type == "escape_sequence":
                pending += decode_string(self._node_text(child))
                continue
            if pending:
                parts.append(Literal(value=pending, raw=pending, loc=loc))
                pending = ""
            inner = self._named_children(child)
            parts.append(self._convert_expr(inner[0]))
        pending += self._source[cursor : node.end_byte - 1].decode("utf-8")
        if pending or not parts:
            parts.append(Literal(value=pending, raw=pending, loc=loc))
        if len(parts) == 1 and isinstance(parts[0], Literal):
            return parts[0]

        result: Node = Literal(value="", raw="", loc=loc)
        for part in parts:
            result = BinaryExpression(operator="+", left=result, right=part, loc=loc)
        return result

    # ── compound expressions ─────────────────────────────────────

    def _convert_paren(self, node) -> Node:
        inner = self._named_children(node)
        if len(inner) != 1:
            return self._unsupported(node)
        return self._convert_expr(inner[0])

    def _convert_array(self, node) -> ArrayExpression:
        elements: list[Node | None] = []
        current: Node | None = None
        for child in node.children:
            if child.type == ",":
                elements.append(current)
                current = None
            elif child.is_named and child.type not in self.COMMENT_TYPES:
                current = self._convert_expr(child)
        if current is not None:
            elements.append(current)
        return ArrayExpression(elements=elements, loc=self._source_loc(node))

    def _convert_property_key(self, node) -> tuple[Node, bool]:
        if node.type == "computed_property_name":
            inner = self._named_children(node)
            return self._convert_expr(inner[0]), True
        if node.type in ("property_identifier", "identifier"):
            return Identifier(name=self._node_text(node), loc=self._source_loc(node)), False
        return self._convert_expr(node), False

    def _convert_object(self, node) -> ObjectExpression:
        properties: list[Property] = []
        for child in self._named_children(node):
            loc = self._source_loc(child)
            if child.type == "pair":
                key, computed = self._convert_property_key(
                    child.child_by_field_name("key")
                )
                value = self._convert_expr(child.child_by_field_name("value"))
                properties.append(
                    Property(key=key, value=value, computed=computed, loc=loc)
                )
            elif child.type == "shorthand_property_identifier":
                ident = Identifier(name=self._node_text(child), loc=loc)
                properties.append(
                    Property(key=ident, value=ident, shorthand=True, loc=loc)
                )
            elif child.type == "method_definition":
                key, computed = self._convert_property_key(
                    child.child_by_field_name("name")
                )
                properties.append(
                    Property(key=key, kind="method", computed=computed, loc=loc)
                )
            else:
                properties.append(
                    Property(key=self._unsupported(child), kind=child.type, loc=loc)
                )
        return ObjectExpression(properties=properties, loc=self._source_loc(node))

    def _operator_text(self, node, left_field: str) -> str:
        op_node = node.child_by_field_name("operator")
        if op_node is not None:
            return self._node_text(op_node)
        left = node.child_by_field_name(left_field)
        following = [c for c in node.children if not c.is_named and c.start_byte >= left.end_byte]
        return self._node_text(following[0])

    def _convert_binary(self, node) -> BinaryExpression:
        return BinaryExpression(
            operator=self._operator_text(node, "left"),
            left=self._convert_expr(node.child_by_field_name("left")),
            right=self._convert_expr(node.child_by_field_name("right")),
            loc=self._source_loc(node),
        )

    def _convert_unary(self, node) -> UnaryExpression:
        argument = node.child_by_field_name("argument")
        return UnaryExpression(
            operator=self._node_text(node.children[0]),
            argument=self._convert_expr(argument),
            loc=self._source_loc(node),
        )

    def _convert_update(self, node) -> UpdateExpression:
        argument = node.child_by_field_name("argument")
        op_node = next(c for c in node.children if c.type in ("++", "--"))
        return UpdateExpression(
            operator=self._node_text(op_node),
            prefix=op_node.start_byte < argument.start_byte,
            argument=self._convert_expr(argument),
            loc=self._source_loc(node),
        )

    def _convert_assignment(self, node) -> AssignmentExpression:
        return AssignmentExpression(
            operator="=",
            left=self._convert_expr(node.child_by_field_name("left")),
            right=self._convert_expr(node.child_by_field_name("right")),
            loc=self._source_loc(node),
        )

    def _convert_augmented_assignment(self, node) -> AssignmentExpression:
        return AssignmentExpression(
            operator=self._operator_text(node, "left"),
            left=self._convert_expr(node.child_by_field_name("left")),
            right=self._convert_expr(node.child_by_field_name("right")),
            loc=self._source_loc(node),
        )

    def _convert_member(self, node) -> MemberExpression:
        prop = node.child_by_field_name("property")
        return MemberExpression(
            object=self._convert_expr(node.child_by_field_name("object")),
            property=Identifier(name=self._node_text(prop), loc=self._source_loc(prop)),
            computed=False,
            loc=self._source_loc(node),
        )

    def _convert_subscript(self, node) -> MemberExpression:
        return MemberExpression(
            object=self._convert_expr(node.child_by_field_name("object")),
            property=self._convert_expr(node.child_by_field_name("index")),
            computed=True,
            loc=self._source_loc(node),
        )

    def _convert_arguments(self, args_node) -> list[Node]:
        if args_node is None:
            return []
        return [self._convert_expr(c) for c in self._named_children(args_node)]

    def _convert_call(self, node) -> Node:
        args_node = node.child_by_field_name("arguments")
        if args_node is not None and args_node.type != "arguments":
            return self._unsupported(node)
        return CallExpression(
            callee=self._convert_expr(node.child_by_field_name("function")),
            arguments=self._convert_arguments(args_node),
            loc=self._source_loc(node),
        )

    def _convert_new(self, node) -> NewExpression:
        return NewExpression(
            callee=self._convert_expr(node.child_by_field_name("constructor")),
            arguments=self._convert_arguments(node.child_by_field_name("arguments")),
            loc=self._source_loc(node),
        )

    # ── functions ────────────────────────────────────────────────

    def _convert_params(self, params_node) -> list[Node]:
        if params_node is None:
            return []
        if params_node.type == "identifier":
            return [self._convert_identifier(params_node)]
        params: list[Node] = []
        for child in self._named_children(params_node):
            if child.type == "identifier":
                params.append(self._convert_identifier(child))
            elif child.type == "assignment_pattern":
                left = child.child_by_field_name("left")
                params.append(
                    self._convert_identifier(left)
                    if left.type == "identifier"
                    else self._unsupported(child)
                )
            else:
                params.append(self._unsupported(child))
        return params

    def _function_name(self, node) -> Identifier | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return Identifier(name=self._node_text(name_node), loc=self._source_loc(name_node))

    def _convert_function_declaration(self, node) -> FunctionDeclaration:
        return FunctionDeclaration(
            id=self._function_name(node),
            params=self._convert_params(node.child_by_field_name("parameters")),
            body=self._convert_block(node.child_by_field_name("body")),
            loc=self._source_loc(node),
        )

    def _convert_function_expression(self, node) -> FunctionExpression:
        return FunctionExpression(
            id=self._function_name(node),
            params=self._convert_params(node.child_by_field_name("parameters")),
            body=self._convert_block(node.child_by_field_name("body")),
            loc=self._source_loc(node),
        )

    def _convert_arrow_function(self, node) -> ArrowFunctionExpression:
        params_node = node.child_by_field_name("parameter")
        if params_node is None:
            params_node = node.child_by_field_name("parameters")
        body_node = node.child_by_field_name("body")
        if body_node.type == "statement_block":
            body: Node = self._convert_block(body_node)
            expression = False
        else:
            body = self._convert_expr(body_node)
            expression = True
        return ArrowFunctionExpression(
            params=self._convert_params(params_node),
            body=body,
            expression=expression,
            loc=self._source_loc(node),
        )

    # ── statements ───────────────────────────────────────────────

    def _convert_expression_statement(self, node) -> Node:
        inner = self._named_children(node)
        if len(inner) != 1:
            return self._unsupported(node)
        return ExpressionStatement(
            expression=self._convert_expr(inner[0]), loc=self._source_loc(node)
        )

    def _convert_var_declaration(self, node) -> VariableDeclaration:
        declarations = []
        for child in node.children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            name = (
                self._convert_identifier(name_node)
                if name_node.type == "identifier"
                else self._unsupported(name_node)
            )
            declarations.append(
                VariableDeclarator(
                    id=name,
                    init=self._convert_expr(value_node) if value_node else None,
                    loc=self._source_loc(child),
                )
            )
        return VariableDeclaration(
            kind=self._node_text(node.children[0]),
            declarations=declarations,
            loc=self._source_loc(node),
        )

    def _convert_condition(self, node) -> Node:
        if node.type == "parenthesized_expression":
            return self._convert_paren(node)
        return self._convert_expr(node)

    def _convert_if(self, node) -> IfStatement:
        alt_node = node.child_by_field_name("alternative")
        alternate = None
        if alt_node is not None:
            if alt_node.type == "else_clause":
                alt_node = self._named_children(alt_node)[0]
            alternate = self._convert_stmt(alt_node)
        return IfStatement(
            test=self._convert_condition(node.child_by_field_name("condition")),
            consequent=self._convert_stmt(node.child_by_field_name("consequence")),
            alternate=alternate,
            loc=self._source_loc(node),
        )

    def _convert_while(self, node) -> WhileStatement:
        return WhileStatement(
            test=self._convert_condition(node.child_by_field_name("condition")),
            body=self._convert_stmt(node.child_by_field_name("body")),
            loc=self._source_loc(node),
        )

    def _convert_for_clause(self, node) -> Node | None:
        """Initializer / condition clause: declaration, expression or empty."""
        if node is None or not node.is_named or node.type == "empty_statement":
            return None
        if node.type in ("lexical_declaration", "variable_declaration"):
            return self._convert_var_declaration(node)
        if node.type == "expression_statement":
            inner = self._named_children(node)
            return self._convert_expr(inner[0]) if inner else None
        return self._convert_expr(node)

    def _convert_for(self, node) -> ForStatement:
        update_node = next(
            (
                n
                for n in (node.child_by_field_name(f) for f in self.UPDATE_FIELDS)
                if n is not None
            ),
            None,
        )
        return ForStatement(
            init=self._convert_for_clause(node.child_by_field_name("initializer")),
            test=self._convert_for_clause(node.child_by_field_name("condition")),
            update=self._convert_expr(update_node) if update_node else None,
            body=self._convert_stmt(node.child_by_field_name("body")),
            loc=self._source_loc(node),
        )

    def _convert_return(self, node) -> ReturnStatement:
        inner = self._named_children(node)
        return ReturnStatement(
            argument=self._convert_expr(inner[0]) if inner else None,
            loc=self._source_loc(node),
        )

    def _convert_continue(self, node) -> ContinueStatement:
        label = node.child_by_field_name("label")
        return ContinueStatement(
            label=self._node_text(label) if label is not None else None,
            loc=self._source_loc(node),
        )
