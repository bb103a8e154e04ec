"""Entry-Point Locator: pairs annotated functions with their parameter specs."""

from __future__ import annotations

import logging

from . import constants
from .param_types import Annotation
from .syntax import (
    ArrowFunctionExpression,
    AssignmentExpression,
    BlockStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    MemberExpression,
    Node,
    ReturnStatement,
    ThisExpression,
    VariableDeclarator,
)
from .trace_types import TracedFunction

logger = logging.getLogger(__name__)


def find_annotation(annotations: list[Annotation], line: int) -> Annotation | None:
    """The last annotation whose comment ends on the line above ``line``."""
    match = None
    for annotation in annotations:
        if annotation.location.end_line + 1 == line:
            match = annotation
    return match


def normalize_function(fn: Node) -> FunctionDeclaration:
    """Give every function shape a block body, as a FunctionDeclaration."""
    if isinstance(fn, ArrowFunctionExpression) and fn.expression:
        body = BlockStatement(
            body=[ReturnStatement(argument=fn.body, loc=fn.body.loc)],
            loc=fn.body.loc,
        )
    else:
        body = fn.body
    return FunctionDeclaration(
        id=getattr(fn, "id", None), params=fn.params, body=body, loc=fn.loc
    )


def _target_name(node: Node) -> str:
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, ThisExpression):
        return constants.THIS_BINDING
    if isinstance(node, MemberExpression):
        owner = _target_name(node.object)
        prop = node.property.name if isinstance(node.property, Identifier) else "?"
        return f"{owner}.{prop}" if not node.computed else f"{owner}[{prop}]"
    return constants.ANONYMOUS_FUNCTION_NAME


def _candidate(node: Node) -> tuple[str, Node] | None:
    """(name, function node) when ``node`` introduces a named function."""
    if isinstance(node, FunctionDeclaration):
        return (node.id.name if node.id else constants.ANONYMOUS_FUNCTION_NAME, node)
    if isinstance(node, VariableDeclarator) and node.init is not None:
        if node.init.type in constants.FUNCTION_NODE_TYPES:
            return _target_name(node.id), node.init
    if isinstance(node, AssignmentExpression):
        if node.right.type in constants.FUNCTION_NODE_TYPES:
            return _target_name(node.left), node.right
    return None


def _children(node: Node) -> list[Node]:
    children: list[Node] = []
    for field_name in type(node).model_fields:
        value = getattr(node, field_name)
        if isinstance(value, Node):
            children.append(value)
        elif isinstance(value, list):
            children.extend(v for v in value if isinstance(v, Node))
    return children


def locate_functions(
    program: Node, annotations: list[Annotation], source_text: str = ""
) -> list[TracedFunction]:
    """One fresh TracedFunction per annotated function, in source order.

    Matched functions are not searched for nested annotated functions.
    """
    found: list[TracedFunction] = []
    stack = [program]
    while stack:
        node = stack.pop()
        candidate = _candidate(node)
        if candidate is not None:
            name, fn = candidate
            annotation = find_annotation(annotations, node.loc.start_line)
            if annotation is not None:
                logger.info("Located %s at line %d", name, node.loc.start_line)
                found.append(
                    TracedFunction(
                        name=name,
                        node=normalize_function(fn),
                        params=[p.model_copy(deep=True) for p in annotation.params],
                        source_text=source_text,
                    )
                )
                continue
        stack.extend(reversed(_children(node)))

    found.sort(key=lambda t: (t.node.loc.start_line, t.node.loc.start_col))
    logger.info("Located %d annotated functions", len(found))
    return found
