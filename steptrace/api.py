"""Composable API functions for the tracing pipeline.

Each function corresponds to a CLI workflow but is callable programmatically
without argparse.
"""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Node

from .annotations import read_annotations
from .errors import InterpreterError
from .frontends import get_frontend
from .locator import locate_functions
from .param_types import Annotation
from .parser import Parser, TreeSitterParserFactory
from .run import execute_function
from .run_types import RunConfig
from .syntax import Program
from .trace_types import TracedFunction
from . import constants

logger = logging.getLogger(__name__)

_FUNCTION_NODE_TYPES: frozenset[str] = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "arrow_function",
    }
)

_BINDING_NODE_TYPES: dict[str, tuple[str, str]] = {
    "variable_declarator": ("name", "value"),
    "assignment_expression": ("left", "right"),
}


def parse_source(source: str, language: str = constants.DEFAULT_LANGUAGE) -> Program:
    """Parse source code into the syntax node model.

    Args:
        source: The source code text.
        language: Source language name.

    Returns:
        The Program node, with every comment collected.
    """
    logger.info("Parsing source (%s)", language)
    tree = Parser(TreeSitterParserFactory()).parse(source, language)
    return get_frontend(language).convert(tree, source.encode("utf-8"))


def read_source_annotations(
    source: str, language: str = constants.DEFAULT_LANGUAGE
) -> list[Annotation]:
    """Parse source and read every ``@param`` annotation in it."""
    return read_annotations(parse_source(source, language).comments)


def locate_source_functions(
    source: str, language: str = constants.DEFAULT_LANGUAGE
) -> list[TracedFunction]:
    """Parse source and return one pending TracedFunction per annotated function."""
    program = parse_source(source, language)
    return locate_functions(program, read_annotations(program.comments), source)


def trace_function(
    source: str,
    function_name: str = "",
    language: str = constants.DEFAULT_LANGUAGE,
    max_steps: int | None = constants.DEFAULT_MAX_STEPS,
) -> TracedFunction:
    """Locate one annotated function and run it.

    Args:
        source: The source code text.
        function_name: Name of the annotated function; the first one when empty.
        language: Source language name.
        max_steps: Trace entry ceiling (None disables it).

    Returns:
        The executed TracedFunction.  A failed run is returned with status
        FAILED, its partial trace and the error in ``failure``.

    Raises:
        ValueError: If no annotated function matches *function_name*.
    """
    logger.info("trace_function: language=%s, function=%s", language, function_name)
    instances = locate_source_functions(source, language)
    if function_name:
        instances = [t for t in instances if t.name == function_name]
    if not instances:
        raise ValueError(
            f"No annotated function {function_name!r} found in source"
            if function_name
            else "No annotated function found in source"
        )
    traced = instances[0]
    try:
        execute_function(traced, RunConfig(max_steps=max_steps))
    except InterpreterError as exc:
        logger.warning("Returning partial trace for %s: %s", traced.name, exc)
    return traced


def dump_trace(traced: TracedFunction) -> str:
    """Render a run as a text table: one row per trace entry plus its writes.

    Args:
        traced: An executed TracedFunction.

    Returns:
        A multi-line string.
    """
    env = traced.environment
    lines = [f"═══ {traced.name} ({traced.status.value}) ═══"]
    params = env.changes_at(constants.PARAMETER_STEP)
    if params:
        lines.append(
            "  step   0            "
            + ", ".join(f"{k} = {v}" for k, v in params.items())
        )
    for entry in traced.trace:
        outcome = "" if entry.branch_outcome is None else str(entry.branch_outcome).lower()
        changes = env.changes_at(entry.step)
        lines.append(
            f"  step {entry.step:>3}  line {entry.source_line:>4}"
            f"  {entry.node_kind.value:<20} {outcome:<5}  "
            + ", ".join(f"{k} = {v}" for k, v in changes.items())
        )
    if traced.failure is not None:
        lines.append(f"  failed: {traced.failure}")
    else:
        lines.append(f"  returned: {env.format(traced.return_value)}")
    return "\n".join(line.rstrip() for line in lines)


def _function_node_name(node: Node) -> str:
    if node.type in _BINDING_NODE_TYPES:
        name_field, value_field = _BINDING_NODE_TYPES[node.type]
        value = node.child_by_field_name(value_field)
        name = node.child_by_field_name(name_field)
        if value is not None and name is not None and value.type in _FUNCTION_NODE_TYPES:
            return name.text.decode("utf-8")
        return ""
    if node.type in _FUNCTION_NODE_TYPES:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return name_node.text.decode("utf-8")
    return ""


def _find_function_node(node: Node, name: str) -> Optional[Node]:
    """Recursively walk the AST to find a function node matching *name*."""
    if _function_node_name(node) == name:
        return node

    return next(
        (
            found
            for child in node.children
            if (found := _find_function_node(child, name)) is not None
        ),
        None,
    )


def extract_function_source(
    source: str,
    function_name: str,
    language: str = constants.DEFAULT_LANGUAGE,
) -> str:
    """Extract the raw source text of a named function from source code.

    Matches function declarations and variables or assignments whose value
    is a function or arrow expression.

    Raises:
        ValueError: If no function with the given name is found.
    """
    if not function_name:
        raise ValueError("function_name must not be empty")
    logger.info("Extracting function source for '%s' (%s)", function_name, language)
    tree = Parser(TreeSitterParserFactory()).parse(source, language)
    source_bytes = source.encode("utf-8")
    match = _find_function_node(tree.root_node, function_name)
    if match is None:
        raise ValueError(f"Function '{function_name}' not found in source")
    return source_bytes[match.start_byte : match.end_byte].decode("utf-8")
