"""Named constants shared by the parser, interpreter and CLI."""

from __future__ import annotations

PARAM_TAG = "@param"

THIS_BINDING = "this"

SEQUENCE_CONSTRUCTORS: frozenset[str] = frozenset({"Array"})

PARAMETER_STEP = 0

DEFAULT_MAX_STEPS = 10_000

DEFAULT_LANGUAGE = "javascript"

OBJECT_PATH_SEPARATOR_PATTERN = r"[\[\]\"'.]+"

FUNCTION_NODE_TYPES: frozenset[str] = frozenset(
    {
        "FunctionDeclaration",
        "FunctionExpression",
        "ArrowFunctionExpression",
    }
)

ANONYMOUS_FUNCTION_NAME = "<anonymous>"
