"""Interpreter error taxonomy.

Everything except ``OperatorEvaluationError`` is fatal to the current run:
the exception propagates out of the walker and leaves the partial trace in
place.  ``OperatorEvaluationError`` is caught inside the evaluator, logged,
and the failing node yields ``undefined``.
"""

from __future__ import annotations

from .syntax import SourceLocation


class InterpreterError(Exception):
    """Base class for all errors raised while tracing a function."""

    def __init__(self, message: str, location: SourceLocation | None = None):
        self.location = location
        if location is not None and not location.is_unknown():
            message = f"{message} (line {location.start_line})"
        super().__init__(message)


class UndefinedVariableError(InterpreterError):
    def __init__(self, name: str, location: SourceLocation | None = None):
        self.name = name
        super().__init__(f"Undefined variable: {name}", location)


class UnsupportedStatementError(InterpreterError):
    def __init__(self, node_type: str, location: SourceLocation | None = None):
        self.node_type = node_type
        super().__init__(f"Unsupported statement: {node_type}", location)


class UnsupportedExpressionError(InterpreterError):
    def __init__(self, node_type: str, location: SourceLocation | None = None):
        self.node_type = node_type
        super().__init__(f"Unsupported expression: {node_type}", location)


class UnsupportedConstructorError(InterpreterError):
    pass


class UnsupportedCallError(InterpreterError):
    pass


class PropertyAccessError(InterpreterError):
    """Property read or write on a value that cannot hold properties."""


class StepLimitExceededError(InterpreterError):
    def __init__(self, max_steps: int, location: SourceLocation | None = None):
        self.max_steps = max_steps
        super().__init__(f"Execution exceeded {max_steps} steps", location)


class ParameterBindingError(InterpreterError):
    """Declared parameters and annotated specs do not line up."""


class OperatorEvaluationError(InterpreterError):
    """Neither the numeric nor the text interpretation of an operator applies."""

    def __init__(self, operator: str, lhs_kind: str, rhs_kind: str = ""):
        self.operator = operator
        operands = f"{lhs_kind}, {rhs_kind}" if rhs_kind else lhs_kind
        super().__init__(f"Cannot evaluate operator {operator!r} on ({operands})")


class SourceParseError(Exception):
    """tree-sitter reported a syntax error in the source."""

    def __init__(self, message: str, location: SourceLocation | None = None):
        self.location = location
        super().__init__(message)


class AnnotationError(Exception):
    """A ``@param`` annotation could not be turned into a parameter spec."""
