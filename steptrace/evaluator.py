"""Expression Evaluator: computes values of syntax nodes against an Environment.

Every evaluation takes the logical ``step`` at which any binding mutation
it performs is stamped.  The evaluator never appends trace entries.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable

from . import constants
from .builtins import Builtins
from .environment import Environment
from .errors import (
    OperatorEvaluationError,
    PropertyAccessError,
    UndefinedVariableError,
    UnsupportedCallError,
    UnsupportedConstructorError,
    UnsupportedExpressionError,
)
from .syntax import (
    ArrayExpression,
    AssignmentExpression,
    BinaryExpression,
    CallExpression,
    Identifier,
    Literal,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    VariableDeclarator,
)
from .values import (
    UNDEFINED,
    Operators,
    ValueKind,
    is_truthy,
    kind_of,
    normalize_number,
    to_number,
    to_text,
)

logger = logging.getLogger(__name__)

_LENGTH = "length"


def _short_circuits(operator: str, lhs: Any) -> bool:
    """True when a logical operator's result is its left operand."""
    if operator == "&&":
        return not is_truthy(lhs)
    if operator == "||":
        return is_truthy(lhs)
    if operator == "??":
        return lhs is not None and lhs is not UNDEFINED
    return False


def get_property(receiver: Any, key: Any, location=None) -> Any:
    """Read ``receiver[key]`` with JavaScript lookup rules."""
    kind = kind_of(receiver)
    if kind in (ValueKind.NULL, ValueKind.UNDEFINED):
        raise PropertyAccessError(
            f"Cannot read property {to_text(key)!r} of {to_text(receiver)}", location
        )
    name = to_text(key)
    if kind in (ValueKind.SEQUENCE, ValueKind.TEXT):
        if name == _LENGTH:
            return len(receiver)
        index = _as_index(key)
        if index is not None and index < len(receiver):
            return receiver[index]
        return UNDEFINED
    if kind == ValueKind.STRUCTURE:
        return receiver.get(name, UNDEFINED)
    return UNDEFINED


def set_property(receiver: Any, key: Any, value: Any, location=None) -> None:
    """Write ``receiver[key] = value``; sequences grow with ``undefined`` holes."""
    kind = kind_of(receiver)
    if kind == ValueKind.STRUCTURE:
        receiver[to_text(key)] = value
        return
    if kind == ValueKind.SEQUENCE:
        index = _as_index(key)
        if index is None:
            raise PropertyAccessError(
                f"Cannot set non-index property {to_text(key)!r} on a sequence",
                location,
            )
        if index >= len(receiver):
            receiver.extend([UNDEFINED] * (index + 1 - len(receiver)))
        receiver[index] = value
        return
    raise PropertyAccessError(
        f"Cannot set property {to_text(key)!r} on {kind.value}", location
    )


def _as_index(key: Any) -> int | None:
    if kind_of(key) == ValueKind.TEXT:
        if not key.isdigit():
            return None
        key = int(key)
    if kind_of(key) != ValueKind.NUMBER:
        return None
    if isinstance(key, float) and (math.isnan(key) or not key.is_integer()):
        return None
    return int(key) if key >= 0 else None


class Evaluator:
    """Evaluates expression nodes; mutations go through the Environment."""

    def __init__(self, env: Environment):
        self.env = env
        self._EXPR_DISPATCH: dict[str, Callable[[Any, int], Any]] = {
            "Literal": self._eval_literal,
            "Identifier": self._eval_identifier,
            "ThisExpression": self._eval_this,
            "VariableDeclarator": self._eval_declarator,
            "ArrayExpression": self._eval_array,
            "ObjectExpression": self._eval_object,
            "NewExpression": self._eval_new,
            "UpdateExpression": self._eval_update,
            "UnaryExpression": self._eval_unary,
            "BinaryExpression": self._eval_binary,
            "AssignmentExpression": self._eval_assignment,
            "MemberExpression": self._eval_member,
            "CallExpression": self._eval_call,
        }

    def evaluate(self, node: Node, step: int) -> Any:
        handler = self._EXPR_DISPATCH.get(node.type)
        if handler is None:
            raise UnsupportedExpressionError(node.type, node.loc)
        return handler(node, step)

    # ── names ────────────────────────────────────────────────────

    def _lookup_value(self, name: str, node: Node) -> Any:
        binding = self.env.lookup(name)
        if binding is None:
            raise UndefinedVariableError(name, node.loc)
        return binding.value

    def _set_variable(self, name: str, value: Any, step: int, node: Node) -> Any:
        try:
            self.env.set(name, value, step)
        except UndefinedVariableError as exc:
            raise UndefinedVariableError(name, node.loc) from exc
        return value

    def _eval_literal(self, node: Literal, step: int) -> Any:
        return node.value

    def _eval_identifier(self, node: Identifier, step: int) -> Any:
        return self._lookup_value(node.name, node)

    def _eval_this(self, node: ThisExpression, step: int) -> Any:
        return self._lookup_value(constants.THIS_BINDING, node)

    def _eval_declarator(self, node: VariableDeclarator, step: int) -> Any:
        if not isinstance(node.id, Identifier):
            raise UnsupportedExpressionError(node.id.type, node.id.loc)
        value = UNDEFINED if node.init is None else self.evaluate(node.init, step)
        self.env.define(node.id.name, value, step)
        return UNDEFINED

    # ── construction ─────────────────────────────────────────────

    def _eval_array(self, node: ArrayExpression, step: int) -> list:
        return [
            UNDEFINED if element is None else self.evaluate(element, step)
            for element in node.elements
        ]

    def _property_key(self, key: Node, computed: bool, step: int) -> str:
        if computed:
            return to_text(self.evaluate(key, step))
        if isinstance(key, Identifier):
            return key.name
        if isinstance(key, Literal):
            return to_text(key.value)
        raise UnsupportedExpressionError(key.type, key.loc)

    def _eval_object(self, node: ObjectExpression, step: int) -> dict:
        result: dict[str, Any] = {}
        for prop in node.properties:
            if prop.kind != "init" or prop.value is None:
                continue
            result[self._property_key(prop.key, prop.computed, step)] = self.evaluate(
                prop.value, step
            )
        return result

    def _eval_new(self, node: NewExpression, step: int) -> Any:
        if not node.arguments:
            return {}
        callee_name = node.callee.name if isinstance(node.callee, Identifier) else ""
        if callee_name in constants.SEQUENCE_CONSTRUCTORS and len(node.arguments) == 1:
            size = self.evaluate(node.arguments[0], step)
            if (
                kind_of(size) == ValueKind.NUMBER
                and float(size).is_integer()
                and size >= 0
            ):
                return [UNDEFINED] * int(size)
        raise UnsupportedConstructorError(
            f"Unsupported constructor: new {callee_name or node.callee.type}"
            f" with {len(node.arguments)} argument(s)",
            node.loc,
        )

    # ── operators ────────────────────────────────────────────────

    def _eval_update(self, node: UpdateExpression, step: int) -> Any:
        if not isinstance(node.argument, Identifier):
            raise UnsupportedExpressionError(
                f"UpdateExpression on {node.argument.type}", node.loc
            )
        name = node.argument.name
        old = to_number(self._lookup_value(name, node))
        new = normalize_number(old + 1 if node.operator == "++" else old - 1)
        self._set_variable(name, new, step, node)
        return new if node.prefix else old

    def _eval_unary(self, node: UnaryExpression, step: int) -> Any:
        if node.operator == "typeof" and isinstance(node.argument, Identifier):
            if not self.env.is_bound(node.argument.name):
                return "undefined"
        operand = self.evaluate(node.argument, step)
        try:
            return Operators.eval_unop(node.operator, operand)
        except OperatorEvaluationError as exc:
            logger.warning("%s at %s", exc, node.loc)
            return UNDEFINED

    def _apply_binop(self, op: str, lhs: Any, rhs: Any, node: Node) -> Any:
        try:
            return Operators.eval_binop(op, lhs, rhs)
        except OperatorEvaluationError as exc:
            logger.warning("%s at %s", exc, node.loc)
            return UNDEFINED

    def _eval_binary(self, node: BinaryExpression, step: int) -> Any:
        lhs = self.evaluate(node.left, step)
        if _short_circuits(node.operator, lhs):
            return lhs
        rhs = self.evaluate(node.right, step)
        return self._apply_binop(node.operator, lhs, rhs, node)

    # ── assignment ───────────────────────────────────────────────

    def _receiver_name(self, receiver: Node) -> str:
        if isinstance(receiver, ThisExpression):
            return constants.THIS_BINDING
        if isinstance(receiver, Identifier):
            return receiver.name
        raise UnsupportedExpressionError(
            f"assignment through nested {receiver.type}", receiver.loc
        )

    def _compound(
        self, node: AssignmentExpression, current: Any, step: int
    ) -> Any:
        if node.operator == "=":
            return self.evaluate(node.right, step)
        operator = node.operator[:-1]
        if _short_circuits(operator, current):
            return current
        rhs = self.evaluate(node.right, step)
        return self._apply_binop(operator, current, rhs, node)

    def _eval_assignment(self, node: AssignmentExpression, step: int) -> Any:
        target = node.left
        if isinstance(target, Identifier):
            current = (
                self._lookup_value(target.name, target)
                if node.operator != "="
                else UNDEFINED
            )
            value = self._compound(node, current, step)
            return self._set_variable(target.name, value, step, target)

        if isinstance(target, MemberExpression):
            owner = self._receiver_name(target.object)
            receiver_value = self._lookup_value(owner, target.object)
            if receiver_value is None or receiver_value is UNDEFINED:
                receiver_value = {}
            key = (
                self.evaluate(target.property, step)
                if target.computed
                else target.property.name
            )
            current = (
                get_property(receiver_value, key, target.loc)
                if node.operator != "="
                else UNDEFINED
            )
            value = self._compound(node, current, step)
            set_property(receiver_value, key, value, target.loc)
            self._set_variable(owner, receiver_value, step, target)
            return value

        raise UnsupportedExpressionError(f"assignment to {target.type}", target.loc)

    # ── property access and calls ────────────────────────────────

    def _eval_member(self, node: MemberExpression, step: int) -> Any:
        receiver = self.evaluate(node.object, step)
        key = (
            self.evaluate(node.property, step) if node.computed else node.property.name
        )
        return get_property(receiver, key, node.loc)

    def _sequence_owner(self, receiver: Node) -> str | None:
        """Variable whose history must record an in-place sequence mutation."""
        if isinstance(receiver, Identifier):
            return receiver.name
        if isinstance(receiver, ThisExpression):
            return constants.THIS_BINDING
        if isinstance(receiver, MemberExpression) and isinstance(
            receiver.object, (Identifier, ThisExpression)
        ):
            return self._sequence_owner(receiver.object)
        return None

    def _eval_call(self, node: CallExpression, step: int) -> Any:
        callee = node.callee
        if not isinstance(callee, MemberExpression) or callee.computed:
            raise UnsupportedCallError(
                f"Unsupported call: callee must be a named method, got {callee.type}",
                node.loc,
            )
        if len(node.arguments) > 1:
            raise UnsupportedCallError(
                f"Unsupported call: {callee.property.name}() with"
                f" {len(node.arguments)} arguments",
                node.loc,
            )
        method = callee.property.name

        if (
            isinstance(callee.object, Identifier)
            and not self.env.is_bound(callee.object.name)
            and Builtins.is_global(callee.object.name)
        ):
            args = [self.evaluate(a, step) for a in node.arguments]
            return Builtins.invoke_global(callee.object.name, method, args, node.loc)

        receiver = self.evaluate(callee.object, step)
        args = [self.evaluate(a, step) for a in node.arguments]
        result = Builtins.invoke_method(receiver, method, args, node.loc)

        if kind_of(receiver) == ValueKind.SEQUENCE:
            owner = self._sequence_owner(callee.object)
            if owner is not None and self.env.is_bound(owner):
                self.env.set(owner, self.env.get(owner), step)
        return result
