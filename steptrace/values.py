"""Value model: tagged value kinds, JavaScript coercions and the operator table.

Interpreted values are plain Python objects tagged by ``ValueKind``:

    NUMBER     int / float (never bool)
    TEXT       str
    BOOLEAN    bool
    SEQUENCE   list
    STRUCTURE  dict with str keys
    NULL       None
    UNDEFINED  the ``UNDEFINED`` sentinel
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable

from .errors import OperatorEvaluationError


class ValueKind(str, Enum):
    NUMBER = "Number"
    TEXT = "Text"
    BOOLEAN = "Boolean"
    SEQUENCE = "Sequence"
    STRUCTURE = "Structure"
    NULL = "Null"
    UNDEFINED = "Undefined"


class _Undefined:
    """Sentinel for JavaScript ``undefined``."""

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()

_MAX_SAFE_INTEGER = 2**53


def kind_of(value: Any) -> ValueKind:
    if value is UNDEFINED:
        return ValueKind.UNDEFINED
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, list):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.STRUCTURE
    raise TypeError(f"Not an interpreter value: {value!r}")


def normalize_number(n: int | float) -> int | float:
    """Collapse integral floats to int so 8 / 2 and 4 are the same value."""
    if isinstance(n, float) and n.is_integer() and abs(n) < _MAX_SAFE_INTEGER:
        return int(n)
    return n


def format_number(n: int | float) -> str:
    if isinstance(n, float):
        if math.isnan(n):
            return "NaN"
        if math.isinf(n):
            return "Infinity" if n > 0 else "-Infinity"
        n = normalize_number(n)
    return str(n) if isinstance(n, int) else repr(n)


def _parse_numeric_text(text: str) -> int | float:
    stripped = text.strip().replace("_", "")
    if stripped == "":
        return 0
    if stripped in ("Infinity", "+Infinity"):
        return math.inf
    if stripped == "-Infinity":
        return -math.inf
    if stripped[:2].lower() in ("0x", "0o", "0b"):
        try:
            return int(stripped, 0)
        except ValueError:
            return math.nan
    try:
        return normalize_number(float(stripped))
    except ValueError:
        return math.nan


def to_number(value: Any) -> int | float:
    """JavaScript ToNumber."""
    kind = kind_of(value)
    if kind == ValueKind.NUMBER:
        return normalize_number(value)
    if kind == ValueKind.BOOLEAN:
        return int(value)
    if kind == ValueKind.NULL:
        return 0
    if kind == ValueKind.TEXT:
        return _parse_numeric_text(value)
    if kind == ValueKind.SEQUENCE:
        return _parse_numeric_text(to_text(value))
    return math.nan


def to_text(value: Any) -> str:
    """JavaScript ToString (coercion, not the history snapshot format)."""
    kind = kind_of(value)
    if kind == ValueKind.TEXT:
        return value
    if kind == ValueKind.NUMBER:
        return format_number(value)
    if kind == ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind == ValueKind.NULL:
        return "null"
    if kind == ValueKind.UNDEFINED:
        return "undefined"
    if kind == ValueKind.SEQUENCE:
        return ",".join(
            "" if item is None or item is UNDEFINED else to_text(item) for item in value
        )
    return "[object Object]"


def is_truthy(value: Any) -> bool:
    """JavaScript ToBoolean."""
    kind = kind_of(value)
    if kind in (ValueKind.UNDEFINED, ValueKind.NULL):
        return False
    if kind == ValueKind.BOOLEAN:
        return value
    if kind == ValueKind.NUMBER:
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if kind == ValueKind.TEXT:
        return value != ""
    return True


def type_name(value: Any) -> str:
    """JavaScript ``typeof``."""
    kind = kind_of(value)
    return {
        ValueKind.NUMBER: "number",
        ValueKind.TEXT: "string",
        ValueKind.BOOLEAN: "boolean",
        ValueKind.UNDEFINED: "undefined",
    }.get(kind, "object")


def format_value(value: Any) -> str:
    """Deterministic rendering used for history snapshots."""
    kind = kind_of(value)
    if kind == ValueKind.SEQUENCE:
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if kind == ValueKind.STRUCTURE:
        return (
            "{" + ", ".join(f"{k}: {format_value(v)}" for k, v in value.items()) + "}"
        )
    if kind == ValueKind.TEXT:
        return f'"{value}"'
    return to_text(value)


# ── equality ─────────────────────────────────────────────────────


def strict_equals(a: Any, b: Any) -> bool:
    kind = kind_of(a)
    if kind != kind_of(b):
        return False
    if kind in (ValueKind.SEQUENCE, ValueKind.STRUCTURE):
        return a is b
    return a == b


def loose_equals(a: Any, b: Any) -> bool:
    ka, kb = kind_of(a), kind_of(b)
    if ka == kb:
        return strict_equals(a, b)
    nullish = (ValueKind.NULL, ValueKind.UNDEFINED)
    if ka in nullish or kb in nullish:
        return ka in nullish and kb in nullish
    if ka == ValueKind.BOOLEAN:
        return loose_equals(int(a), b)
    if kb == ValueKind.BOOLEAN:
        return loose_equals(a, int(b))
    if {ka, kb} == {ValueKind.NUMBER, ValueKind.TEXT}:
        return to_number(a) == to_number(b)
    if ka in (ValueKind.SEQUENCE, ValueKind.STRUCTURE):
        return loose_equals(to_text(a), b)
    if kb in (ValueKind.SEQUENCE, ValueKind.STRUCTURE):
        return loose_equals(a, to_text(b))
    return False


# ── numeric helpers ──────────────────────────────────────────────


def _divide(a: int | float, b: int | float) -> int | float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1, b)
    return a / b


def _remainder(a: int | float, b: int | float) -> int | float:
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    if isinstance(a, int) and isinstance(b, int):
        r = abs(a) % abs(b)
        return r if a >= 0 else -r
    return math.fmod(a, b)


def _power(a: int | float, b: int | float) -> int | float:
    if isinstance(a, int) and isinstance(b, int) and b >= 0:
        # exact only while the result stays a safe integer
        if abs(a) < 2 or b * math.log2(abs(a)) < 53:
            return a**b
    try:
        result = float(a) ** b
    except OverflowError:
        return -math.inf if a < 0 and b % 2 == 1 else math.inf
    except ZeroDivisionError:
        return math.inf
    if isinstance(result, complex):
        return math.nan
    return result


def _to_int32(n: int | float) -> int:
    if math.isnan(n) or math.isinf(n):
        return 0
    n = int(n) & 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _to_uint32(n: int | float) -> int:
    return _to_int32(n) & 0xFFFFFFFF


class OperandClass(str, Enum):
    """How a binary operator interprets its operands."""

    ANY = "any"
    NUMERIC = "numeric"
    TEXT = "text"


_NUMERIC_KINDS = frozenset(
    {ValueKind.NUMBER, ValueKind.BOOLEAN, ValueKind.NULL, ValueKind.UNDEFINED}
)

# kinds whose primitive form is text
_TEXT_KINDS = frozenset({ValueKind.TEXT, ValueKind.SEQUENCE, ValueKind.STRUCTURE})

_RELATIONAL_OPERATORS = frozenset({"<", ">", "<=", ">="})


class Operators:
    """Binary and unary operator evaluation keyed by operand class.

    Lookup order for a binary operator: the kind-agnostic entry, then the
    entry for ``operand_class``.  ``+`` is numeric only when both operands
    are number-like, comparisons are textual only when both operands are,
    and every other operator coerces its operands with ``to_number``.
    """

    BINOP_TABLE: dict[tuple[str, OperandClass], Callable[[Any, Any], Any]] = {
        ("==", OperandClass.ANY): loose_equals,
        ("!=", OperandClass.ANY): lambda a, b: not loose_equals(a, b),
        ("===", OperandClass.ANY): strict_equals,
        ("!==", OperandClass.ANY): lambda a, b: not strict_equals(a, b),
        ("&&", OperandClass.ANY): lambda a, b: b if is_truthy(a) else a,
        ("||", OperandClass.ANY): lambda a, b: a if is_truthy(a) else b,
        ("??", OperandClass.ANY): lambda a, b: b if a is None or a is UNDEFINED else a,
        ("+", OperandClass.NUMERIC): lambda a, b: a + b,
        ("-", OperandClass.NUMERIC): lambda a, b: a - b,
        ("*", OperandClass.NUMERIC): lambda a, b: a * b,
        ("/", OperandClass.NUMERIC): _divide,
        ("%", OperandClass.NUMERIC): _remainder,
        ("**", OperandClass.NUMERIC): _power,
        ("<", OperandClass.NUMERIC): lambda a, b: a < b,
        (">", OperandClass.NUMERIC): lambda a, b: a > b,
        ("<=", OperandClass.NUMERIC): lambda a, b: a <= b,
        (">=", OperandClass.NUMERIC): lambda a, b: a >= b,
        ("&", OperandClass.NUMERIC): lambda a, b: _to_int32(_to_int32(a) & _to_int32(b)),
        ("|", OperandClass.NUMERIC): lambda a, b: _to_int32(_to_int32(a) | _to_int32(b)),
        ("^", OperandClass.NUMERIC): lambda a, b: _to_int32(_to_int32(a) ^ _to_int32(b)),
        ("<<", OperandClass.NUMERIC): lambda a, b: _to_int32(
            _to_int32(a) << (_to_uint32(b) & 31)
        ),
        (">>", OperandClass.NUMERIC): lambda a, b: _to_int32(a) >> (_to_uint32(b) & 31),
        (">>>", OperandClass.NUMERIC): lambda a, b: _to_uint32(a) >> (_to_uint32(b) & 31),
        ("+", OperandClass.TEXT): lambda a, b: a + b,
        ("<", OperandClass.TEXT): lambda a, b: a < b,
        (">", OperandClass.TEXT): lambda a, b: a > b,
        ("<=", OperandClass.TEXT): lambda a, b: a <= b,
        (">=", OperandClass.TEXT): lambda a, b: a >= b,
    }

    UNOP_TABLE: dict[str, Callable[[Any], Any]] = {
        "-": lambda v: normalize_number(-to_number(v)),
        "+": to_number,
        "!": lambda v: not is_truthy(v),
        "~": lambda v: _to_int32(~_to_int32(to_number(v))),
        "typeof": type_name,
        "void": lambda v: UNDEFINED,
    }

    @classmethod
    def operand_class(cls, op: str, lhs: Any, rhs: Any) -> OperandClass:
        lhs_kind, rhs_kind = kind_of(lhs), kind_of(rhs)
        if op == "+":
            numeric = lhs_kind in _NUMERIC_KINDS and rhs_kind in _NUMERIC_KINDS
            return OperandClass.NUMERIC if numeric else OperandClass.TEXT
        if op in _RELATIONAL_OPERATORS:
            textual = lhs_kind in _TEXT_KINDS and rhs_kind in _TEXT_KINDS
            return OperandClass.TEXT if textual else OperandClass.NUMERIC
        return OperandClass.NUMERIC

    @classmethod
    def eval_binop(cls, op: str, lhs: Any, rhs: Any) -> Any:
        fn = cls.BINOP_TABLE.get((op, OperandClass.ANY))
        if fn is not None:
            return fn(lhs, rhs)

        operand_class = cls.operand_class(op, lhs, rhs)
        fn = cls.BINOP_TABLE.get((op, operand_class))
        if fn is None:
            raise OperatorEvaluationError(op, kind_of(lhs).value, kind_of(rhs).value)
        if operand_class == OperandClass.TEXT:
            return fn(to_text(lhs), to_text(rhs))
        try:
            result = fn(to_number(lhs), to_number(rhs))
        except (TypeError, ValueError, OverflowError) as exc:
            raise OperatorEvaluationError(
                op, kind_of(lhs).value, kind_of(rhs).value
            ) from exc
        return result if isinstance(result, bool) else normalize_number(result)

    @classmethod
    def eval_unop(cls, op: str, operand: Any) -> Any:
        fn = cls.UNOP_TABLE.get(op)
        if fn is None:
            raise OperatorEvaluationError(op, kind_of(operand).value)
        return fn(operand)
