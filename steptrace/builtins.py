"""Built-in method implementations, keyed by receiver value kind."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable

from .errors import UnsupportedCallError
from .syntax import SourceLocation
from .values import (
    UNDEFINED,
    ValueKind,
    format_number,
    kind_of,
    normalize_number,
    strict_equals,
    to_number,
    to_text,
)

logger = logging.getLogger(__name__)

Method = Callable[[Any, list[Any]], Any]


def _arg(args: list[Any], index: int = 0, default: Any = UNDEFINED) -> Any:
    return args[index] if len(args) > index else default


def _index_arg(args: list[Any], length: int, index: int = 0, default: int = 0) -> int:
    """Resolve a JavaScript relative index argument against ``length``."""
    raw = _arg(args, index, None)
    if raw is None or raw is UNDEFINED:
        return default
    n = to_number(raw)
    if math.isnan(n):
        return 0
    n = int(n)
    return max(length + n, 0) if n < 0 else min(n, length)


# ── sequence methods ─────────────────────────────────────────────


def _seq_push(receiver: list, args: list[Any]) -> Any:
    receiver.extend(args)
    return len(receiver)


def _seq_pop(receiver: list, args: list[Any]) -> Any:
    return receiver.pop() if receiver else UNDEFINED


def _seq_shift(receiver: list, args: list[Any]) -> Any:
    return receiver.pop(0) if receiver else UNDEFINED


def _seq_unshift(receiver: list, args: list[Any]) -> Any:
    receiver[0:0] = args
    return len(receiver)


def _seq_index_of(receiver: list, args: list[Any]) -> Any:
    target = _arg(args)
    return next(
        (i for i, item in enumerate(receiver) if strict_equals(item, target)), -1
    )


def _seq_includes(receiver: list, args: list[Any]) -> Any:
    return _seq_index_of(receiver, args) != -1


def _seq_join(receiver: list, args: list[Any]) -> Any:
    separator = _arg(args)
    separator = "," if separator is UNDEFINED else to_text(separator)
    return separator.join(
        "" if item is None or item is UNDEFINED else to_text(item) for item in receiver
    )


def _seq_concat(receiver: list, args: list[Any]) -> Any:
    extra = _arg(args)
    if extra is UNDEFINED and not args:
        return list(receiver)
    return receiver + (extra if isinstance(extra, list) else [extra])


def _seq_slice(receiver: list, args: list[Any]) -> Any:
    start = _index_arg(args, len(receiver))
    end = _index_arg(args, len(receiver), 1, len(receiver))
    return receiver[start:end]


def _seq_reverse(receiver: list, args: list[Any]) -> Any:
    receiver.reverse()
    return receiver


# ── text methods ─────────────────────────────────────────────────


def _text_char_at(receiver: str, args: list[Any]) -> Any:
    i = int(to_number(_arg(args, 0, 0)))
    return receiver[i] if 0 <= i < len(receiver) else ""


def _text_index_of(receiver: str, args: list[Any]) -> Any:
    return receiver.find(to_text(_arg(args)))


def _text_includes(receiver: str, args: list[Any]) -> Any:
    return to_text(_arg(args)) in receiver


def _text_split(receiver: str, args: list[Any]) -> Any:
    separator = _arg(args)
    if separator is UNDEFINED:
        return [receiver]
    separator = to_text(separator)
    if separator == "":
        return list(receiver)
    return receiver.split(separator)


def _text_concat(receiver: str, args: list[Any]) -> Any:
    return receiver + "".join(to_text(a) for a in args)


def _text_slice(receiver: str, args: list[Any]) -> Any:
    start = _index_arg(args, len(receiver))
    end = _index_arg(args, len(receiver), 1, len(receiver))
    return receiver[start:end]


def _text_repeat(receiver: str, args: list[Any]) -> Any:
    count = to_number(_arg(args, 0, 0))
    if math.isnan(count) or count < 0 or math.isinf(count):
        raise ValueError(f"Invalid repeat count: {format_number(count)}")
    return receiver * int(count)


# ── number / structure methods ───────────────────────────────────


def _num_to_fixed(receiver: int | float, args: list[Any]) -> Any:
    digits = int(to_number(_arg(args, 0, 0)))
    if not 0 <= digits <= 100:
        raise ValueError(f"toFixed() digits out of range: {digits}")
    return f"{receiver:.{digits}f}"


def _num_to_string(receiver: int | float, args: list[Any]) -> Any:
    radix = _arg(args)
    if radix is UNDEFINED or to_number(radix) == 10:
        return format_number(receiver)
    base = int(to_number(radix))
    if not 2 <= base <= 36 or not float(receiver).is_integer():
        raise ValueError(f"Unsupported radix conversion: {base}")
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    n = abs(int(receiver))
    out = ""
    while True:
        n, r = divmod(n, base)
        out = digits[r] + out
        if n == 0:
            break
    return ("-" if receiver < 0 else "") + out


def _struct_has_own_property(receiver: dict, args: list[Any]) -> Any:
    return to_text(_arg(args)) in receiver


# ── global objects ───────────────────────────────────────────────


def _math(fn: Callable[[float], Any]) -> Method:
    def method(receiver: Any, args: list[Any]) -> Any:
        n = to_number(_arg(args))
        if math.isnan(n) or math.isinf(n):
            return n
        return normalize_number(fn(n))

    return method


def _round_half_up(n: float) -> int:
    return math.floor(n + 0.5)


def _sqrt(n: float) -> float:
    return math.nan if n < 0 else math.sqrt(n)


def _sign(n: float) -> int:
    return (n > 0) - (n < 0)


def _console_log(receiver: Any, args: list[Any]) -> Any:
    logger.info("console.log: %s", " ".join(to_text(a) for a in args))
    return UNDEFINED


class Builtins:
    """Tables of built-in method implementations."""

    METHODS: dict[ValueKind, dict[str, Method]] = {
        ValueKind.SEQUENCE: {
            "push": _seq_push,
            "pop": _seq_pop,
            "shift": _seq_shift,
            "unshift": _seq_unshift,
            "indexOf": _seq_index_of,
            "includes": _seq_includes,
            "join": _seq_join,
            "concat": _seq_concat,
            "slice": _seq_slice,
            "reverse": _seq_reverse,
        },
        ValueKind.TEXT: {
            "charAt": _text_char_at,
            "indexOf": _text_index_of,
            "includes": _text_includes,
            "split": _text_split,
            "concat": _text_concat,
            "slice": _text_slice,
            "repeat": _text_repeat,
            "toUpperCase": lambda s, args: s.upper(),
            "toLowerCase": lambda s, args: s.lower(),
            "trim": lambda s, args: s.strip(),
            "startsWith": lambda s, args: s.startswith(to_text(_arg(args))),
            "endsWith": lambda s, args: s.endswith(to_text(_arg(args))),
        },
        ValueKind.NUMBER: {
            "toFixed": _num_to_fixed,
            "toString": _num_to_string,
        },
        ValueKind.STRUCTURE: {
            "hasOwnProperty": _struct_has_own_property,
        },
    }

    GLOBALS: dict[str, dict[str, Method]] = {
        "Math": {
            "floor": _math(math.floor),
            "ceil": _math(math.ceil),
            "round": _math(_round_half_up),
            "abs": _math(abs),
            "sqrt": _math(_sqrt),
            "trunc": _math(math.trunc),
            "sign": _math(_sign),
        },
        "console": {
            "log": _console_log,
        },
    }

    @classmethod
    def is_global(cls, name: str) -> bool:
        return name in cls.GLOBALS

    @classmethod
    def invoke_global(
        cls,
        receiver_name: str,
        method: str,
        args: list[Any],
        location: SourceLocation | None = None,
    ) -> Any:
        fn = cls.GLOBALS.get(receiver_name, {}).get(method)
        if fn is None:
            raise UnsupportedCallError(
                f"Unsupported call: {receiver_name}.{method}", location
            )
        return fn(None, args)

    @classmethod
    def invoke_method(
        cls,
        receiver: Any,
        method: str,
        args: list[Any],
        location: SourceLocation | None = None,
    ) -> Any:
        kind = kind_of(receiver)
        fn = cls.METHODS.get(kind, {}).get(method)
        if fn is None:
            raise UnsupportedCallError(
                f"Unsupported call: {method}() on {kind.value}", location
            )
        try:
            return fn(receiver, args)
        except (TypeError, ValueError) as exc:
            raise UnsupportedCallError(
                f"Call {method}() on {kind.value} failed: {exc}", location
            ) from exc
