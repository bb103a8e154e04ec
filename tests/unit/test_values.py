"""Tests for the value model: coercions, formatting and the operator table."""

from __future__ import annotations

import copy
import math

import pytest

from steptrace.errors import OperatorEvaluationError
from steptrace.values import (
    UNDEFINED,
    OperandClass,
    Operators,
    ValueKind,
    format_value,
    is_truthy,
    kind_of,
    loose_equals,
    strict_equals,
    to_number,
    to_text,
)


class TestKinds:
    def test_bool_is_not_a_number(self):
        assert kind_of(True) == ValueKind.BOOLEAN
        assert kind_of(1) == ValueKind.NUMBER

    def test_null_and_undefined_are_distinct(self):
        assert kind_of(None) == ValueKind.NULL
        assert kind_of(UNDEFINED) == ValueKind.UNDEFINED

    def test_containers(self):
        assert kind_of([]) == ValueKind.SEQUENCE
        assert kind_of({}) == ValueKind.STRUCTURE

    def test_undefined_survives_deepcopy(self):
        assert copy.deepcopy([UNDEFINED])[0] is UNDEFINED


class TestFormatting:
    def test_numbers(self):
        assert format_value(16) == "16"
        assert format_value(2.5) == "2.5"
        assert format_value(4.0) == "4"
        assert format_value(math.nan) == "NaN"
        assert format_value(math.inf) == "Infinity"

    def test_text_is_quoted(self):
        assert format_value("8px") == '"8px"'

    def test_sequence(self):
        assert format_value([0, 1, 2]) == "[0, 1, 2]"
        assert format_value([]) == "[]"

    def test_structure(self):
        assert format_value({"x": 1, "y": "a"}) == '{x: 1, y: "a"}'
        assert format_value({}) == "{}"

    def test_nested(self):
        assert format_value({"p": [1, {"q": None}]}) == "{p: [1, {q: null}]}"

    def test_keywords(self):
        assert format_value(True) == "true"
        assert format_value(False) == "false"
        assert format_value(None) == "null"
        assert format_value(UNDEFINED) == "undefined"


class TestCoercions:
    def test_to_number(self):
        assert to_number("42") == 42
        assert to_number("") == 0
        assert to_number(True) == 1
        assert to_number(None) == 0
        assert math.isnan(to_number(UNDEFINED))
        assert math.isnan(to_number("abc"))

    def test_to_text(self):
        assert to_text(8) == "8"
        assert to_text([1, 2]) == "1,2"
        assert to_text({}) == "[object Object]"
        assert to_text(None) == "null"

    def test_truthiness(self):
        assert not is_truthy(0)
        assert not is_truthy("")
        assert not is_truthy(None)
        assert not is_truthy(UNDEFINED)
        assert not is_truthy(math.nan)
        assert is_truthy([])
        assert is_truthy({})
        assert is_truthy("0")


class TestEquality:
    def test_loose(self):
        assert loose_equals(1, "1")
        assert loose_equals(None, UNDEFINED)
        assert loose_equals(0, False)
        assert not loose_equals(None, 0)

    def test_strict(self):
        assert not strict_equals(1, "1")
        assert strict_equals("a", "a")

    def test_containers_compare_by_identity(self):
        a = [1]
        assert strict_equals(a, a)
        assert not strict_equals(a, [1])


class TestOperators:
    def test_numeric_arithmetic(self):
        assert Operators.eval_binop("*", 8, 2) == 16
        assert Operators.eval_binop("/", 7, 2) == 3.5
        assert Operators.eval_binop("/", 8, 2) == 4
        assert Operators.eval_binop("%", -7, 2) == -1
        assert Operators.eval_binop("**", 2, 10) == 1024

    def test_division_by_zero(self):
        assert Operators.eval_binop("/", 1, 0) == math.inf
        assert math.isnan(Operators.eval_binop("/", 0, 0))

    def test_text_fallback_concatenates(self):
        assert Operators.eval_binop("+", 8, "px") == "8px"
        assert Operators.eval_binop("+", "a", [1, 2]) == "a1,2"

    def test_text_comparison(self):
        assert Operators.eval_binop("<", "apple", "banana") is True

    def test_comparisons_return_booleans(self):
        assert Operators.eval_binop("<", 1, 2) is True
        assert Operators.eval_binop(">=", 1, 2) is False

    def test_bitwise(self):
        assert Operators.eval_binop("&", 6, 3) == 2
        assert Operators.eval_binop("<<", 1, 4) == 16
        assert Operators.eval_binop(">>>", -1, 28) == 15

    def test_logical_returns_operand(self):
        assert Operators.eval_binop("||", 0, "x") == "x"
        assert Operators.eval_binop("&&", 0, "x") == 0
        assert Operators.eval_binop("??", None, 5) == 5

    def test_arithmetic_coerces_numeric_text(self):
        assert Operators.eval_binop("-", "10", 3) == 7
        assert Operators.eval_binop("*", "4", "2") == 8
        assert Operators.eval_binop("%", "7", 4) == 3
        assert Operators.eval_binop("|", "5", 2) == 7

    def test_arithmetic_on_non_numeric_text_is_nan(self):
        assert math.isnan(Operators.eval_binop("-", "a", "b"))

    def test_mixed_comparison_is_numeric(self):
        assert Operators.eval_binop(">", "10", 9) is True
        assert Operators.eval_binop("<", 2, "10") is True
        assert Operators.eval_binop("<", "abc", 1) is False

    def test_text_comparison_when_both_are_text(self):
        assert Operators.eval_binop(">", "10", "9") is False

    def test_plus_with_text_still_concatenates(self):
        assert Operators.eval_binop("+", "10", 3) == "103"

    def test_unknown_operator_fails(self):
        with pytest.raises(OperatorEvaluationError):
            Operators.eval_binop("instanceof", 1, 2)

    def test_operand_class(self):
        assert Operators.operand_class("+", 1, True) == OperandClass.NUMERIC
        assert Operators.operand_class("+", 1, "1") == OperandClass.TEXT
        assert Operators.operand_class("-", "1", "1") == OperandClass.NUMERIC
        assert Operators.operand_class("<", "a", "b") == OperandClass.TEXT
        assert Operators.operand_class("<", "a", 1) == OperandClass.NUMERIC

    def test_large_power_overflows_to_infinity(self):
        assert Operators.eval_binop("**", 2, 100_000_000) == math.inf
        assert Operators.eval_binop("**", -2, 100_000_001) == -math.inf

    def test_power_stays_exact_for_safe_integers(self):
        assert Operators.eval_binop("**", 3, 33) == 3**33
        assert Operators.eval_binop("**", 2, -1) == 0.5
        assert Operators.eval_binop("**", 1, 10**12) == 1

    def test_unary(self):
        assert Operators.eval_unop("-", 3) == -3
        assert Operators.eval_unop("!", 0) is True
        assert Operators.eval_unop("typeof", "s") == "string"
        assert Operators.eval_unop("typeof", None) == "object"
        assert Operators.eval_unop("~", 0) == -1
