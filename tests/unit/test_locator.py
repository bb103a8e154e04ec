"""Tests for the Entry-Point Locator."""

from __future__ import annotations

from steptrace.annotations import read_annotations
from steptrace.api import parse_source
from steptrace.locator import find_annotation, locate_functions, normalize_function
from steptrace.param_types import Annotation
from steptrace.syntax import (
    ArrowFunctionExpression,
    BlockStatement,
    FunctionDeclaration,
    Identifier,
    ReturnStatement,
    SourceLocation,
)


def _locate(source: str):
    program = parse_source(source)
    return locate_functions(program, read_annotations(program.comments), source)


def _annotation(start_line: int, end_line: int) -> Annotation:
    return Annotation(
        location=SourceLocation(
            start_line=start_line, start_col=0, end_line=end_line, end_col=3
        )
    )


class TestFindAnnotation:
    def test_comment_must_end_on_previous_line(self):
        annotations = [_annotation(1, 3)]
        assert find_annotation(annotations, 4) is annotations[0]
        assert find_annotation(annotations, 5) is None

    def test_last_match_wins(self):
        first, second = _annotation(1, 3), _annotation(3, 3)
        assert find_annotation([first, second], 4) is second


class TestNormalizeFunction:
    def test_expression_arrow_gets_return_block(self):
        arrow = ArrowFunctionExpression(
            params=[Identifier(name="x")], body=Identifier(name="x"), expression=True
        )
        fn = normalize_function(arrow)
        assert isinstance(fn, FunctionDeclaration)
        assert isinstance(fn.body, BlockStatement)
        assert isinstance(fn.body.body[0], ReturnStatement)
        assert fn.body.body[0].argument.name == "x"


class TestLocateFunctions:
    def test_declaration(self):
        source = (
            "/**\n"
            " * @param {Number} size = 8\n"
            " */\n"
            "function double(size) {\n"
            "  return size * 2;\n"
            "}\n"
        )
        [traced] = _locate(source)
        assert traced.name == "double"
        assert traced.line == 4
        assert traced.params[0].initial_value == 8
        assert traced.source_text == source

    def test_unannotated_function_is_skipped(self):
        source = (
            "function plain(a) {\n  return a;\n}\n"
            "/** @param {Number} n = 1 */\n"
            "function counted(n) {\n  return n;\n}\n"
        )
        assert [t.name for t in _locate(source)] == ["counted"]

    def test_gap_between_comment_and_function(self):
        source = "/** @param {Number} n = 1 */\n\nfunction f(n) {}\n"
        assert _locate(source) == []

    def test_variable_arrow_is_normalized(self):
        source = "/** @param {Number} x = 3 */\nconst triple = x => x * 3;\n"
        [traced] = _locate(source)
        assert traced.name == "triple"
        assert isinstance(traced.node, FunctionDeclaration)
        assert isinstance(traced.node.body.body[0], ReturnStatement)

    def test_member_assignment(self):
        source = (
            "/** @param {Number} n = 1 */\n"
            "this.bump = function (n) {\n"
            "  return n + 1;\n"
            "};\n"
        )
        [traced] = _locate(source)
        assert traced.name == "this.bump"

    def test_source_order(self):
        source = (
            "/** @param {Number} a = 1 */\n"
            "function first(a) {}\n"
            "/** @param {Number} b = 2 */\n"
            "function second(b) {}\n"
        )
        assert [t.name for t in _locate(source)] == ["first", "second"]

    def test_each_instance_gets_its_own_specs(self):
        source = "/** @param {Array} arr = [] */\nfunction f(arr) {}\n"
        program = parse_source(source)
        annotations = read_annotations(program.comments)
        [a] = locate_functions(program, annotations, source)
        [b] = locate_functions(program, annotations, source)
        a.params[0].initial_value.append(1)
        assert b.params[0].initial_value == []
        assert annotations[0].params[0].initial_value == []

    def test_nested_annotated_function_inside_match_is_not_located(self):
        source = (
            "/** @param {Number} n = 1 */\n"
            "function outer(n) {\n"
            "  /** @param {Number} m = 2 */\n"
            "  function inner(m) {}\n"
            "}\n"
        )
        assert [t.name for t in _locate(source)] == ["outer"]
