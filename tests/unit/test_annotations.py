"""Tests for the Annotation Reader."""

from __future__ import annotations

import logging

import pytest

from steptrace.annotations import (
    parse_candidates,
    read_annotation,
    read_annotations,
    split_object_path,
)
from steptrace.errors import AnnotationError
from steptrace.param_types import ParamKind
from steptrace.syntax import Comment, CommentKind, SourceLocation
from steptrace.values import UNDEFINED


def _block(*lines: str, start_line: int = 1) -> Comment:
    value = "*\n" + "\n".join(f" * {line}" for line in lines) + "\n "
    end_line = start_line + len(lines) + 1
    return Comment(
        kind=CommentKind.BLOCK,
        value=value,
        loc=SourceLocation(
            start_line=start_line, start_col=0, end_line=end_line, end_col=3
        ),
    )


class TestParseCandidates:
    def test_numbers(self):
        assert parse_candidates("8, 0, 10") == [8, 0, 10]

    def test_negative_and_mixed(self):
        assert parse_candidates("-1, 'a,b', true") == [-1, "a,b", True]

    def test_nested_literals(self):
        assert parse_candidates("[1, 2], {a: 1}") == [[1, 2], {"a": 1}]

    def test_undefined_literal(self):
        assert parse_candidates("undefined") == [UNDEFINED]

    def test_identifier_is_rejected(self):
        with pytest.raises(AnnotationError, match="literals"):
            parse_candidates("someVariable")

    def test_syntax_error_is_rejected(self):
        with pytest.raises(AnnotationError):
            parse_candidates("1, (")


class TestSplitObjectPath:
    def test_dotted(self):
        assert split_object_path("cfg.size.unit") == ["cfg", "size", "unit"]

    def test_bracketed(self):
        assert split_object_path("cfg[\"size\"]['unit']") == ["cfg", "size", "unit"]


class TestReadAnnotation:
    def test_number_with_range(self):
        annotation = read_annotation(_block("@param {Number} size = 8, 0, 10"))
        spec = annotation.spec_for("size")
        assert spec.kind == ParamKind.NUMBER
        assert spec.initial_value == 8
        assert (spec.min, spec.max) == (0, 10)
        assert spec.alternatives == []

    def test_number_extra_candidates_are_alternatives(self):
        spec = read_annotation(_block("@param {Number} n = 1, 0, 5, 3")).params[0]
        assert spec.alternatives == [3]

    def test_inverted_range_fails(self):
        with pytest.raises(ValueError):
            read_annotation(_block("@param {Number} n = 1, 10, 0"))

    def test_string_and_boolean(self):
        annotation = read_annotation(
            _block('@param {String} unit = "px", "em"', "@param {Boolean} flag = false")
        )
        unit = annotation.spec_for("unit")
        assert unit.initial_value == "px"
        assert unit.alternatives == ["em"]
        assert annotation.spec_for("flag").initial_value is False

    def test_array(self):
        spec = read_annotation(_block("@param {Array} arr = [3, 1, 2]")).params[0]
        assert spec.kind == ParamKind.ARRAY
        assert spec.initial_value == [3, 1, 2]

    def test_array_requires_sequence(self):
        with pytest.raises(AnnotationError, match="array"):
            read_annotation(_block("@param {Array} arr = 5"))

    def test_object_paths_are_merged(self):
        annotation = read_annotation(
            _block(
                "@param {Object} cfg.size = 8",
                '@param {Object} cfg["style"].unit = "px"',
            )
        )
        assert len(annotation.params) == 1
        assert annotation.params[0].initial_value == {
            "size": 8,
            "style": {"unit": "px"},
        }

    def test_whole_object(self):
        spec = read_annotation(_block("@param {Object} cfg = {a: 1}")).params[0]
        assert spec.initial_value == {"a": 1}

    def test_specs_keep_declaration_order(self):
        annotation = read_annotation(
            _block("@param {Number} b = 2", "@param {Number} a = 1")
        )
        assert [p.name for p in annotation.params] == ["b", "a"]

    def test_unknown_kind_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="steptrace.annotations"):
            annotation = read_annotation(
                _block("@param {Date} when = 1", "@param {Number} n = 2")
            )
        assert [p.name for p in annotation.params] == ["n"]
        assert "unknown @param kind" in caplog.text

    def test_param_without_value_is_skipped(self):
        annotation = read_annotation(_block("@param {Number} n"))
        assert annotation is not None
        assert annotation.params == []

    def test_comment_without_param_tag(self):
        assert read_annotation(_block("Just documentation.")) is None

    def test_line_comment_is_ignored(self):
        comment = Comment(kind=CommentKind.LINE, value=" @param {Number} n = 1")
        assert read_annotation(comment) is None

    def test_location_is_the_comment_span(self):
        comment = _block("@param {Number} n = 1", start_line=4)
        assert read_annotation(comment).location.end_line == 6


class TestReadAnnotations:
    def test_filters_comments(self):
        comments = [
            _block("@param {Number} n = 1"),
            Comment(kind=CommentKind.LINE, value=" note"),
            _block("plain"),
        ]
        assert len(read_annotations(comments)) == 1
