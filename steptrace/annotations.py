"""Annotation Reader: turns ``@param`` doc comments into parameter specs.

A block comment line of the form::

    @param {Number} size = 8, 0, 10

declares parameter ``size`` of kind ``Number`` with candidate values
``8, 0, 10``.  Candidates are parsed as a JavaScript array literal, so any
literal the interpreter understands (strings with commas, nested arrays,
object literals, negative numbers) may be used.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from . import constants
from .environment import Environment
from .errors import AnnotationError, InterpreterError, SourceParseError
from .evaluator import Evaluator
from .frontends import get_frontend
from .param_types import Annotation, ParamKind, ParameterSpec
from .parser import Parser, TreeSitterParserFactory
from .syntax import ArrayExpression, Comment, CommentKind, ExpressionStatement
from .values import ValueKind, is_truthy, kind_of, to_number, to_text

logger = logging.getLogger(__name__)

_PARAM_LINE = re.compile(
    re.escape(constants.PARAM_TAG)
    + r"\s*\{\s*(?P<kind>[^}]*?)\s*\}\s*(?P<name>[^=]*?)\s*(?:=\s*(?P<values>.*?))?\s*$"
)

_OBJECT_PATH_SEPARATOR = re.compile(constants.OBJECT_PATH_SEPARATOR_PATTERN)


def parse_candidates(text: str, parser: Parser | None = None) -> list[Any]:
    """Parse a comma-separated list of JavaScript literals."""
    parser = parser or Parser(TreeSitterParserFactory())
    source = f"[{text}];"
    try:
        tree = parser.parse(source, constants.DEFAULT_LANGUAGE)
    except SourceParseError as exc:
        raise AnnotationError(f"Cannot parse parameter values {text!r}: {exc}") from exc
    program = get_frontend(constants.DEFAULT_LANGUAGE).convert(
        tree, source.encode("utf-8")
    )
    statement = program.body[0] if len(program.body) == 1 else None
    if not (
        isinstance(statement, ExpressionStatement)
        and isinstance(statement.expression, ArrayExpression)
    ):
        raise AnnotationError(f"Cannot parse parameter values {text!r}")
    try:
        return Evaluator(Environment()).evaluate(
            statement.expression, constants.PARAMETER_STEP
        )
    except InterpreterError as exc:
        raise AnnotationError(
            f"Parameter values must be literals, got {text!r}: {exc}"
        ) from exc


def split_object_path(name: str) -> list[str]:
    """``cfg["size"].unit`` → ``["cfg", "size", "unit"]``."""
    return [part for part in _OBJECT_PATH_SEPARATOR.split(name) if part]


def _set_nested(target: dict, path: list[str], value: Any) -> None:
    for key in path[:-1]:
        child = target.get(key)
        if not isinstance(child, dict):
            child = target[key] = {}
        target = child
    target[path[-1]] = value


def _number(value: Any, name: str) -> int | float:
    if kind_of(value) not in (ValueKind.NUMBER, ValueKind.TEXT, ValueKind.BOOLEAN):
        raise AnnotationError(
            f"Parameter {name}: expected a number, got {to_text(value)!r}"
        )
    return to_number(value)


class _AnnotationBuilder:
    """Accumulates specs for one comment, merging object path fragments."""

    def __init__(self):
        self.params: list[ParameterSpec] = []

    def _existing(self, name: str) -> ParameterSpec | None:
        return next((p for p in self.params if p.name == name), None)

    def add(self, kind: ParamKind, name: str, candidates: list[Any]) -> None:
        if kind == ParamKind.OBJECT:
            self._add_object(name, candidates)
            return
        if not candidates:
            raise AnnotationError(f"Parameter {name}: no values given")
        first, rest = candidates[0], candidates[1:]
        if kind == ParamKind.NUMBER:
            bounds = [_number(v, name) for v in rest[:2]]
            spec = ParameterSpec(
                name=name,
                kind=kind,
                initial_value=_number(first, name),
                min=bounds[0] if len(bounds) > 0 else None,
                max=bounds[1] if len(bounds) > 1 else None,
                alternatives=rest[2:],
            )
        elif kind == ParamKind.BOOLEAN:
            spec = ParameterSpec(
                name=name, kind=kind, initial_value=is_truthy(first), alternatives=rest
            )
        elif kind == ParamKind.STRING:
            spec = ParameterSpec(
                name=name, kind=kind, initial_value=to_text(first), alternatives=rest
            )
        else:
            if kind_of(first) != ValueKind.SEQUENCE:
                raise AnnotationError(
                    f"Parameter {name}: expected an array, got {to_text(first)!r}"
                )
            spec = ParameterSpec(
                name=name, kind=kind, initial_value=first, alternatives=rest
            )
        self.params.append(spec)

    def _add_object(self, name: str, candidates: list[Any]) -> None:
        path = split_object_path(name)
        if not path:
            raise AnnotationError(f"Invalid object parameter name: {name!r}")
        if not candidates:
            raise AnnotationError(f"Parameter {name}: no values given")
        base, keys = path[0], path[1:]
        value, rest = candidates[0], candidates[1:]

        spec = self._existing(base)
        if spec is None:
            spec = ParameterSpec(name=base, kind=ParamKind.OBJECT, initial_value={})
            self.params.append(spec)
        if not keys:
            if kind_of(value) != ValueKind.STRUCTURE:
                raise AnnotationError(
                    f"Parameter {name}: expected an object, got {to_text(value)!r}"
                )
            spec.initial_value.update(value)
        else:
            _set_nested(spec.initial_value, keys, value)
        spec.alternatives.extend(rest)


def read_annotation(comment: Comment, parser: Parser | None = None) -> Annotation | None:
    """Parameter specs of one comment, or ``None`` when it declares none."""
    if comment.kind != CommentKind.BLOCK:
        return None

    builder = _AnnotationBuilder()
    found = False
    for line_offset, line in enumerate(re.split(r"\r?\n", comment.value)):
        match = _PARAM_LINE.search(line)
        if match is None:
            continue
        found = True
        line_no = comment.loc.start_line + line_offset
        kind_text, name, values = match["kind"], match["name"], match["values"]
        if not values:
            logger.warning("Line %d: @param %s has no value, skipped", line_no, name)
            continue
        try:
            kind = ParamKind(kind_text)
        except ValueError:
            logger.warning(
                "Line %d: unknown @param kind {%s} for %s, skipped",
                line_no,
                kind_text,
                name,
            )
            continue
        if not name:
            raise AnnotationError(f"Line {line_no}: @param without a name")
        builder.add(kind, name, parse_candidates(values, parser))

    if not found:
        return None
    return Annotation(location=comment.loc, params=builder.params)


def read_annotations(
    comments: list[Comment], parser: Parser | None = None
) -> list[Annotation]:
    parser = parser or Parser(TreeSitterParserFactory())
    annotations = []
    for comment in comments:
        annotation = read_annotation(comment, parser)
        if annotation is not None:
            annotations.append(annotation)
    logger.info("Read %d annotations from %d comments", len(annotations), len(comments))
    return annotations
