"""Tests for StatementWalker: trace entries and step accounting."""

from __future__ import annotations

import pytest
from tree_sitter_language_pack import get_parser

from steptrace.environment import Environment
from steptrace.errors import StepLimitExceededError, UnsupportedStatementError
from steptrace.frontends.javascript import JavaScriptFrontend
from steptrace.run_types import RunConfig
from steptrace.syntax import FunctionDeclaration
from steptrace.trace_types import ExecutionTrace, NodeKind
from steptrace.walker import StatementWalker


def _body(source: str):
    """Wrap statements in a function (line 1) and return its body block."""
    wrapped = "function f() {\n" + source + "\n}"
    parser = get_parser("javascript")
    tree = parser.parse(wrapped.encode("utf-8"))
    program = JavaScriptFrontend().convert(tree, wrapped.encode("utf-8"))
    fn = program.body[0]
    assert isinstance(fn, FunctionDeclaration)
    return fn.body


def _walk(source: str, config: RunConfig = RunConfig(), **bindings):
    env = Environment()
    env.define("this", {}, 0)
    for name, value in bindings.items():
        env.define(name, value, 0)
    trace = ExecutionTrace()
    walker = StatementWalker(env, trace, config=config)
    walker.walk_block(_body(source))
    return env, trace, walker


def _kinds(trace: ExecutionTrace) -> list[NodeKind]:
    return [e.node_kind for e in trace]


class TestSimpleStatements:
    def test_declaration_defined_at_trace_length(self):
        env, trace, _ = _walk("let a = 1;\nlet b = a + 1;")
        assert trace.lines == [2, 3]
        assert env.lookup("a").history[0].step == 1
        assert env.lookup("b").history[0].step == 2

    def test_entries_are_numbered_from_one(self):
        _, trace, _ = _walk("x = 1;\nx = 2;", x=0)
        assert [e.step for e in trace] == [1, 2]

    def test_expression_statement(self):
        env, trace, _ = _walk("x = x + 1;", x=1)
        assert _kinds(trace) == [NodeKind.EXPRESSION_STATEMENT]
        assert env.get_at_step("x", 1) == "2"

    def test_continue_only_records(self):
        _, trace, _ = _walk("continue;")
        assert _kinds(trace) == [NodeKind.CONTINUE_STATEMENT]

    def test_unsupported_statement(self):
        with pytest.raises(UnsupportedStatementError, match="do_statement"):
            _walk("do { x++; } while (x < 3);", x=0)

    def test_nested_block(self):
        _, trace, _ = _walk("{\n x = 1;\n}", x=0)
        assert trace.lines == [3]


class TestIf:
    def test_true_branch(self):
        env, trace, _ = _walk("if (x > 0) {\n  y = 1;\n} else {\n  y = 2;\n}", x=1, y=0)
        assert trace[0].branch_outcome is True
        assert trace.lines == [2, 3]
        assert env.get("y") == 1

    def test_false_branch_without_alternate(self):
        _, trace, _ = _walk("if (x > 0) {\n  x = 5;\n}", x=0)
        assert len(trace) == 1
        assert trace[0].branch_outcome is False

    def test_else_if_chain(self):
        env, trace, _ = _walk(
            "if (x > 5) {\n  y = 1;\n} else if (x > 0) {\n  y = 2;\n}", x=3, y=0
        )
        assert [e.branch_outcome for e in trace if e.node_kind == NodeKind.IF_STATEMENT] == [
            False,
            True,
        ]
        assert env.get("y") == 2

    def test_bare_statement_branch(self):
        env, _, _ = _walk("if (x) y = 1;\nelse y = 2;", x=0, y=0)
        assert env.get("y") == 2

    def test_truthiness_not_strict_true(self):
        env, trace, _ = _walk('if (s) {\n  y = 1;\n}', s="text", y=0)
        assert trace[0].branch_outcome is True

    def test_guard_mutation_uses_lookahead_step(self):
        env, _, _ = _walk("if (i++ < 1) {\n}", i=0)
        assert env.lookup("i").history[-1].step == 1


class TestWhile:
    def test_false_exit_entry(self):
        env, trace, _ = _walk("while (i < 2) {\n  i++;\n}", i=0)
        assert [e.branch_outcome for e in trace if e.node_kind == NodeKind.WHILE_STATEMENT] == [
            True,
            True,
            False,
        ]
        assert trace.lines == [2, 3, 2, 3, 2]
        assert env.get("i") == 2

    def test_guard_step_is_one_ahead(self):
        env, trace, _ = _walk("while (i++ < 1) {\n}", i=0)
        steps = [h.step for h in env.lookup("i").history]
        assert steps == [0, 1, 2]
        assert len(trace) == 2

    def test_never_entered(self):
        _, trace, _ = _walk("while (false) {\n  x = 1;\n}")
        assert len(trace) == 1
        assert trace[0].branch_outcome is False


class TestFor:
    def test_entries_per_iteration(self):
        env, trace, _ = _walk("for (let i = 0; i < 3; i++) {\n  arr.push(i);\n}", arr=[])
        assert trace.lines.count(2) == 4
        assert trace.lines.count(3) == 3
        assert env.get_at_step("arr", len(trace)) == "[0, 1, 2]"

    def test_no_branch_outcome_on_for_entries(self):
        _, trace, _ = _walk("for (let i = 0; i < 1; i++) {\n}")
        assert all(e.branch_outcome is None for e in trace)

    def test_initializer_bound_at_initializer_step(self):
        env, _, _ = _walk("for (let i = 0; i < 1; i++) {\n}")
        assert env.lookup("i").history[0].step == 1

    def test_update_uses_lookahead_step(self):
        env, trace, _ = _walk("for (let i = 0; i < 1; i++) {\n  x = i;\n}", x=0)
        # entries: init(1), body(2), iteration(3)
        assert len(trace) == 3
        assert [h.step for h in env.lookup("i").history] == [1, 3]

    def test_expression_initializer(self):
        env, _, _ = _walk("for (i = 0; i < 2; i++) {\n}", i=5)
        assert env.get("i") == 2

    def test_zero_iterations(self):
        _, trace, _ = _walk("for (let i = 0; i < 0; i++) {\n  x = 1;\n}")
        assert len(trace) == 1


class TestReturn:
    def test_identifier_is_pinned_at_return_step(self):
        env, trace, walker = _walk("let result = 2;\nreturn result;")
        assert [h.step for h in env.lookup("result").history] == [1, 2]
        assert walker.return_value == 2

    def test_member_return_is_not_pinned(self):
        env, _, walker = _walk("this.x = 1;\nreturn this.x;")
        assert [h.step for h in env.lookup("this").history] == [0, 1]
        assert walker.return_value == 1

    def test_return_does_not_stop_walk(self):
        _, trace, _ = _walk("return 1;\nx = 2;", x=0)
        assert _kinds(trace) == [NodeKind.RETURN_STATEMENT, NodeKind.EXPRESSION_STATEMENT]


class TestStepLimit:
    def test_infinite_loop_is_cut(self):
        with pytest.raises(StepLimitExceededError):
            _walk("while (true) {\n}", config=RunConfig(max_steps=50))

    def test_partial_trace_is_kept(self):
        env = Environment()
        trace = ExecutionTrace()
        walker = StatementWalker(env, trace, config=RunConfig(max_steps=5))
        with pytest.raises(StepLimitExceededError):
            walker.walk_block(_body("while (true) {\n}"))
        assert len(trace) == 5
