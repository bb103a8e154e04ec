"""Statement Walker: replays a function body and records the execution trace.

The walker is the only writer of the ExecutionTrace.  The logical step used
for a binding mutation is the trace length when the mutation happens, except
for loop and branch guards, which look one entry ahead.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .environment import Environment
from .errors import StepLimitExceededError, UnsupportedStatementError
from .evaluator import Evaluator
from .run_types import RunConfig
from .syntax import (
    BlockStatement,
    ContinueStatement,
    ExpressionStatement,
    ForStatement,
    Identifier,
    IfStatement,
    Node,
    ReturnStatement,
    VariableDeclaration,
    WhileStatement,
)
from .trace_types import ExecutionTrace, NodeKind, TraceEntry
from .values import UNDEFINED, is_truthy

logger = logging.getLogger(__name__)


class StatementWalker:
    """Walks statements of one function body against one Environment."""

    def __init__(
        self,
        env: Environment,
        trace: ExecutionTrace,
        evaluator: Evaluator | None = None,
        config: RunConfig = RunConfig(),
    ):
        self.env = env
        self.trace = trace
        self.evaluator = evaluator or Evaluator(env)
        self.config = config
        self.return_value: Any = UNDEFINED
        self._STMT_DISPATCH: dict[str, Callable[[Any], None]] = {
            "VariableDeclaration": self._walk_var_declaration,
            "IfStatement": self._walk_if,
            "WhileStatement": self._walk_while,
            "ForStatement": self._walk_for,
            "ExpressionStatement": self._walk_expression_statement,
            "ReturnStatement": self._walk_return,
            "ContinueStatement": self._walk_continue,
            "BlockStatement": self.walk_block,
        }

    @property
    def step(self) -> int:
        return len(self.trace)

    # ── dispatch ─────────────────────────────────────────────────

    def walk(self, node: Node) -> None:
        handler = self._STMT_DISPATCH.get(node.type)
        if handler is None:
            raise UnsupportedStatementError(node.type, node.loc)
        handler(node)

    def walk_block(self, block: BlockStatement) -> None:
        for statement in block.body:
            self.walk(statement)

    def walk_body(self, node: Node) -> None:
        """Walk a block's statements, or a bare statement used as a body."""
        if isinstance(node, BlockStatement):
            self.walk_block(node)
        else:
            self.walk(node)

    def _record(
        self, node: Node, kind: NodeKind, branch_outcome: bool | None = None
    ) -> TraceEntry:
        limit = self.config.max_steps
        if limit is not None and len(self.trace) >= limit:
            raise StepLimitExceededError(limit, node.loc)
        entry = self.trace.append(node.loc.start_line, kind, branch_outcome)
        logger.debug(
            "step %d: line %d %s%s",
            entry.step,
            entry.source_line,
            kind.value,
            "" if branch_outcome is None else f" -> {branch_outcome}",
        )
        return entry

    def _test(self, test: Node | None, step: int) -> bool:
        if test is None:
            return True
        return is_truthy(self.evaluator.evaluate(test, step))

    # ── statements ───────────────────────────────────────────────

    def _walk_var_declaration(self, node: VariableDeclaration) -> None:
        self._record(node, NodeKind.VARIABLE_DECLARATION)
        for declarator in node.declarations:
            self.evaluator.evaluate(declarator, self.step)

    def _walk_if(self, node: IfStatement) -> None:
        outcome = self._test(node.test, self.step + 1)
        self._record(node, NodeKind.IF_STATEMENT, outcome)
        if outcome:
            self.walk_body(node.consequent)
        elif node.alternate is not None:
            self.walk_body(node.alternate)

    def _walk_while(self, node: WhileStatement) -> None:
        while True:
            outcome = self._test(node.test, self.step + 1)
            self._record(node, NodeKind.WHILE_STATEMENT, outcome)
            if not outcome:
                return
            self.walk_body(node.body)

    def _walk_for(self, node: ForStatement) -> None:
        self._record(node, NodeKind.FOR_STATEMENT)
        if isinstance(node.init, VariableDeclaration):
            for declarator in node.init.declarations:
                self.evaluator.evaluate(declarator, self.step)
        elif node.init is not None:
            self.evaluator.evaluate(node.init, self.step)

        while self._test(node.test, self.step):
            self.walk_body(node.body)
            if node.update is not None:
                self.evaluator.evaluate(node.update, self.step + 1)
            self._record(node, NodeKind.FOR_STATEMENT)

    def _walk_expression_statement(self, node: ExpressionStatement) -> None:
        self._record(node, NodeKind.EXPRESSION_STATEMENT)
        self.evaluator.evaluate(node.expression, self.step)

    def _walk_return(self, node: ReturnStatement) -> None:
        self._record(node, NodeKind.RETURN_STATEMENT)
        if node.argument is None:
            self.return_value = UNDEFINED
            return
        value = self.evaluator.evaluate(node.argument, self.step)
        if isinstance(node.argument, Identifier):
            self.env.set(node.argument.name, value, self.step)
        self.return_value = value

    def _walk_continue(self, node: ContinueStatement) -> None:
        self._record(node, NodeKind.CONTINUE_STATEMENT)
