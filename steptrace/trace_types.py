"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .environment import Environment, EnvironmentView
from .param_types import ParameterSpec
from .run_types import RunStatus
from .syntax import Node
from .values import UNDEFINED


class NodeKind(str, Enum):
    VARIABLE_DECLARATION = "VariableDeclaration"
    IF_STATEMENT = "IfStatement"
    WHILE_STATEMENT = "WhileStatement"
    FOR_STATEMENT = "ForStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    RETURN_STATEMENT = "ReturnStatement"
    CONTINUE_STATEMENT = "ContinueStatement"


@dataclass(frozen=True)
class TraceEntry:
    """A single control-flow point visited during execution.

    ``step`` is the entry's 1-based position in the trace.  ``branch_outcome``
    is only set for If and While entries.
    """

    step: int
    source_line: int
    node_kind: NodeKind
    branch_outcome: bool | None = None


@dataclass
class ExecutionTrace:
    """Ordered, append-only list of trace entries."""

    entries: list[TraceEntry] = field(default_factory=list)

    def append(
        self, source_line: int, node_kind: NodeKind, branch_outcome: bool | None = None
    ) -> TraceEntry:
        entry = TraceEntry(len(self.entries) + 1, source_line, node_kind, branch_outcome)
        self.entries.append(entry)
        return entry

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> TraceEntry:
        return self.entries[index]

    @property
    def lines(self) -> list[int]:
        return [e.source_line for e in self.entries]

    def to_dict(self) -> list[dict[str, Any]]:
        return [
            {
                "step": e.step,
                "line": e.source_line,
                "kind": e.node_kind.value,
                "outcome": e.branch_outcome,
            }
            for e in self.entries
        ]


@dataclass(frozen=True)
class PresentationModel:
    """Read-only hand-off to the renderer."""

    source_text: str
    execution_trace: ExecutionTrace
    environment: EnvironmentView


@dataclass
class TracedFunction:
    """One annotated function and the state of its interpreter run.

    Owns its Environment and ExecutionTrace exclusively.  After a failed run
    both are left as they were at the failure so replay can stop at the
    last valid step.
    """

    name: str
    node: Node
    params: list[ParameterSpec]
    source_text: str = ""
    environment: Environment = field(default_factory=Environment)
    trace: ExecutionTrace = field(default_factory=ExecutionTrace)
    status: RunStatus = RunStatus.PENDING
    failure: Exception | None = None
    return_value: Any = UNDEFINED

    @property
    def line(self) -> int:
        return self.node.loc.start_line

    def presentation(self) -> PresentationModel:
        return PresentationModel(
            source_text=self.source_text,
            execution_trace=self.trace,
            environment=EnvironmentView(self.environment),
        )
