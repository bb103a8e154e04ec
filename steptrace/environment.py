"""Scoped variable store with time-indexed history.

Every binding keeps the full sequence of formatted values it held, each
tagged with the logical step of the write.  History is append-only and
non-decreasing in step, so ``get_at_step`` is a binary search.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Iterator

from .errors import UndefinedVariableError
from .param_types import ParameterSpec
from .values import format_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    step: int
    value: str


@dataclass
class Binding:
    """Current value of a variable plus every formatted value it has held."""

    value: Any
    history: list[HistoryEntry] = field(default_factory=list)
    spec: ParameterSpec | None = None

    @property
    def is_parameter(self) -> bool:
        return self.spec is not None

    def record(self, value: Any, step: int) -> None:
        if self.history and step < self.history[-1].step:
            logger.warning(
                "Write of %s at step %d precedes last recorded step %d; kept at %d",
                format_value(value),
                step,
                self.history[-1].step,
                self.history[-1].step,
            )
            step = self.history[-1].step
        self.value = value
        self.history.append(HistoryEntry(step, format_value(value)))

    def value_at(self, step: int) -> str | None:
        idx = bisect_right(self.history, step, key=lambda entry: entry.step)
        return self.history[idx - 1].value if idx else None


class Environment:
    """One lexical scope; scopes form a chain through ``parent``."""

    def __init__(self, parent: Environment | None = None):
        self.parent = parent
        self.bindings: dict[str, Binding] = {}

    format = staticmethod(format_value)

    def extend(self) -> Environment:
        return Environment(parent=self)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def lookup(self, name: str) -> Binding | None:
        scope: Environment | None = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def is_bound(self, name: str) -> bool:
        return self.lookup(name) is not None

    def define(
        self, name: str, value: Any, step: int, spec: ParameterSpec | None = None
    ) -> Binding:
        existing = self.bindings.get(name)
        if existing is not None:
            existing.record(value, step)
            logger.debug("redefine %s = %s at step %d", name, self.format(value), step)
            return existing
        binding = Binding(value=value, spec=spec)
        binding.record(value, step)
        self.bindings[name] = binding
        logger.debug("define %s = %s at step %d", name, self.format(value), step)
        return binding

    def get(self, name: str) -> Any:
        binding = self.lookup(name)
        if binding is None:
            raise UndefinedVariableError(name)
        return binding.value

    def get_at_step(self, name: str, step: int) -> str | None:
        binding = self.lookup(name)
        if binding is None:
            raise UndefinedVariableError(name)
        return binding.value_at(step)

    def set(self, name: str, value: Any, step: int) -> Binding:
        binding = self.lookup(name)
        if binding is None:
            if not self.is_root:
                raise UndefinedVariableError(name)
            return self.define(name, value, step)
        binding.record(value, step)
        logger.debug("set %s = %s at step %d", name, self.format(value), step)
        return binding

    def names(self) -> list[str]:
        """Every visible name, innermost scope first, without duplicates."""
        seen: dict[str, None] = {}
        scope: Environment | None = self
        while scope is not None:
            for name in scope.bindings:
                seen.setdefault(name, None)
            scope = scope.parent
        return list(seen)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_bound(name)

    def snapshot(self, step: int) -> dict[str, str]:
        """Formatted value of every variable already defined at ``step``."""
        result = {}
        for name in self.names():
            value = self.get_at_step(name, step)
            if value is not None:
                result[name] = value
        return result

    def changes_at(self, step: int) -> dict[str, str]:
        """Variables written at exactly ``step``, with their last value there."""
        result = {}
        for name in self.names():
            binding = self.lookup(name)
            written = [h.value for h in binding.history if h.step == step]
            if written:
                result[name] = written[-1]
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            name: {
                "parameter": self.lookup(name).is_parameter,
                "history": [
                    {"step": h.step, "value": h.value}
                    for h in self.lookup(name).history
                ],
            }
            for name in self.names()
        }


class EnvironmentView:
    """Read-only facade handed to presentation."""

    def __init__(self, environment: Environment):
        self._environment = environment

    def get(self, name: str) -> Any:
        return self._environment.get(name)

    def get_at_step(self, name: str, step: int) -> str | None:
        return self._environment.get_at_step(name, step)

    def format(self, value: Any) -> str:
        return format_value(value)

    def is_parameter(self, name: str) -> bool:
        binding = self._environment.lookup(name)
        return binding is not None and binding.is_parameter

    def history(self, name: str) -> list[HistoryEntry]:
        binding = self._environment.lookup(name)
        if binding is None:
            raise UndefinedVariableError(name)
        return list(binding.history)

    @property
    def parameter_names(self) -> list[str]:
        return [n for n in self._environment.names() if self.is_parameter(n)]

    @property
    def variable_names(self) -> list[str]:
        return [n for n in self._environment.names() if not self.is_parameter(n)]

    def snapshot(self, step: int) -> dict[str, str]:
        return self._environment.snapshot(step)

    def changes_at(self, step: int) -> dict[str, str]:
        return self._environment.changes_at(step)

    def to_dict(self) -> dict[str, Any]:
        return self._environment.to_dict()
