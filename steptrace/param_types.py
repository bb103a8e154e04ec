"""Parameter specification types (pure data, no business logic)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from .syntax import SourceLocation


class ParamKind(str, Enum):
    BOOLEAN = "Boolean"
    NUMBER = "Number"
    STRING = "String"
    ARRAY = "Array"
    OBJECT = "Object"


class ParameterSpec(BaseModel):
    """Declared parameter: kind, active initial value and optional range.

    Only ``initial_value`` drives execution.  For ``Number`` parameters the
    second and third annotated candidates become ``min`` and ``max``; for
    every other kind extra candidates are kept in ``alternatives``.
    """

    name: str
    kind: ParamKind
    initial_value: Any = None
    min: float | None = None
    max: float | None = None
    alternatives: list[Any] = []

    @model_validator(mode="after")
    def _check_range(self) -> ParameterSpec:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(
                f"Parameter {self.name}: min {self.min} is greater than max {self.max}"
            )
        return self


class Annotation(BaseModel):
    """Parameter specs read from one doc comment."""

    location: SourceLocation
    params: list[ParameterSpec] = []

    def spec_for(self, name: str) -> ParameterSpec | None:
        return next((p for p in self.params if p.name == name), None)
