"""Parameter Binder: seeds the root scope with annotated parameter values."""

from __future__ import annotations

import copy
import logging

from . import constants
from .environment import Environment
from .errors import ParameterBindingError
from .param_types import ParameterSpec
from .syntax import Identifier, Node

logger = logging.getLogger(__name__)


def declared_names(params: list[Node]) -> list[str]:
    """Names of plain identifier parameters; any other pattern is rejected."""
    names = []
    for param in params:
        if not isinstance(param, Identifier):
            raise ParameterBindingError(
                f"Unsupported parameter pattern: {param.type}", param.loc
            )
        names.append(param.name)
    return names


def bind_parameters(
    env: Environment,
    declared: list[Node],
    specs: list[ParameterSpec],
    step: int = constants.PARAMETER_STEP,
) -> None:
    """Define one binding per spec, in spec order, stamped at ``step``.

    Every declared parameter must have exactly one spec.  Specs for names
    the function does not declare are still bound so the body can read
    them.
    """
    names = declared_names(declared)

    seen: set[str] = set()
    for spec in specs:
        if spec.name in seen:
            raise ParameterBindingError(f"Duplicate parameter spec: {spec.name}")
        seen.add(spec.name)

    missing = [name for name in names if name not in seen]
    if missing:
        raise ParameterBindingError(
            f"No parameter spec for: {', '.join(missing)}",
            declared[names.index(missing[0])].loc,
        )

    for spec in specs:
        env.define(spec.name, copy.deepcopy(spec.initial_value), step, spec=spec)
        logger.debug("bound parameter %s (%s)", spec.name, spec.kind.value)
