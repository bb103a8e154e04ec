"""Orchestrator: parse, read annotations, locate and execute."""

from __future__ import annotations

import logging
import time

from . import constants
from .annotations import read_annotations
from .binder import bind_parameters
from .environment import Environment
from .errors import InterpreterError
from .evaluator import Evaluator
from .frontends import get_frontend
from .locator import locate_functions
from .parser import Parser, TreeSitterParserFactory
from .run_types import PipelineStats, RunConfig, RunStatus
from .trace_types import ExecutionTrace, TracedFunction
from .walker import StatementWalker

logger = logging.getLogger(__name__)


def execute_function(
    traced: TracedFunction, config: RunConfig = RunConfig()
) -> TracedFunction:
    """Run one annotated function to completion, filling its trace and history.

    On an ``InterpreterError`` the run is marked FAILED, the error is kept on
    ``traced.failure`` and re-raised; the partial trace and environment stay
    in place.
    """
    traced.environment = Environment()
    traced.trace = ExecutionTrace()
    traced.status = RunStatus.PENDING
    traced.failure = None

    env = traced.environment
    walker = StatementWalker(env, traced.trace, Evaluator(env), config)
    try:
        env.define(constants.THIS_BINDING, {}, constants.PARAMETER_STEP)
        bind_parameters(env, traced.node.params, traced.params)
        walker.walk_block(traced.node.body)
    except InterpreterError as exc:
        traced.status = RunStatus.FAILED
        traced.failure = exc
        traced.return_value = walker.return_value
        logger.warning(
            "%s failed after %d steps: %s", traced.name, len(traced.trace), exc
        )
        raise
    traced.status = RunStatus.COMPLETED
    traced.return_value = walker.return_value
    logger.info("%s completed in %d steps", traced.name, len(traced.trace))
    return traced


def run(
    source: str,
    language: str = constants.DEFAULT_LANGUAGE,
    function_name: str = "",
    max_steps: int | None = constants.DEFAULT_MAX_STEPS,
    verbose: bool = False,
) -> list[TracedFunction]:
    """End-to-end: parse → read annotations → locate → execute.

    Args:
        source: Raw source code string.
        language: Source language name.
        function_name: Only trace the function with this name (all if empty).
        max_steps: Trace entry ceiling per function (None disables it).
        verbose: Print the pipeline statistics block.

    A function whose run fails is returned with status FAILED and its
    partial trace; the remaining functions still run.
    """
    pipeline_start = time.perf_counter()
    stats = PipelineStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n")
        + (1 if source and not source.endswith("\n") else 0),
        language=language,
    )

    # 1. Parse + convert
    t0 = time.perf_counter()
    parser = Parser(TreeSitterParserFactory())
    tree = parser.parse(source, language)
    program = get_frontend(language).convert(tree, source.encode("utf-8"))
    stats.parse_time = time.perf_counter() - t0
    stats.node_count = len(program.body)
    logger.info(
        "Parsed %d top-level statements in %.1fms",
        stats.node_count,
        stats.parse_time * 1000,
    )

    # 2. Annotations
    t0 = time.perf_counter()
    annotations = read_annotations(program.comments, parser)
    stats.annotate_time = time.perf_counter() - t0
    stats.annotation_count = len(annotations)

    # 3. Locate
    t0 = time.perf_counter()
    instances = locate_functions(program, annotations, source)
    if function_name:
        instances = [t for t in instances if t.name == function_name]
    stats.locate_time = time.perf_counter() - t0
    stats.instance_count = len(instances)

    # 4. Execute
    config = RunConfig(max_steps=max_steps, verbose=verbose)
    exec_start = time.perf_counter()
    for traced in instances:
        try:
            execute_function(traced, config)
        except InterpreterError:
            stats.failures += 1
        stats.total_steps += len(traced.trace)
    stats.execution_time = time.perf_counter() - exec_start
    stats.total_time = time.perf_counter() - pipeline_start

    if verbose:
        print()
        print(stats.report())

    return instances
