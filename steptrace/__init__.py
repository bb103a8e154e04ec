"""Step-tracing interpreter for annotated JavaScript functions."""

from .run import run, execute_function  # noqa: F401
from .api import (  # noqa: F401
    parse_source,
    read_source_annotations,
    locate_source_functions,
    trace_function,
    dump_trace,
    extract_function_source,
)
