"""Command-line entry point: trace annotated JavaScript functions."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import constants
from .api import dump_trace
from .errors import AnnotationError, SourceParseError
from .run import run
from .trace_types import TracedFunction

DEMO_SOURCE = """\
/**
 * @param {Number} size = 8, 0, 10
 * @param {Array} arr = []
 */
function demo(size, arr) {
  let result = size * 2;
  for (let i = 0; i < 3; i++) {
    arr.push(i);
  }
  if (result > 10) {
    result = result + "px";
  }
  return result;
}
"""


def _to_dict(traced: TracedFunction) -> dict:
    return {
        "name": traced.name,
        "line": traced.line,
        "status": traced.status.value,
        "failure": str(traced.failure) if traced.failure is not None else None,
        "return_value": traced.environment.format(traced.return_value),
        "trace": traced.trace.to_dict(),
        "environment": traced.environment.to_dict(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Step-by-step tracing interpreter for annotated JavaScript functions"
    )
    parser.add_argument("file", nargs="?", help="Source file to trace")
    parser.add_argument(
        "--function", "-f", default="", help="Only trace the function with this name"
    )
    parser.add_argument(
        "--max-steps",
        "-n",
        type=int,
        default=constants.DEFAULT_MAX_STEPS,
        help=f"Trace entry ceiling per function (default: {constants.DEFAULT_MAX_STEPS})",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print traces and histories as JSON"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging and pipeline statistics",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.file:
        # Demo mode: use a built-in example
        source = DEMO_SOURCE
        if not args.json:
            print("No file provided. Using built-in demo:\n")
            print(source)
    else:
        with open(args.file, encoding="utf-8") as f:
            source = f.read()

    try:
        instances = run(
            source,
            function_name=args.function,
            max_steps=args.max_steps if args.max_steps > 0 else None,
            verbose=args.verbose,
        )
    except (SourceParseError, AnnotationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if not instances:
        print("No annotated functions found.", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([_to_dict(t) for t in instances], indent=2, default=str))
    else:
        for traced in instances:
            print(dump_trace(traced))
            print()

    return 1 if any(t.failure is not None for t in instances) else 0


if __name__ == "__main__":
    sys.exit(main())
