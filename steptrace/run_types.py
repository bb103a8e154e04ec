"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RunConfig:
    """Groups interpreter execution configuration."""

    max_steps: int | None = None
    verbose: bool = False


@dataclass
class PipelineStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0
    language: str = ""

    # Stage timings (seconds)
    parse_time: float = 0.0
    annotate_time: float = 0.0
    locate_time: float = 0.0
    execution_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    node_count: int = 0
    annotation_count: int = 0
    instance_count: int = 0

    # Execution stats
    total_steps: int = 0
    failures: int = 0

    def stages(self) -> list[tuple[str, float, str]]:
        return [
            ("parse", self.parse_time, f"{self.node_count} statements"),
            ("annotations", self.annotate_time, f"{self.annotation_count} found"),
            ("locate", self.locate_time, f"{self.instance_count} functions"),
            ("execute", self.execution_time, f"{self.total_steps} trace entries"),
        ]

    def report(self) -> str:
        rule = "─" * 48
        rows = [
            "═══ Pipeline Statistics ═══",
            f"  {self.language}: {self.source_lines} lines / {self.source_bytes} bytes",
            f"  {rule}",
        ]
        rows.extend(
            f"  {stage:<12} {seconds * 1000:>9.2f} ms   {output}"
            for stage, seconds, output in self.stages()
        )
        rows.append(f"  {rule}")
        rows.append(f"  {'total':<12} {self.total_time * 1000:>9.2f} ms")
        rows.append(
            f"  {self.instance_count - self.failures} completed,"
            f" {self.failures} failed"
        )
        return "\n".join(rows)
