"""
Pipeline Result Classes.

This module defines dataclasses for storing pipeline results:
- StepResult: Outcome of one step, including its counters and output table
- PipelineReport: Outcome of a whole pipeline run

Author: Daniel Edge
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from tabjoin.core.table import Table


class Status(Enum):
    """
    Status of a step or of a whole run.

    - COMPLETED: Finished normally
    - FAILED: Aborted with an error
    - NOT_RUN: Never reached because an earlier step failed
    """
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NOT_RUN = "NOT_RUN"


@dataclass
class StepResult:
    """
    Result of applying one step.

    The table field holds the table the pipeline continues with. Transform
    steps may return the table they were given or a replacement; save steps
    return their input unchanged.

    Attributes:
        step_name: Display name of the step
        step_type: Registry type of the step
        message: Completion message shown to the user
        table: Table the pipeline continues with
        counters: Named counts (records kept, invalid values, ...)
        label_counts: Rows attributed to each label, for analysis steps
        output_path: File written, for save steps
        duration_seconds: Time taken to apply the step

    Example:
        >>> result = StepResult(
        ...     step_name="filter",
        ...     step_type="include_filter",
        ...     message="10 keys in filter file.  8 records kept, 2 deleted.",
        ...     table=table,
        ...     counters={'filter_keys': 10, 'kept': 8, 'deleted': 2}
        ... )
    """

    step_name: str
    step_type: str
    message: str
    table: Optional[Table] = None
    counters: Dict[str, int] = field(default_factory=dict)
    label_counts: Dict[str, int] = field(default_factory=dict)
    output_path: Optional[str] = None
    duration_seconds: float = 0.0
    status: Status = Status.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary (the table itself is omitted)."""
        return {
            'step_name': self.step_name,
            'step_type': self.step_type,
            'status': self.status.value,
            'message': self.message,
            'counters': dict(self.counters),
            'label_counts': dict(self.label_counts),
            'output_path': self.output_path,
            'duration_seconds': round(self.duration_seconds, 4),
            'rows': len(self.table) if self.table is not None else None,
        }


@dataclass
class PipelineReport:
    """
    Report for an entire pipeline run.

    Attributes:
        pipeline_name: Name from the configuration
        execution_time: When the run started
        duration_seconds: Wall-clock time of the run
        step_results: One result per step, in order; after a failure the
            failing step is FAILED and the steps after it NOT_RUN
        status: COMPLETED or FAILED
        error: Serialized error when the run failed
        seed: Random seed used for sampling, if any
    """

    pipeline_name: str
    execution_time: datetime
    duration_seconds: float = 0.0
    step_results: List[StepResult] = field(default_factory=list)
    status: Status = Status.COMPLETED
    error: Optional[Dict[str, Any]] = None
    seed: Optional[int] = None
    description: Optional[str] = None

    def add_step_result(self, result: StepResult) -> None:
        self.step_results.append(result)

    @property
    def final_table(self) -> Optional[Table]:
        """Table left by the last completed step."""
        completed = [r for r in self.step_results if r.status == Status.COMPLETED]
        return completed[-1].table if completed else None

    @property
    def label_counts(self) -> Dict[str, int]:
        """Merged label counts of every step that produced them; later steps win."""
        merged: Dict[str, int] = {}
        for result in self.step_results:
            merged.update(result.label_counts)
        return merged

    @property
    def output_files(self) -> List[str]:
        return [r.output_path for r in self.step_results if r.output_path]

    def to_dict(self) -> Dict[str, Any]:
        table = self.final_table
        return {
            'pipeline_name': self.pipeline_name,
            'description': self.description,
            'execution_time': self.execution_time.isoformat(),
            'duration_seconds': round(self.duration_seconds, 4),
            'status': self.status.value,
            'seed': self.seed,
            'final_rows': len(table) if table is not None else None,
            'final_columns': table.width if table is not None else None,
            'output_files': self.output_files,
            'steps': [r.to_dict() for r in self.step_results],
            'error': self.error,
        }

    def to_json(self, output_path) -> None:
        """Write the report as JSON, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
