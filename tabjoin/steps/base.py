"""
Base class for pipeline steps.

Every step exposes exactly two operations to the pipeline: validate(), a
cheap check of its configuration, and apply(), which consumes the current
table and returns a StepResult carrying the table to continue with.

Author: Daniel Edge
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from tabjoin.core.results import StepResult
from tabjoin.core.table import Table


@dataclass
class RunContext:
    """
    Per-run state shared by all steps of one pipeline run.

    Attributes:
        rng: The run's single random source
        seed: Seed the random source was created from, if any
    """
    rng: np.random.Generator
    seed: Optional[int] = None

    @classmethod
    def create(cls, seed: Optional[int] = None) -> "RunContext":
        return cls(rng=np.random.default_rng(seed), seed=seed)


class Step(ABC):
    """
    Abstract base class for all pipeline steps.

    Subclasses read their options from params in __init__, report whether
    those options are usable from validate(), and do their work in apply().
    Structural problems (missing files or columns) are raised as exceptions
    from apply(); per-row problems are counted and reported in the result.

    Attributes:
        step_type: Registry name of the step, set by register_step
        is_output: True for steps that write an artifact and leave the table alone
        params: Raw configuration options
        name: Display name
        base_dir: Directory that relative paths are resolved against
    """

    step_type: str = "step"
    is_output: bool = False

    def __init__(
        self,
        params: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        base_dir: Optional[str] = None
    ):
        self.params: Dict[str, Any] = dict(params or {})
        self.name: str = name or self.step_type
        self.base_dir: Optional[Path] = Path(base_dir) if base_dir else None

    @abstractmethod
    def validate(self) -> bool:
        """Return True if the step's configuration is complete enough to run."""
        pass

    @abstractmethod
    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        """
        Apply the step to the current table.

        Args:
            table: Table produced by the previous step
            context: Run-wide state (random source); optional for direct use

        Returns:
            StepResult whose table is the one the pipeline continues with
        """
        pass

    def get_description(self) -> str:
        """Human-readable summary of what the step does."""
        return self.__class__.__doc__.strip().splitlines()[0] if self.__class__.__doc__ else self.step_type

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def resolve_path(self, value: Optional[str]) -> Optional[Path]:
        """Resolve a configured path against the configuration's directory."""
        if not value:
            return None
        path = Path(str(value)).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def param_str(self, key: str, default: str = "") -> str:
        value = self.params.get(key, default)
        return "" if value is None else str(value)

    def param_list(self, key: str) -> List[str]:
        value = self.params.get(key)
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]

    def param_bool(self, key: str, default: bool = False) -> bool:
        value = self.params.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "on")
        return bool(value)

    def _create_result(
        self,
        message: str,
        table: Table,
        start_time: float,
        counters: Optional[Dict[str, int]] = None,
        label_counts: Optional[Dict[str, int]] = None,
        output_path: Optional[str] = None
    ) -> StepResult:
        return StepResult(
            step_name=self.name,
            step_type=self.step_type,
            message=message,
            table=table,
            counters=counters or {},
            label_counts=label_counts or {},
            output_path=output_path,
            duration_seconds=time.time() - start_time,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
