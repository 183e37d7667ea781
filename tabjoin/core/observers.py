"""
Observer Pattern for Pipeline Event Notifications.

Decouples the pipeline driver from progress reporting. The pipeline calls
every observer synchronously at step boundaries; observers are for user
feedback only and never influence control flow.

Author: Daniel Edge
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from tabjoin.core.results import PipelineReport, Status, StepResult

logger = logging.getLogger(__name__)


class PipelineObserver(ABC):
    """
    Abstract base class for pipeline event observers.

    Example:
        >>> class MyObserver(PipelineObserver):
        ...     def on_step_complete(self, step_name, result):
        ...         print(result.message)
        ...
        >>> pipeline = Pipeline.from_yaml('join.yaml', observers=[MyObserver()])
    """

    def on_pipeline_start(self, pipeline_name: str, step_count: int) -> None:
        """Called once before the first step runs."""
        pass

    def on_step_start(self, index: int, step_name: str, step_type: str) -> None:
        """Called before each step is applied."""
        pass

    @abstractmethod
    def on_step_complete(self, step_name: str, result: StepResult) -> None:
        """
        Called after each step completes.

        Args:
            step_name: Display name of the step
            result: The step's result, including its completion message
        """
        pass

    def on_error(self, error: Exception, context: Dict[str, Any]) -> None:
        """Called when a step fails, before the run aborts."""
        pass

    def on_pipeline_complete(self, report: PipelineReport) -> None:
        """Called once the run has finished successfully."""
        pass


class CLIProgressObserver(PipelineObserver):
    """
    Observer for CLI pretty output.

    Attributes:
        verbose (bool): Whether to print progress
    """

    def __init__(self, verbose: bool = True):
        self.verbose = verbose

        # Import here to avoid circular dependency
        from tabjoin.core.pretty_output import PrettyOutput
        self.po = PrettyOutput

    def on_pipeline_start(self, pipeline_name: str, step_count: int) -> None:
        if self.verbose:
            self.po.header("TABJOIN PIPELINE")
            self.po.key_value("Pipeline", pipeline_name, indent=2)
            self.po.key_value("Steps", step_count, indent=2)
            self.po.blank_line()

    def on_step_start(self, index: int, step_name: str, step_type: str) -> None:
        if self.verbose:
            self.po.item(f"Step {index + 1}: {step_name} ({step_type})")

    def on_step_complete(self, step_name: str, result: StepResult) -> None:
        if self.verbose:
            print(f"  {self.po.SUCCESS}{self.po.CHECK}{self.po.RESET} {result.message}")
            if result.output_path:
                self.po.output_file("Output", result.output_path, indent=4)

    def on_error(self, error: Exception, context: Dict[str, Any]) -> None:
        if self.verbose:
            step_name = context.get('step_name', 'unknown')
            self.po.error(f"Error in step '{step_name}': {error}")

    def on_pipeline_complete(self, report: PipelineReport) -> None:
        if self.verbose:
            table = report.final_table
            summary_items = [
                ("Steps Run", len(report.step_results), self.po.INFO),
                ("Final Records", len(table) if table is not None else 0, self.po.INFO),
                ("Final Columns", table.width if table is not None else 0, self.po.INFO),
                ("Outputs", len(report.output_files), self.po.INFO),
                ("Status", report.status.value, self.po.SUCCESS if report.status == Status.COMPLETED else self.po.ERROR),
                ("Duration", f"{report.duration_seconds:.2f}s", self.po.DIM),
            ]
            self.po.summary_box("Results", summary_items)


class LoggingObserver(PipelineObserver):
    """Observer that records every pipeline event in the log."""

    def on_pipeline_start(self, pipeline_name: str, step_count: int) -> None:
        logger.info(f"Pipeline '{pipeline_name}' starting with {step_count} steps")

    def on_step_complete(self, step_name: str, result: StepResult) -> None:
        logger.info(f"[{step_name}] {result.message}")

    def on_error(self, error: Exception, context: Dict[str, Any]) -> None:
        logger.error(f"Step {context.get('step_name', 'unknown')} failed: {error}")

    def on_pipeline_complete(self, report: PipelineReport) -> None:
        logger.info(f"Pipeline '{report.pipeline_name}' finished in {report.duration_seconds:.2f}s")
