"""
Pipeline driver - runs an ordered list of steps over one table.

The pipeline:
1. Validates that every step is configured and the first step is a load
2. Creates the run's single random source
3. Applies each step in order, continuing with the table it returns
4. Aborts on the first failure, identifying the failing step
5. Collects step results into a PipelineReport
"""

import time
from datetime import datetime
from typing import List, Optional

from tabjoin.core.config import PipelineConfig
from tabjoin.core.exceptions import ConfigValidationError, StepFailedError, TabJoinException
from tabjoin.core.logging_config import get_logger
from tabjoin.core.observers import PipelineObserver
from tabjoin.core.results import PipelineReport, Status, StepResult
from tabjoin.core.table import Table
from tabjoin.steps import LoadStep, RunContext, Step, get_registry

logger = get_logger(__name__)


class Pipeline:
    """
    Ordered sequence of steps sharing a single table.

    Example usage:
        pipeline = Pipeline.from_yaml('join.yaml')
        if pipeline.is_valid():
            report = pipeline.run()
            print(report.final_table)
    """

    def __init__(
        self,
        steps: List[Step],
        observers: Optional[List[PipelineObserver]] = None,
        seed: Optional[int] = None,
        name: str = "Unnamed Pipeline",
        description: Optional[str] = None
    ) -> None:
        self.steps: List[Step] = list(steps)
        self.observers: List[PipelineObserver] = observers if observers is not None else []
        self.seed = seed
        self.name = name
        self.description = description

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        observers: Optional[List[PipelineObserver]] = None
    ) -> "Pipeline":
        """
        Build a pipeline from a parsed configuration.

        Raises:
            ConfigError: If a step type is unknown or a step rejects its options
        """
        registry = get_registry()
        steps = [registry.create(step_config, base_dir=config.base_dir) for step_config in config.steps]
        return cls(steps, observers=observers, seed=config.seed, name=config.name,
                   description=config.description)

    @classmethod
    def from_yaml(cls, config_path: str, observers: Optional[List[PipelineObserver]] = None) -> "Pipeline":
        return cls.from_config(PipelineConfig.from_yaml(config_path), observers=observers)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def invalid_steps(self) -> List[int]:
        """Indices of steps whose configuration is incomplete."""
        return [idx for idx, step in enumerate(self.steps) if not step.validate()]

    def is_valid(self) -> bool:
        """True if the first step is a load and every step is fully configured."""
        if not self.steps or not isinstance(self.steps[0], LoadStep):
            return False
        return not self.invalid_steps()

    def _check_valid(self) -> None:
        if not self.steps or not isinstance(self.steps[0], LoadStep):
            actual = self.steps[0].step_type if self.steps else None
            raise ConfigValidationError(
                "The first step of a pipeline must be a load step",
                field="steps[0].type",
                expected="load",
                actual=actual
            )
        bad = self.invalid_steps()
        if bad:
            names = ", ".join(f"{idx + 1} ({self.steps[idx].name})" for idx in bad)
            raise ConfigValidationError(f"Incomplete configuration for step(s): {names}", field="steps")

    # ------------------------------------------------------------------
    # Observer notification
    # ------------------------------------------------------------------

    def _notify(self, method: str, *args) -> None:
        for observer in self.observers:
            try:
                getattr(observer, method)(*args)
            except Exception as e:
                logger.warning(f"Observer {observer.__class__.__name__} failed {method}: {e}")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, input_path: Optional[str] = None, verbose: bool = False) -> PipelineReport:
        """
        Execute every step in order.

        Args:
            input_path: Optional replacement for the load step's input file
            verbose: If True and no observers were given, print progress

        Returns:
            PipelineReport with one StepResult per step

        Raises:
            ConfigValidationError: If the pipeline is not valid
            StepFailedError: If any step fails; the run stops at that step
        """
        self._check_valid()
        if input_path:
            self.steps[0].override_path(input_path)

        if verbose and not self.observers:
            from tabjoin.core.observers import CLIProgressObserver
            self.observers = [CLIProgressObserver(verbose=True)]

        logger.info(f"Starting pipeline: {self.name}")
        self._notify("on_pipeline_start", self.name, len(self.steps))

        start_time = time.time()
        report = PipelineReport(
            pipeline_name=self.name,
            execution_time=datetime.now(),
            seed=self.seed,
            description=self.description,
        )
        context = RunContext.create(self.seed)
        table = Table()

        for idx, step in enumerate(self.steps):
            logger.info(f"Step {idx + 1}/{len(self.steps)}: {step.name} ({step.step_type})")
            self._notify("on_step_start", idx, step.name, step.step_type)
            try:
                result = step.apply(table, context)
            except Exception as e:
                error = StepFailedError(idx, step.name, step.step_type, e)
                report.status = Status.FAILED
                report.error = error.to_dict()
                report.add_step_result(StepResult(step.name, step.step_type, str(e), status=Status.FAILED))
                for skipped in self.steps[idx + 1:]:
                    report.add_step_result(StepResult(skipped.name, skipped.step_type, "", status=Status.NOT_RUN))
                report.duration_seconds = time.time() - start_time
                if isinstance(e, TabJoinException):
                    logger.error(error.message)
                else:
                    logger.exception(error.message)
                self._notify("on_error", e, {'step_name': step.name, 'step_type': step.step_type, 'step_index': idx})
                error.report = report
                raise error from e

            table = result.table if result.table is not None else table
            report.add_step_result(result)
            logger.debug(f"[{step.name}] {result.message}")
            self._notify("on_step_complete", step.name, result)

        report.duration_seconds = time.time() - start_time
        logger.info(f"Pipeline completed in {report.duration_seconds:.2f}s with {len(table)} records")
        self._notify("on_pipeline_complete", report)
        return report

