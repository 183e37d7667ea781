"""
Step registry.

Maps the `type` string of a configured step to the Step class that
implements it. Step modules register themselves with the register_step
decorator when tabjoin.steps is imported.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from tabjoin.core.exceptions import ConfigError
from tabjoin.steps.base import Step

logger = logging.getLogger(__name__)


class StepRegistry:
    """Registry of available step types."""

    def __init__(self):
        self._steps: Dict[str, Type[Step]] = {}

    def register(self, step_type: str, step_class: Type[Step]) -> None:
        if step_type in self._steps and self._steps[step_type] is not step_class:
            raise ValueError(f"Step type '{step_type}' is already registered")
        step_class.step_type = step_type
        self._steps[step_type] = step_class

    def get(self, step_type: str) -> Type[Step]:
        """
        Look up a step class.

        Raises:
            ConfigError: If the type is unknown
        """
        try:
            return self._steps[step_type]
        except KeyError:
            raise ConfigError(
                f"Unknown step type '{step_type}'. Available: {', '.join(self.list_available())}",
                field="type"
            )

    def list_available(self) -> List[str]:
        return sorted(self._steps)

    def create(self, step_config: Dict[str, Any], base_dir: Optional[Path] = None) -> Step:
        """
        Build a step from its configuration dictionary.

        The dictionary's 'type' and 'name' keys select and label the step;
        every other key is passed to the step as a parameter.
        """
        step_type = step_config.get("type")
        if not step_type:
            raise ConfigError("Every step must have a 'type'", field="type")
        step_class = self.get(str(step_type))
        params = {k: v for k, v in step_config.items() if k not in ("type", "name")}
        logger.debug(f"Creating step {step_type} with params {sorted(params)}")
        return step_class(params=params, name=step_config.get("name"), base_dir=base_dir)


_registry = StepRegistry()


def get_registry() -> StepRegistry:
    return _registry


def register_step(step_type: str):
    """Class decorator that adds a Step subclass to the global registry."""
    def decorator(step_class: Type[Step]) -> Type[Step]:
        _registry.register(step_type, step_class)
        return step_class
    return decorator
