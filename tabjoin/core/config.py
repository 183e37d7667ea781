"""Configuration parsing and validation."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from tabjoin.core.exceptions import ConfigError, ConfigValidationError, YAMLSizeError
from tabjoin.core.constants import (
    MAX_STRING_LENGTH,
    MAX_YAML_FILE_SIZE,
    MAX_YAML_KEY_COUNT,
    MAX_YAML_NESTING_DEPTH,
)


class PipelineConfig:
    """
    Configuration for a pipeline run.

    Example YAML:
        pipeline:
          name: "Join genomes with traits"
          seed: 42
          steps:
            - type: load
              path: genomes.tbl
            - type: left_join
              path: traits.tbl
            - type: save_flat
              path: output.tbl
    """

    MAX_YAML_FILE_SIZE = MAX_YAML_FILE_SIZE
    MAX_YAML_NESTING_DEPTH = MAX_YAML_NESTING_DEPTH
    MAX_YAML_KEYS = MAX_YAML_KEY_COUNT

    def __init__(self, config_dict: Dict[str, Any], base_dir: Optional[str] = None):
        """
        Initialize from configuration dictionary.

        Args:
            config_dict: Parsed configuration
            base_dir: Directory that relative paths in steps are resolved against
        """
        self.raw_config = config_dict
        self.base_dir: Optional[Path] = Path(base_dir) if base_dir else None
        self._parse_config()

    @classmethod
    def from_yaml(cls, config_path: str) -> "PipelineConfig":
        """
        Load configuration from a YAML file.

        Relative step paths are resolved against the file's directory.

        Raises:
            ConfigError: If file not found or invalid
            YAMLSizeError: If file exceeds size limit
            ConfigValidationError: If YAML structure is too complex
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > cls.MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {cls.MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=cls.MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            cls._validate_yaml_structure(config_dict)

        return cls(config_dict, base_dir=str(config_file.resolve().parent))

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: List[int] = None) -> None:
        """
        Reject YAML documents that are too deep, too large or hold huge strings.

        Raises:
            ConfigValidationError: If structure is too complex
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > cls.MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {cls.MAX_YAML_NESTING_DEPTH} levels."
            )

        if isinstance(obj, (dict, list)):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(
                    f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items."
                )
            children = obj.values() if isinstance(obj, dict) else obj
            for child in children:
                cls._validate_yaml_structure(child, current_depth + 1, total_keys)

        elif isinstance(obj, str) and len(obj) > MAX_STRING_LENGTH:
            raise ConfigValidationError(
                f"YAML contains string exceeding maximum length ({MAX_STRING_LENGTH:,}): '{obj[:50]}...'"
            )

    def _parse_config(self) -> None:
        """Parse and validate configuration."""
        if not isinstance(self.raw_config, dict) or "pipeline" not in self.raw_config:
            raise ConfigError("Configuration must have 'pipeline' key", field="pipeline")

        job_config = self.raw_config["pipeline"]
        if not isinstance(job_config, dict):
            raise ConfigError("'pipeline' must be a mapping", field="pipeline")

        self.name: str = str(job_config.get("name", "Unnamed Pipeline"))
        self.description: Optional[str] = job_config.get("description")
        self.seed: Optional[int] = self._parse_seed(job_config.get("seed"))

        steps = job_config.get("steps")
        if not steps:
            raise ConfigError("Configuration must specify at least one step", field="steps")
        if not isinstance(steps, list):
            raise ConfigError("'steps' must be a list", field="steps")

        self.steps: List[Dict[str, Any]] = []
        for idx, step in enumerate(steps):
            if not isinstance(step, dict):
                raise ConfigError(f"Step {idx + 1} must be a mapping", field=f"steps[{idx}]")
            if not step.get("type"):
                raise ConfigError(f"Step {idx + 1} has no 'type'", field=f"steps[{idx}].type")
            self.steps.append(dict(step))

    @staticmethod
    def _parse_seed(value: Any) -> Optional[int]:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ConfigError(f"Seed must be an integer, got {value!r}", field="seed")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Seed must be an integer, got {value!r}", field="seed")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'seed': self.seed,
            'base_dir': str(self.base_dir) if self.base_dir else None,
            'steps': self.steps,
        }
