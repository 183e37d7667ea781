"""
Unit tests for PipelineConfig parsing.

Author: Daniel Edge
"""

import pytest
import yaml

from tabjoin.core.config import PipelineConfig
from tabjoin.core.exceptions import ConfigError, ConfigValidationError, YAMLSizeError


def _config(steps, **extra):
    job = {'name': 'Test', 'steps': steps}
    job.update(extra)
    return {'pipeline': job}


@pytest.mark.unit
class TestPipelineConfig:
    """Test parsing of configuration dictionaries."""

    def test_minimal_config(self):
        """Test a config with one load step parses."""
        config = PipelineConfig(_config([{'type': 'load', 'path': 'a.tbl'}]))
        assert config.name == "Test"
        assert config.seed is None
        assert config.steps == [{'type': 'load', 'path': 'a.tbl'}]

    def test_missing_pipeline_key(self):
        """Test the top-level 'pipeline' key is required."""
        with pytest.raises(ConfigError, match="'pipeline'"):
            PipelineConfig({'job': {}})

    def test_no_steps(self):
        """Test at least one step is required."""
        with pytest.raises(ConfigError):
            PipelineConfig(_config([]))

    def test_step_without_type(self):
        """Test every step needs a type."""
        with pytest.raises(ConfigError) as exc_info:
            PipelineConfig(_config([{'path': 'a.tbl'}]))
        assert exc_info.value.field == "steps[0].type"

    def test_seed_parsing(self):
        """Test integer seeds are accepted and booleans rejected."""
        assert PipelineConfig(_config([{'type': 'load'}], seed=7)).seed == 7
        with pytest.raises(ConfigError):
            PipelineConfig(_config([{'type': 'load'}], seed=True))
        with pytest.raises(ConfigError):
            PipelineConfig(_config([{'type': 'load'}], seed="abc"))

    def test_to_dict(self):
        """Test to_dict round-trips the parsed fields."""
        config = PipelineConfig(_config([{'type': 'load', 'path': 'a.tbl'}], seed=3), base_dir="/data")
        result = config.to_dict()
        assert result['seed'] == 3
        assert result['steps'][0]['type'] == 'load'
        assert result['base_dir'] is not None


@pytest.mark.unit
class TestPipelineConfigFromYaml:
    """Test loading configuration files."""

    def test_from_yaml_sets_base_dir(self, tmp_path):
        """Test relative step paths are anchored at the config directory."""
        path = tmp_path / "job.yaml"
        path.write_text(yaml.safe_dump(_config([{'type': 'load', 'path': 'a.tbl'}])), encoding="utf-8")
        config = PipelineConfig.from_yaml(str(path))
        assert config.base_dir == tmp_path.resolve()

    def test_missing_file(self, tmp_path):
        """Test a missing config file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            PipelineConfig.from_yaml(str(tmp_path / "none.yaml"))

    def test_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors raise ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("pipeline: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="parse YAML"):
            PipelineConfig.from_yaml(str(path))

    def test_oversized_file(self, tmp_path, monkeypatch):
        """Test the file size limit."""
        monkeypatch.setattr(PipelineConfig, "MAX_YAML_FILE_SIZE", 10)
        path = tmp_path / "big.yaml"
        path.write_text(yaml.safe_dump(_config([{'type': 'load', 'path': 'a.tbl'}])), encoding="utf-8")
        with pytest.raises(YAMLSizeError):
            PipelineConfig.from_yaml(str(path))

    def test_nesting_limit(self, monkeypatch):
        """Test deeply nested documents are rejected."""
        monkeypatch.setattr(PipelineConfig, "MAX_YAML_NESTING_DEPTH", 3)
        deep = {'a': {'b': {'c': {'d': {'e': 1}}}}}
        with pytest.raises(ConfigValidationError, match="nesting depth"):
            PipelineConfig._validate_yaml_structure(deep)
