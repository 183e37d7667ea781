"""
Command-line interface for tabjoin.

Provides commands for:
- Running a pipeline from a YAML configuration
- Listing the available step types
- Writing a sample configuration
"""

import sys
from pathlib import Path

import click

from tabjoin import __version__
from tabjoin.core.config import PipelineConfig
from tabjoin.core.exceptions import ConfigError, StepFailedError, TabJoinException
from tabjoin.core.logging_config import setup_logging, get_logger
from tabjoin.core.observers import CLIProgressObserver, LoggingObserver
from tabjoin.core.pipeline import Pipeline
from tabjoin.core.pretty_output import PrettyOutput as po
from tabjoin.steps import get_registry

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    tabjoin - keyed tabular join/transform pipeline.

    Reads tab-delimited tables, applies joins, filters, binning, column
    analysis and sampling steps in order, and writes flat, Excel, HTML or
    confusion-matrix output.
    """
    pass


@cli.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--input', '-i', 'input_path', type=click.Path(exists=True),
              help='Replace the input file named by the load step')
@click.option('--seed', type=int, default=None, help='Random seed for sampling steps (overrides config)')
@click.option('--json-output', '-j', type=click.Path(), help='Write a JSON run summary to this path')
@click.option('--verbose/--quiet', '-v/-q', default=True, help='Verbose output')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def run(config_file, input_path, seed, json_output, verbose, log_level, log_file):
    """
    Run a pipeline from a configuration file.

    CONFIG_FILE: Path to YAML configuration file defining the steps

    Examples:

    \b
    # Basic run
    tabjoin run join.yaml

    \b
    # Different input, reproducible sampling, JSON summary
    tabjoin run join.yaml --input genomes2.tbl --seed 7 -j summary.json
    """
    setup_logging(level=log_level, log_file=log_file)
    logger.info(f"Starting pipeline: {config_file}")

    try:
        config = PipelineConfig.from_yaml(config_file)
        if seed is not None:
            config.seed = seed
        observers = [LoggingObserver()]
        if verbose:
            observers.append(CLIProgressObserver(verbose=True))
        pipeline = Pipeline.from_config(config, observers=observers)
        logger.info(f"Configuration loaded: {pipeline.name}")

        report = pipeline.run(input_path=input_path)

        if json_output:
            report.to_json(json_output)
            if verbose:
                po.output_file("JSON", json_output)

        if verbose:
            po.blank_line()
            po.success("PIPELINE COMPLETE")
        sys.exit(0)

    except ConfigError as e:
        po.blank_line()
        po.error(f"Configuration error: {e.message}")
        sys.exit(1)

    except StepFailedError as e:
        po.blank_line()
        po.error(f"Pipeline stopped at step {e.step_index + 1} ({e.step_name}, type {e.step_type}):")
        click.echo(f"   {e.original_exception}", err=True)
        if json_output and e.report is not None:
            e.report.to_json(json_output)
            po.output_file("JSON", json_output)
        sys.exit(1)

    except TabJoinException as e:
        po.blank_line()
        po.error(f"Error: {e.message}")
        sys.exit(1)


@cli.command()
def list_steps():
    """List all available step types."""
    registry = get_registry()
    po.header("AVAILABLE STEPS")
    for step_type in registry.list_available():
        step_class = registry.get(step_type)
        description = step_class.__doc__.strip().splitlines()[0] if step_class.__doc__ else ""
        po.key_value(step_type, description, indent=2)
    po.blank_line()


SAMPLE_CONFIG = '''# tabjoin pipeline configuration
# Paths are relative to this file.

pipeline:
  name: "Sample Join"
  description: "Join a main table with a trait table and save the result"
  seed: 42

  steps:
    # The first step must load the main table
    - type: load
      path: "data/main.tbl"
      # key_column: "id"

    - type: left_join
      path: "data/traits.tbl"
      key_column: "id"
      # columns: ["trait1", "trait2"]
      qualifier: "traits"

    - type: match
      column: "traits.trait1"
      pattern: "yes"
      mode: include
      ignore_case: true

    - type: classify
      column: "score"
      new_column: "score_class"
      classes:
        - {label: "Low", max: 0.5}
        - {label: "High"}

    - type: pick
      count: 100
      scatter_column: "group"

    - type: save_flat
      path: "output/joined.tbl"

    - type: save_excel
      path: "output/joined.xlsx"
      sheet_name: "Joined"
      precision: 3

    - type: save_html
      path: "output/joined.html"
      title: "Joined Output"
'''


@cli.command()
@click.argument('output_path', type=click.Path())
def init_config(output_path):
    """
    Generate a sample configuration file.

    OUTPUT_PATH: Path where sample config should be written
    """
    try:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(SAMPLE_CONFIG)
    except OSError as e:
        click.echo(f"Error creating config file: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"✓ Sample configuration written to: {output_path}")
    click.echo("\nEdit the file to point at your data, then run:")
    click.echo(f"  tabjoin run {output_path}")


@cli.command()
def version():
    """Display version information."""
    click.echo(f"tabjoin v{__version__}")
    click.echo("Keyed tabular join/transform pipeline")


if __name__ == '__main__':
    cli()
