"""
End-to-end tests: YAML configuration through the CLI to output files.

Author: Daniel Edge
"""

import json

import pytest
import yaml
from click.testing import CliRunner
from openpyxl import load_workbook

from tabjoin.cli import cli


@pytest.fixture
def project(tmp_path, write_tab, write_labels):
    """A small data directory with a main table, traits, keys and labels."""
    write_tab("data/genomes.tbl", [
        ["genome_id", "genus", "score", "group"],
        ["g1", "Bacillus", "0.2", "A"],
        ["g2", "Escherichia", "0.9", "B"],
        ["g3", "Bacillus", "0.7", "A"],
        ["g4", "Vibrio", "abc", "C"],
    ])
    write_tab("data/traits.tbl", [
        ["id", "gram", "habitat"],
        ["g1", "+", "soil"],
        ["g2", "-", "gut"],
        ["g9", "-", "sea"],
    ])
    write_tab("data/keep.tbl", [["id"], ["g1"], ["g2"], ["g3"]])
    write_labels(["Low", "High"], name="data/classes.txt")
    return tmp_path


def _write_config(project, steps, seed=None):
    job = {'name': 'E2E', 'steps': steps}
    if seed is not None:
        job['seed'] = seed
    path = project / "job.yaml"
    path.write_text(yaml.safe_dump({'pipeline': job}), encoding="utf-8")
    return path


@pytest.mark.integration
class TestRunCommand:
    """Test the run command."""

    def test_join_filter_classify_and_save(self, project):
        """Test a full pipeline writes flat, Excel, HTML and JSON outputs."""
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/genomes.tbl'},
            {'type': 'include_filter', 'path': 'data/keep.tbl'},
            {'type': 'left_join', 'path': 'data/traits.tbl', 'qualifier': 'traits'},
            {'type': 'classify', 'column': 'score', 'new_column': 'level',
             'classes': [{'label': 'Low', 'max': 0.5}, {'label': 'High'}]},
            {'type': 'save_flat', 'path': 'out/result.tbl'},
            {'type': 'save_excel', 'path': 'out/result.xlsx', 'precision': 2},
            {'type': 'save_html', 'path': 'out/result.html', 'link_column': 'genome_id'},
        ])
        runner = CliRunner()
        result = runner.invoke(cli, ['run', str(config), '--quiet', '-j', str(project / "out" / "summary.json")])

        assert result.exit_code == 0, result.output
        lines = (project / "out" / "result.tbl").read_text(encoding="utf-8").splitlines()
        assert lines == [
            "genome_id\tgenus\tscore\tgroup\ttraits.gram\ttraits.habitat\tlevel",
            "g1\tBacillus\t0.2\tA\t+\tsoil\tLow",
            "g2\tEscherichia\t0.9\tB\t-\tgut\tHigh",
            "g3\tBacillus\t0.7\tA\t\t\tHigh",
        ]
        sheet = load_workbook(project / "out" / "result.xlsx").active
        assert sheet["C2"].value == pytest.approx(0.2)
        html = (project / "out" / "result.html").read_text(encoding="utf-8")
        assert 'href="https://pubmed.ncbi.nlm.nih.gov/g1/"' in html

        summary = json.loads((project / "out" / "summary.json").read_text(encoding="utf-8"))
        assert summary['status'] == "COMPLETED"
        assert summary['final_rows'] == 3
        assert len(summary['output_files']) == 3
        assert summary['steps'][1]['message'] == "3 keys in filter file.  3 records kept, 1 deleted."

    def test_pick_with_seed_override(self, project):
        """Test --seed makes sampling reproducible across runs."""
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/genomes.tbl'},
            {'type': 'pick', 'count': 2, 'scatter_column': 'group'},
            {'type': 'save_flat', 'path': 'out/picked.tbl'},
        ], seed=1)
        runner = CliRunner()
        outputs = []
        for _ in range(2):
            result = runner.invoke(cli, ['run', str(config), '--quiet', '--seed', '77'])
            assert result.exit_code == 0, result.output
            outputs.append((project / "out" / "picked.tbl").read_text(encoding="utf-8"))
        assert outputs[0] == outputs[1]
        assert len(outputs[0].splitlines()) == 3

    def test_analyze_and_confusion(self, project, write_tab, write_labels):
        """Test analysis replaces the table and a confusion report is written."""
        write_tab("data/scored.tbl", [
            ["id", "f1", "actual", "predicted"],
            ["r1", "1", "Low", "Low"],
            ["r2", "3", "Low", "High"],
            ["r3", "9", "High", "High"],
        ])
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/scored.tbl'},
            {'type': 'save_confusion', 'path': 'out/confusion.txt', 'expect_column': 'actual',
             'predict_column': 'predicted', 'label_file': 'data/classes.txt'},
            {'type': 'analyze', 'label_file': 'data/classes.txt'},
            {'type': 'save_flat', 'path': 'out/scores.tbl'},
        ])
        result = CliRunner().invoke(cli, ['run', str(config), '--quiet'])
        assert result.exit_code == 0, result.output

        confusion = (project / "out" / "confusion.txt").read_text(encoding="utf-8")
        assert confusion.startswith("3 predictions found.  0 were invalid.\n2 correct predictions")
        scores = (project / "out" / "scores.tbl").read_text(encoding="utf-8").splitlines()
        assert scores[0] == "column\tLow\tHigh\tbest"
        # The label column is found scanning from the right, so rows are grouped by 'predicted'
        assert scores[1] == "f1\t1.0\t6.0\tHigh"
        assert len(scores) == 2

    def test_failing_step_exits_nonzero(self, project):
        """Test a missing secondary file stops the run with exit code 1."""
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/genomes.tbl'},
            {'type': 'natural_join', 'path': 'data/missing.tbl'},
            {'type': 'save_flat', 'path': 'out/never.tbl'},
        ])
        result = CliRunner().invoke(cli, ['run', str(config), '--quiet'])
        assert result.exit_code == 1
        assert not (project / "out" / "never.tbl").exists()

    def test_failed_run_still_writes_json(self, project):
        """Test the JSON summary records the failing and skipped steps."""
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/genomes.tbl'},
            {'type': 'match', 'column': 'species', 'pattern': 'x'},
            {'type': 'save_flat', 'path': 'out/never.tbl'},
        ])
        summary_path = project / "out" / "failed.json"
        result = CliRunner().invoke(cli, ['run', str(config), '--quiet', '-j', str(summary_path)])
        assert result.exit_code == 1

        summary = json.loads(summary_path.read_text(encoding="utf-8"))
        assert summary['status'] == "FAILED"
        assert summary['error']['type'] == "StepFailedError"
        assert [s['status'] for s in summary['steps']] == ["COMPLETED", "FAILED", "NOT_RUN"]
        assert summary['final_rows'] == 4
        assert summary['output_files'] == []

    def test_invalid_config_exits_nonzero(self, project):
        """Test an unknown step type is reported as a configuration error."""
        config = _write_config(project, [{'type': 'load', 'path': 'data/genomes.tbl'}, {'type': 'sort'}])
        result = CliRunner().invoke(cli, ['run', str(config), '--quiet'])
        assert result.exit_code == 1
        assert "Unknown step type" in result.output

    def test_input_override(self, project, write_tab):
        """Test --input replaces the load step's file."""
        other = write_tab("other.tbl", [["id", "genus"], ["x1", "Vibrio"]])
        config = _write_config(project, [
            {'type': 'load', 'path': 'data/genomes.tbl'},
            {'type': 'save_flat', 'path': 'out/other.tbl'},
        ])
        result = CliRunner().invoke(cli, ['run', str(config), '--quiet', '--input', str(other)])
        assert result.exit_code == 0, result.output
        assert (project / "out" / "other.tbl").read_text(encoding="utf-8") == "id\tgenus\nx1\tVibrio\n"


@pytest.mark.integration
class TestOtherCommands:
    """Test list-steps, init-config and version."""

    def test_list_steps(self):
        """Test every step type is listed."""
        result = CliRunner().invoke(cli, ['list-steps'])
        assert result.exit_code == 0
        for step_type in ("load", "natural_join", "pick", "save_confusion"):
            assert step_type in result.output

    def test_init_config_is_loadable(self, tmp_path):
        """Test the sample configuration parses into a valid pipeline definition."""
        from tabjoin.core.pipeline import Pipeline

        target = tmp_path / "configs" / "sample.yaml"
        result = CliRunner().invoke(cli, ['init-config', str(target)])
        assert result.exit_code == 0
        pipeline = Pipeline.from_yaml(str(target))
        assert pipeline.is_valid()

    def test_version(self):
        """Test the version command."""
        result = CliRunner().invoke(cli, ['version'])
        assert result.exit_code == 0
        assert "tabjoin v0.1.0" in result.output
