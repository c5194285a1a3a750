import json
import pathlib

from click.testing import CliRunner

from actiongraph.cli import cli
from actiongraph.example import EXAMPLE_WORKFLOW


def _write(tmp_path, text, name="ci.yml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_check_prints_ranks(tmp_path):
    path = _write(tmp_path, EXAMPLE_WORKFLOW)
    result = CliRunner().invoke(cli, ["check", str(path)])
    assert result.exit_code == 0, result.output
    assert "RANK 0" in result.output
    assert "Build image [build]" in result.output
    assert "OK" in result.output


def test_check_reports_cycle(tmp_path):
    path = _write(tmp_path, "on: push\njobs:\n  a:\n    needs: b\n  b:\n    needs: a\n")
    result = CliRunner().invoke(cli, ["check", str(path)])
    assert result.exit_code == 1
    assert "Circular job dependency" in result.output
    assert "a -> b -> a" in result.output


def test_check_reports_schema_violations(tmp_path):
    path = _write(tmp_path, "on: push\njobs:\n  a:\n    steps:\n      - name: nothing\n")
    result = CliRunner().invoke(cli, ["check", str(path)])
    assert result.exit_code == 1
    assert "jobs.a.steps[0]" in result.output


def test_check_missing_file(tmp_path):
    result = CliRunner().invoke(cli, ["check", str(tmp_path / "nope.yml")])
    assert result.exit_code == 1
    assert "Workflow file not found" in result.output


def test_check_discovers_single_workflow(tmp_path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        wf_dir = pathlib.Path(".github/workflows")
        wf_dir.mkdir(parents=True)
        (wf_dir / "ci.yml").write_text(EXAMPLE_WORKFLOW, encoding="utf-8")
        result = runner.invoke(cli, ["check"])
    assert result.exit_code == 0, result.output


def test_layout_prints_json(tmp_path):
    path = _write(tmp_path, EXAMPLE_WORKFLOW)
    result = CliRunner().invoke(cli, ["layout", str(path)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [n["id"] for n in payload["nodes"]] == ["lint", "test", "build", "docs", "deploy"]
    assert {"id": "build->deploy", "source": "build", "target": "deploy"}.items() <= payload["edges"][3].items()


def test_example_command():
    result = CliRunner().invoke(cli, ["example"])
    assert result.exit_code == 0
    assert result.output == EXAMPLE_WORKFLOW


def test_unexpected_failure_exits_with_internal_error(tmp_path, monkeypatch):
    def boom(text):
        raise RuntimeError("layout blew up")

    monkeypatch.setattr("actiongraph.cli.run_pipeline", boom)
    path = _write(tmp_path, EXAMPLE_WORKFLOW)
    result = CliRunner().invoke(cli, ["check", str(path)])
    assert result.exit_code == 1
    assert "Internal error" in result.output
    assert "RuntimeError: layout blew up" in result.output
    assert "--debug" in result.output


def test_unexpected_failure_shows_traceback_in_debug(tmp_path, monkeypatch):
    def boom(text):
        raise RuntimeError("layout blew up")

    monkeypatch.setattr("actiongraph.cli.run_pipeline", boom)
    path = _write(tmp_path, EXAMPLE_WORKFLOW)
    result = CliRunner().invoke(cli, ["--debug", "check", str(path)])
    assert result.exit_code == 1
    assert "Traceback" in result.output
