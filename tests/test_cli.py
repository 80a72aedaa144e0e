import json

import pandas as pd
from typer.testing import CliRunner

from dryflow.cli import app

runner = CliRunner()


def test_check_passes_on_valid_workflow(workflow, write_workflow):
    path = write_workflow(workflow)
    result = runner.invoke(app, ["check", str(path)])
    assert result.exit_code == 0, result.output
    assert "ALL CHECKS PASSED" in result.output
    assert "Failed: 0" in result.output


def test_check_fails_on_orphaned_node(workflow, write_workflow):
    workflow["connections"]["B"] = {"main": [[]]}
    path = write_workflow(workflow)
    result = runner.invoke(app, ["check", str(path)])
    assert result.exit_code == 1
    assert "unreachable: C" in result.output


def test_check_keeps_going_after_a_parse_error(tmp_path, workflow, write_workflow):
    good = write_workflow(workflow, "good.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")

    result = runner.invoke(app, ["check", str(bad), str(good)])

    assert result.exit_code == 1
    assert "bad.json parses as valid JSON" in result.output
    assert '[Scenario] "B" executes without error' in result.output


def test_check_uses_default_files_from_cwd(tmp_path, monkeypatch, workflow, write_workflow):
    write_workflow(workflow, "workflow-research-pipeline.json")
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["check"])
    # the weekly report file is absent
    assert result.exit_code == 1
    assert "workflow-weekly-report.json parses as valid JSON" in result.output
    assert "Passed: 15" in result.output


def test_check_writes_json_report(tmp_path, workflow, write_workflow):
    path = write_workflow(workflow)
    out = tmp_path / "out" / "report.json"
    result = runner.invoke(app, ["check", str(path), "--report", str(out)])
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["failed"] == 0
    assert [s["title"] for s in data["sections"]][0] == "0. File Loading"


def test_check_with_extra_fixtures(tmp_path, workflow, write_workflow):
    workflow["nodes"][1]["parameters"]["jsCode"] = "return $('A').item.json.answer;"
    path = write_workflow(workflow)

    failing = runner.invoke(app, ["check", str(path)])
    assert failing.exit_code == 1

    fixtures = tmp_path / "fixtures.json"
    fixtures.write_text(json.dumps({"A": {"answer": 42}}), encoding="utf-8")
    passing = runner.invoke(app, ["check", str(path), "--fixtures", str(fixtures)])
    assert passing.exit_code == 0, passing.output


def test_refs_lists_names(workflow, write_workflow):
    workflow["nodes"][1]["parameters"]["jsCode"] += "\n$('Z');"
    path = write_workflow(workflow)
    result = runner.invoke(app, ["refs", str(path)])
    assert result.exit_code == 1
    assert "missing  Z" in result.output
    assert "ok       A" in result.output
    assert "3 references, 1 unresolved" in result.output


def test_bench_writes_csv(tmp_path, workflow, write_workflow):
    write_workflow(workflow, "a.json")
    broken = dict(workflow, connections={})
    write_workflow(broken, "b.json")
    out = tmp_path / "results" / "bench.csv"

    result = runner.invoke(app, ["bench", "--glob", str(tmp_path / "*.json"), "--out", str(out)])

    assert result.exit_code == 0, result.output
    df = pd.read_csv(out)
    assert list(df["failed"]) == [0, 1]
    assert df.loc[1, "errors"] == "UnreachableNodeError"
