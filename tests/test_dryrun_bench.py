# tests/test_dryrun_bench.py

import json
from pathlib import Path

import pytest

from dryflow.runner import run_dry_run

BENCH_DIR = Path(__file__).resolve().parent.parent / "bench" / "dryrun"


@pytest.mark.parametrize("case_dir", sorted(BENCH_DIR.glob("D*")), ids=lambda p: p.name)
def test_dryrun_bench(case_dir: Path):
    """
    Dry-run benchmark:
    - run every section over workflow.json
    - compare exit code, counts and failing error kinds with expect.json
    """
    wf_file = case_dir / "workflow.json"
    exp_file = case_dir / "expect.json"

    assert wf_file.exists(), f"Missing workflow.json in {case_dir}"
    assert exp_file.exists(), f"Missing expect.json in {case_dir}"

    with exp_file.open("r", encoding="utf-8") as f:
        expect = json.load(f)
    asserts = expect.get("assert") or {}

    report = run_dry_run([wf_file])
    failures = [r.message for r in report.failures]

    if "exit_code" in asserts:
        assert report.exit_code == asserts["exit_code"], f"{case_dir.name}: failures={failures}"

    if "failed" in asserts:
        assert report.failed == asserts["failed"], f"{case_dir.name}: failures={failures}"

    if "passed" in asserts:
        assert report.passed == asserts["passed"], f"{case_dir.name}: passed={report.passed}"

    if "error_kinds" in asserts:
        kinds = sorted({r.kind for r in report.failures})
        assert kinds == sorted(asserts["error_kinds"]), f"{case_dir.name}: kinds={kinds}"

    if "unreachable" in asserts:
        errors = [r.error for r in report.failures if r.kind == "UnreachableNodeError"]
        assert errors and errors[0].items == asserts["unreachable"]

    if "unresolved" in asserts:
        errors = [r.error for r in report.failures if r.kind == "UnresolvedReferenceError"]
        assert errors and errors[0].items == asserts["unresolved"]
