from dryflow.errors import LoopBackError
from dryflow.report import CheckResult, Report, Section, check


def _report():
    return Report((
        Section("1. First", (CheckResult.success("a"), CheckResult.success("b"))),
        Section("2. Second", (check(False, "c", LoopBackError("targets: X")),)),
    ))


def test_counts_are_derived_from_results():
    report = _report()
    assert report.passed == 2
    assert report.failed == 1
    assert report.exit_code == 1
    assert [r.label for r in report.failures] == ["c"]


def test_empty_report_passes():
    report = Report(())
    assert report.exit_code == 0
    assert "ALL CHECKS PASSED" in report.render()


def test_render_lists_sections_and_failures():
    text = _report().render()
    assert "━━━ 1. First ━━━" in text
    assert "  ✓ a" in text
    assert "  ✗ c: targets: X" in text
    assert "  Passed: 2" in text
    assert "  Failed: 1" in text
    assert "Failures:\n  - c: targets: X" in text
    assert text.endswith("SOME CHECKS FAILED")


def test_to_dict_names_error_kinds():
    data = _report().to_dict()
    assert data["passed"] == 2 and data["failed"] == 1 and data["exit_code"] == 1
    assert data["sections"][1]["results"][0] == {
        "label": "c", "ok": False, "detail": "targets: X", "error": "LoopBackError",
    }


def test_check_helper():
    assert check(True, "ok").ok
    failed = check(False, "bad")
    assert not failed.ok and failed.detail is None and failed.message == "bad"
