# dryflow/report.py
"""
Check results and their aggregation.

Every check returns `CheckResult` values; nothing is counted globally. A run
groups them into `Section`s and `Report` derives the totals, the rendered text
and the process exit status from those values alone.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from dryflow.errors import DryRunError

PASS_MARK = "✓"
FAIL_MARK = "✗"


@dataclass(frozen=True)
class CheckResult:
    label: str
    ok: bool
    detail: Optional[str] = None
    error: Optional[DryRunError] = field(default=None, compare=False)

    @classmethod
    def success(cls, label: str) -> "CheckResult":
        return cls(label=label, ok=True)

    @classmethod
    def failure(cls, label: str, error: Optional[DryRunError] = None) -> "CheckResult":
        detail = str(error) if error is not None and str(error) else None
        return cls(label=label, ok=False, detail=detail, error=error)

    @property
    def kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def message(self) -> str:
        return f"{self.label}: {self.detail}" if self.detail else self.label

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "ok": self.ok,
            "detail": self.detail,
            "error": self.kind,
        }


def check(condition: bool, label: str, error: Optional[DryRunError] = None) -> CheckResult:
    """Turn a boolean condition into a labeled result."""
    return CheckResult.success(label) if condition else CheckResult.failure(label, error)


@dataclass(frozen=True)
class Section:
    title: str
    results: Sequence[CheckResult] = ()


@dataclass(frozen=True)
class Report:
    sections: Sequence[Section] = ()

    @property
    def results(self) -> List[CheckResult]:
        return [r for s in self.sections for r in s.results]

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def failures(self) -> List[CheckResult]:
        return [r for r in self.results if not r.ok]

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1

    def section(self, title: str) -> Optional[Section]:
        for s in self.sections:
            if s.title == title:
                return s
        return None

    def render(self) -> str:
        lines: List[str] = []
        for s in self.sections:
            lines.append("")
            lines.append(_header(s.title))
            for r in s.results:
                mark = PASS_MARK if r.ok else FAIL_MARK
                lines.append(f"  {mark} {r.message}")

        lines.append("")
        lines.append(_header("RESULTS"))
        lines.append(f"  Passed: {self.passed}")
        lines.append(f"  Failed: {self.failed}")

        if self.failures:
            lines.append("")
            lines.append("Failures:")
            for r in self.failures:
                lines.append(f"  - {r.message}")

        lines.append("")
        lines.append("ALL CHECKS PASSED" if self.failed == 0 else "SOME CHECKS FAILED")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "exit_code": self.exit_code,
            "sections": [
                {"title": s.title, "results": [r.to_dict() for r in s.results]}
                for s in self.sections
            ],
        }


def _header(title: str) -> str:
    return f"━━━ {title} ━━━"
