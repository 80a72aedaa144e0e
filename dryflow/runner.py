# dryflow/runner.py
"""
Runs every check over a set of workflow files and groups the results by
section. Documents are independent: a file that fails to load only loses its
own checks, and a crash inside one check is recorded as that check's failure.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from dryflow.config import DryRunConfig
from dryflow.errors import DryRunError
from dryflow.executable.mocks import MockContext, build_mock_context, load_fixtures
from dryflow.executable.payload import check_llm_requests
from dryflow.executable.sandbox import ScriptSandbox, check_code_nodes
from dryflow.model import WorkflowDocument
from dryflow.report import CheckResult, Report, Section
from dryflow.semantic.references import check_references
from dryflow.structural.checker import validate_schema
from dryflow.structural.connections import check_connections
from dryflow.structural.loader import load_documents
from dryflow.utils.logger import get_logger

logger = get_logger("runner")

SECTION_LOADING = "0. File Loading"
SECTION_SCHEMA = "1. Schema Validation"
SECTION_GRAPH = "2. Connection Graph"
SECTION_REFERENCES = "3. Node Name References"
SECTION_CODE = "4. Code Node Execution"
SECTION_LLM = "5. LLM Request Validation"

DocumentCheck = Callable[[WorkflowDocument], List[CheckResult]]


def document_checks(config: DryRunConfig, sandbox: ScriptSandbox) -> List[Tuple[str, DocumentCheck]]:
    """Per-document checks in report order."""
    return [
        (SECTION_SCHEMA, lambda doc: validate_schema(doc, config)),
        (SECTION_GRAPH, lambda doc: check_connections(doc, config)),
        (SECTION_REFERENCES, lambda doc: check_references(doc, config)),
        (SECTION_CODE, lambda doc: check_code_nodes(doc, config, sandbox)),
        (SECTION_LLM, lambda doc: check_llm_requests(doc, config)),
    ]


def build_context(config: DryRunConfig) -> MockContext:
    extra = load_fixtures(config.fixtures_file) if config.fixtures_file else None
    return build_mock_context(extra)


def run_checks(
    documents: Sequence[WorkflowDocument],
    config: Optional[DryRunConfig] = None,
    context: Optional[MockContext] = None,
) -> List[Section]:
    """Run sections 1-5 over already loaded documents."""
    config = config or DryRunConfig()
    context = context or build_context(config)
    sandbox = ScriptSandbox(context, timeout_ms=config.script_timeout_ms)

    sections: List[Section] = []
    for title, fn in document_checks(config, sandbox):
        results: List[CheckResult] = []
        for doc in documents:
            results.extend(_guarded(title, doc, fn))
        sections.append(Section(title, tuple(results)))
    return sections


def run_dry_run(
    paths: Sequence[Union[str, Path]],
    config: Optional[DryRunConfig] = None,
    context: Optional[MockContext] = None,
) -> Report:
    """Load every path, run every check, return the aggregated report."""
    config = config or DryRunConfig()
    outcomes = load_documents(paths)
    loading = Section(SECTION_LOADING, tuple(result for _, _, result in outcomes))
    documents = [doc for _, doc, _ in outcomes if doc is not None]
    logger.debug("loaded %d of %d workflow files", len(documents), len(outcomes))
    return Report((loading, *run_checks(documents, config, context)))


def summarize_by_document(paths: Sequence[Union[str, Path]], config: Optional[DryRunConfig] = None,
                          context: Optional[MockContext] = None) -> List[Dict[str, object]]:
    """One summary row per file (used by the `bench` command)."""
    config = config or DryRunConfig()
    context = context or build_context(config)
    rows = []
    for path in paths:
        report = run_dry_run([path], config, context)
        kinds = sorted({r.kind for r in report.failures if r.kind})
        rows.append({
            "file": str(path),
            "passed": report.passed,
            "failed": report.failed,
            "errors": ";".join(kinds),
            "ok": report.exit_code == 0,
        })
    return rows


def _guarded(title: str, document: WorkflowDocument, fn: DocumentCheck) -> List[CheckResult]:
    try:
        return fn(document)
    except Exception as e:
        logger.exception("%s crashed on %s", title, document.source)
        return [CheckResult.failure(
            f"[{document.label}] {title.split('. ', 1)[-1]} analysis completes",
            DryRunError(f"analysis failed: {e}"),
        )]
