# dryflow/structural/checker.py

import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from jsonschema import Draft7Validator, ValidationError

from dryflow.config import DryRunConfig
from dryflow.errors import SchemaError
from dryflow.model import WorkflowDocument
from dryflow.report import CheckResult
from .schema import build_workflow_schema

_REQUIRED_RE = re.compile(r"^'(.+)' is a required property$")


def schema_violations(workflow: Dict[str, Any], config: Optional[DryRunConfig] = None) -> List[str]:
    """
    Collect every schema violation of a raw workflow mapping, as human-readable
    strings naming the offending node where there is one. Never stops early.
    """
    config = config or DryRunConfig()
    validator = Draft7Validator(build_workflow_schema(config.node_type_prefixes))

    violations: List[str] = []
    for error in validator.iter_errors(workflow):
        msg = _describe(error, workflow, config.node_type_prefixes)
        if msg not in violations:
            violations.append(msg)

    violations.extend(_duplicate_names(workflow))
    return violations


def validate_schema(document: WorkflowDocument, config: Optional[DryRunConfig] = None) -> List[CheckResult]:
    """One aggregated pass/fail per document."""
    config = config or DryRunConfig()
    violations = schema_violations(document.raw, config)
    label = f"[{document.label}] document has required fields and valid node structure"
    if not violations:
        return [CheckResult.success(label)]
    return [CheckResult.failure(label, SchemaError("; ".join(violations), items=violations))]


# ---------- Helpers ----------

def _node_label(node: Any) -> str:
    if not isinstance(node, dict):
        return "?"
    return str(node.get("name") or node.get("id") or "?")


def _describe(error: ValidationError, workflow: Dict[str, Any], prefixes: Sequence[str]) -> str:
    path = list(error.absolute_path)

    missing = _REQUIRED_RE.match(error.message) if error.validator == "required" else None

    # errors inside nodes[i]
    if len(path) >= 2 and path[0] == "nodes" and isinstance(path[1], int):
        node = workflow["nodes"][path[1]]
        who = _node_label(node)
        field = path[2] if len(path) > 2 else None
        if missing:
            return f'{who} missing "{missing.group(1)}"'
        if field == "position":
            return f"{who} invalid position"
        if field == "type" and error.validator == "pattern":
            return f'{who} type "{error.instance}" missing {_prefix_text(prefixes)} prefix'
        return f"{who}: {'.'.join(str(p) for p in path[2:]) or 'node'} {error.message}"

    if len(path) > 1 and path[0] == "connections":
        where = " → ".join(str(p) for p in path[1:])
        return f"connections {where}: {error.message}"

    if missing:
        return f'missing top-level key "{missing.group(1)}"'
    if path:
        return f'"{path[0]}": {error.message}'
    return error.message


def _prefix_text(prefixes: Sequence[str]) -> str:
    return " or ".join(f'"{p}"' for p in prefixes)


def _duplicate_names(workflow: Dict[str, Any]) -> List[str]:
    nodes = workflow.get("nodes")
    if not isinstance(nodes, list):
        return []
    counts = Counter(
        n.get("name") for n in nodes
        if isinstance(n, dict) and isinstance(n.get("name"), str)
    )
    return [f'duplicate node name "{name}"' for name, c in counts.items() if c > 1]
