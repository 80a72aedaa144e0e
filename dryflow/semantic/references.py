# dryflow/semantic/references.py

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Iterator, List, Optional, Pattern, Set, Tuple

from dryflow.config import DryRunConfig
from dryflow.errors import UnresolvedReferenceError
from dryflow.model import WorkflowDocument
from dryflow.report import CheckResult, check


@dataclass(frozen=True)
class ReferenceScan:
    found: FrozenSet[str]
    unresolved: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.unresolved


def iter_strings(value: Any) -> Iterator[str]:
    """
    Yield every string inside a parsed JSON value: mapping keys, mapping values
    and list items, at any depth. Script bodies and payload templates are plain
    strings, so references inside them are reached too.
    """
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for k, v in value.items():
            if isinstance(k, str):
                yield k
            yield from iter_strings(v)
    elif isinstance(value, list):
        for v in value:
            yield from iter_strings(v)


def extract_references(value: Any, patterns: Iterable[Pattern[str]]) -> Set[str]:
    """Distinct node names referenced anywhere inside `value`."""
    patterns = list(patterns)
    refs: Set[str] = set()
    for text in iter_strings(value):
        for rx in patterns:
            for m in rx.finditer(text):
                refs.add(m.group(1))
    return refs


def resolve(refs: Iterable[str], node_names: Iterable[str]) -> Tuple[str, ...]:
    names = set(node_names)
    return tuple(sorted(r for r in set(refs) if r not in names))


def scan_document(document: WorkflowDocument, config: Optional[DryRunConfig] = None) -> ReferenceScan:
    config = config or DryRunConfig()
    found = extract_references(document.raw, config.reference_regexes)
    return ReferenceScan(found=frozenset(found), unresolved=resolve(found, document.node_names))


def check_references(document: WorkflowDocument, config: Optional[DryRunConfig] = None) -> List[CheckResult]:
    scan = scan_document(document, config)
    label = document.label
    missing = list(scan.unresolved)
    return [
        check(
            scan.ok,
            f"[{label}] all $('NodeName') references point to existing nodes",
            UnresolvedReferenceError(f"missing: {', '.join(missing)}", items=missing),
        ),
        # coverage line, reported even when everything resolves
        CheckResult.success(f"[{label}] found {len(scan.found)} node references"),
    ]
