# dryflow/structural/loader.py
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from dryflow.errors import ParseError
from dryflow.model import WorkflowDocument
from dryflow.report import CheckResult
from dryflow.utils.io import read_text
from dryflow.utils.logger import get_logger

logger = get_logger("loader")

LoadOutcome = Tuple[Path, Optional[WorkflowDocument], CheckResult]


def parse_document(text: str, source: str = "<string>") -> WorkflowDocument:
    """Parse serialized workflow JSON into a WorkflowDocument."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(str(e))
    if not isinstance(data, dict):
        raise ParseError(f"top-level value is {type(data).__name__}, expected an object")
    return WorkflowDocument(source=source, raw=data)


def load_document(path: Union[str, Path]) -> WorkflowDocument:
    p = Path(path)
    try:
        text = read_text(p)
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot read {p}: {e}")
    doc = parse_document(text, source=str(p))
    logger.debug("loaded %s (%d nodes)", p, len(doc.nodes))
    return doc


def dump_document(document: WorkflowDocument, indent: Optional[int] = 2) -> str:
    return json.dumps(document.raw, ensure_ascii=False, indent=indent)


def load_documents(paths: Sequence[Union[str, Path]]) -> List[LoadOutcome]:
    """
    Load every path independently. A file that fails to parse yields a failed
    result and no document; the others are unaffected.
    """
    outcomes: List[LoadOutcome] = []
    for path in paths:
        p = Path(path)
        label = f"{p.name} parses as valid JSON"
        try:
            doc = load_document(p)
        except ParseError as e:
            logger.warning("failed to load %s: %s", p, e)
            outcomes.append((p, None, CheckResult.failure(label, e)))
            continue
        outcomes.append((p, doc, CheckResult.success(label)))
    return outcomes
