# dryflow/errors.py
from __future__ import annotations

from typing import Iterable, List, Optional


class DryRunError(Exception):
    """
    Base class for every failure a dry run can record.

    `items` carries the offending names/edges (when there are any) so callers
    can inspect them without parsing the message.
    """
    tag = "ERROR"

    def __init__(self, message: str, items: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.message = message
        self.items: List[str] = list(items or [])

    def __str__(self) -> str:
        return self.message


class ConfigError(DryRunError):
    tag = "CONFIG"


class ParseError(DryRunError):
    tag = "PARSE"


class SchemaError(DryRunError):
    tag = "SCHEMA"


class GraphIntegrityError(DryRunError):
    tag = "GRAPH"


class UnreachableNodeError(DryRunError):
    tag = "PATH"


class LoopBackError(DryRunError):
    tag = "LOOP"


class UnresolvedReferenceError(DryRunError):
    tag = "REFERENCE"


class MissingScriptError(DryRunError):
    tag = "RUNTIME"


class ScriptExecutionError(DryRunError):
    tag = "RUNTIME"


class EmptyResultError(DryRunError):
    tag = "RUNTIME"


class PayloadParseError(DryRunError):
    tag = "PAYLOAD"


class PayloadSchemaError(DryRunError):
    tag = "PAYLOAD"
