# dryflow/config.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union

import yaml

from dryflow.errors import ConfigError
from dryflow.utils.io import load_any

NODE_TYPE_PREFIX = "n8n-nodes-base."

TRIGGER_TYPES = (
    "n8n-nodes-base.manualTrigger",
    "n8n-nodes-base.scheduleTrigger",
    "n8n-nodes-base.googleSheetsTrigger",
    "n8n-nodes-base.webhook",
)

CODE_NODE_TYPE = "n8n-nodes-base.code"
HTTP_NODE_TYPE = "n8n-nodes-base.httpRequest"
LOOP_MARKER_TYPE = "n8n-nodes-base.noOp"
BATCH_NODE_TYPE = "n8n-nodes-base.splitInBatches"

LLM_URL = "https://api.anthropic.com/v1/messages"
LLM_METHOD = "POST"

# $('Node Name') -- the node name is the single capture group
REFERENCE_PATTERN = r"\$\('([^']+)'\)"

SCRIPT_TIMEOUT_MS = 2000

WORKFLOW_FILES = (
    "workflow-research-pipeline.json",
    "workflow-weekly-report.json",
)


@dataclass(frozen=True)
class DryRunConfig:
    node_type_prefixes: Tuple[str, ...] = (NODE_TYPE_PREFIX,)
    trigger_types: Tuple[str, ...] = TRIGGER_TYPES
    code_node_type: str = CODE_NODE_TYPE
    http_node_type: str = HTTP_NODE_TYPE
    loop_marker_type: str = LOOP_MARKER_TYPE
    batch_node_type: str = BATCH_NODE_TYPE
    llm_url: str = LLM_URL
    llm_method: str = LLM_METHOD
    reference_patterns: Tuple[str, ...] = (REFERENCE_PATTERN,)
    script_timeout_ms: int = SCRIPT_TIMEOUT_MS
    workflow_files: Tuple[str, ...] = WORKFLOW_FILES
    fixtures_file: Optional[str] = None
    _compiled: Tuple[Pattern[str], ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = []
        for pattern in self.reference_patterns:
            try:
                rx = re.compile(pattern)
            except re.error as e:
                raise ConfigError(f"invalid reference pattern {pattern!r}: {e}")
            if rx.groups != 1:
                raise ConfigError(
                    f"reference pattern {pattern!r} must have exactly one capture group (the node name)"
                )
            compiled.append(rx)
        object.__setattr__(self, "_compiled", tuple(compiled))

    @property
    def reference_regexes(self) -> Tuple[Pattern[str], ...]:
        return self._compiled

    def with_overrides(self, **overrides: Any) -> "DryRunConfig":
        """Return a copy with every non-None override applied."""
        clean = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **clean) if clean else self


_TUPLE_FIELDS = {
    "node_type_prefixes",
    "trigger_types",
    "reference_patterns",
    "workflow_files",
}
_INT_FIELDS = {"script_timeout_ms"}


def config_from_mapping(data: Dict[str, Any]) -> DryRunConfig:
    """Build a config from a plain mapping (as read from JSON/YAML)."""
    if not isinstance(data, dict):
        raise ConfigError("config file must contain a mapping at the top level")

    known = {f.name for f in fields(DryRunConfig) if f.init}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _TUPLE_FIELDS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings")
            values[key] = tuple(value)
        elif key in _INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"'{key}' must be a positive integer")
            values[key] = value
        else:
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string")
            values[key] = value
    return DryRunConfig(**values)


def load_config(path: Optional[Union[str, Path]] = None) -> DryRunConfig:
    """
    Load a DryRunConfig from a JSON or YAML file.
    Without a path the built-in defaults are returned.
    """
    if path is None:
        return DryRunConfig()
    try:
        data = load_any(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read config {path}: {e}")
    return config_from_mapping(data or {})


def default_workflow_paths(config: DryRunConfig, base: Optional[Path] = None) -> List[Path]:
    """Workflow files resolved against the invocation directory."""
    root = base or Path.cwd()
    return [root / name for name in config.workflow_files]
