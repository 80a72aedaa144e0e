# dryflow/structural/schema.py
import re
from typing import Any, Dict, Sequence

from dryflow.config import NODE_TYPE_PREFIX

# A connection hop: {"node": "Target", "type": "main", "index": 0}
_HOP_SCHEMA = {
    "type": "object",
    "required": ["node"],
    "properties": {
        "node": {"type": "string"},
        "type": {"type": "string"},
        "index": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": True,
}


def build_workflow_schema(type_prefixes: Sequence[str] = (NODE_TYPE_PREFIX,)) -> Dict[str, Any]:
    """
    JSON schema of an exported workflow document. Node types must start with one
    of `type_prefixes`.
    """
    prefix_pattern = "^(?:" + "|".join(re.escape(p) for p in type_prefixes) + ")"
    return {
        "type": "object",
        "required": ["name", "nodes", "connections", "settings"],
        "properties": {
            "name": {"type": "string"},
            "nodes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["id", "name", "type", "position"],
                    "properties": {
                        "type": {
                            # only constrains string values; non-strings are left alone
                            "pattern": prefix_pattern,
                        },
                        "parameters": {"type": "object"},
                        # cosmetic [x, y] canvas coordinates
                        "position": {
                            "type": "array",
                            "minItems": 2,
                            "maxItems": 2,
                            "items": {"type": "number"},
                        },
                    },
                    "additionalProperties": True,
                },
            },
            "connections": {
                "type": "object",
                # Top-level keys: source node names
                "additionalProperties": {
                    "type": "object",
                    # Inner keys: output streams ("main", "ai_languageModel", ...)
                    "additionalProperties": {
                        "type": "array",
                        # one entry per output slot; an empty/null slot is an unconnected port
                        "items": {
                            "type": ["array", "null"],
                            "items": _HOP_SCHEMA,
                        },
                    },
                },
            },
        },
        "additionalProperties": True,
    }


WORKFLOW_SCHEMA = build_workflow_schema()
