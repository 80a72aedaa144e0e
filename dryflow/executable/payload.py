# dryflow/executable/payload.py
"""
Static checks of outbound LLM request bodies.

HTTP request nodes that POST to the LLM endpoint carry a templated JSON body
(`parameters.jsonBody`). Expressions (`{{ ... }}`) are replaced by a neutral
token so the template parses as plain JSON, then the request fields are checked
one by one.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator

from dryflow.config import DryRunConfig
from dryflow.errors import PayloadParseError, PayloadSchemaError, UnresolvedReferenceError
from dryflow.model import Node, WorkflowDocument
from dryflow.report import CheckResult, check
from dryflow.semantic.references import extract_references, resolve

BODY_PARAMETER = "jsonBody"
EXPRESSION_PLACEHOLDER = "__EXPRESSION__"

# field -> (label suffix, schema of its value)
REQUEST_FIELDS: Tuple[Tuple[str, str, Dict[str, Any]], ...] = (
    ("model", 'has "model" field', {"type": "string", "minLength": 1}),
    ("max_tokens", 'has valid "max_tokens"', {"type": "number", "exclusiveMinimum": 0}),
    ("system", 'has "system" prompt', {
        "anyOf": [
            {"type": "string", "minLength": 1},
            {"type": "array", "minItems": 1},
        ],
    }),
    ("messages", 'has "messages" array', {"type": "array", "minItems": 1}),
)

MESSAGE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["role", "content"],
    "properties": {
        "role": {"type": "string", "minLength": 1},
        "content": {
            "anyOf": [
                {"type": "string", "minLength": 1},
                {"type": "array", "minItems": 1},
            ],
        },
    },
}


# ---------- Templates ----------

def detemplate(text: str, placeholder: str = EXPRESSION_PLACEHOLDER) -> str:
    """
    Turn an expression-mode template into parseable JSON.

    The leading "=" of expression mode is dropped and every `{{ ... }}` becomes
    `placeholder`. Inside a JSON string the token is inserted bare; outside one
    it is inserted as a quoted string, so the surrounding quoting stays valid.
    """
    if text.startswith("="):
        text = text[1:]

    out: List[str] = []
    in_string = False
    i, n = 0, len(text)
    while i < n:
        if text.startswith("{{", i):
            end = _expression_end(text, i + 2)
            if end != -1:
                out.append(placeholder if in_string else json.dumps(placeholder))
                i = end
                continue
        ch = text[i]
        if in_string and ch == "\\" and i + 1 < n:
            out.append(text[i:i + 2])
            i += 2
            continue
        if ch == '"':
            in_string = not in_string
        out.append(ch)
        i += 1
    return "".join(out)


def _expression_end(text: str, start: int) -> int:
    """Index just past the `}}` closing an expression opened before `start`, or -1."""
    depth = 0
    i = start
    while i < len(text):
        if depth == 0 and text.startswith("}}", i):
            return i + 2
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        i += 1
    return -1


def parse_request_body(raw: Any) -> Dict[str, Any]:
    """De-template and parse a request body. Raises PayloadParseError."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise PayloadParseError(f"no {BODY_PARAMETER}")
    try:
        body = json.loads(detemplate(raw))
    except json.JSONDecodeError as e:
        raise PayloadParseError(str(e))
    if not isinstance(body, dict):
        raise PayloadParseError(f"body is {type(body).__name__}, expected an object")
    return body


# ---------- Field validation ----------

def validate_field(body: Dict[str, Any], field: str, schema: Dict[str, Any]) -> Optional[PayloadSchemaError]:
    if field not in body:
        return PayloadSchemaError(f"missing \"{field}\"")
    errors = list(Draft7Validator(schema).iter_errors(body[field]))
    if not errors:
        return None
    return PayloadSchemaError(f"got: {json.dumps(body[field])} ({errors[0].message})")


def validate_message(message: Any) -> Optional[PayloadSchemaError]:
    errors = list(Draft7Validator(MESSAGE_SCHEMA).iter_errors(message))
    if not errors:
        return None
    return PayloadSchemaError("; ".join(e.message for e in errors))


# ---------- Node checks ----------

def is_llm_request(node: Node, config: DryRunConfig) -> bool:
    params = node.parameters
    method = params.get("method")
    return (
        node.type == config.http_node_type
        and params.get("url") == config.llm_url
        and isinstance(method, str)
        and method.upper() == config.llm_method.upper()
    )


def check_llm_request(node: Node, document: WorkflowDocument, config: DryRunConfig) -> List[CheckResult]:
    prefix = f'[{document.label}] "{node.label}"'
    raw = node.parameters.get(BODY_PARAMETER)

    try:
        body = parse_request_body(raw)
    except PayloadParseError as e:
        return [CheckResult.failure(
            f"{prefix} {BODY_PARAMETER} parses as valid JSON (after expression substitution)", e
        )]

    results = [CheckResult.success(f"{prefix} {BODY_PARAMETER} parses as valid JSON")]
    for field, what, schema in REQUEST_FIELDS:
        err = validate_field(body, field, schema)
        results.append(check(err is None, f"{prefix} {what}", err))

    messages = body.get("messages")
    if isinstance(messages, list):
        for i, msg in enumerate(messages):
            err = validate_message(msg)
            results.append(check(err is None, f"{prefix} message[{i}] has role and content", err))

    # node-scoped references, read from the original (non-substituted) template
    source = raw if isinstance(raw, str) else json.dumps(raw)
    missing = list(resolve(extract_references(source, config.reference_regexes), document.node_names))
    results.append(check(
        not missing,
        f"{prefix} prompt node references are valid",
        UnresolvedReferenceError(f"missing: {', '.join(missing)}", items=missing),
    ))
    return results


def check_llm_requests(document: WorkflowDocument, config: Optional[DryRunConfig] = None) -> List[CheckResult]:
    config = config or DryRunConfig()
    results: List[CheckResult] = []
    for node in document.nodes:
        if is_llm_request(node, config):
            results.extend(check_llm_request(node, document, config))
    return results
