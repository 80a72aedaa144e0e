# dryflow/executable/sandbox.py

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from py_mini_racer import JSTimeoutException, MiniRacer

from dryflow.config import DryRunConfig
from dryflow.errors import (
    DryRunError,
    EmptyResultError,
    MissingScriptError,
    ScriptExecutionError,
)
from dryflow.executable.mocks import MockContext, build_mock_context
from dryflow.model import Node, WorkflowDocument
from dryflow.report import CheckResult
from dryflow.utils.logger import get_logger

logger = get_logger("sandbox")

SCRIPT_PARAMETER = "jsCode"

# The harness runs inside a fresh V8 isolate. The user script is compiled with
# `new Function`, so its scope is the isolate's global object (JS builtins only)
# plus the three parameters `$`, `$input` and `$json`. Everything it can reach
# is a deep-frozen copy of the mock context.
_HARNESS = r"""
(function (ctx, code) {
  function freeze(value) {
    if (value !== null && typeof value === "object" && !Object.isFrozen(value)) {
      Object.getOwnPropertyNames(value).forEach(function (key) { freeze(value[key]); });
      Object.freeze(value);
    }
    return value;
  }
  freeze(ctx);

  function wrap(json) { return Object.freeze({ json: json }); }

  function accessor(items, current) {
    var wrapped = Object.freeze(items.map(wrap));
    return Object.freeze({
      item: current,
      first: function () { return wrapped[0]; },
      last: function () { return wrapped[wrapped.length - 1]; },
      all: function () { return wrapped.slice(); }
    });
  }

  var lookup = function (name) {
    var data = Object.prototype.hasOwnProperty.call(ctx.fixtures, name) ? ctx.fixtures[name] : undefined;
    var items;
    if (Array.isArray(data)) {
      items = data.length ? data : [freeze({})];
    } else if (data === undefined || data === null) {
      items = [freeze({})];
    } else {
      items = [data];
    }
    return accessor(items, wrap(items[0]));
  };
  var input = accessor(ctx.input, wrap(ctx.current));

  var body = new Function("$", "$input", "$json", code);
  var result = body.call(undefined, lookup, input, ctx.current);
  if (result === undefined || result === null) {
    return null;
  }
  var kind = Array.isArray(result) ? "array" : typeof result;
  try {
    return JSON.stringify({ kind: kind, value: result });
  } catch (e) {
    // circular or BigInt values are still results; only the value is dropped
    return JSON.stringify({ kind: kind });
  }
})(%s, %s)
"""


@dataclass(frozen=True)
class ScriptResult:
    kind: str
    value: Any


class ScriptSandbox:
    """
    Executes code-node scripts against a mock context, one fresh isolate per
    script, with a wall-clock budget per execution.
    """

    def __init__(self, context: Optional[MockContext] = None, timeout_ms: int = 2000):
        self.context = context or build_mock_context()
        self.timeout_ms = timeout_ms
        # serialized once; every run gets the identical snapshot
        self._payload = json.dumps(self.context.to_payload(), ensure_ascii=False)

    def run(self, code: str) -> ScriptResult:
        """
        Execute `code` and return what it produced.
        Raises ScriptExecutionError / EmptyResultError.
        """
        source = _HARNESS % (self._payload, json.dumps(code))
        ctx = MiniRacer()
        try:
            raw = ctx.eval(source, timeout=self.timeout_ms)
        except JSTimeoutException:
            raise ScriptExecutionError(f"exceeded time budget of {self.timeout_ms} ms")
        except Exception as e:
            raise ScriptExecutionError(_error_summary(str(e)) or type(e).__name__)
        finally:
            ctx.close()

        if raw is None:
            raise EmptyResultError("got undefined/null")
        outcome = json.loads(raw)
        return ScriptResult(kind=outcome["kind"], value=outcome.get("value"))


# ---------- Code node checks ----------

def extract_script(node: Node) -> str:
    code = node.parameters.get(SCRIPT_PARAMETER)
    if not isinstance(code, str) or not code.strip():
        raise MissingScriptError(f'"{node.label}" has no {SCRIPT_PARAMETER}')
    return code


def check_code_nodes(
    document: WorkflowDocument,
    config: Optional[DryRunConfig] = None,
    sandbox: Optional[ScriptSandbox] = None,
) -> List[CheckResult]:
    """Execute every code node of a document; one result per node."""
    config = config or DryRunConfig()
    sandbox = sandbox or ScriptSandbox(timeout_ms=config.script_timeout_ms)
    label = document.label

    results: List[CheckResult] = []
    for node in document.nodes_of_type(config.code_node_type):
        try:
            code = extract_script(node)
        except MissingScriptError as e:
            results.append(CheckResult.failure(f'[{label}] "{node.label}" has {SCRIPT_PARAMETER}', e))
            continue

        logger.debug("executing code node %r of %s", node.label, label)
        try:
            result = sandbox.run(code)
        except EmptyResultError as e:
            results.append(CheckResult.failure(f'[{label}] "{node.label}" returns a value', e))
        except DryRunError as e:
            logger.warning("code node %r of %s failed: %s", node.label, label, e)
            results.append(CheckResult.failure(f'[{label}] "{node.label}" executes without error', e))
        else:
            results.append(CheckResult.success(
                f'[{label}] "{node.label}" executes without error and returns {result.kind}'
            ))
    return results


def _error_summary(text: str) -> str:
    """Pick the line of a V8 error dump that carries the message."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        if "Error" in line:
            return line
    return lines[0] if lines else ""
