# tests/conftest.py
import copy
import json

import pytest

from dryflow.model import WorkflowDocument


LLM_BODY = (
    '={\n'
    '  "model": "claude-sonnet-4-5",\n'
    '  "max_tokens": 1024,\n'
    '  "system": "You are a research analyst.",\n'
    '  "messages": [\n'
    '    {"role": "user", "content": "Summarize: {{ JSON.stringify($(\'B\').item.json) }}"}\n'
    '  ]\n'
    '}'
)

HAPPY_WORKFLOW = {
    "name": "Scenario",
    "nodes": [
        {
            "id": "a1",
            "name": "A",
            "type": "n8n-nodes-base.manualTrigger",
            "position": [0, 0],
            "parameters": {},
        },
        {
            "id": "b1",
            "name": "B",
            "type": "n8n-nodes-base.code",
            "position": [220, 0],
            "parameters": {
                "jsCode": "const a = $('A').item.json;\nreturn [{ json: { source: 'A', seen: a } }];",
            },
        },
        {
            "id": "c1",
            "name": "C",
            "type": "n8n-nodes-base.httpRequest",
            "position": [440, 0],
            "parameters": {
                "method": "POST",
                "url": "https://api.anthropic.com/v1/messages",
                "jsonBody": LLM_BODY,
            },
        },
    ],
    "connections": {
        "A": {"main": [[{"node": "B", "type": "main", "index": 0}]]},
        "B": {"main": [[{"node": "C", "type": "main", "index": 0}]]},
    },
    "settings": {"executionOrder": "v1"},
}


@pytest.fixture
def workflow():
    """A fresh copy of the trigger -> code -> LLM request scenario."""
    return copy.deepcopy(HAPPY_WORKFLOW)


@pytest.fixture
def make_doc():
    def _make(data, source="scenario.json"):
        return WorkflowDocument(source=source, raw=data)
    return _make


@pytest.fixture
def write_workflow(tmp_path):
    def _write(data, name="workflow.json"):
        p = tmp_path / name
        p.write_text(json.dumps(data), encoding="utf-8")
        return p
    return _write
