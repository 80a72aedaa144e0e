import json

import pytest

from dryflow.config import DryRunConfig, config_from_mapping, default_workflow_paths, load_config
from dryflow.errors import ConfigError


def test_defaults():
    cfg = load_config()
    assert cfg.code_node_type == "n8n-nodes-base.code"
    assert cfg.llm_url == "https://api.anthropic.com/v1/messages"
    assert [rx.pattern for rx in cfg.reference_regexes] == [r"\$\('([^']+)'\)"]


def test_yaml_file_overrides(tmp_path):
    p = tmp_path / "dryflow.yaml"
    p.write_text(
        "trigger_types:\n  - n8n-nodes-base.cron\nscript_timeout_ms: 500\nllm_url: https://llm.local/v1\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.trigger_types == ("n8n-nodes-base.cron",)
    assert cfg.script_timeout_ms == 500
    assert cfg.llm_url == "https://llm.local/v1"
    assert cfg.code_node_type == DryRunConfig().code_node_type


def test_json_file(tmp_path):
    p = tmp_path / "dryflow.json"
    p.write_text(json.dumps({"workflow_files": ["one.json"]}), encoding="utf-8")
    assert load_config(p).workflow_files == ("one.json",)


@pytest.mark.parametrize("data", [
    {"nope": 1},
    {"script_timeout_ms": 0},
    {"script_timeout_ms": "fast"},
    {"trigger_types": [1, 2]},
    {"reference_patterns": ["no-group"]},
    {"reference_patterns": ["(unclosed"]},
    {"llm_url": 5},
])
def test_bad_values_raise_config_error(data):
    with pytest.raises(ConfigError):
        config_from_mapping(data)


def test_unreadable_config(tmp_path):
    p = tmp_path / "broken.yaml"
    p.write_text("a: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(p)


def test_overrides_skip_none():
    cfg = DryRunConfig().with_overrides(script_timeout_ms=None, fixtures_file="f.json")
    assert cfg.script_timeout_ms == DryRunConfig().script_timeout_ms
    assert cfg.fixtures_file == "f.json"
    assert cfg.reference_regexes


def test_default_paths_are_relative_to_base(tmp_path):
    paths = default_workflow_paths(DryRunConfig(), base=tmp_path)
    assert paths == [tmp_path / "workflow-research-pipeline.json", tmp_path / "workflow-weekly-report.json"]
