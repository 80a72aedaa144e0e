from dryflow.config import DryRunConfig
from dryflow.semantic.references import (
    check_references,
    extract_references,
    iter_strings,
    scan_document,
)


def test_references_inside_scripts_and_templates_are_found(workflow, make_doc):
    scan = scan_document(make_doc(workflow))
    assert scan.found == {"A", "B"}
    assert scan.unresolved == ()


def test_unknown_reference_is_reported_by_name(workflow, make_doc):
    workflow["nodes"][1]["parameters"]["jsCode"] += "\nconst z = $('Z').item.json;"

    results = check_references(make_doc(workflow))

    resolved, coverage = results
    assert not resolved.ok
    assert resolved.kind == "UnresolvedReferenceError"
    assert resolved.error.items == ["Z"]
    assert resolved.detail == "missing: Z"
    # coverage is reported either way
    assert coverage.ok
    assert coverage.label == "[Scenario] found 3 node references"


def test_coverage_line_is_always_reported(workflow, make_doc):
    results = check_references(make_doc(workflow))
    assert [r.ok for r in results] == [True, True]
    assert results[1].label == "[Scenario] found 2 node references"


def test_extraction_is_idempotent(workflow, make_doc):
    doc = make_doc(workflow)
    assert scan_document(doc) == scan_document(doc)


def test_visitor_walks_nested_values_and_keys():
    value = {
        "a": ["x", {"deep": ["$('One')"]}],
        "$('Two')": 1,
        "n": None,
        "f": 1.5,
    }
    assert set(iter_strings(value)) >= {"x", "$('One')", "$('Two')"}
    assert extract_references(value, DryRunConfig().reference_regexes) == {"One", "Two"}


def test_references_anywhere_in_the_document_count(workflow, make_doc):
    workflow["pinData"] = {"A": [{"json": {"note": "copied from $('Elsewhere')"}}]}
    scan = scan_document(make_doc(workflow))
    assert scan.unresolved == ("Elsewhere",)


def test_double_quoted_calls_are_not_references(workflow, make_doc):
    workflow["nodes"][1]["parameters"]["jsCode"] = 'return $("Z").item.json;'
    scan = scan_document(make_doc(workflow))
    assert "Z" not in scan.found


def test_reference_pattern_is_configurable(workflow, make_doc):
    workflow["nodes"][1]["parameters"]["jsCode"] = 'return $node["A"].json;'
    config = DryRunConfig(reference_patterns=(r"\$node\[\"([^\"]+)\"\]",))
    scan = scan_document(make_doc(workflow), config)
    assert scan.found == {"A"}
