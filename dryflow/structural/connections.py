# dryflow/structural/connections.py

from typing import List, Optional

import networkx as nx

from dryflow.config import DryRunConfig
from dryflow.errors import GraphIntegrityError, LoopBackError, UnreachableNodeError
from dryflow.model import WorkflowDocument
from dryflow.report import CheckResult, check
from dryflow.utils.graph import bfs_order, build_connection_graph, trigger_names


def check_connections(document: WorkflowDocument, config: Optional[DryRunConfig] = None) -> List[CheckResult]:
    """
    Run the four connection-graph checks. Each one is reported on its own, so a
    workflow can fail reachability and still pass integrity.
    """
    config = config or DryRunConfig()
    G = build_connection_graph(document)
    label = document.label

    results = [
        check_sources(G, label),
        check_targets(G, label),
        check_reachability(G, label, config),
    ]
    results.extend(check_loop_backs(G, label, config))
    return results


def check_sources(G: nx.DiGraph, label: str) -> CheckResult:
    missing = list(G.graph.get("dangling_sources", []))
    return check(
        not missing,
        f"[{label}] all connection source nodes exist",
        GraphIntegrityError(f"missing: {', '.join(missing)}", items=missing),
    )


def check_targets(G: nx.DiGraph, label: str) -> CheckResult:
    # only the target decides; a missing source is reported by check_sources
    bad = [
        e for e in G.graph.get("dangling_edges", [])
        if not isinstance(e.target, str) or e.target not in G
    ]
    edges = [str(e) for e in bad]
    return check(
        not bad,
        f"[{label}] all connection target nodes exist",
        GraphIntegrityError(f"missing: {', '.join(edges)}", items=edges),
    )


def find_unreachable(G: nx.DiGraph, config: DryRunConfig) -> List[str]:
    """Non-trigger nodes never visited by a BFS from the trigger set."""
    triggers = trigger_names(G, config.trigger_types)
    reachable = set(bfs_order(G, triggers))
    return [n for n in G.nodes if n not in reachable]


def check_reachability(G: nx.DiGraph, label: str, config: DryRunConfig) -> CheckResult:
    unreachable = find_unreachable(G, config)
    return check(
        not unreachable,
        f"[{label}] all non-trigger nodes are reachable",
        UnreachableNodeError(f"unreachable: {', '.join(unreachable)}", items=unreachable),
    )


def check_loop_backs(G: nx.DiGraph, label: str, config: DryRunConfig) -> List[CheckResult]:
    """Every loop marker must have an outgoing edge into a batch splitter."""
    results: List[CheckResult] = []
    for name, data in G.nodes(data=True):
        if data.get("type") != config.loop_marker_type:
            continue
        targets = list(G.successors(name))
        closes = any(G.nodes[t].get("type") == config.batch_node_type for t in targets)
        detail = f"targets: {', '.join(targets)}" if targets else "no outgoing connections"
        results.append(check(
            closes,
            f'[{label}] "{name}" loops back to a batch splitter node',
            LoopBackError(detail, items=targets),
        ))
    return results
