# utils/graph.py
from collections import deque
from typing import Iterable, List

import networkx as nx

from dryflow.model import WorkflowDocument


def build_connection_graph(document: WorkflowDocument) -> nx.DiGraph:
    """
    Build the directed connection graph of a workflow, keyed by node name.

    Only edges between existing nodes become graph edges. Connection sources
    and edges that point at unknown names are kept on the graph itself:
      G.graph["dangling_sources"] -> [source names missing from nodes]
      G.graph["dangling_edges"]   -> [ConnectionEdge with an unknown endpoint]
    """
    G = nx.DiGraph()
    for n in document.nodes:
        if isinstance(n.name, str):
            G.add_node(n.name, type=n.type)

    dangling_sources = [src for src in document.connections if src not in G]
    dangling_edges = []

    for edge in document.edges():
        if edge.source not in G or not isinstance(edge.target, str) or edge.target not in G:
            dangling_edges.append(edge)
            continue
        if G.has_edge(edge.source, edge.target):
            G[edge.source][edge.target]["outputs"].append(edge.output)
        else:
            G.add_edge(edge.source, edge.target, outputs=[edge.output])

    G.graph["dangling_sources"] = dangling_sources
    G.graph["dangling_edges"] = dangling_edges
    return G


def trigger_names(G: nx.DiGraph, trigger_types: Iterable[str]) -> List[str]:
    types = set(trigger_types)
    return [n for n, data in G.nodes(data=True) if data.get("type") in types]


def bfs_order(G: nx.DiGraph, sources: Iterable[str]) -> List[str]:
    """
    Breadth-first visit order from several sources at once. Every reachable
    vertex appears exactly once, cycles included.
    """
    seen = set()
    order: List[str] = []
    q = deque()
    for s in sources:
        if s in G and s not in seen:
            seen.add(s)
            q.append(s)

    while q:
        cur = q.popleft()
        order.append(cur)
        for nxt in G.successors(cur):
            if nxt not in seen:
                seen.add(nxt)
                q.append(nxt)
    return order
