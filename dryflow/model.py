# dryflow/model.py
"""
In-memory view of a workflow document.

The parsed mapping is kept as-is in `WorkflowDocument.raw`; everything else is a
lenient, read-only view over it so that malformed documents can still be
analyzed (the schema checker is the one that reports malformations).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional


@dataclass(frozen=True)
class Node:
    id: Any
    name: Optional[str]
    type: Optional[str]
    parameters: Dict[str, Any]
    position: Any
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        params = data.get("parameters")
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            type=data.get("type"),
            parameters=params if isinstance(params, dict) else {},
            position=data.get("position"),
            raw=data,
        )

    @property
    def label(self) -> str:
        return str(self.name or self.id or "?")


@dataclass(frozen=True)
class ConnectionEdge:
    source: str
    target: Any
    output: int = 0
    index: int = 0

    def __str__(self) -> str:
        return f"{self.source} → {self.target}"


@dataclass(frozen=True)
class WorkflowDocument:
    source: str
    raw: Dict[str, Any] = field(repr=False)

    @property
    def name(self) -> Optional[str]:
        name = self.raw.get("name")
        return name if isinstance(name, str) and name else None

    @property
    def label(self) -> str:
        """Human label used in report lines: workflow name, else the file name."""
        return self.name or Path(self.source).name

    @property
    def nodes(self) -> List[Node]:
        nodes = self.raw.get("nodes")
        if not isinstance(nodes, list):
            return []
        return [Node.from_dict(n) for n in nodes if isinstance(n, dict)]

    @property
    def node_names(self) -> List[str]:
        return [n.name for n in self.nodes if isinstance(n.name, str)]

    @property
    def connections(self) -> Dict[str, Any]:
        conns = self.raw.get("connections")
        return conns if isinstance(conns, dict) else {}

    @property
    def settings(self) -> Any:
        return self.raw.get("settings")

    def node(self, name: str) -> Optional[Node]:
        for n in self.nodes:
            if n.name == name:
                return n
        return None

    def nodes_of_type(self, node_type: str) -> List[Node]:
        return [n for n in self.nodes if n.type == node_type]

    def edges(self) -> List[ConnectionEdge]:
        return list(iter_edges(self.connections))


def iter_edges(connections: Dict[str, Any]) -> Iterator[ConnectionEdge]:
    """
    Yield every edge of every `main` output slot:
      connections[src]["main"] = [
         [ {"node": "B", "type": "main", "index": 0}, ... ],   # output 0
         [],                                                   # output 1 (unconnected)
      ]
    Malformed slots/hops are skipped; the schema checker reports them.
    """
    for src_name, outputs in connections.items():
        if not isinstance(outputs, dict):
            continue
        slots = outputs.get("main")
        if not isinstance(slots, list):
            continue
        for out_idx, slot in enumerate(slots):
            if not isinstance(slot, list):
                continue
            for hop in slot:
                if not isinstance(hop, dict) or "node" not in hop:
                    continue
                index = hop.get("index")
                yield ConnectionEdge(
                    source=src_name,
                    target=hop.get("node"),
                    output=out_idx,
                    index=index if isinstance(index, int) else 0,
                )
