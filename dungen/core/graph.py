"""
Dungeon Graph Model
===================

The mutable graph that the grammar rewrites in place.

- Node: id + label
- Edge: id, src, dest, label, optional prereq, plus open metadata
- DungeonGraph: node-id -> Node and edge-id -> Edge mappings
- IdGenerator: monotonic, never-reused ids for one namespace

Invariant: every edge's src/dest resolves to a node in the same graph
between rewriting steps.
"""

import copy
import logging
from typing import Any, Container, Dict, Iterable, List, Mapping, Optional
from dataclasses import dataclass, field

from dungen.core.errors import GraphIntegrityError
from dungen.core.labels import Label, copy_label, is_subset

logger = logging.getLogger(__name__)

# Edge fields with a dedicated attribute; anything else goes to metadata.
EDGE_FIELDS = ('id', 'src', 'dest', 'label', 'prereq')


# ============================================================================
# ENTITIES
# ============================================================================

@dataclass
class Node:
    """Node in the dungeon graph."""
    id: str
    label: Label = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'label': copy.deepcopy(self.label)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Node':
        return cls(id=data['id'], label=copy_label(data.get('label')))


@dataclass
class Edge:
    """Directed edge in the dungeon graph."""
    id: Optional[str]
    src: str
    dest: str
    label: Label = field(default_factory=dict)
    prereq: Optional[Label] = None  # e.g. {'node_id': <key node>, 'text': ...}
    metadata: Dict[str, Any] = field(default_factory=dict)  # Extra spec fields

    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.metadata)
        data.update({
            'id': self.id,
            'src': self.src,
            'dest': self.dest,
            'label': copy.deepcopy(self.label),
        })
        if self.prereq is not None:
            data['prereq'] = copy.deepcopy(self.prereq)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Edge':
        prereq = data.get('prereq')
        return cls(
            id=data.get('id'),
            src=data['src'],
            dest=data['dest'],
            label=copy_label(data.get('label')),
            prereq=copy.deepcopy(prereq) if prereq is not None else None,
            metadata={
                key: copy.deepcopy(value)
                for key, value in data.items()
                if key not in EDGE_FIELDS
            },
        )


# ============================================================================
# ID GENERATION
# ============================================================================

class IdGenerator:
    """
    Generates unique ids of the form ``<prefix>_<counter>``.

    The counter only moves forward. Ids found in ``taken`` are skipped, so
    generated ids never collide with ids that were supplied by the seed graph.
    """

    def __init__(self, prefix: str = 'gen', start: int = 0):
        self.prefix = prefix
        self.counter = start

    def next(self, taken: Container[str] = ()) -> str:
        while True:
            candidate = f"{self.prefix}_{self.counter}"
            self.counter += 1
            if candidate not in taken:
                return candidate


# ============================================================================
# GRAPH
# ============================================================================

@dataclass
class DungeonGraph:
    """Complete dungeon layout graph."""
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: Dict[str, Edge] = field(default_factory=dict)

    def add_node(self, node: Node) -> Node:
        """Add (or replace) a node."""
        self.nodes[node.id] = node
        return node

    def add_edge(self, edge: Edge, strict: bool = False) -> Edge:
        """
        Add (or replace) an edge.

        Args:
            edge: Edge with an id already assigned
            strict: Raise GraphIntegrityError if an endpoint is missing
        """
        if edge.id is None:
            raise ValueError("Edge must have an id before insertion")
        if strict:
            for endpoint in (edge.src, edge.dest):
                if endpoint not in self.nodes:
                    raise GraphIntegrityError(
                        f"Edge {edge.id} references missing node {endpoint}"
                    )
        self.edges[edge.id] = edge
        return edge

    def remove_edge(self, edge_id: str) -> Optional[Edge]:
        return self.edges.pop(edge_id, None)

    def nodes_with_label(self, pattern: Mapping[str, Any]) -> List[Node]:
        """Get all nodes whose label contains ``pattern``."""
        return [n for n in self.nodes.values() if is_subset(pattern, n.label)]

    def out_edges(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges.values() if e.src == node_id]

    def dangling_edges(self) -> List[Edge]:
        """Edges whose src or dest is not a node of this graph."""
        return [
            e for e in self.edges.values()
            if e.src not in self.nodes or e.dest not in self.nodes
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-mapping form, suitable for JSON."""
        return {
            'nodes': {nid: node.to_dict() for nid, node in self.nodes.items()},
            'edges': {eid: edge.to_dict() for eid, edge in self.edges.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DungeonGraph':
        graph = cls()
        for node_data in data.get('nodes', {}).values():
            graph.add_node(Node.from_dict(node_data))
        for edge_data in data.get('edges', {}).values():
            graph.add_edge(Edge.from_dict(edge_data))
        return graph


def build_graph(
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
) -> DungeonGraph:
    """
    Build a graph from lists of node and edge mappings.

    Edges without an id are numbered ``edge_1``, ``edge_2``, ...

    Args:
        nodes: Node mappings with "id" and optional "label"
        edges: Edge mappings with "src", "dest" and optional "id"/"label"

    Returns:
        DungeonGraph
    """
    graph = DungeonGraph()
    for node_data in nodes:
        graph.add_node(Node.from_dict(node_data))

    counter = 0
    for edge_data in edges:
        edge = Edge.from_dict(edge_data)
        if not edge.id:
            counter += 1
            edge.id = f"edge_{counter}"
        graph.add_edge(edge)

    dangling = graph.dangling_edges()
    if dangling:
        logger.warning(f"Seed graph has {len(dangling)} dangling edge(s)")
    return graph
