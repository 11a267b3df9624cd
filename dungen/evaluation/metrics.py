"""
Layout Metrics
==============
Summary statistics for a generated dungeon graph.

- Type histograms for nodes and edges
- Degree statistics (over the undirected view, parallel edges counted)
- Dead ends: nodes with exactly one incident edge
- Critical path: shortest start -> goal hop count
"""

import logging
from collections import Counter
from typing import Dict, Optional
from dataclasses import dataclass, field

import numpy as np
import networkx as nx

from dungen.core.graph import DungeonGraph
from dungen.utils.graph_utils import find_nodes_by_type, graph_to_networkx

logger = logging.getLogger(__name__)


@dataclass
class LayoutMetrics:
    """Summary of a dungeon layout."""
    num_nodes: int
    num_edges: int
    node_types: Dict[str, int] = field(default_factory=dict)
    edge_types: Dict[str, int] = field(default_factory=dict)
    mean_degree: float = 0.0
    max_degree: int = 0
    dead_end_count: int = 0
    critical_path_length: Optional[int] = None  # None if goal unreachable

    def to_dict(self) -> Dict:
        return {
            'num_nodes': self.num_nodes,
            'num_edges': self.num_edges,
            'node_types': dict(self.node_types),
            'edge_types': dict(self.edge_types),
            'mean_degree': self.mean_degree,
            'max_degree': self.max_degree,
            'dead_end_count': self.dead_end_count,
            'critical_path_length': self.critical_path_length,
        }


def compute_layout_metrics(
    graph: DungeonGraph,
    start_type: str = 'start',
    goal_type: str = 'win',
) -> LayoutMetrics:
    """
    Compute layout metrics for a dungeon graph.

    Args:
        graph: Generated graph
        start_type: Label type of the entrance node
        goal_type: Label type of the goal node

    Returns:
        LayoutMetrics
    """
    G = graph_to_networkx(graph)

    node_types = Counter(str(data.get('type')) for _, data in G.nodes(data=True))
    edge_types = Counter(str(data.get('type')) for _, _, data in G.edges(data=True))

    degrees = np.array([d for _, d in G.degree()], dtype=np.int64)
    if degrees.size:
        mean_degree = float(np.mean(degrees))
        max_degree = int(np.max(degrees))
        dead_end_count = int(np.sum(degrees == 1))
    else:
        mean_degree, max_degree, dead_end_count = 0.0, 0, 0

    critical_path_length = None
    starts = find_nodes_by_type(graph, start_type)
    goals = find_nodes_by_type(graph, goal_type)
    lengths = []
    for s in starts:
        for g in goals:
            try:
                lengths.append(nx.shortest_path_length(G, s, g))
            except nx.NetworkXNoPath:
                continue
    if lengths:
        critical_path_length = int(min(lengths))

    metrics = LayoutMetrics(
        num_nodes=G.number_of_nodes(),
        num_edges=G.number_of_edges(),
        node_types=dict(node_types),
        edge_types=dict(edge_types),
        mean_degree=mean_degree,
        max_degree=max_degree,
        dead_end_count=dead_end_count,
        critical_path_length=critical_path_length,
    )
    logger.debug(f"Layout metrics: {metrics}")
    return metrics
