"""
Dungeon Graph Utilities
=======================

Export and checks for generated dungeon graphs.

This module provides:
- DOT export (one line per node and edge, labelled by "type")
- Graphviz rendering of DOT text
- Conversion to a networkx MultiDiGraph (parallel edges are kept)
- Topology validation: referential integrity and start -> goal reachability

Usage:
    from dungen.utils.graph_utils import graph_to_dot, validate_graph_topology

    dot = graph_to_dot(simulator.graph)
    is_valid, errors = validate_graph_topology(simulator.graph)
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Tuple, Union

import networkx as nx

from dungen.core.errors import DungenError
from dungen.core.graph import DungeonGraph

logger = logging.getLogger(__name__)


# ==========================================
# DOT EXPORT
# ==========================================

def _dot_quote(value: object) -> str:
    text = '' if value is None else str(value)
    return '"' + text.replace('\\', '\\\\').replace('"', '\\"') + '"'


def _label_type(label: Optional[Mapping]) -> Optional[str]:
    if not label:
        return None
    return label.get('type')


def graph_to_dot(graph: DungeonGraph, name: str = 'G') -> str:
    """
    Convert the graph to DOT text.

    Example:
        >>> print(graph_to_dot(initial_dungeon_graph()))
        digraph G {
          "start" [label="start"];
          "goal" [label="win"];
          "start" -> "goal" [label="path"];
        }
    """
    lines = [f'digraph {name} {{']
    for node_id, node in graph.nodes.items():
        lines.append(f'  {_dot_quote(node_id)} [label={_dot_quote(_label_type(node.label))}];')
    for edge in graph.edges.values():
        lines.append(
            f'  {_dot_quote(edge.src)} -> {_dot_quote(edge.dest)} '
            f'[label={_dot_quote(_label_type(edge.label))}];'
        )
    lines.append('}')
    return '\n'.join(lines)


def render_dot(
    dot_text: str,
    output_path: Union[str, Path],
    fmt: str = 'pdf',
    dot_command: str = 'dot',
) -> Path:
    """
    Render DOT text with Graphviz.

    Raises:
        DungenError: If Graphviz is missing or fails
    """
    output_path = Path(output_path)
    try:
        subprocess.run(
            [dot_command, f'-T{fmt}', '-o', str(output_path)],
            input=dot_text,
            text=True,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise DungenError(f"Graphviz rendering failed: {e}") from e
    logger.info(f"Graph exported to {output_path}")
    return output_path


# ==========================================
# NETWORKX CONVERSION
# ==========================================

def graph_to_networkx(graph: DungeonGraph) -> nx.MultiDiGraph:
    """
    Convert to a networkx MultiDiGraph.

    Node attributes: ``label`` (full label) and ``type``.
    Edge keys are the edge ids; attributes: ``label``, ``type``, ``prereq``.
    Edges with a missing endpoint are skipped.
    """
    G = nx.MultiDiGraph()
    for node_id, node in graph.nodes.items():
        G.add_node(node_id, label=node.label, type=_label_type(node.label))
    for edge in graph.edges.values():
        if edge.src not in graph.nodes or edge.dest not in graph.nodes:
            continue
        G.add_edge(
            edge.src,
            edge.dest,
            key=edge.id,
            label=edge.label,
            type=_label_type(edge.label),
            prereq=edge.prereq,
        )
    return G


def find_nodes_by_type(graph: DungeonGraph, type_name: str) -> List[str]:
    """Ids of all nodes whose label type equals ``type_name``."""
    return [nid for nid, node in graph.nodes.items() if _label_type(node.label) == type_name]


# ==========================================
# VALIDATION
# ==========================================

def validate_graph_topology(
    graph: DungeonGraph,
    start_type: str = 'start',
    goal_type: str = 'win',
) -> Tuple[bool, List[str]]:
    """
    Check referential integrity and start -> goal reachability.

    Args:
        graph: Graph to check
        start_type: Label type of the entrance node
        goal_type: Label type of the goal node

    Returns:
        (is_valid, errors)
    """
    errors: List[str] = []

    for edge in graph.dangling_edges():
        errors.append(f"Edge {edge.id} references missing node ({edge.src} -> {edge.dest})")

    for edge in graph.edges.values():
        if edge.prereq and 'node_id' in edge.prereq and edge.prereq['node_id'] not in graph.nodes:
            errors.append(f"Edge {edge.id} prerequisite references missing node {edge.prereq['node_id']}")

    starts = find_nodes_by_type(graph, start_type)
    goals = find_nodes_by_type(graph, goal_type)
    if not starts:
        errors.append(f"No '{start_type}' node")
    if not goals:
        errors.append(f"No '{goal_type}' node")

    if starts and goals:
        G = graph_to_networkx(graph)
        if not any(nx.has_path(G, s, g) for s in starts for g in goals):
            errors.append(f"No path from '{start_type}' to '{goal_type}'")

    for error in errors:
        logger.warning(f"Topology check failed: {error}")

    return len(errors) == 0, errors
