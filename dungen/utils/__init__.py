"""
Utility Module for dungen
=========================

Graph export and validation helpers.
"""

from .graph_utils import (
    graph_to_dot,
    render_dot,
    graph_to_networkx,
    find_nodes_by_type,
    validate_graph_topology,
)

__all__ = [
    'graph_to_dot',
    'render_dot',
    'graph_to_networkx',
    'find_nodes_by_type',
    'validate_graph_topology',
]
