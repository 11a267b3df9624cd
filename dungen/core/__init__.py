"""
Core data model: labels, graph entities, id generation and errors.
"""

from .errors import DungenError, TextGenerationError, GraphIntegrityError
from .labels import Label, Value, is_subset, deep_merge, map_strings, copy_label
from .graph import Node, Edge, DungeonGraph, IdGenerator, build_graph

__all__ = [
    # Errors
    'DungenError',
    'TextGenerationError',
    'GraphIntegrityError',

    # Labels
    'Label',
    'Value',
    'is_subset',
    'deep_merge',
    'map_strings',
    'copy_label',

    # Graph
    'Node',
    'Edge',
    'DungeonGraph',
    'IdGenerator',
    'build_graph',
]
