"""
Tests for the label algebra and graph model
===========================================

Covers structural subset matching, deep merge, the generic string mapper,
graph (de)serialization and id generation.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from dungen.core.errors import GraphIntegrityError
from dungen.core.graph import DungeonGraph, Edge, IdGenerator, Node, build_graph
from dungen.core.labels import copy_label, deep_merge, is_subset, map_strings


class TestIsSubset:
    """Structural-subset matching."""

    def test_extra_keys_ignored(self):
        assert is_subset({'type': 'path'}, {'type': 'path', 'cost': 3})

    def test_missing_key_fails(self):
        assert not is_subset({'type': 'path', 'cost': 3}, {'type': 'path'})

    def test_nested_subset(self):
        label = {'type': 'door', 'lock': {'color': 'red', 'strength': 2}}
        assert is_subset({'lock': {'color': 'red'}}, label)
        assert not is_subset({'lock': {'color': 'blue'}}, label)

    def test_leaf_equality(self):
        assert is_subset({'tags': ['a', 'b']}, {'tags': ['a', 'b']})
        assert not is_subset({'tags': ['a']}, {'tags': ['a', 'b']})

    def test_booleans_do_not_match_numbers(self):
        assert not is_subset({'locked': True}, {'locked': 1})
        assert not is_subset({'n': 0}, {'n': False})
        assert not is_subset({'flags': [True]}, {'flags': [1]})
        assert is_subset({'locked': False}, {'locked': False})
        assert is_subset({'n': 1}, {'n': 1.0})

    def test_mapping_pattern_against_scalar(self):
        assert not is_subset({'lock': {'color': 'red'}}, {'lock': 'red'})

    def test_empty_pattern_matches_everything(self):
        assert is_subset({}, {'anything': 1})


class TestDeepMerge:
    """Deep merge of update specs into labels."""

    def test_sibling_keys_preserved(self):
        label = {'a': {'b': 0, 'c': 2}}
        deep_merge(label, {'a': {'b': 1}})
        assert label == {'a': {'b': 1, 'c': 2}}

    def test_scalar_overwrite(self):
        label = {'type': 'path', 'cost': 1}
        deep_merge(label, {'type': 'monster'})
        assert label == {'type': 'monster', 'cost': 1}

    def test_creates_nested_mapping(self):
        label = {'lock': 'none'}
        deep_merge(label, {'lock': {'color': 'red'}, 'new': {'x': {'y': 1}}})
        assert label == {'lock': {'color': 'red'}, 'new': {'x': {'y': 1}}}

    def test_merged_values_not_aliased(self):
        spec = {'tags': ['a'], 'meta': {'inner': [1]}}
        label = {}
        deep_merge(label, spec)
        label['tags'].append('b')
        label['meta']['inner'].append(2)
        assert spec == {'tags': ['a'], 'meta': {'inner': [1]}}


class TestMapStrings:
    """Generic recursive string rewrite."""

    def test_rewrites_nested_strings(self):
        value = {'src': '$k', 'prereq': {'node_id': '$k', 'list': ['$k', 3]}, 'n': 1}
        result = map_strings(value, lambda s: 'node_7' if s == '$k' else s)
        assert result == {'src': 'node_7', 'prereq': {'node_id': 'node_7', 'list': ['node_7', 3]}, 'n': 1}

    def test_keys_untouched_and_input_unchanged(self):
        value = {'$k': '$k'}
        result = map_strings(value, lambda s: 'X')
        assert result == {'$k': 'X'}
        assert value == {'$k': '$k'}

    def test_non_strings_pass_through(self):
        assert map_strings(5, str.upper) == 5
        assert map_strings(None, str.upper) is None
        assert map_strings(True, str.upper) is True


class TestGraphModel:
    """Node/Edge/DungeonGraph basics."""

    def test_build_graph_numbers_edges(self):
        graph = build_graph(
            nodes=[{'id': 'a'}, {'id': 'b'}],
            edges=[
                {'src': 'a', 'dest': 'b', 'label': {'type': 'path'}},
                {'src': 'b', 'dest': 'a', 'label': {'type': 'path'}},
            ],
        )
        assert list(graph.edges) == ['edge_1', 'edge_2']
        assert graph.nodes['a'].label == {}

    def test_edge_round_trip_keeps_extra_fields(self):
        edge = Edge.from_dict({
            'id': 'e', 'src': 'a', 'dest': 'b',
            'label': {'type': 'path'},
            'prereq': {'node_id': 'k'},
            'weight_hint': 3,
        })
        assert edge.metadata == {'weight_hint': 3}
        assert edge.to_dict() == {
            'id': 'e', 'src': 'a', 'dest': 'b',
            'label': {'type': 'path'},
            'prereq': {'node_id': 'k'},
            'weight_hint': 3,
        }

    def test_graph_round_trip(self):
        graph = build_graph(
            nodes=[{'id': 'a', 'label': {'type': 'start'}}, {'id': 'b', 'label': {'type': 'win'}}],
            edges=[{'src': 'a', 'dest': 'b', 'label': {'type': 'path'}}],
        )
        restored = DungeonGraph.from_dict(graph.to_dict())
        assert restored == graph

    def test_strict_add_edge_rejects_dangling(self):
        graph = DungeonGraph()
        graph.add_node(Node('a'))
        with pytest.raises(GraphIntegrityError):
            graph.add_edge(Edge('e1', 'a', 'missing'), strict=True)

    def test_dangling_edges(self):
        graph = DungeonGraph()
        graph.add_node(Node('a'))
        graph.add_edge(Edge('e1', 'a', 'missing'))
        assert [e.id for e in graph.dangling_edges()] == ['e1']

    def test_nodes_with_label(self):
        graph = build_graph(
            nodes=[{'id': 'a', 'label': {'type': 'room'}}, {'id': 'b', 'label': {'type': 'key'}}],
            edges=[],
        )
        assert [n.id for n in graph.nodes_with_label({'type': 'room'})] == ['a']

    def test_copy_label_none(self):
        assert copy_label(None) == {}


class TestIdGenerator:
    """Monotonic id generation."""

    def test_sequence(self):
        gen = IdGenerator('node')
        assert [gen.next() for _ in range(3)] == ['node_0', 'node_1', 'node_2']

    def test_skips_taken(self):
        gen = IdGenerator('edge')
        assert gen.next({'edge_0', 'edge_1'}) == 'edge_2'
        assert gen.next() == 'edge_3'
