"""
Tests for production rules: matchers, updaters and the declarative form.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dungen.core.graph import DungeonGraph, Edge, Node
from dungen.generation.rules import (
    EdgeRule,
    GraphRule,
    NodeRule,
    ProductionRule,
    Triple,
    load_grammar,
    make_matcher,
    make_updater,
    rule_from_dict,
)


class TestMakeMatcher:
    """Match spec compilation."""

    def test_absent_spec_is_permissive(self):
        graph = DungeonGraph()
        node = Node('a', {'type': 'room'})
        assert make_matcher(None)(node, graph)
        assert make_matcher({})(node, graph)

    def test_mapping_spec_is_subset_match(self):
        graph = DungeonGraph()
        matcher = make_matcher({'type': 'room'})
        assert matcher(Node('a', {'type': 'room', 'size': 2}), graph)
        assert not matcher(Node('b', {'type': 'key'}), graph)

    def test_callable_spec_used_verbatim(self):
        def predicate(entity, graph):
            return entity.id == 'b' and len(graph.nodes) == 0

        assert make_matcher(predicate) is predicate

    def test_malformed_spec_is_permissive(self):
        assert make_matcher(42)(Node('a'), DungeonGraph())


class TestMakeUpdater:
    """Update spec compilation."""

    def test_absent_spec_is_noop(self):
        node = Node('a', {'type': 'room'})
        assert make_updater(None)(node) is None
        assert node.label == {'type': 'room'}

    def test_mapping_spec_deep_merges(self):
        node = Node('a', {'type': 'room', 'loot': {'gold': 1, 'gems': 2}})
        make_updater({'loot': {'gold': 5}})(node)
        assert node.label == {'type': 'room', 'loot': {'gold': 5, 'gems': 2}}

    def test_mapping_spec_on_missing_label(self):
        node = Node('a', None)
        make_updater({'type': 'room'})(node)
        assert node.label == {'type': 'room'}

    def test_malformed_spec_is_noop(self):
        node = Node('a', {'type': 'room'})
        make_updater('oops')(node)
        assert node.label == {'type': 'room'}


class TestEdgeMatching:
    """Three-way matching of edge rules."""

    def test_all_three_matchers_must_succeed(self):
        graph = DungeonGraph()
        src = Node('s', {'type': 'start'})
        dest = Node('d', {'type': 'win'})
        edge = Edge('e', 's', 'd', {'type': 'path'})
        triple = Triple(src, dest, edge)

        assert EdgeRule(edge={'type': 'path'}, src={'type': 'start'}).matches(triple, graph)
        assert not EdgeRule(edge={'type': 'path'}, dest={'type': 'start'}).matches(triple, graph)
        assert not EdgeRule(edge={'type': 'monster'}).matches(triple, graph)


class TestDeclarativeRules:
    """rule_from_dict / load_grammar."""

    def test_node_rule(self):
        rule = rule_from_dict({
            'type': 'node', 'weight': 2,
            'lhs': {'node': {'type': 'room'}},
            'rhs': {'node': {'lit': True}},
        })
        assert isinstance(rule, NodeRule)
        assert rule.kind == 'node'
        assert rule.weight == 2
        assert rule.node == {'type': 'room'}

    def test_edge_rule(self):
        rule = rule_from_dict({
            'type': 'edge',
            'lhs': {'edge': {'type': 'path'}},
            'rhs': {'edge': {'type': 'passage'}},
        })
        assert isinstance(rule, EdgeRule)
        assert not isinstance(rule, GraphRule)
        assert rule.weight == 1.0
        assert rule.update == {'type': 'passage'}

    def test_graph_rule(self):
        def builder(match):
            return None

        rule = rule_from_dict({
            'type': 'graph',
            'lhs': {'edge': {'type': 'path'}},
            'rhs': {'edge': None, 'subgraph': builder},
        })
        assert isinstance(rule, GraphRule)
        assert rule.kind == 'graph'
        assert rule.subgraph is builder

    def test_unknown_type(self):
        rule = rule_from_dict({'type': 'hyperedge', 'weight': 3})
        assert type(rule) is ProductionRule
        assert rule.kind == 'hyperedge'
        assert rule.weight == 3

    def test_load_grammar_passes_objects_through(self):
        rule = NodeRule(node={'type': 'room'})
        grammar = load_grammar([[rule, {'type': 'edge', 'lhs': {}, 'rhs': {}}], []])
        assert grammar[0][0] is rule
        assert isinstance(grammar[0][1], EdgeRule)
        assert grammar[1] == []

    def test_load_grammar_non_rule_entry_becomes_unknown(self):
        grammar = load_grammar([[None, 42]])
        assert [type(rule) for rule in grammar[0]] == [ProductionRule, ProductionRule]
        assert [rule.kind for rule in grammar[0]] == ['NoneType', 'int']
