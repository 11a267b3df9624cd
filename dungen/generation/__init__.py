"""
Graph-grammar rewriting: rules, the simulator and the dungeon grammar.
"""

from .rules import (
    ProductionRule,
    NodeRule,
    EdgeRule,
    GraphRule,
    Candidate,
    Triple,
    make_matcher,
    make_updater,
    rule_from_dict,
    load_grammar,
)
from .grammar import GraphGrammarSimulator, StepRecord, weighted_choice

__all__ = [
    # Rules
    'ProductionRule',
    'NodeRule',
    'EdgeRule',
    'GraphRule',
    'Candidate',
    'Triple',
    'make_matcher',
    'make_updater',
    'rule_from_dict',
    'load_grammar',

    # Engine
    'GraphGrammarSimulator',
    'StepRecord',
    'weighted_choice',
]
