"""
dungen - Dungeon Graph-Grammar Generator
========================================

Grows a dungeon layout graph from a seed graph by repeatedly applying
productions from a prioritized, weighted graph grammar.

Submodules:
- core: Label algebra, graph model, id generation, errors
- generation: Rules, the rewriting engine and the dungeon grammar
- llm: Text-generation clients and the narrator used for flavor text
- utils: DOT export, networkx conversion, topology validation
- evaluation: Layout metrics over generated graphs

Usage:
    from dungen.generation import GraphGrammarSimulator
    from dungen.generation.dungeon_grammar import (
        build_dungeon_grammar, initial_dungeon_graph,
    )

    simulator = GraphGrammarSimulator(
        initial_dungeon_graph(), build_dungeon_grammar(), seed="abc123",
    )
    simulator.run(20)
    graph = simulator.graph
"""

__version__ = "1.0.0"

__all__ = ['core', 'generation', 'llm', 'utils', 'evaluation']
