"""
Dungeon Generation - Command-Line Entry Point
=============================================

Grows a dungeon from the seed corridor (start -> goal) with the dungeon
grammar and reports the result.

Usage:
    python -m dungen.generate --seed abc123 --steps 20 --dump

    # Write DOT and render a PDF with Graphviz
    python -m dungen.generate --dot dungeon.dot --render dungeon.pdf

    # Narrated key/door rooms through the `llm` command-line tool
    python -m dungen.generate --llm command
"""

import sys
import json
import secrets
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from dungen.config import LLM_BACKENDS, GenerationConfig, LLMConfig, create_text_client
from dungen.core.errors import DungenError
from dungen.core.graph import DungeonGraph
from dungen.evaluation.metrics import compute_layout_metrics
from dungen.generation.dungeon_grammar import build_dungeon_grammar, initial_dungeon_graph
from dungen.generation.grammar import GraphGrammarSimulator
from dungen.llm.narrator import Narrator
from dungen.utils.graph_utils import graph_to_dot, render_dot, validate_graph_topology

logger = logging.getLogger(__name__)


def generate_dungeon(config: GenerationConfig) -> DungeonGraph:
    """
    Run the dungeon grammar with the given configuration.

    Args:
        config: Generation settings (seed, step budget, text backend)

    Returns:
        The generated graph
    """
    client = create_text_client(config.llm)
    narrator = Narrator(client) if client is not None else None

    simulator = GraphGrammarSimulator(
        initial_dungeon_graph(),
        build_dungeon_grammar(narrator),
        seed=config.seed,
    )
    simulator.run(config.max_steps)

    for record in simulator.history:
        logger.debug(f"  step {record.step}: {record.rule_name} on {record.target}")
    return simulator.graph


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Grow a dungeon layout with a weighted graph grammar',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        '--seed', type=str, default=None,
        help='Seed string; a random one is generated when omitted'
    )
    parser.add_argument(
        '--steps', type=int, default=20,
        help='Maximum number of rule applications'
    )
    parser.add_argument(
        '--dump', '-d', action='store_true',
        help='Print the final graph as JSON'
    )
    parser.add_argument(
        '--dot', type=str, default=None,
        help='Write the graph in DOT format to this path'
    )
    parser.add_argument(
        '--render', type=str, default=None,
        help='Render the graph to a PDF at this path (requires Graphviz)'
    )
    parser.add_argument(
        '--llm', choices=LLM_BACKENDS, default=None,
        help='Text-generation backend (default: $DUNGEN_LLM_BACKEND or none)'
    )
    parser.add_argument(
        '--metrics', action='store_true',
        help='Print layout metrics as JSON'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Verbose output'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
    )

    seed = args.seed if args.seed is not None else secrets.token_hex(6)
    print(f"Using seed: {seed} (run with --seed {seed} to reproduce)")

    llm_config = LLMConfig.from_env()
    if args.llm is not None:
        llm_config.backend = args.llm

    config = GenerationConfig(max_steps=args.steps, seed=seed, llm=llm_config)
    graph = generate_dungeon(config)

    is_valid, errors = validate_graph_topology(graph)
    if not is_valid:
        logger.warning(f"Generated graph has {len(errors)} topology issue(s)")

    if args.dump:
        print(json.dumps(graph.to_dict(), indent=2))

    if args.metrics:
        print(json.dumps(compute_layout_metrics(graph).to_dict(), indent=2))

    dot_text = graph_to_dot(graph)
    if args.dot:
        Path(args.dot).write_text(dot_text + '\n', encoding='utf-8')
        logger.info(f"DOT written to {args.dot}")

    if args.render:
        try:
            render_dot(dot_text, args.render)
        except DungenError as e:
            logger.error(str(e))
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
