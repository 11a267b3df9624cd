"""
Graph Grammar Simulator: Rewriting Engine for Dungeon Layouts
=============================================================

Grows a dungeon graph from a seed graph by repeatedly applying productions
from a prioritized, weighted grammar.

Grammar structure:
    Grammar    = [Subgrammar, Subgrammar, ...]   (highest priority first)
    Subgrammar = [Rule, Rule, ...]               (one priority tier)

One step:
    1. Candidate search - scan the tiers in order; the first tier with any
       match site returns ALL of its candidates, lower tiers are never seen.
    2. Weighted selection - pick one candidate with probability proportional
       to its rule's weight (a rule matched at K sites contributes K
       candidates).
    3. Application - node/edge label update, or subgraph substitution with
       fresh-id remapping of placeholder ids.

The loop stops when no tier has a candidate or when the step budget is
spent. Candidates are re-derived from scratch every step.

Usage:
    simulator = GraphGrammarSimulator(graph, grammar, seed=42)
    simulator.run(max_steps=20)
    print(simulator.steps_applied, len(simulator.graph.nodes))
"""

import random
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from dataclasses import dataclass

from dungen.core.errors import GraphIntegrityError
from dungen.core.graph import DungeonGraph, Edge, IdGenerator, Node
from dungen.core.labels import copy_label, is_mapping, map_strings
from dungen.generation.rules import (
    Candidate,
    EdgeRule,
    Grammar,
    GraphRule,
    NodeRule,
    ProductionRule,
    Triple,
    load_grammar,
)

logger = logging.getLogger(__name__)


@dataclass
class StepRecord:
    """Trace entry for one applied rule."""
    step: int
    rule_name: str
    kind: str
    target: Optional[str]


# ============================================================================
# WEIGHTED SELECTION
# ============================================================================

def weighted_choice(candidates: Sequence[Candidate], rng: random.Random) -> Candidate:
    """
    Draw one candidate with probability proportional to its weight.

    Args:
        candidates: Non-empty candidate list
        rng: Explicit random source (makes the draw reproducible)

    Returns:
        The selected candidate
    """
    if not candidates:
        raise ValueError("Cannot select from an empty candidate set")

    total_weight = sum(candidate.weight for candidate in candidates)
    r = rng.random() * total_weight
    for candidate in candidates:
        r -= candidate.weight
        if r <= 0:
            return candidate
    return candidates[-1]


# ============================================================================
# SIMULATOR
# ============================================================================

class GraphGrammarSimulator:
    """
    Applies a grammar to a graph, one production per step.

    The graph is rewritten in place and stays available on ``self.graph``.
    Node and edge ids are drawn from two independent counters that never
    hand out an id twice.

    Args:
        graph: Seed graph (mutated in place)
        grammar: List of subgrammars; rule objects or declarative mappings
        rng: Explicit random source; takes precedence over ``seed``
        seed: Seed for a private random.Random when ``rng`` is not given
    """

    def __init__(
        self,
        graph: DungeonGraph,
        grammar: Sequence[Sequence[Union[ProductionRule, Mapping[str, Any]]]],
        rng: Optional[random.Random] = None,
        seed: Optional[Any] = None,
    ):
        self.graph = graph
        self.grammar: Grammar = load_grammar(grammar)
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.node_ids = IdGenerator('node')
        self.edge_ids = IdGenerator('edge')
        # Every id ever present, so retired seed ids are never handed out again
        self._issued_node_ids = set(graph.nodes)
        self._issued_edge_ids = set(graph.edges)
        self.steps_applied = 0
        self.history: List[StepRecord] = []

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self, max_steps: int = 1000) -> None:
        """
        Run search/select/apply cycles until no rule applies or
        ``max_steps`` rules have been applied.
        """
        step = 0
        while step < max_steps:
            if not self.step():
                logger.debug("No applicable rules found, simulation halting")
                break
            step += 1
        logger.info(
            f"Simulation ended after {step} steps "
            f"({len(self.graph.nodes)} nodes, {len(self.graph.edges)} edges)"
        )

    def step(self) -> bool:
        """
        Perform one search/select/apply cycle.

        Returns:
            False if no candidate was found (terminal state), True otherwise
        """
        candidates = self.find_candidates()
        if not candidates:
            return False

        candidate = weighted_choice(candidates, self.rng)
        logger.debug(
            f"Step {self.steps_applied + 1}: applying {candidate.rule.name} "
            f"({candidate.rule.kind}, weight {candidate.weight}) "
            f"to {candidate.target_id} out of {len(candidates)} candidates"
        )
        self.apply_candidate(candidate)
        self.steps_applied += 1
        self.history.append(StepRecord(
            step=self.steps_applied,
            rule_name=candidate.rule.name,
            kind=candidate.rule.kind,
            target=candidate.target_id,
        ))
        return True

    # ------------------------------------------------------------------
    # Candidate search
    # ------------------------------------------------------------------

    def find_candidates(self) -> List[Candidate]:
        """
        Find all match sites in the highest-priority subgrammar that has any.

        Returns:
            Candidates of a single tier, or an empty list if no tier matches
        """
        for tier_index, subgrammar in enumerate(self.grammar):
            candidates: List[Candidate] = []
            for rule in subgrammar:
                if isinstance(rule, NodeRule):
                    self._find_node_candidates(rule, candidates)
                elif isinstance(rule, EdgeRule):
                    # GraphRule shares the edge-shaped left-hand side
                    self._find_edge_candidates(rule, candidates)
                else:
                    logger.warning(f"Unknown rule type {rule.kind} ({rule.name})")
            if candidates:
                logger.debug(f"Subgrammar {tier_index}: {len(candidates)} candidates")
                return candidates
        return []

    def _find_node_candidates(self, rule: NodeRule, candidates: List[Candidate]) -> None:
        for node in list(self.graph.nodes.values()):
            if rule.match_node(node, self.graph):
                candidates.append(Candidate(rule, node=node))

    def _find_edge_candidates(self, rule: EdgeRule, candidates: List[Candidate]) -> None:
        for edge in list(self.graph.edges.values()):
            src = self.graph.nodes.get(edge.src)
            dest = self.graph.nodes.get(edge.dest)
            if src is None or dest is None:
                logger.warning(f"Skipping dangling edge {edge.id} ({edge.src} -> {edge.dest})")
                continue
            triple = Triple(src, dest, edge)
            if rule.matches(triple, self.graph):
                candidates.append(Candidate(rule, src=src, dest=dest, edge=edge))

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply_candidate(self, candidate: Candidate) -> None:
        """Apply the candidate's rule at its match site."""
        rule = candidate.rule
        if isinstance(rule, NodeRule):
            result = rule.updater(candidate.node, self.graph)
            if isinstance(result, Node):
                self.graph.nodes[candidate.node.id] = result
        elif isinstance(rule, GraphRule):
            self._substitute_subgraph(rule, candidate)
        elif isinstance(rule, EdgeRule):
            result = rule.updater(candidate.edge, candidate.src, candidate.dest)
            if isinstance(result, Edge):
                self.graph.edges[candidate.edge.id] = result
        else:
            logger.warning(f"Cannot apply unknown rule type {rule.kind} ({rule.name})")

    def _substitute_subgraph(self, rule: GraphRule, candidate: Candidate) -> None:
        """
        Replace the matched edge by the subgraph the rule builds.

        The new nodes and edges are built and checked before the graph is
        touched. A subgraph with malformed entries or unresolved endpoints
        is rejected as a whole and the matched edge stays in place.
        """
        edge = candidate.edge
        spec = rule.subgraph(candidate.triple) if rule.subgraph is not None else None
        if not spec:
            self.graph.remove_edge(edge.id)
            logger.debug(f"{rule.name}: builder returned nothing, edge {edge.id} removed")
            return

        try:
            new_nodes, new_edges = self._build_subgraph(spec)
        except GraphIntegrityError as e:
            logger.warning(f"{rule.name}: rejected subgraph for edge {edge.id}: {e}")
            return

        self.graph.remove_edge(edge.id)
        for node in new_nodes:
            self.graph.add_node(node)
        for new_edge in new_edges:
            new_edge.id = self._issue(self.edge_ids, self._issued_edge_ids, self.graph.edges)
            self.graph.add_edge(new_edge, strict=True)

        logger.debug(
            f"{rule.name}: replaced edge {edge.id} with "
            f"{len(new_nodes)} node(s) and {len(new_edges)} edge(s)"
        )

    def _build_subgraph(self, spec: Mapping[str, Any]):
        """
        Turn a builder's output into fresh nodes and unnumbered edges.

        Raises:
            GraphIntegrityError: if an entry is malformed or an edge endpoint
                is neither an existing node nor one of the new ones
        """
        if not is_mapping(spec):
            raise GraphIntegrityError(f"builder returned {type(spec).__name__}, expected a mapping")
        id_map: Dict[str, str] = {}
        new_nodes: List[Node] = []
        for node_spec in spec.get('nodes') or []:
            try:
                placeholder = node_spec['id']
            except (KeyError, TypeError) as e:
                raise GraphIntegrityError(f"malformed node {node_spec!r}") from e
            new_id = self._issue(self.node_ids, self._issued_node_ids, self.graph.nodes)
            id_map[placeholder] = new_id
            new_nodes.append(Node(id=new_id, label=copy_label(node_spec.get('label'))))

        def remap(value: str) -> str:
            return id_map.get(value, value)

        known = set(self.graph.nodes) | set(id_map.values())
        new_edges: List[Edge] = []
        for edge_spec in spec.get('edges') or []:
            if isinstance(edge_spec, Edge):
                edge_spec = edge_spec.to_dict()
            try:
                new_edge = Edge.from_dict(map_strings(dict(edge_spec), remap))
            except (KeyError, TypeError, ValueError) as e:
                raise GraphIntegrityError(f"malformed edge {edge_spec!r}") from e
            for endpoint in (new_edge.src, new_edge.dest):
                if endpoint not in known:
                    raise GraphIntegrityError(f"edge endpoint {endpoint!r} does not resolve")
            new_edges.append(new_edge)
        return new_nodes, new_edges

    @staticmethod
    def _issue(generator: IdGenerator, issued: set, present: Mapping[str, Any]) -> str:
        issued.update(present)
        new_id = generator.next(issued)
        issued.add(new_id)
        return new_id
