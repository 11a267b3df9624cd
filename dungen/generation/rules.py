"""
Production Rules
================

Rules are productions of the dungeon grammar. Each rule has a weight and a
left-hand side (what it matches) and a right-hand side (what it does):

    NodeRule  - match a node, deep-merge an update into its label
    EdgeRule  - match (src, dest, edge), deep-merge an update into the edge label
    GraphRule - match (src, dest, edge), replace the edge by a built subgraph

Match specs may be a callable ``(entity, graph) -> bool``, a partial label
(structural-subset match) or absent (always matches). Update specs may be a
callable or a partial label (deep merge); absent means no-op.

Rules can also be written in the declarative mapping form:

    {
        "type": "edge",
        "weight": 1,
        "lhs": {"edge": {"type": "path"}},
        "rhs": {"edge": {"type": "monster"}},
    }

and converted with ``rule_from_dict`` / ``load_grammar``.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union
from dataclasses import dataclass

from dungen.core.graph import DungeonGraph, Edge, Node
from dungen.core.labels import deep_merge, is_mapping, is_subset

logger = logging.getLogger(__name__)

Matcher = Callable[[Any, DungeonGraph], bool]
MatchSpec = Union[None, Mapping[str, Any], Matcher]
UpdateSpec = Union[None, Mapping[str, Any], Callable[..., Any]]


class Triple(NamedTuple):
    """An edge together with its resolved endpoints."""
    src: Node
    dest: Node
    edge: Edge


SubgraphBuilder = Callable[[Triple], Optional[Mapping[str, Any]]]


# ============================================================================
# MATCHERS AND UPDATERS
# ============================================================================

def _always(entity: Any, graph: DungeonGraph) -> bool:
    return True


def make_matcher(spec: MatchSpec) -> Matcher:
    """
    Compile a match spec into a test ``(entity, graph) -> bool``.

    - falsy spec -> always matches
    - callable -> used verbatim
    - mapping -> structural subset of ``entity.label``
    - anything else -> treated as absent
    """
    if not spec:
        return _always
    if callable(spec):
        return spec
    if is_mapping(spec):
        return lambda entity, graph: is_subset(spec, entity.label)
    logger.debug(f"Ignoring malformed match spec {spec!r}")
    return _always


def _no_update(entity: Any, *args: Any) -> None:
    return None


def make_updater(spec: UpdateSpec) -> Callable[..., Any]:
    """
    Compile an update spec into a mutation of an entity.

    The returned function takes the entity (plus rule-specific context) and
    either mutates it in place and returns None, or returns a replacement.
    Mapping specs deep-merge into ``entity.label``.
    """
    if not spec:
        return _no_update
    if callable(spec):
        return spec
    if is_mapping(spec):
        def merge(entity: Any, *args: Any) -> Any:
            if entity.label is None:
                entity.label = {}
            deep_merge(entity.label, spec)
            return entity
        return merge
    logger.debug(f"Ignoring malformed update spec {spec!r}")
    return _no_update


# ============================================================================
# RULE TYPES
# ============================================================================

class ProductionRule:
    """
    Base class for grammar production rules.

    Instances of the base class (or of any subclass other than the three
    below) are unknown to the engine: they are reported and never match.
    """

    kind = 'unknown'

    def __init__(self, name: Optional[str] = None, weight: float = 1.0):
        self.name = name or self.__class__.__name__
        self.weight = weight

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, kind={self.kind!r}, weight={self.weight})"


class NodeRule(ProductionRule):
    """Match a single node and update its label."""

    kind = 'node'

    def __init__(
        self,
        node: MatchSpec = None,
        update: UpdateSpec = None,
        weight: float = 1.0,
        name: Optional[str] = None,
    ):
        super().__init__(name, weight)
        self.node = node
        self.update = update
        self.match_node = make_matcher(node)
        self.updater = make_updater(update)


class EdgeRule(ProductionRule):
    """Match an edge and its endpoints, then update the edge label."""

    kind = 'edge'

    def __init__(
        self,
        edge: MatchSpec = None,
        src: MatchSpec = None,
        dest: MatchSpec = None,
        update: UpdateSpec = None,
        weight: float = 1.0,
        name: Optional[str] = None,
    ):
        super().__init__(name, weight)
        self.edge = edge
        self.src = src
        self.dest = dest
        self.update = update
        self.match_src = make_matcher(src)
        self.match_dest = make_matcher(dest)
        self.match_edge = make_matcher(edge)
        self.updater = make_updater(update)

    def matches(self, triple: Triple, graph: DungeonGraph) -> bool:
        return (
            self.match_src(triple.src, graph)
            and self.match_dest(triple.dest, graph)
            and self.match_edge(triple.edge, graph)
        )


class GraphRule(EdgeRule):
    """
    Match an edge and its endpoints, then substitute a subgraph for the edge.

    The builder receives the matched Triple and returns None or a mapping
    ``{"nodes": [...], "edges": [...]}``. New nodes carry placeholder ids
    (e.g. "$room") that are remapped to fresh ids on insertion; new edges may
    reference placeholders, the matched endpoints' real ids, or re-emit the
    matched Edge itself.
    """

    kind = 'graph'

    def __init__(
        self,
        subgraph: Optional[SubgraphBuilder] = None,
        edge: MatchSpec = None,
        src: MatchSpec = None,
        dest: MatchSpec = None,
        weight: float = 1.0,
        name: Optional[str] = None,
    ):
        super().__init__(edge=edge, src=src, dest=dest, weight=weight, name=name)
        self.subgraph = subgraph


# ============================================================================
# CANDIDATES
# ============================================================================

@dataclass
class Candidate:
    """One concrete match site of one rule against the current graph."""
    rule: ProductionRule
    node: Optional[Node] = None
    src: Optional[Node] = None
    dest: Optional[Node] = None
    edge: Optional[Edge] = None

    @property
    def weight(self) -> float:
        return self.rule.weight

    @property
    def triple(self) -> Triple:
        return Triple(self.src, self.dest, self.edge)

    @property
    def target_id(self) -> Optional[str]:
        if self.node is not None:
            return self.node.id
        if self.edge is not None:
            return self.edge.id
        return None


# ============================================================================
# DECLARATIVE FORM
# ============================================================================

def rule_from_dict(data: Mapping[str, Any]) -> ProductionRule:
    """
    Convert a declarative rule mapping into a rule object.

    Unknown ``type`` values produce a bare ProductionRule carrying that kind,
    which the engine reports and skips.
    """
    rule_type = data.get('type')
    weight = data.get('weight', 1.0)
    name = data.get('name')
    lhs = data.get('lhs') or {}
    rhs = data.get('rhs') or {}

    if rule_type == 'node':
        return NodeRule(node=lhs.get('node'), update=rhs.get('node'), weight=weight, name=name)
    if rule_type == 'edge':
        return EdgeRule(
            edge=lhs.get('edge'), src=lhs.get('src'), dest=lhs.get('dest'),
            update=rhs.get('edge'), weight=weight, name=name,
        )
    if rule_type == 'graph':
        return GraphRule(
            subgraph=rhs.get('subgraph'),
            edge=lhs.get('edge'), src=lhs.get('src'), dest=lhs.get('dest'),
            weight=weight, name=name,
        )

    return _unknown_rule(rule_type, name=name, weight=weight)


def _unknown_rule(kind: Any, name: Optional[str] = None, weight: float = 1.0) -> ProductionRule:
    rule = ProductionRule(name=name or f"Unknown_{kind}", weight=weight)
    rule.kind = str(kind)
    return rule


def load_grammar(
    tiers: Sequence[Sequence[Union[ProductionRule, Mapping[str, Any]]]],
) -> List[List[ProductionRule]]:
    """
    Convert a grammar (list of subgrammars) into rule objects.

    Rule objects pass through unchanged; mappings go through rule_from_dict.
    Any other entry becomes an unknown rule named after its Python type.
    """
    grammar: List[List[ProductionRule]] = []
    for tier in tiers:
        grammar.append([_coerce_rule(rule) for rule in tier])
    return grammar


def _coerce_rule(entry: Any) -> ProductionRule:
    if isinstance(entry, ProductionRule):
        return entry
    if is_mapping(entry):
        return rule_from_dict(entry)
    return _unknown_rule(type(entry).__name__)


Subgrammar = List[ProductionRule]
Grammar = List[Subgrammar]
