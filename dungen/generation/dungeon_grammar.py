"""
Dungeon Grammar: Productions for Growing a Dungeon Layout
=========================================================

The seed graph is a single corridor:

    start --path--> goal

and one subgrammar refines "path" edges until the budget runs out:

    InsertRoom      path        => src -path-> $room -path-> dest
    DeadEnd         path        => path kept, src -path-> $dead_end
    ParallelPath    path        => path, path   (two independent copies)
    KeyDoor         path        => src -path-> $key -backtrack-> src,
                                   src -path-> $door -path[prereq $key]-> dest
    Passage/Monster/Puzzle      => path retyped in place

All productions have weight 1. KeyDoor asks the narrator for a theme and
flavor text; whatever the narrator cannot provide is left out of the labels.
"""

import logging
from typing import Any, Dict, List, Optional

from dungen.core.graph import DungeonGraph, build_graph
from dungen.generation.rules import EdgeRule, GraphRule, ProductionRule, Triple
from dungen.llm.narrator import Narrator

logger = logging.getLogger(__name__)

# ============================================================================
# LABEL TYPES
# ============================================================================

START = 'start'
WIN = 'win'
ROOM = 'room'
DEAD_END = 'dead_end'
KEY = 'key'
DOOR = 'door'

PATH = 'path'
BACKTRACK = 'backtrack'
PASSAGE = 'passage'
MONSTER = 'monster'
PUZZLE = 'puzzle'

PATH_EDGE = {'type': PATH}

DOOR_TEMPLATE = "There is a door here. It is closed and locked."
KEY_TEMPLATE = "There is a key here. You pick it up."
OPEN_TEMPLATE = "The key unlocks the door, but will you pass through?"


# ============================================================================
# SUBGRAPH BUILDERS
# ============================================================================

def insert_room(match: Triple) -> Dict[str, Any]:
    """Split the corridor with a new room."""
    return {
        'nodes': [
            {'id': '$midpoint', 'label': {'type': ROOM}},
        ],
        'edges': [
            {'src': match.src.id, 'dest': '$midpoint', 'label': {'type': PATH}},
            {'src': '$midpoint', 'dest': match.dest.id, 'label': {'type': PATH}},
        ],
    }


def add_dead_end(match: Triple) -> Dict[str, Any]:
    """Keep the corridor and hang a dead end off its source."""
    return {
        'nodes': [
            {'id': '$dead_end', 'label': {'type': DEAD_END}},
        ],
        'edges': [
            match.edge,
            {'src': match.src.id, 'dest': '$dead_end', 'label': {'type': PATH}},
        ],
    }


def add_parallel_path(match: Triple) -> Dict[str, Any]:
    """Re-emit the corridor twice; each copy becomes its own edge."""
    return {'edges': [match.edge, match.edge]}


class KeyDoorBuilder:
    """
    Builds a key side-room and a locked door between the endpoints.

    The door->dest edge carries ``prereq = {'node_id': '$key', ...}`` so the
    remapped key id ends up on the edge that needs it.
    """

    def __init__(self, narrator: Optional[Narrator] = None):
        self.narrator = narrator

    def _texts(self) -> Dict[str, Optional[str]]:
        texts = {'theme': None, 'door': None, 'key': None, 'open': None}
        if self.narrator is None:
            return texts
        theme = self.narrator.theme()
        if not theme:
            return texts
        texts['theme'] = theme
        texts['door'] = self.narrator.rewrite(theme, DOOR_TEMPLATE)
        texts['key'] = self.narrator.rewrite(theme, KEY_TEMPLATE)
        prior = (texts['key'] or '') + (texts['door'] or '')
        texts['open'] = self.narrator.continue_narrative(theme, prior, OPEN_TEMPLATE)
        return texts

    def __call__(self, match: Triple) -> Dict[str, Any]:
        texts = self._texts()

        key_label = {'type': KEY}
        if texts['key']:
            key_label['text'] = texts['key']
        door_label = {'type': DOOR}
        if texts['door']:
            door_label['text'] = texts['door']
        if texts['theme']:
            door_label['theme'] = texts['theme']
        prereq = {'node_id': '$key'}
        if texts['open']:
            prereq['text'] = texts['open']

        return {
            'nodes': [
                {'id': '$key', 'label': key_label},
                {'id': '$door', 'label': door_label},
            ],
            'edges': [
                {'src': match.src.id, 'dest': '$key', 'label': {'type': PATH}},
                {'src': '$key', 'dest': match.src.id, 'label': {'type': BACKTRACK}},
                {'src': match.src.id, 'dest': '$door', 'label': {'type': PATH}},
                {'src': '$door', 'dest': match.dest.id, 'label': {'type': PATH}, 'prereq': prereq},
            ],
        }


# ============================================================================
# GRAMMAR
# ============================================================================

def build_dungeon_grammar(narrator: Optional[Narrator] = None) -> List[List[ProductionRule]]:
    """
    Build the dungeon grammar (a single subgrammar).

    Args:
        narrator: Optional narrator for key/door flavor text

    Returns:
        Grammar as a list of subgrammars
    """
    return [
        [
            GraphRule(insert_room, edge=PATH_EDGE, name='InsertRoom'),
            GraphRule(add_dead_end, edge=PATH_EDGE, name='DeadEnd'),
            GraphRule(add_parallel_path, edge=PATH_EDGE, name='ParallelPath'),
            GraphRule(KeyDoorBuilder(narrator), edge=PATH_EDGE, name='KeyDoor'),
            EdgeRule(edge=PATH_EDGE, update={'type': PASSAGE}, name='Passage'),
            EdgeRule(edge=PATH_EDGE, update={'type': MONSTER}, name='Monster'),
            EdgeRule(edge=PATH_EDGE, update={'type': PUZZLE}, name='Puzzle'),
        ],
    ]


def initial_dungeon_graph() -> DungeonGraph:
    """Seed graph: start --path--> goal."""
    return build_graph(
        nodes=[
            {'id': 'start', 'label': {'type': START}},
            {'id': 'goal', 'label': {'type': WIN}},
        ],
        edges=[
            {'src': 'start', 'dest': 'goal', 'label': {'type': PATH}},
        ],
    )
