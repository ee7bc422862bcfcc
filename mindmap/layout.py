"""
Grid re-pack ("Auto Arrange").

Places every node on a square-ish grid in store order. This is the only
layout the editor does; anything smarter is left to the renderer.
"""

import math
from typing import Dict, List

from mindmap.model import Effects, Node, Position
from mindmap.store import GraphStore

GRID_ORIGIN = (80, 80)
SPACING_X = 200
SPACING_Y = 160


def grid_positions(nodes: List[Node]) -> Dict[str, Position]:
    per_row = math.ceil(math.sqrt(len(nodes) or 1))
    ox, oy = GRID_ORIGIN
    return {
        node.id: Position(ox + (idx % per_row) * SPACING_X, oy + (idx // per_row) * SPACING_Y)
        for idx, node in enumerate(nodes)
    }


def auto_arrange(store: GraphStore) -> Effects:
    effects = Effects()
    for node_id, position in grid_positions(store.nodes).items():
        effects = effects.merge(store.move_node(node_id, position))
    return effects
