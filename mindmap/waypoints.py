"""
Waypoint topology.

A waypoint is an ordinary graph node that bends one logical connection into
two rendered segments:

    A ----e----> B      becomes      A --e1--> (wp) --e2--> B

A well-formed waypoint has exactly one inbound and one outbound edge. The
functions here are the only ones that create or dissolve that shape, and
`logical_chain` / `prune_orphan_waypoints` keep deletions from leaving half
a bend behind.

Split vs. insert (both intentional, kept distinct):
- split_edge_to_waypoint copies label, style and both markers onto both
  segments, so a labeled edge shows its label twice.
- insert_waypoint_at keeps the label and start marker on the first segment
  and the end marker on the second, so the bent path has one arrowhead at
  each original end and none in the middle.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mindmap.model import ArrowMode, Edge, Effects, Node, NodeKind, Position
from mindmap.store import GraphStore

logger = logging.getLogger(__name__)

SPLIT_FALLBACK = Position(100, 100)
# Split waypoints sit slightly right of the true midpoint so they are not
# hidden under a label drawn at the segment centre
SPLIT_X_SHIFT = 20


@dataclass
class LogicalEdge:
    """One user-level connection, possibly bent through several waypoints."""
    source: str
    target: str
    segments: List[str] = field(default_factory=list)
    waypoints: List[str] = field(default_factory=list)


def split_edge_to_waypoint(store: GraphStore, edge_id: str) -> Effects:
    """Replace an edge with two segments meeting at a new waypoint near its midpoint."""
    edge = store.edge(edge_id)
    if edge is None:
        logger.debug(f"split_edge_to_waypoint: no edge {edge_id}")
        return Effects()

    source, target = store.node(edge.source), store.node(edge.target)
    if source is not None and target is not None:
        position = source.position.midpoint(target.position).offset(SPLIT_X_SHIFT, 0)
    else:
        position = SPLIT_FALLBACK

    segment = dict(routing_kind=edge.routing_kind, arrow_mode=edge.arrow_mode,
                   label=edge.label, style=edge.style)
    return _subdivide(store, edge, position, segment, dict(segment))


def insert_waypoint_at(store: GraphStore, edge_id: str, position: Position) -> Effects:
    """
    Bend an edge through a new waypoint at `position`.

    The start marker stays on the first segment and the end marker moves to the
    second; the label is kept only on the first segment.
    """
    edge = store.edge(edge_id)
    if edge is None:
        logger.debug(f"insert_waypoint_at: no edge {edge_id}")
        return Effects()

    first = dict(routing_kind=edge.routing_kind,
                 arrow_mode=ArrowMode.from_markers(start=edge.marker_start, end=False),
                 label=edge.label, style=edge.style)
    second = dict(routing_kind=edge.routing_kind,
                  arrow_mode=ArrowMode.from_markers(start=False, end=edge.marker_end),
                  label=None, style=edge.style)
    return _subdivide(store, edge, position, first, second)


def _subdivide(store: GraphStore, edge: Edge, position: Position,
               first: Dict[str, Any], second: Dict[str, Any]) -> Effects:
    waypoint = Node.waypoint(position=position)
    first_segment = Edge.create(edge.source, waypoint.id, **first)
    second_segment = Edge.create(waypoint.id, edge.target, **second)

    effects = store.remove_edge(edge.id)
    effects = effects.merge(store.add_node(waypoint))
    effects = effects.merge(store.add_edge(first_segment))
    effects = effects.merge(store.add_edge(second_segment))
    logger.info(f"Edge {edge.id} bent through waypoint {waypoint.id}")
    return effects


def find_adjacent_waypoint(store: GraphStore, edge_id: str) -> Optional[Node]:
    """
    Return the waypoint at either end of an edge that has exactly one inbound and
    one outbound edge. The target end is checked first.
    """
    edge = store.edge(edge_id)
    if edge is None:
        return None
    for node_id in (edge.target, edge.source):
        node = store.node(node_id)
        if node is None or node.kind is not NodeKind.WAYPOINT:
            continue
        if len(store.incoming(node_id)) == 1 and len(store.outgoing(node_id)) == 1:
            return node
    return None


def remove_waypoint(store: GraphStore, edge_id: str) -> Effects:
    """
    Dissolve the waypoint next to `edge_id` and rejoin its two segments.

    The rejoined edge takes source, label, style, routing and start marker from
    the inbound segment and the end marker from the outbound segment. No-op when
    no well-formed waypoint touches the edge.

    The old web editor dropped the start marker here, so a two-way edge came
    back one-way after insert then remove. Keeping it restores the original.
    """
    waypoint = find_adjacent_waypoint(store, edge_id)
    if waypoint is None:
        logger.debug(f"remove_waypoint: no well-formed waypoint next to edge {edge_id}")
        return Effects()

    before = store.incoming(waypoint.id)[0]
    after = store.outgoing(waypoint.id)[0]
    joined = Edge.create(
        before.source,
        after.target,
        routing_kind=before.routing_kind,
        arrow_mode=ArrowMode.from_markers(start=before.marker_start, end=after.marker_end),
        label=before.label,
        style=before.style,
    )

    effects = store.remove_node(waypoint.id)
    effects = effects.merge(store.add_edge(joined))
    logger.info(f"Waypoint {waypoint.id} removed, rejoined as edge {joined.id}")
    return effects


def _is_chain_waypoint(store: GraphStore, node_id: str) -> bool:
    node = store.node(node_id)
    return (node is not None and node.kind is NodeKind.WAYPOINT
            and len(store.incoming(node_id)) == 1 and len(store.outgoing(node_id)) == 1)


def logical_chain(store: GraphStore, edge_id: str) -> Optional[LogicalEdge]:
    """
    Walk from one segment through well-formed waypoints in both directions and
    return the whole logical connection it belongs to.
    """
    edge = store.edge(edge_id)
    if edge is None:
        return None

    segments = [edge.id]
    waypoints: List[str] = []
    head = edge
    while _is_chain_waypoint(store, head.source) and head.source not in waypoints:
        waypoints.insert(0, head.source)
        head = store.incoming(head.source)[0]
        segments.insert(0, head.id)
    tail = edge
    while _is_chain_waypoint(store, tail.target) and tail.target not in waypoints:
        waypoints.append(tail.target)
        tail = store.outgoing(tail.target)[0]
        segments.append(tail.id)

    return LogicalEdge(source=head.source, target=tail.target, segments=segments, waypoints=waypoints)


def logical_edges(store: GraphStore) -> List[LogicalEdge]:
    """Group every stored edge into the logical connections the user drew."""
    seen = set()
    result = []
    for edge in store.edges:
        if edge.id in seen:
            continue
        chain = logical_chain(store, edge.id)
        seen.update(chain.segments)
        result.append(chain)
    return result


def remove_logical_edge(store: GraphStore, edge_id: str) -> Effects:
    """Delete a segment together with the rest of its bent connection."""
    chain = logical_chain(store, edge_id)
    if chain is None:
        return Effects()
    effects = Effects()
    for waypoint_id in chain.waypoints:
        effects = effects.merge(store.remove_node(waypoint_id))
    for segment_id in chain.segments:
        effects = effects.merge(store.remove_edge(segment_id))
    return effects


def prune_orphan_waypoints(store: GraphStore) -> Effects:
    """
    Remove waypoints left without an inbound or an outbound edge, e.g. after an
    endpoint node was deleted. Repeats until stable since pruning one waypoint
    can orphan the next one in a chain.
    """
    effects = Effects()
    while True:
        orphans = [
            n.id for n in store.nodes
            if n.kind is NodeKind.WAYPOINT and (not store.incoming(n.id) or not store.outgoing(n.id))
        ]
        if not orphans:
            return effects
        for node_id in orphans:
            effects = effects.merge(store.remove_node(node_id))
