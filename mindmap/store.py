"""
GraphStore - single source of truth for the mind map graph.

Owns the node set, the edge set and the collapsed-node set. Every mutation
goes through the methods below; nodes and edges are frozen records, so
callers only ever hold snapshots.

Invariants:
- the `root` node always exists and cannot be removed
- every edge references two nodes present in the store
- collapsed ids may be stale (they are not compacted on node removal)
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

import networkx as nx

from mindmap.errors import InvalidReference
from mindmap.model import (
    ROOT_ID,
    ArrowMode,
    Edge,
    EdgeStyle,
    Effects,
    InfoData,
    Node,
    Position,
    RoutingKind,
    make_root,
    subject_color,
)

logger = logging.getLogger(__name__)

NODE_PATCH_KEYS = ("label", "subject", "color")
EDGE_PATCH_KEYS = ("label", "arrow_mode", "routing_kind", "style")
STYLE_PATCH_KEYS = ("stroke", "stroke_width", "label_bg", "label_bg_color", "label_text_color")


class GraphStore:
    """Mutable container for nodes, edges and the collapse set."""

    def __init__(self, nodes: Optional[Iterable[Node]] = None,
                 edges: Optional[Iterable[Edge]] = None,
                 collapsed: Optional[Iterable[str]] = None):
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        # dict used as an insertion-ordered set
        self._collapsed: Dict[str, None] = {}
        if nodes is None:
            self._nodes[ROOT_ID] = make_root()
        else:
            self.replace(nodes, edges or [], collapsed or [])

    # --- Read access ---

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    @property
    def collapsed(self) -> List[str]:
        return list(self._collapsed)

    def node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def is_collapsed(self, node_id: str) -> bool:
        return node_id in self._collapsed

    def incoming(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges.values() if e.target == node_id]

    def outgoing(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges.values() if e.source == node_id]

    def as_digraph(self) -> nx.MultiDiGraph:
        """
        Build a networkx view of the current graph.

        A MultiDiGraph, since nothing stops two edges between the same ordered
        pair. Edge keys are the edge ids.
        """
        graph = nx.MultiDiGraph()
        for node in self._nodes.values():
            graph.add_node(node.id, kind=node.kind.value, label=node.label)
        for edge in self._edges.values():
            graph.add_edge(edge.source, edge.target, key=edge.id, arrow_mode=edge.arrow_mode.value)
        return graph

    def __len__(self) -> int:
        return len(self._nodes)

    # --- Node mutations ---

    def add_node(self, node: Node) -> Effects:
        if node.id in self._nodes:
            raise InvalidReference(f"Node id already present: {node.id}", [node.id])
        self._nodes[node.id] = node
        logger.info(f"Added {node.kind.value} node {node.id}")
        return Effects(added_nodes=[node.id])

    def remove_node(self, node_id: str) -> Effects:
        """Remove a node and every edge incident to it. Root and unknown ids are a no-op."""
        if node_id == ROOT_ID:
            logger.debug("Ignoring request to remove root")
            return Effects()
        if node_id not in self._nodes:
            logger.debug(f"Ignoring removal of unknown node {node_id}")
            return Effects()
        incident = [e.id for e in self._edges.values() if e.touches(node_id)]
        for edge_id in incident:
            del self._edges[edge_id]
        del self._nodes[node_id]
        logger.info(f"Removed node {node_id} and {len(incident)} incident edge(s)")
        return Effects(removed_nodes=[node_id], removed_edges=incident)

    def move_node(self, node_id: str, position: Position) -> Effects:
        node = self._nodes.get(node_id)
        if node is None:
            return Effects()
        self._nodes[node_id] = node.moved(position)
        return Effects(updated=[node_id])

    def update_node_data(self, node_id: str, patch: Dict[str, Any]) -> Effects:
        """
        Merge `label`, `subject` and `color` into a node's data.

        A subject change without an explicit color re-derives the color from the
        subject palette. Waypoints carry no data, so patching one is a no-op.
        """
        node = self._nodes.get(node_id)
        if node is None or node.data is None:
            return Effects()
        changes = {k: v for k, v in patch.items() if k in NODE_PATCH_KEYS}
        if isinstance(node.data, InfoData):
            changes.pop("subject", None)
        elif "subject" in changes and "color" not in changes:
            changes["color"] = subject_color(changes["subject"])
        if not changes:
            return Effects()
        self._nodes[node_id] = replace(node, data=replace(node.data, **changes))
        return Effects(updated=[node_id])

    # --- Edge mutations ---

    def add_edge(self, edge: Edge) -> Effects:
        missing = [nid for nid in (edge.source, edge.target) if nid not in self._nodes]
        if missing:
            logger.warning(f"Rejected edge {edge.id}: missing endpoint(s) {missing}")
            raise InvalidReference(f"Edge {edge.id} references missing node(s): {', '.join(missing)}", missing)
        if edge.id in self._edges:
            raise InvalidReference(f"Edge id already present: {edge.id}", [edge.id])
        self._edges[edge.id] = edge
        logger.info(f"Added edge {edge.id} ({edge.source} -> {edge.target})")
        return Effects(added_edges=[edge.id])

    def remove_edge(self, edge_id: str) -> Effects:
        if self._edges.pop(edge_id, None) is None:
            return Effects()
        logger.info(f"Removed edge {edge_id}")
        return Effects(removed_edges=[edge_id])

    def update_edge(self, edge_id: str, patch: Dict[str, Any]) -> Effects:
        """
        Merge `label`, `arrow_mode`, `routing_kind` and style fields into an edge.

        Style fields may come nested under `style` (dict or EdgeStyle) or flat
        (`stroke`, `stroke_width`, ...).
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            return Effects()
        changes: Dict[str, Any] = {}
        if "label" in patch:
            changes["label"] = patch["label"] or None
        if "arrow_mode" in patch:
            changes["arrow_mode"] = ArrowMode(patch["arrow_mode"])
        if "routing_kind" in patch:
            changes["routing_kind"] = RoutingKind(patch["routing_kind"])

        style_patch = patch.get("style")
        if isinstance(style_patch, EdgeStyle):
            changes["style"] = style_patch
        else:
            flat = {k: patch[k] for k in STYLE_PATCH_KEYS if k in patch}
            flat.update(style_patch or {})
            if flat:
                changes["style"] = replace(edge.style or EdgeStyle(), **flat)

        if not changes:
            return Effects()
        self._edges[edge_id] = replace(edge, **changes)
        return Effects(updated=[edge_id])

    # --- Collapse ---

    def toggle_collapse(self, node_id: str) -> Effects:
        if node_id in self._collapsed:
            del self._collapsed[node_id]
        else:
            self._collapsed[node_id] = None
        return Effects(updated=[node_id])

    # --- Bulk ---

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge], collapsed: Iterable[str]) -> None:
        """
        Swap the whole graph in one step.

        Validation happens before anything is touched: duplicate ids or dangling
        edges raise InvalidReference and leave the current graph in place. A
        node set without `root` gets a default root node.
        """
        new_nodes: Dict[str, Node] = {}
        for node in nodes:
            if node.id in new_nodes:
                raise InvalidReference(f"Duplicate node id: {node.id}", [node.id])
            new_nodes[node.id] = node
        if ROOT_ID not in new_nodes:
            new_nodes = {ROOT_ID: make_root(), **new_nodes}

        new_edges: Dict[str, Edge] = {}
        for edge in edges:
            missing = [nid for nid in (edge.source, edge.target) if nid not in new_nodes]
            if missing:
                raise InvalidReference(f"Edge {edge.id} references missing node(s): {', '.join(missing)}", missing)
            if edge.id in new_edges:
                raise InvalidReference(f"Duplicate edge id: {edge.id}", [edge.id])
            new_edges[edge.id] = edge

        self._nodes = new_nodes
        self._edges = new_edges
        self._collapsed = dict.fromkeys(collapsed)
        logger.info(f"Graph replaced: {len(new_nodes)} nodes, {len(new_edges)} edges")
