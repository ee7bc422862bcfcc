"""
Collapse visibility.

Collapsing a node hides everything reachable from it along source -> target
edges. The collapsed node itself stays on screen; its outgoing edges do not.
Derived state is rebuilt from scratch on every call, nothing is cached.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set

import networkx as nx

from mindmap.model import Edge, Node


@dataclass
class VisibleView:
    """What the renderer should draw for the current graph state."""
    hidden: Set[str] = field(default_factory=set)
    collapsed: Set[str] = field(default_factory=set)
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


def compute_hidden(collapsed_ids: Iterable[str], edges: Iterable[Edge]) -> Set[str]:
    """
    Return ids of every node reachable from a collapsed node.

    Traversal follows edges strictly from source to target. A collapsed node is
    only hidden when another collapsed node (or a cycle back through itself)
    reaches it. Ids that are not part of any edge are ignored.
    """
    graph = nx.DiGraph()
    graph.add_edges_from((e.source, e.target) for e in edges)

    hidden: Set[str] = set()
    for collapsed_id in collapsed_ids:
        if collapsed_id not in graph:
            continue
        for child in graph.successors(collapsed_id):
            if child in hidden:
                continue
            hidden.add(child)
            hidden.update(nx.descendants(graph, child))
    return hidden


def is_edge_visible(edge: Edge, hidden: Set[str], collapsed: Set[str]) -> bool:
    return edge.source not in hidden and edge.target not in hidden and edge.source not in collapsed


def derive_view(nodes: Iterable[Node], edges: Iterable[Edge], collapsed_ids: Iterable[str]) -> VisibleView:
    edges = list(edges)
    collapsed = set(collapsed_ids)
    hidden = compute_hidden(collapsed, edges)
    return VisibleView(
        hidden=hidden,
        collapsed=collapsed,
        nodes=[n for n in nodes if n.id not in hidden],
        edges=[e for e in edges if is_edge_visible(e, hidden, collapsed)],
    )
