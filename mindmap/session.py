"""
EditorSession - the context object every gesture goes through.

Holds the GraphStore, the active tool and pending connection settings, the
current selection and the theme. Gesture handlers resolve one user action,
apply it to the store and return the Effects of that action; an empty
Effects means nothing changed.

InvalidReference raised by the store is handled here, at the gesture
boundary: the action is logged and dropped, the graph is left as it was.
FormatError from imports is re-raised so the UI can show it.

After every committed change the snapshot is written to the storage backend
(if any) and registered listeners are called with the Effects.
"""

import logging
import random
from typing import Callable, List, Optional

from mindmap import layout, templates, tools, waypoints
from mindmap.conversion import from_legacy, is_legacy_snapshot
from mindmap.errors import FormatError, InvalidReference
from mindmap.model import (
    ROOT_ID,
    SUBJECTS,
    Edge,
    Effects,
    Node,
    Position,
)
from mindmap.serialization import deserialize, dumps, parse_json, serialize
from mindmap.storage.protocol import StorageBackend
from mindmap.store import GraphStore
from mindmap.tools import ArrowType, Tool, ToolState
from mindmap.visibility import VisibleView, derive_view

logger = logging.getLogger(__name__)

# Child nodes are placed to the right of their parent with some vertical jitter
CHILD_OFFSET_X = 200
CHILD_JITTER_Y = 160


class EditorSession:
    """Single-user editing context for one mind map."""

    def __init__(self, store: Optional[GraphStore] = None, tool_state: Optional[ToolState] = None,
                 backend: Optional[StorageBackend] = None, rng: Optional[random.Random] = None,
                 on_change: Optional[Callable[[Effects], None]] = None):
        self.store = store if store is not None else GraphStore()
        self.tool_state = tool_state or ToolState()
        self.backend = backend
        self.rng = rng or random.Random()
        self.selected_node_id: Optional[str] = ROOT_ID
        self.selected_edge_id: Optional[str] = None
        self.theme = "light"
        self._listeners: List[Callable[[Effects], None]] = []
        if on_change:
            self._listeners.append(on_change)

    @classmethod
    def from_backend(cls, backend: StorageBackend, **kwargs) -> "EditorSession":
        """
        Open the map saved in `backend`.

        A missing snapshot starts a fresh graph; a malformed one is logged and
        replaced by an empty graph plus root.
        """
        session = cls(backend=backend, **kwargs)
        try:
            raw = backend.load_snapshot()
            if raw is not None:
                session._replace_from_blob(raw)
        except (FormatError, InvalidReference) as e:
            logger.warning(f"Saved map could not be loaded, starting empty: {e}")
            session.store = GraphStore()
        session.theme = backend.load_theme()
        return session

    # --- Listeners & commit ---

    def add_listener(self, callback: Callable[[Effects], None]) -> None:
        self._listeners.append(callback)

    def _commit(self, effects: Effects) -> Effects:
        if not effects.changed:
            return effects
        if self.selected_edge_id in effects.removed_edges:
            self.selected_edge_id = None
        if self.selected_node_id in effects.removed_nodes:
            self.selected_node_id = ROOT_ID
        if self.backend is not None:
            self.backend.save_snapshot(serialize(self.store))
        for callback in self._listeners:
            callback(effects)
        return effects

    # --- Derived state ---

    @property
    def tool(self) -> Tool:
        return self.tool_state.tool

    @property
    def view(self) -> VisibleView:
        return derive_view(self.store.nodes, self.store.edges, self.store.collapsed)

    @property
    def selected_node(self) -> Optional[Node]:
        return self.store.node(self.selected_node_id) if self.selected_node_id else None

    @property
    def selected_edge(self) -> Optional[Edge]:
        return self.store.edge(self.selected_edge_id) if self.selected_edge_id else None

    def matching_nodes(self, query: str) -> List[str]:
        """Ids of nodes whose label contains `query`, case-insensitive."""
        q = (query or "").strip().lower()
        if not q:
            return []
        return [n.id for n in self.store.nodes if n.label and q in n.label.lower()]

    def logical_edges(self) -> List[waypoints.LogicalEdge]:
        return waypoints.logical_edges(self.store)

    # --- Tool selection ---

    def select_tool(self, tool) -> ToolState:
        self.tool_state = self.tool_state.select(tool)
        return self.tool_state

    def configure_connection(self, **changes) -> ToolState:
        self.tool_state = self.tool_state.configure(**changes)
        return self.tool_state

    # --- Selection ---

    def select_node(self, node_id: Optional[str]) -> None:
        self.selected_node_id = node_id if node_id and self.store.has_node(node_id) else None
        self.selected_edge_id = None

    def select_edge(self, edge_id: Optional[str]) -> None:
        self.selected_edge_id = edge_id if edge_id and self.store.edge(edge_id) else None
        self.selected_node_id = None

    def clear_selection(self) -> None:
        self.selected_node_id = None
        self.selected_edge_id = None

    # --- Gestures ---

    def connect(self, source_id: str, target_id: str) -> Effects:
        try:
            effects = tools.connect(self.store, self.tool_state, source_id, target_id, rng=self.rng)
        except InvalidReference as e:
            logger.warning(f"connect({source_id}, {target_id}) dropped: {e}")
            return Effects()
        if self.tool is Tool.NODE:
            self.select_node(effects.added_nodes[0])
        return self._commit(effects)

    def click_empty_space(self, position: Position) -> Effects:
        if self.tool is Tool.NODE:
            node = Node.content(position=position)
        elif self.tool is Tool.INFORMATIONAL:
            node = Node.info(position=position)
        else:
            return Effects()
        effects = self.store.add_node(node)
        self.select_node(node.id)
        return self._commit(effects)

    def edge_midpoint(self, edge_id: str) -> Optional[Position]:
        """Halfway point between an edge's endpoints, or None if either is gone."""
        edge = self.store.edge(edge_id)
        if edge is None:
            return None
        source, target = self.store.node(edge.source), self.store.node(edge.target)
        if source is None or target is None:
            return None
        return source.position.midpoint(target.position)

    def double_click_edge(self, edge_id: str, position: Position) -> Effects:
        return self._commit(waypoints.insert_waypoint_at(self.store, edge_id, position))

    def click_edge(self, edge_id: str, position: Optional[Position] = None) -> Effects:
        if self.tool is Tool.WAYPOINT and position is not None:
            return self._commit(waypoints.insert_waypoint_at(self.store, edge_id, position))
        self.select_edge(edge_id)
        return Effects()

    def delete_selection(self) -> Effects:
        """
        Delete the selected edge, or else the selected node.

        Deleting a segment of a bent connection deletes the whole connection;
        deleting a node also clears waypoints it leaves dangling. Root stays.
        """
        if self.selected_edge_id:
            effects = waypoints.remove_logical_edge(self.store, self.selected_edge_id)
            self.selected_edge_id = None
            return self._commit(effects)
        if self.selected_node_id and self.selected_node_id != ROOT_ID:
            effects = self.store.remove_node(self.selected_node_id)
            effects = effects.merge(waypoints.prune_orphan_waypoints(self.store))
            self.selected_node_id = ROOT_ID
            return self._commit(effects)
        return Effects()

    def create_shortcut(self, position: Optional[Position] = None) -> Effects:
        node = Node.content(position=position or tools.free_position(self.rng))
        effects = self.store.add_node(node)
        self.select_node(node.id)
        return self._commit(effects)

    def move_node(self, node_id: str, position: Position) -> Effects:
        return self._commit(self.store.move_node(node_id, position))

    def toggle_collapse(self, node_id: str) -> Effects:
        return self._commit(self.store.toggle_collapse(node_id))

    # --- Toolbar & inspector actions ---

    def add_child(self, subject: str = "Default") -> Effects:
        """Add a `<subject> Topic` node to the right of the selected node (or the first node)."""
        base = self.selected_node or (self.store.nodes[0] if len(self.store) else None)
        if base is None:
            return Effects()
        subject = subject if subject in SUBJECTS else "Default"
        position = base.position.offset(CHILD_OFFSET_X, self.rng.random() * CHILD_JITTER_Y - CHILD_JITTER_Y / 2)
        child = Node.content(label=f"{subject} Topic", subject=subject, color=SUBJECTS[subject], position=position)

        effects = self.store.add_node(child)
        effects = effects.merge(self.store.add_edge(Edge.create(base.id, child.id)))
        self.select_node(child.id)
        return self._commit(effects)

    def update_selected(self, patch: dict) -> Effects:
        if not self.selected_node_id:
            return Effects()
        return self._commit(self.store.update_node_data(self.selected_node_id, patch))

    def update_edge(self, edge_id: str, patch: dict) -> Effects:
        return self._commit(self.store.update_edge(edge_id, patch))

    def set_edge_arrow_type(self, edge_id: str, arrow_type) -> Effects:
        mode = ArrowType(arrow_type).arrow_mode
        return self._commit(self.store.update_edge(edge_id, {"arrow_mode": mode}))

    def delete_edge(self, edge_id: str) -> Effects:
        """Delete the connection `edge_id` belongs to, bends included."""
        return self._commit(waypoints.remove_logical_edge(self.store, edge_id))

    def split_edge(self, edge_id: str) -> Effects:
        return self._commit(waypoints.split_edge_to_waypoint(self.store, edge_id))

    def remove_waypoint(self, edge_id: str) -> Effects:
        return self._commit(waypoints.remove_waypoint(self.store, edge_id))

    def apply_template(self, name: str) -> Effects:
        before = self.store.nodes
        templates.apply_template(self.store, name)
        self.selected_node_id = ROOT_ID
        self.selected_edge_id = None
        return self._commit(Effects(removed_nodes=[n.id for n in before],
                                    added_nodes=[n.id for n in self.store.nodes]))

    def auto_arrange(self) -> Effects:
        return self._commit(layout.auto_arrange(self.store))

    # --- Import / export ---

    def _replace_from_blob(self, blob) -> None:
        if is_legacy_snapshot(blob):
            blob = from_legacy(blob)
        nodes, edges, collapsed = deserialize(blob)
        self.store.replace(nodes, edges, collapsed)

    def import_json(self, text: str) -> Effects:
        """
        Replace the graph with a JSON snapshot (current or legacy format).

        Raises FormatError and leaves the graph untouched when the payload does
        not parse or validate.
        """
        try:
            blob = parse_json(text)
            self._replace_from_blob(blob)
        except InvalidReference as e:
            raise FormatError(str(e)) from e
        self.selected_node_id = ROOT_ID
        self.selected_edge_id = None
        logger.info("Imported map from JSON")
        return self._commit(Effects(added_nodes=[n.id for n in self.store.nodes]))

    def export_json(self) -> str:
        return dumps(self.store)

    # --- Theme ---

    def toggle_theme(self) -> str:
        self.theme = "light" if self.theme == "dark" else "dark"
        if self.backend is not None:
            self.backend.save_theme(self.theme)
        return self.theme
