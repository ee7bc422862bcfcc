"""
Connection tools.

The editor has one active tool at a time plus a bundle of pending connection
settings (label, arrow type, colors, width). A "connect two points" gesture
is interpreted by `connect` according to the tool:

- node: drop a new content node near the source, no edge
- informational: waypoint at the midpoint plus two arrowless segments
- dotted: a single dashed edge
- one-way / two-way / waypoint: a single direct edge

ToolState is immutable; selecting a tool returns a new state.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from mindmap.errors import InvalidReference
from mindmap.model import (
    ArrowMode,
    Edge,
    EdgeStyle,
    Effects,
    Node,
    Position,
    RoutingKind,
)
from mindmap.store import GraphStore

logger = logging.getLogger(__name__)

# Random placement window for nodes created without an anchor
FREE_NODE_ORIGIN = 120
FREE_NODE_SPREAD = 200


class Tool(str, Enum):
    ONE_WAY = "one-way"
    TWO_WAY = "two-way"
    INFORMATIONAL = "informational"
    NODE = "node"
    DOTTED = "dotted"
    WAYPOINT = "waypoint"


class ArrowType(str, Enum):
    """Arrow setting chosen in the connection panel."""
    ONE_WAY = "one-way"
    TWO_WAY = "two-way"
    NONE = "none"

    @property
    def arrow_mode(self) -> ArrowMode:
        return ArrowMode.from_markers(start=self is ArrowType.TWO_WAY, end=self is not ArrowType.NONE)

    @classmethod
    def from_arrow_mode(cls, mode: ArrowMode) -> "ArrowType":
        if mode.marker_start and mode.marker_end:
            return cls.TWO_WAY
        if mode.marker_end:
            return cls.ONE_WAY
        return cls.NONE


# Selecting these tools also resets the pending arrow type
TOOL_ARROW_TYPES = {
    Tool.ONE_WAY: ArrowType.ONE_WAY,
    Tool.TWO_WAY: ArrowType.TWO_WAY,
    Tool.INFORMATIONAL: ArrowType.NONE,
    Tool.DOTTED: ArrowType.ONE_WAY,
}


@dataclass(frozen=True)
class ConnectionSettings:
    label: str = ""
    arrow_type: ArrowType = ArrowType.ONE_WAY
    color: str = "#4f46e5"
    width: float = 2
    label_bg: bool = True
    label_bg_color: str = "#ffffff"
    label_text_color: str = "#111827"

    def edge_style(self) -> EdgeStyle:
        return EdgeStyle(
            stroke=self.color,
            stroke_width=float(self.width),
            label_bg=self.label_bg,
            label_bg_color=self.label_bg_color,
            label_text_color=self.label_text_color,
        )


@dataclass(frozen=True)
class ToolState:
    tool: Tool = Tool.ONE_WAY
    settings: ConnectionSettings = field(default_factory=ConnectionSettings)

    def select(self, tool) -> "ToolState":
        tool = Tool(tool)
        arrow_type = TOOL_ARROW_TYPES.get(tool, self.settings.arrow_type)
        return ToolState(tool=tool, settings=replace(self.settings, arrow_type=arrow_type))

    def configure(self, **changes) -> "ToolState":
        if "arrow_type" in changes:
            changes["arrow_type"] = ArrowType(changes["arrow_type"])
        return replace(self, settings=replace(self.settings, **changes))


def free_position(rng: random.Random) -> Position:
    return Position(FREE_NODE_ORIGIN + rng.random() * FREE_NODE_SPREAD,
                    FREE_NODE_ORIGIN + rng.random() * FREE_NODE_SPREAD)


def _node_box_position(store: GraphStore, source_id: str, rng: random.Random) -> Position:
    source = store.node(source_id)
    if source is None:
        return free_position(rng)
    return source.position.offset(60 + rng.random() * 140, rng.random() * 160 - 80)


def connect(store: GraphStore, state: ToolState, source_id: str, target_id: str,
            rng: Optional[random.Random] = None) -> Effects:
    """
    Apply a connect(source, target) gesture under the active tool.

    Raises InvalidReference (from the store) when an endpoint no longer
    exists; nothing is added in that case.
    """
    rng = rng or random.Random()
    settings = state.settings

    if state.tool is Tool.NODE:
        node = Node.content(position=_node_box_position(store, source_id, rng))
        return store.add_node(node)

    if state.tool is Tool.INFORMATIONAL:
        return _connect_informational(store, settings, source_id, target_id)

    routing = RoutingKind.DASHED if state.tool is Tool.DOTTED else RoutingKind.DIRECT
    edge = Edge.create(
        source_id,
        target_id,
        routing_kind=routing,
        arrow_mode=settings.arrow_type.arrow_mode,
        label=settings.label or None,
        style=settings.edge_style(),
    )
    return store.add_edge(edge)


def _connect_informational(store: GraphStore, settings: ConnectionSettings,
                           source_id: str, target_id: str) -> Effects:
    # Endpoints are checked up front so a vanished node leaves no stray waypoint
    missing = [nid for nid in (source_id, target_id) if not store.has_node(nid)]
    if missing:
        logger.warning(f"Informational link rejected: missing endpoint(s) {missing}")
        raise InvalidReference(f"Cannot connect missing node(s): {', '.join(missing)}", missing)

    source, target = store.node(source_id), store.node(target_id)
    waypoint = Node.waypoint(position=source.position.midpoint(target.position))
    style = settings.edge_style()

    first = Edge.create(source_id, waypoint.id, arrow_mode=ArrowMode.NONE,
                        label=settings.label or None, style=style)
    second = Edge.create(waypoint.id, target_id, arrow_mode=ArrowMode.NONE,
                         style=replace(style, label_bg=False))

    effects = store.add_node(waypoint)
    effects = effects.merge(store.add_edge(first))
    effects = effects.merge(store.add_edge(second))
    logger.info(f"Informational link {source_id} -> {target_id} via waypoint {waypoint.id}")
    return effects
