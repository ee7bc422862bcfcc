"""
Node and edge records for the mind map graph.

Records are frozen dataclasses: the GraphStore swaps whole records on every
mutation (dataclasses.replace), so a reference handed out by the store can
never change underneath its holder.

Node kinds:
- content: a labeled study node with subject and color
- waypoint: an unlabeled dot used to bend a connection
- info: a free-standing note

The `data` field is the per-kind payload (ContentData, InfoData, or None for
waypoints) and is checked against `kind` on construction.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Union

ROOT_ID = "root"

# Subject palette, also used to derive a content node's color
SUBJECTS: Dict[str, str] = {
    "Math": "#4f83cc",
    "Science": "#4caf50",
    "History": "#ffb300",
    "Literature": "#9c27b0",
    "CS": "#5c6bc0",
    "Default": "#2d7ef7",
}
DEFAULT_SUBJECT = "Default"


def new_id() -> str:
    """Return a fresh opaque identifier (UUID4 string)."""
    return str(uuid.uuid4())


def subject_color(subject: Optional[str]) -> str:
    return SUBJECTS.get(subject or DEFAULT_SUBJECT, SUBJECTS[DEFAULT_SUBJECT])


class NodeKind(str, Enum):
    CONTENT = "content"
    WAYPOINT = "waypoint"
    INFO = "info"


class RoutingKind(str, Enum):
    DIRECT = "direct"
    DASHED = "dashed"


class ArrowMode(str, Enum):
    """
    Which ends of an edge carry an arrowhead.

    BACKWARD (start marker only) never comes out of a connect gesture; it
    appears on the first segment when a bidirectional edge is bent with
    insert_waypoint_at.
    """
    NONE = "none"
    FORWARD = "forward"
    BIDIRECTIONAL = "bidirectional"
    BACKWARD = "backward"

    @property
    def marker_start(self) -> bool:
        return self in (ArrowMode.BIDIRECTIONAL, ArrowMode.BACKWARD)

    @property
    def marker_end(self) -> bool:
        return self in (ArrowMode.FORWARD, ArrowMode.BIDIRECTIONAL)

    @classmethod
    def from_markers(cls, start: bool, end: bool) -> "ArrowMode":
        if start and end:
            return cls.BIDIRECTIONAL
        if end:
            return cls.FORWARD
        if start:
            return cls.BACKWARD
        return cls.NONE


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def midpoint(self, other: "Position") -> "Position":
        return Position((self.x + other.x) / 2, (self.y + other.y) / 2)

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def distance_to(self, other: "Position") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class ContentData:
    label: str = "New Node"
    subject: str = DEFAULT_SUBJECT
    color: Optional[str] = None

    @property
    def resolved_color(self) -> str:
        """Explicit color override, else the subject palette color."""
        return self.color or subject_color(self.subject)


@dataclass(frozen=True)
class InfoData:
    label: str = "Info"
    color: str = "#fff"


NodeData = Union[ContentData, InfoData, None]

_DATA_TYPES = {
    NodeKind.CONTENT: ContentData,
    NodeKind.INFO: InfoData,
}


@dataclass(frozen=True)
class Node:
    id: str
    kind: NodeKind
    position: Position = field(default_factory=Position)
    data: NodeData = None

    def __post_init__(self):
        expected = _DATA_TYPES.get(self.kind)
        if expected is None:
            if self.data is not None:
                raise TypeError(f"{self.kind.value} node {self.id!r} takes no data")
        elif not isinstance(self.data, expected):
            raise TypeError(f"{self.kind.value} node {self.id!r} needs {expected.__name__}")

    @classmethod
    def content(cls, label: str = "New Node", subject: str = DEFAULT_SUBJECT,
                color: Optional[str] = None, position: Optional[Position] = None,
                node_id: Optional[str] = None) -> "Node":
        return cls(node_id or new_id(), NodeKind.CONTENT, position or Position(),
                   ContentData(label=label, subject=subject, color=color))

    @classmethod
    def waypoint(cls, position: Optional[Position] = None, node_id: Optional[str] = None) -> "Node":
        return cls(node_id or new_id(), NodeKind.WAYPOINT, position or Position())

    @classmethod
    def info(cls, label: str = "Info", color: str = "#fff", position: Optional[Position] = None,
             node_id: Optional[str] = None) -> "Node":
        return cls(node_id or new_id(), NodeKind.INFO, position or Position(),
                   InfoData(label=label, color=color))

    @property
    def is_waypoint(self) -> bool:
        return self.kind is NodeKind.WAYPOINT

    @property
    def label(self) -> Optional[str]:
        return self.data.label if self.data is not None else None

    @property
    def color(self) -> Optional[str]:
        if isinstance(self.data, ContentData):
            return self.data.resolved_color
        if isinstance(self.data, InfoData):
            return self.data.color
        return None

    def moved(self, position: Position) -> "Node":
        return replace(self, position=position)


def make_root(label: str = "Study Plan") -> Node:
    """The reserved root node every graph starts with."""
    return Node.content(label=label, subject=DEFAULT_SUBJECT, color=SUBJECTS[DEFAULT_SUBJECT],
                        position=Position(250, 100), node_id=ROOT_ID)


@dataclass(frozen=True)
class EdgeStyle:
    stroke: str = "#4f46e5"
    stroke_width: float = 2
    label_bg: bool = True
    label_bg_color: str = "#ffffff"
    label_text_color: str = "#111827"


@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str
    routing_kind: RoutingKind = RoutingKind.DIRECT
    arrow_mode: ArrowMode = ArrowMode.FORWARD
    label: Optional[str] = None
    style: Optional[EdgeStyle] = None

    @classmethod
    def create(cls, source: str, target: str, **kwargs) -> "Edge":
        return cls(kwargs.pop("edge_id", None) or new_id(), source, target, **kwargs)

    @property
    def marker_start(self) -> bool:
        return self.arrow_mode.marker_start

    @property
    def marker_end(self) -> bool:
        return self.arrow_mode.marker_end

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass
class Effects:
    """Ids touched by a single committed operation. Empty means no-op."""
    added_nodes: List[str] = field(default_factory=list)
    removed_nodes: List[str] = field(default_factory=list)
    added_edges: List[str] = field(default_factory=list)
    removed_edges: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added_nodes or self.removed_nodes or self.added_edges
                    or self.removed_edges or self.updated)

    def merge(self, other: "Effects") -> "Effects":
        return Effects(
            added_nodes=self.added_nodes + other.added_nodes,
            removed_nodes=self.removed_nodes + other.removed_nodes,
            added_edges=self.added_edges + other.added_edges,
            removed_edges=self.removed_edges + other.removed_edges,
            updated=self.updated + other.updated,
        )
