"""
Snapshot serialization for the mind map graph.

Snapshot format (JSON-compatible):
{
  "nodes": [{"id", "kind", "position": {"x", "y"}, "label"?, "subject"?, "color"?}],
  "edges": [{"id", "source", "target", "routingKind", "arrowMode", "label"?, "style"?}],
  "collapsed": ["node id", ...]
}

`deserialize` validates everything before returning, so callers can swap the
result into a GraphStore without ever seeing a half-parsed graph. Any problem
raises FormatError with a path pointing at the offending entry.
"""

import json
from typing import Any, Dict, List, Tuple

from mindmap.errors import FormatError
from mindmap.model import (
    ROOT_ID,
    ArrowMode,
    ContentData,
    DEFAULT_SUBJECT,
    Edge,
    EdgeStyle,
    InfoData,
    Node,
    NodeKind,
    Position,
    RoutingKind,
)
from mindmap.store import GraphStore

# snapshot key -> EdgeStyle attribute
STYLE_KEYS = {
    "stroke": "stroke",
    "strokeWidth": "stroke_width",
    "labelShowBg": "label_bg",
    "labelBgColor": "label_bg_color",
    "labelTextColor": "label_text_color",
}

Snapshot = Dict[str, Any]
Parsed = Tuple[List[Node], List[Edge], List[str]]


# --- Encoding ---

def node_to_dict(node: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": node.id,
        "kind": node.kind.value,
        "position": {"x": node.position.x, "y": node.position.y},
    }
    if isinstance(node.data, ContentData):
        out["label"] = node.data.label
        out["subject"] = node.data.subject
        if node.data.color is not None:
            out["color"] = node.data.color
    elif isinstance(node.data, InfoData):
        out["label"] = node.data.label
        out["color"] = node.data.color
    return out


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "routingKind": edge.routing_kind.value,
        "arrowMode": edge.arrow_mode.value,
    }
    if edge.label is not None:
        out["label"] = edge.label
    if edge.style is not None:
        out["style"] = {key: getattr(edge.style, attr) for key, attr in STYLE_KEYS.items()}
    return out


def serialize(store: GraphStore) -> Snapshot:
    return {
        "nodes": [node_to_dict(n) for n in store.nodes],
        "edges": [edge_to_dict(e) for e in store.edges],
        "collapsed": store.collapsed,
    }


def dumps(store: GraphStore) -> str:
    return json.dumps(serialize(store), indent=2, ensure_ascii=False)


# --- Decoding ---

def _require(obj: Dict[str, Any], key: str, kind, path: str):
    if key not in obj:
        raise FormatError(f"missing '{key}'", path)
    value = obj[key]
    if not isinstance(value, kind) or isinstance(value, bool) and kind is not bool:
        raise FormatError(f"'{key}' has wrong type {type(value).__name__}", path)
    return value


def _optional(obj: Dict[str, Any], key: str, kind, path: str, default=None):
    if obj.get(key) is None:
        return default
    return _require(obj, key, kind, path)


def _enum(enum_cls, value: str, path: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise FormatError(f"unknown {enum_cls.__name__} '{value}'", path) from None


def node_from_dict(raw: Any, path: str = "nodes") -> Node:
    if not isinstance(raw, dict):
        raise FormatError("node must be an object", path)
    node_id = _require(raw, "id", str, path)
    kind = _enum(NodeKind, _require(raw, "kind", str, path), path)

    pos = _require(raw, "position", dict, path)
    x = _require(pos, "x", (int, float), f"{path}.position")
    y = _require(pos, "y", (int, float), f"{path}.position")
    position = Position(float(x), float(y))

    if kind is NodeKind.CONTENT:
        data = ContentData(
            label=_optional(raw, "label", str, path, default=""),
            subject=_optional(raw, "subject", str, path, default=DEFAULT_SUBJECT),
            color=_optional(raw, "color", str, path),
        )
        return Node(node_id, kind, position, data)
    if kind is NodeKind.INFO:
        data = InfoData(
            label=_optional(raw, "label", str, path, default="Info"),
            color=_optional(raw, "color", str, path, default="#fff"),
        )
        return Node(node_id, kind, position, data)
    return Node(node_id, kind, position)


def edge_from_dict(raw: Any, path: str = "edges") -> Edge:
    if not isinstance(raw, dict):
        raise FormatError("edge must be an object", path)
    style = None
    raw_style = _optional(raw, "style", dict, path)
    if raw_style is not None:
        values = {}
        for key, attr in STYLE_KEYS.items():
            if raw_style.get(key) is None:
                continue
            kind = bool if attr == "label_bg" else (int, float) if attr == "stroke_width" else str
            values[attr] = _require(raw_style, key, kind, f"{path}.style")
        style = EdgeStyle(**values)

    return Edge(
        id=_require(raw, "id", str, path),
        source=_require(raw, "source", str, path),
        target=_require(raw, "target", str, path),
        routing_kind=_enum(RoutingKind, _optional(raw, "routingKind", str, path, default="direct"), path),
        arrow_mode=_enum(ArrowMode, _optional(raw, "arrowMode", str, path, default="none"), path),
        label=_optional(raw, "label", str, path),
        style=style,
    )


def deserialize(blob: Any) -> Parsed:
    """
    Parse and validate a snapshot.

    Returns (nodes, edges, collapsed). Raises FormatError on any malformed
    entry, duplicate id or edge that points at a node not in the snapshot.
    """
    if not isinstance(blob, dict):
        raise FormatError("snapshot must be an object")
    raw_nodes = _optional(blob, "nodes", list, "snapshot", default=[])
    raw_edges = _optional(blob, "edges", list, "snapshot", default=[])
    raw_collapsed = _optional(blob, "collapsed", list, "snapshot", default=[])

    nodes = [node_from_dict(raw, f"nodes[{i}]") for i, raw in enumerate(raw_nodes)]
    edges = [edge_from_dict(raw, f"edges[{i}]") for i, raw in enumerate(raw_edges)]

    node_ids = set()
    for i, node in enumerate(nodes):
        if node.id in node_ids:
            raise FormatError(f"duplicate node id '{node.id}'", f"nodes[{i}]")
        node_ids.add(node.id)

    edge_ids = set()
    for i, edge in enumerate(edges):
        if edge.id in edge_ids:
            raise FormatError(f"duplicate edge id '{edge.id}'", f"edges[{i}]")
        edge_ids.add(edge.id)
        for end in (edge.source, edge.target):
            if end not in node_ids and end != ROOT_ID:
                raise FormatError(f"edge endpoint '{end}' is not a node", f"edges[{i}]")

    collapsed = []
    for i, node_id in enumerate(raw_collapsed):
        if not isinstance(node_id, str):
            raise FormatError("collapsed ids must be strings", f"collapsed[{i}]")
        collapsed.append(node_id)

    return nodes, edges, collapsed


def parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise FormatError(f"invalid JSON: {e}") from e


def loads(text: str) -> Parsed:
    return deserialize(parse_json(text))
