"""
Conversion from the legacy editor export.

The earlier web editor saved its canvas in React Flow's shape:

    nodes: [{id, type: "study" | "waypoint" | "info", position, data: {label, subject, color}}]
    edges: [{id, source, target, label, style: {stroke, strokeWidth, strokeDasharray},
             markerStart, markerEnd, labelShowBg, labelBgStyle: {fill}, labelStyle: {fill}}]

`from_legacy` rewrites such a payload into the snapshot format understood by
mindmap.serialization. Only the top-level sections are checked here;
per-entry validation is left to `deserialize`.
"""

from typing import Any, Dict, List

from mindmap.errors import FormatError
from mindmap.model import DEFAULT_SUBJECT

LEGACY_NODE_KINDS = {
    "study": "content",
    "waypoint": "waypoint",
    "info": "info",
}


def is_legacy_snapshot(blob: Any) -> bool:
    """A legacy payload has nodes carrying a React Flow `type`/`data` pair instead of `kind`."""
    if not isinstance(blob, dict):
        return False
    nodes = blob.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        edges = blob.get("edges")
        return isinstance(edges, list) and any(
            isinstance(e, dict) and ("markerEnd" in e or "markerStart" in e) for e in edges
        )
    return any(isinstance(n, dict) and "kind" not in n and ("type" in n or "data" in n) for n in nodes)


def _legacy_node(raw: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return raw
    data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
    node_type = raw.get("type") or "study"
    kind = LEGACY_NODE_KINDS.get(node_type, node_type) if isinstance(node_type, str) else node_type
    out = {"id": raw.get("id"), "kind": kind, "position": raw.get("position")}
    if kind == "content":
        out["label"] = data.get("label", "")
        out["subject"] = data.get("subject") or DEFAULT_SUBJECT
        if data.get("color"):
            out["color"] = data["color"]
    elif kind == "info":
        out["label"] = data.get("label") or "Info"
        out["color"] = data.get("color") or "#fff"
    return out


def _width(value: Any) -> Any:
    # React Flow kept numeric input values as strings at times
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _fill(obj: Any) -> Any:
    return obj.get("fill") if isinstance(obj, dict) else None


def _legacy_edge(raw: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return raw
    style = raw.get("style") if isinstance(raw.get("style"), dict) else {}
    start, end = bool(raw.get("markerStart")), bool(raw.get("markerEnd"))
    if start and end:
        arrow_mode = "bidirectional"
    elif end:
        arrow_mode = "forward"
    elif start:
        arrow_mode = "backward"
    else:
        arrow_mode = "none"

    out = {
        "id": raw.get("id"),
        "source": raw.get("source"),
        "target": raw.get("target"),
        "routingKind": "dashed" if style.get("strokeDasharray") else "direct",
        "arrowMode": arrow_mode,
    }
    if raw.get("label"):
        out["label"] = raw["label"]

    if style or "labelShowBg" in raw:
        new_style = {
            "stroke": style.get("stroke"),
            "strokeWidth": _width(style.get("strokeWidth")),
            "labelShowBg": raw.get("labelShowBg"),
            "labelBgColor": _fill(raw.get("labelBgStyle")),
            "labelTextColor": _fill(raw.get("labelStyle")),
        }
        out["style"] = {k: v for k, v in new_style.items() if v is not None}
    return out


def _section(blob: Dict[str, Any], key: str) -> List[Any]:
    value = blob.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise FormatError(f"'{key}' must be a list", "snapshot")
    return list(value)


def from_legacy(blob: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a legacy export into a snapshot dict.

    Raises FormatError when `nodes`, `edges` or `collapsed` is present but not
    a list.
    """
    nodes = _section(blob, "nodes")
    edges = _section(blob, "edges")
    return {
        "nodes": [_legacy_node(n) for n in nodes],
        "edges": [_legacy_edge(e) for e in edges],
        "collapsed": _section(blob, "collapsed"),
    }
