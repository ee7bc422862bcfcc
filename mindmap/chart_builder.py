"""
ECharts options builder for the mind map canvas.

Turns a VisibleView into options for a ui.echart graph series with fixed
positions: content and info nodes as labeled boxes, waypoints as small dots,
edges with arrow symbols, dashed routing and optional labels. Also maps click
events coming back from the chart onto node or edge ids.
"""

from typing import Any, Dict, Iterable, Optional, Tuple

from mindmap.model import Edge, EdgeStyle, Node, NodeKind, RoutingKind
from mindmap.visibility import VisibleView

# Event keys we request from ECharts click events
REQUESTED_EVENT_KEYS = ['componentType', 'name', 'seriesType', 'value', 'dataType']

BACKGROUNDS = {'light': '#f8fafc', 'dark': '#0f172a'}
TEXT_COLORS = {'light': '#111827', 'dark': '#e5e7eb'}

SELECTED_BORDER = '#ffd700'
HIGHLIGHT_SHADOW = '#f59e0b'
CONTENT_SIZE = [140, 40]
INFO_SIZE = [120, 36]
WAYPOINT_SIZE = 8


def _node_item(node: Node, collapsed: bool, selected: bool, highlighted: bool, theme: str) -> Dict[str, Any]:
    if node.kind is NodeKind.WAYPOINT:
        return {
            'id': node.id,
            'name': node.id,
            'value': '',
            'x': node.position.x,
            'y': node.position.y,
            'symbol': 'circle',
            'symbolSize': WAYPOINT_SIZE,
            'itemStyle': {
                'color': '#64748b',
                'borderColor': SELECTED_BORDER if selected else '#ffffff',
                'borderWidth': 2 if selected else 1,
            },
            'label': {'show': False},
            'tooltip': {'show': False},
        }

    label = node.label or ''
    is_info = node.kind is NodeKind.INFO
    item_style = {
        'color': node.color,
        'borderColor': '#94a3b8' if is_info else node.color,
        'borderWidth': 1,
        'borderType': 'solid',
    }
    # Collapsed nodes stay visible, drawn with a dashed outline
    if collapsed:
        item_style['borderType'] = 'dashed'
        item_style['borderWidth'] = 2
        item_style['borderColor'] = TEXT_COLORS.get(theme, TEXT_COLORS['light'])
    if selected:
        item_style['borderColor'] = SELECTED_BORDER
        item_style['borderWidth'] = 3
    if highlighted:
        item_style['shadowBlur'] = 12
        item_style['shadowColor'] = HIGHLIGHT_SHADOW

    return {
        'id': node.id,
        'name': node.id,
        'value': label,
        'x': node.position.x,
        'y': node.position.y,
        'symbol': 'rect' if is_info else 'roundRect',
        'symbolSize': INFO_SIZE if is_info else CONTENT_SIZE,
        'itemStyle': item_style,
        'label': {
            'show': True,
            'formatter': f"{label} (+)" if collapsed else label,
            'position': 'inside',
            'fontSize': 12,
            'color': '#111827' if is_info else '#ffffff',
        },
        'tooltip': {'formatter': label},
    }


def _link_item(edge: Edge, selected: bool) -> Dict[str, Any]:
    style = edge.style or EdgeStyle()
    line_style = {
        'color': style.stroke,
        'width': style.stroke_width + (2 if selected else 0),
        'type': 'dashed' if edge.routing_kind is RoutingKind.DASHED else 'solid',
        'curveness': 0,
        'opacity': 1.0,
    }
    label_cfg: Dict[str, Any] = {'show': bool(edge.label)}
    if edge.label:
        label_cfg.update({
            'formatter': edge.label,
            'color': style.label_text_color,
            'fontSize': 11,
        })
        if style.label_bg:
            label_cfg['backgroundColor'] = style.label_bg_color
            label_cfg['padding'] = [2, 4]
            label_cfg['borderRadius'] = 3

    return {
        'source': edge.source,
        'target': edge.target,
        # Edge id travels in `value` so click events can name the edge
        'value': edge.id,
        'symbol': [
            'arrow' if edge.marker_start else 'none',
            'arrow' if edge.marker_end else 'none',
        ],
        'symbolSize': 8,
        'lineStyle': line_style,
        'label': label_cfg,
        'tooltip': {'show': False},
    }


def build_echart_options(
    view: VisibleView,
    selected_node_id: Optional[str] = None,
    selected_edge_id: Optional[str] = None,
    theme: str = 'light',
    highlight: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Build ECharts options from the visible part of the graph.

    Args:
        view: Derived view (visible nodes and edges, collapsed ids)
        selected_node_id: Node drawn with the selection border
        selected_edge_id: Edge drawn thicker
        theme: 'light' or 'dark'
        highlight: Node ids matched by the search box

    Returns:
        ECharts options dict ready for ui.echart()
    """
    highlight = set(highlight)
    e_nodes = [
        _node_item(n, n.id in view.collapsed, n.id == selected_node_id, n.id in highlight, theme)
        for n in view.nodes
    ]
    e_links = [_link_item(e, e.id == selected_edge_id) for e in view.edges]

    return {
        'backgroundColor': BACKGROUNDS.get(theme, BACKGROUNDS['light']),
        'tooltip': {},
        'animation': True,
        'animationDurationUpdate': 0,  # Prevent animated repositioning on updates
        'toolbox': {'feature': {'saveAsImage': {'name': 'mindmap'}}},
        'series': [{
            'type': 'graph',
            'layout': 'none',
            'roam': True,
            'edgeLabel': {'show': True},
            'emphasis': {'focus': 'none'},
            'data': e_nodes,
            'links': e_links,
        }]
    }


def normalize_click_payload(raw_payload: Any) -> Dict[str, Any]:
    """Normalize NiceGUI chart click payloads into a dictionary for easier parsing."""
    if isinstance(raw_payload, dict):
        return raw_payload
    if isinstance(raw_payload, (list, tuple)):
        return {
            REQUESTED_EVENT_KEYS[i]: raw_payload[i]
            for i in range(min(len(raw_payload), len(REQUESTED_EVENT_KEYS)))
        }
    if isinstance(raw_payload, str):
        return {'name': raw_payload}
    return {}


def resolve_click_target(payload: Dict[str, Any], store) -> Optional[Tuple[str, str]]:
    """
    Return ('node', id) or ('edge', id) for a normalized click payload.

    Node clicks are matched by id first, then by label. Anything that is not a
    series item of the current graph resolves to None.
    """
    if not isinstance(payload, dict) or payload.get('componentType') != 'series':
        return None

    if payload.get('dataType') == 'edge':
        edge_id = payload.get('value')
        if isinstance(edge_id, str) and store.edge(edge_id) is not None:
            return ('edge', edge_id)
        return None

    name = payload.get('name')
    if not name:
        return None
    if store.has_node(name):
        return ('node', name)
    for node in store.nodes:
        if node.label == name:
            return ('node', node.id)
    return None
