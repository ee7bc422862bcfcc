"""
Main NiceGUI application for the mind map editor.

Renders the graph held by an EditorSession with ui.echart and wires the tool
column, toolbar and inspector card to session gestures. All editing logic
lives in mindmap.*; this page only translates UI events.
"""

import logging
import sys

from nicegui import ui

from dotenv import load_dotenv
load_dotenv()

from mindmap.chart_builder import (
    REQUESTED_EVENT_KEYS,
    build_echart_options,
    normalize_click_payload,
    resolve_click_target,
)
from mindmap.config import configure_logging, get_settings
from mindmap.errors import FormatError
from mindmap.model import SUBJECTS, NodeKind, Position
from mindmap.session import EditorSession
from mindmap.storage import create_backend
from mindmap.templates import TEMPLATES
from mindmap.tools import ArrowType, Tool, free_position

configure_logging()
logger = logging.getLogger(__name__)

TOOL_LABELS = {
    Tool.ONE_WAY.value: 'One-way',
    Tool.TWO_WAY.value: 'Two-way',
    Tool.INFORMATIONAL.value: 'Info',
    Tool.NODE.value: 'Node',
    Tool.DOTTED.value: 'Dotted',
    Tool.WAYPOINT.value: 'Waypoint',
}
ARROW_LABELS = {
    ArrowType.ONE_WAY.value: 'One-way',
    ArrowType.TWO_WAY.value: 'Two-way',
    ArrowType.NONE.value: 'None',
}


def open_session() -> EditorSession:
    settings = get_settings()
    backend = create_backend(settings)
    session = EditorSession.from_backend(backend)
    try:
        session.select_tool(settings.get('default_tool') or Tool.ONE_WAY)
    except ValueError:
        logger.warning(f"Unknown default tool {settings.get('default_tool')!r}, using one-way")
    logger.info(f"Opened map with {len(session.store)} nodes ({backend.backend_type} storage)")
    return session


@ui.page('/')
def main_page():
    session = open_session()
    dark = ui.dark_mode(session.theme == 'dark')

    state = {
        'chart': None,
        'connect_from': None,
        'search': '',
    }

    def get_current_options():
        return build_echart_options(
            session.view,
            selected_node_id=session.selected_node_id,
            selected_edge_id=session.selected_edge_id,
            theme=session.theme,
            highlight=session.matching_nodes(state['search']),
        )

    def refresh_chart_ui():
        chart = state['chart']
        if chart is None:
            return
        chart.options.clear()
        chart.options.update(get_current_options())
        chart.update()
        inspector.refresh()

    session.add_listener(lambda effects: refresh_chart_ui())

    # --- Chart events ---

    def handle_chart_click(event):
        raw_payload = event.args if hasattr(event, 'args') else event
        payload = normalize_click_payload(raw_payload)
        target = resolve_click_target(payload, session.store)
        if target is None:
            return

        kind, target_id = target
        if kind == 'edge':
            position = session.edge_midpoint(target_id) if session.tool is Tool.WAYPOINT else None
            session.click_edge(target_id, position)
            refresh_chart_ui()
            return

        source_id = state['connect_from']
        if source_id:
            state['connect_from'] = None
            connect_hint.set_visibility(False)
            effects = session.connect(source_id, target_id)
            if not effects.changed:
                ui.notify('Could not connect those nodes', type='warning')
            return

        session.select_node(target_id)
        refresh_chart_ui()

    def handle_chart_dblclick(event):
        raw_payload = event.args if hasattr(event, 'args') else event
        target = resolve_click_target(normalize_click_payload(raw_payload), session.store)
        if target is None or target[0] != 'edge':
            return
        # Chart events carry no canvas coordinates; the waypoint lands mid-edge.
        position = session.edge_midpoint(target[1])
        if position is not None:
            session.double_click_edge(target[1], position)

    def start_connect():
        if not session.selected_node_id:
            ui.notify('Select a node to connect from', type='warning')
            return
        state['connect_from'] = session.selected_node_id
        connect_hint.set_visibility(True)

    def handle_keyboard(e):
        if not e.action.keydown or e.action.repeat:
            return
        if e.key.delete or e.key.backspace:
            session.delete_selection()
            refresh_chart_ui()
        elif e.key.escape:
            state['connect_from'] = None
            connect_hint.set_visibility(False)
            session.clear_selection()
            refresh_chart_ui()
        elif e.key.name == 'n' and e.modifiers.alt:
            session.create_shortcut()

    ui.keyboard(on_key=handle_keyboard)

    # --- Toolbar actions ---

    def set_tool(value):
        tool_state = session.select_tool(value)
        arrow_select.value = tool_state.settings.arrow_type.value

    def place_node():
        if session.tool not in (Tool.NODE, Tool.INFORMATIONAL):
            ui.notify('Pick the Node or Info tool to place a node', type='info')
            return
        session.click_empty_space(free_position(session.rng))

    def do_export():
        ui.download(session.export_json().encode('utf-8'), 'mindmap.json')

    def handle_upload(e):
        try:
            text = e.content.read().decode('utf-8')
            session.import_json(text)
            ui.notify('Map imported', type='positive')
        except (FormatError, UnicodeDecodeError) as err:
            logger.warning(f"Import rejected: {err}")
            ui.notify(f'Import failed: {err}', type='negative')

    def do_toggle_theme():
        theme = session.toggle_theme()
        dark.set_value(theme == 'dark')
        refresh_chart_ui()

    def on_search(e):
        state['search'] = e.value or ''
        refresh_chart_ui()

    # --- Layout Construction ---

    state['chart'] = ui.echart(get_current_options())
    state['chart'].style('width: 100vw; height: 100vh; position: absolute; top: 0; left: 0; z-index: 0;')
    state['chart'].on('componentClick', handle_chart_click, REQUESTED_EVENT_KEYS)
    state['chart'].on('chart:dblclick', handle_chart_dblclick, REQUESTED_EVENT_KEYS)

    # Tool column
    with ui.card().classes('fixed left-4 top-20 z-10 w-56 gap-2 shadow-xl'):
        ui.label('Tool').classes('text-xs text-gray-500')
        ui.toggle(TOOL_LABELS, value=session.tool.value,
                  on_change=lambda e: set_tool(e.value)).props('dense no-caps').classes('flex-wrap')

        ui.label('Connection').classes('text-xs text-gray-500')
        settings = session.tool_state.settings
        ui.input('Label', value=settings.label,
                 on_change=lambda e: session.configure_connection(label=e.value or '')).props('dense')
        arrow_select = ui.select(ARROW_LABELS, value=settings.arrow_type.value, label='Arrows',
                                 on_change=lambda e: session.configure_connection(arrow_type=e.value)).props('dense')
        ui.color_input('Color', value=settings.color,
                       on_change=lambda e: session.configure_connection(color=e.value)).props('dense')
        ui.number('Width', value=settings.width, min=1, max=8, step=1,
                  on_change=lambda e: session.configure_connection(width=e.value or 2)).props('dense')
        ui.switch('Label background', value=settings.label_bg,
                  on_change=lambda e: session.configure_connection(label_bg=e.value)).props('dense')

        with ui.row().classes('gap-1'):
            ui.button('Connect', on_click=start_connect).props('dense icon=link')
            ui.button('Place', on_click=place_node).props('dense flat icon=add_location')
        connect_hint = ui.label('Click a target node').classes('text-xs text-amber-600')
        connect_hint.set_visibility(False)

    # Top toolbar
    with ui.row().classes('fixed top-4 left-4 right-4 z-10 items-center gap-2'):
        with ui.button('Template', icon='dashboard').props('dense'):
            with ui.menu():
                for name in TEMPLATES:
                    ui.menu_item(name.title(), on_click=lambda n=name: session.apply_template(n))
        with ui.button('Add child', icon='add').props('dense'):
            with ui.menu():
                for subject in SUBJECTS:
                    ui.menu_item(subject, on_click=lambda s=subject: session.add_child(s))
        ui.button('Shortcut', on_click=lambda: session.create_shortcut()).props('dense flat icon=note_add')
        ui.button('Arrange', on_click=lambda: session.auto_arrange()).props('dense flat icon=grid_view')
        ui.button('Delete', on_click=lambda: (session.delete_selection(), refresh_chart_ui())).props(
            'dense flat color=negative icon=delete')
        ui.input(placeholder='Search', on_change=on_search).props('dense outlined clearable')
        ui.space()
        ui.button('Export', on_click=do_export).props('dense flat icon=download')
        ui.upload(label='Import', on_upload=handle_upload, auto_upload=True).props(
            'dense flat accept=.json').classes('w-40')
        ui.button(on_click=do_toggle_theme).props('dense flat icon=contrast').tooltip('Toggle theme')

    # Inspector
    with ui.card().classes('fixed right-4 top-20 w-80 z-10 shadow-2xl'):
        @ui.refreshable
        def inspector():
            node = session.selected_node
            edge = session.selected_edge
            if node is not None and node.kind is not NodeKind.WAYPOINT:
                render_node_inspector(node)
            elif node is not None:
                ui.label('Waypoint').classes('font-bold')
                ui.label('Select one of its segments to merge it away.').classes('text-xs text-gray-500')
            elif edge is not None:
                render_edge_inspector(edge)
            else:
                ui.label('Nothing selected').classes('text-gray-500')

        def render_node_inspector(node):
            ui.label('Node').classes('font-bold')
            label_input = ui.input('Label', value=node.label or '').props('dense')
            label_input.on('blur', lambda: session.update_selected({'label': label_input.value or ''}))
            label_input.on('keydown.enter', lambda: session.update_selected({'label': label_input.value or ''}))
            if node.kind is NodeKind.CONTENT:
                ui.select(list(SUBJECTS), value=node.data.subject, label='Subject',
                          on_change=lambda e: session.update_selected({'subject': e.value})).props('dense')
            ui.color_input('Color', value=node.color or '',
                           on_change=lambda e: session.update_selected({'color': e.value})).props('dense')
            with ui.row().classes('gap-1'):
                x_input = ui.number('X', value=node.position.x).props('dense').classes('w-20')
                y_input = ui.number('Y', value=node.position.y).props('dense').classes('w-20')
                ui.button(icon='open_with', on_click=lambda: session.move_node(
                    node.id, Position(x_input.value or 0, y_input.value or 0))).props('dense flat')
            collapsed = session.store.is_collapsed(node.id)
            ui.button('Expand' if collapsed else 'Collapse',
                      on_click=lambda: session.toggle_collapse(node.id)).props('dense flat')

        def render_edge_inspector(edge):
            ui.label('Connection').classes('font-bold')
            label_input = ui.input('Label', value=edge.label or '').props('dense')
            label_input.on('blur', lambda: session.update_edge(edge.id, {'label': label_input.value or None}))
            ui.select(ARROW_LABELS, value=ArrowType.from_arrow_mode(edge.arrow_mode).value, label='Arrows',
                      on_change=lambda e: session.set_edge_arrow_type(edge.id, e.value)).props('dense')
            ui.switch('Dashed', value=edge.routing_kind.value == 'dashed',
                      on_change=lambda e: session.update_edge(
                          edge.id, {'routing_kind': 'dashed' if e.value else 'direct'})).props('dense')
            style = edge.style
            ui.color_input('Color', value=style.stroke if style else '#4f46e5',
                           on_change=lambda e: session.update_edge(edge.id, {'stroke': e.value})).props('dense')
            with ui.row().classes('gap-1'):
                ui.button('Split', on_click=lambda: session.split_edge(edge.id)).props('dense flat icon=call_split')
                ui.button('Merge waypoint', on_click=lambda: session.remove_waypoint(edge.id)).props(
                    'dense flat icon=call_merge')
                ui.button(on_click=lambda: session.delete_edge(edge.id)).props(
                    'dense flat color=negative icon=delete')

        inspector()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Mind Map',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
