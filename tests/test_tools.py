"""
Tests for the connection tools: what a connect(source, target) gesture
produces under each tool.
"""

import random

import pytest

from mindmap.errors import InvalidReference
from mindmap.model import ROOT_ID, ArrowMode, NodeKind, Position, RoutingKind
from mindmap.tools import (
    ArrowType,
    ConnectionSettings,
    Tool,
    ToolState,
    connect,
    free_position,
)


@pytest.fixture
def rng():
    return random.Random(3)


def new_edges(store, effects):
    return [store.edge(eid) for eid in effects.added_edges]


class TestToolState:
    def test_default_is_one_way(self):
        state = ToolState()
        assert state.tool is Tool.ONE_WAY
        assert state.settings.arrow_type is ArrowType.ONE_WAY

    @pytest.mark.parametrize("tool,expected", [
        ("one-way", ArrowType.ONE_WAY),
        ("two-way", ArrowType.TWO_WAY),
        ("informational", ArrowType.NONE),
        ("dotted", ArrowType.ONE_WAY),
    ])
    def test_select_sets_arrow_type(self, tool, expected):
        state = ToolState().configure(arrow_type="none").select(tool)
        assert state.settings.arrow_type is expected

    @pytest.mark.parametrize("tool", ["node", "waypoint"])
    def test_select_keeps_arrow_type(self, tool):
        state = ToolState().configure(arrow_type="two-way").select(tool)
        assert state.settings.arrow_type is ArrowType.TWO_WAY

    def test_select_unknown_tool_raises(self):
        with pytest.raises(ValueError):
            ToolState().select("laser")

    def test_configure_keeps_tool(self):
        state = ToolState().select("dotted").configure(label="why", color="#000000")
        assert state.tool is Tool.DOTTED
        assert state.settings.label == "why"
        assert state.settings.edge_style().stroke == "#000000"

    def test_arrow_type_modes(self):
        assert ArrowType.ONE_WAY.arrow_mode is ArrowMode.FORWARD
        assert ArrowType.TWO_WAY.arrow_mode is ArrowMode.BIDIRECTIONAL
        assert ArrowType.NONE.arrow_mode is ArrowMode.NONE
        assert ArrowType.from_arrow_mode(ArrowMode.BACKWARD) is ArrowType.NONE


class TestConnect:
    def test_one_way_creates_forward_edge(self, abc_store, rng):
        effects = connect(abc_store, ToolState().select("one-way"), "a", "c", rng=rng)
        assert effects.added_nodes == []
        [edge] = new_edges(abc_store, effects)
        assert (edge.source, edge.target) == ("a", "c")
        assert edge.arrow_mode is ArrowMode.FORWARD
        assert edge.routing_kind is RoutingKind.DIRECT

    def test_two_way_has_both_markers(self, abc_store, rng):
        effects = connect(abc_store, ToolState().select("two-way"), "a", "c", rng=rng)
        [edge] = new_edges(abc_store, effects)
        assert edge.marker_start and edge.marker_end

    def test_pending_label_and_style_are_applied(self, abc_store, rng):
        state = ToolState().configure(label="because", color="#ff0000", width=4)
        [edge] = new_edges(abc_store, connect(abc_store, state, "a", "c", rng=rng))
        assert edge.label == "because"
        assert edge.style.stroke == "#ff0000"
        assert edge.style.stroke_width == 4

    def test_empty_label_is_stored_as_none(self, abc_store, rng):
        [edge] = new_edges(abc_store, connect(abc_store, ToolState(), "a", "c", rng=rng))
        assert edge.label is None

    def test_dotted_creates_dashed_edge(self, abc_store, rng):
        state = ToolState().select("dotted")
        [edge] = new_edges(abc_store, connect(abc_store, state, "a", "c", rng=rng))
        assert edge.routing_kind is RoutingKind.DASHED
        assert edge.arrow_mode is ArrowMode.FORWARD

    def test_waypoint_tool_falls_back_to_direct_edge(self, abc_store, rng):
        state = ToolState().configure(arrow_type="none").select("waypoint")
        [edge] = new_edges(abc_store, connect(abc_store, state, "a", "c", rng=rng))
        assert edge.routing_kind is RoutingKind.DIRECT
        assert edge.arrow_mode is ArrowMode.NONE

    def test_informational_adds_waypoint_and_two_plain_segments(self, abc_store, rng):
        state = ToolState().select("informational").configure(label="note")
        effects = connect(abc_store, state, "a", "b", rng=rng)

        assert len(effects.added_nodes) == 1
        waypoint = abc_store.node(effects.added_nodes[0])
        assert waypoint.kind is NodeKind.WAYPOINT
        assert waypoint.position == Position(100, 50)

        first, second = new_edges(abc_store, effects)
        assert (first.source, first.target) == ("a", waypoint.id)
        assert (second.source, second.target) == (waypoint.id, "b")
        assert first.arrow_mode is ArrowMode.NONE
        assert second.arrow_mode is ArrowMode.NONE
        assert first.label == "note"
        assert second.label is None
        assert second.style.label_bg is False

    def test_informational_missing_endpoint_adds_nothing(self, abc_store, rng):
        before = len(abc_store)
        with pytest.raises(InvalidReference):
            connect(abc_store, ToolState().select("informational"), "a", "ghost", rng=rng)
        assert len(abc_store) == before

    def test_node_tool_drops_node_near_source_without_edge(self, abc_store, rng):
        edge_count = len(abc_store.edges)
        effects = connect(abc_store, ToolState().select("node"), "b", "c", rng=rng)

        assert effects.added_edges == []
        node = abc_store.node(effects.added_nodes[0])
        assert node.label == "New Node"
        assert 260 <= node.position.x < 400
        assert 20 <= node.position.y < 180
        assert len(abc_store.edges) == edge_count

    def test_node_tool_with_missing_source_uses_free_spot(self, store, rng):
        effects = connect(store, ToolState().select("node"), "ghost", ROOT_ID, rng=rng)
        node = store.node(effects.added_nodes[0])
        assert 120 <= node.position.x < 320
        assert 120 <= node.position.y < 320

    def test_missing_endpoint_raises_and_adds_nothing(self, abc_store, rng):
        edge_count = len(abc_store.edges)
        with pytest.raises(InvalidReference):
            connect(abc_store, ToolState(), "a", "ghost", rng=rng)
        assert len(abc_store.edges) == edge_count


def test_free_position_window():
    rng = random.Random(0)
    for _ in range(50):
        pos = free_position(rng)
        assert 120 <= pos.x < 320 and 120 <= pos.y < 320


def test_connection_settings_style_defaults():
    style = ConnectionSettings().edge_style()
    assert style.stroke == "#4f46e5"
    assert style.stroke_width == 2
    assert style.label_bg is True
