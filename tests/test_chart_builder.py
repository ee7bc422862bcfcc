import pytest

from mindmap.chart_builder import (
    BACKGROUNDS,
    build_echart_options,
    normalize_click_payload,
    resolve_click_target,
)
from mindmap.model import ROOT_ID, ArrowMode, Edge, Node, Position, RoutingKind
from mindmap.visibility import derive_view
from mindmap.waypoints import split_edge_to_waypoint


def series_of(store, **kwargs):
    view = derive_view(store.nodes, store.edges, store.collapsed)
    return build_echart_options(view, **kwargs)["series"][0]


def find_link(links, edge_id):
    for link in links:
        if link.get("value") == edge_id:
            return link
    return None


class TestBuildOptions:
    def test_fixed_layout_uses_node_positions(self, abc_store):
        series = series_of(abc_store)
        assert series["layout"] == "none"
        by_id = {d["id"]: d for d in series["data"]}
        assert (by_id["b"]["x"], by_id["b"]["y"]) == (200, 100)
        assert by_id["a"]["value"] == "A"

    def test_arrow_symbols_follow_markers(self, abc_store):
        abc_store.update_edge("e2", {"arrow_mode": ArrowMode.BIDIRECTIONAL})
        abc_store.add_edge(Edge.create("a", "c", edge_id="plain", arrow_mode=ArrowMode.NONE))
        links = series_of(abc_store)["links"]

        assert find_link(links, "e1")["symbol"] == ["none", "arrow"]
        assert find_link(links, "e2")["symbol"] == ["arrow", "arrow"]
        assert find_link(links, "plain")["symbol"] == ["none", "none"]

    def test_dashed_routing(self, abc_store):
        abc_store.add_edge(Edge.create("a", "c", edge_id="d", routing_kind=RoutingKind.DASHED))
        link = find_link(series_of(abc_store)["links"], "d")
        assert link["lineStyle"]["type"] == "dashed"

    def test_edge_label(self, abc_store):
        link = find_link(series_of(abc_store)["links"], "e2")
        assert link["label"]["show"] is True
        assert link["label"]["formatter"] == "next"
        assert find_link(series_of(abc_store)["links"], "e1")["label"]["show"] is False

    def test_waypoints_are_small_unlabeled_dots(self, abc_store):
        effects = split_edge_to_waypoint(abc_store, "e2")
        by_id = {d["id"]: d for d in series_of(abc_store)["data"]}
        waypoint = by_id[effects.added_nodes[0]]
        assert waypoint["symbol"] == "circle"
        assert waypoint["label"]["show"] is False

    def test_collapsed_node_visible_and_marked(self, abc_store):
        abc_store.toggle_collapse("a")
        series = series_of(abc_store)
        ids = [d["id"] for d in series["data"]]
        assert "a" in ids and "b" not in ids
        assert find_link(series["links"], "e2") is None
        a = next(d for d in series["data"] if d["id"] == "a")
        assert a["itemStyle"]["borderType"] == "dashed"

    def test_selection_and_highlight(self, abc_store):
        series = series_of(abc_store, selected_node_id="a", selected_edge_id="e1", highlight=["b"])
        by_id = {d["id"]: d for d in series["data"]}
        assert by_id["a"]["itemStyle"]["borderWidth"] == 3
        assert by_id["b"]["itemStyle"]["shadowBlur"] > 0
        assert find_link(series["links"], "e1")["lineStyle"]["width"] > 2

    def test_theme_background(self, store):
        view = derive_view(store.nodes, store.edges, store.collapsed)
        assert build_echart_options(view, theme="dark")["backgroundColor"] == BACKGROUNDS["dark"]

    def test_info_node_shape(self, store):
        store.add_node(Node.info(label="Note", node_id="i", position=Position(1, 1)))
        by_id = {d["id"]: d for d in series_of(store)["data"]}
        assert by_id["i"]["symbol"] == "rect"


class TestClickPayload:
    def test_normalize_click_payload_handles_dict(self):
        payload = {"componentType": "series", "name": "node-1"}
        assert normalize_click_payload(payload) is payload

    def test_normalize_click_payload_handles_list(self):
        payload = normalize_click_payload(["series", "e-1", "graph", "edge-id", "edge"])
        assert payload == {
            "componentType": "series",
            "name": "e-1",
            "seriesType": "graph",
            "value": "edge-id",
            "dataType": "edge",
        }

    def test_normalize_click_payload_handles_string(self):
        assert normalize_click_payload("node-3") == {"name": "node-3"}

    def test_normalize_click_payload_other(self):
        assert normalize_click_payload(None) == {}


class TestResolveClickTarget:
    def test_node_by_id(self, abc_store):
        payload = {"componentType": "series", "dataType": "node", "name": "a"}
        assert resolve_click_target(payload, abc_store) == ("node", "a")

    def test_node_falls_back_to_label(self, abc_store):
        payload = {"componentType": "series", "name": "Study Plan"}
        assert resolve_click_target(payload, abc_store) == ("node", ROOT_ID)

    def test_edge_by_value(self, abc_store):
        payload = {"componentType": "series", "dataType": "edge", "name": "a > b", "value": "e2"}
        assert resolve_click_target(payload, abc_store) == ("edge", "e2")

    @pytest.mark.parametrize("payload", [
        {"componentType": "tooltip", "name": "a"},
        {"componentType": "series", "dataType": "edge", "value": "gone"},
        {"componentType": "series", "name": "nobody"},
        {"componentType": "series"},
        "a",
    ])
    def test_unresolvable(self, abc_store, payload):
        assert resolve_click_target(payload, abc_store) is None
