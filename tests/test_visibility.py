import random

import pytest

from mindmap.model import ROOT_ID, Edge, Node
from mindmap.visibility import compute_hidden, derive_view, is_edge_visible


def chain(*ids):
    return [Edge.create(a, b, edge_id=f"{a}-{b}") for a, b in zip(ids, ids[1:])]


class TestComputeHidden:
    def test_root_collapse_hides_child(self):
        edges = [Edge.create(ROOT_ID, "A", edge_id="rA")]
        assert compute_hidden({ROOT_ID}, edges) == {"A"}

    def test_hides_transitive_descendants(self):
        edges = chain("a", "b", "c", "d")
        assert compute_hidden({"b"}, edges) == {"c", "d"}

    def test_follows_edges_forward_only(self):
        edges = chain("a", "b", "c")
        assert compute_hidden({"c"}, edges) == set()

    def test_collapsed_node_itself_stays_unless_reached(self):
        edges = chain("a", "b", "c")
        assert compute_hidden({"a", "b"}, edges) == {"b", "c"}

    def test_cycle_hides_collapsed_node(self):
        edges = chain("a", "b", "a")
        assert compute_hidden({"a"}, edges) == {"a", "b"}

    def test_stale_ids_are_ignored(self):
        assert compute_hidden({"gone"}, chain("a", "b")) == set()

    def test_empty_inputs(self):
        assert compute_hidden(set(), []) == set()

    @pytest.mark.parametrize("seed", range(20))
    def test_idempotent_on_random_graphs(self, seed):
        rng = random.Random(seed)
        ids = [f"n{i}" for i in range(12)]
        edges = [
            Edge.create(rng.choice(ids), rng.choice(ids), edge_id=f"e{i}")
            for i in range(rng.randint(0, 25))
        ]
        collapsed = set(rng.sample(ids, rng.randint(0, 4)))

        hidden = compute_hidden(collapsed, edges)
        assert compute_hidden(collapsed, edges) == hidden
        assert compute_hidden(collapsed | hidden, edges) == hidden


class TestDeriveView:
    def test_root_scenario_hides_child_and_its_edge(self):
        nodes = [Node.content(node_id=ROOT_ID), Node.content(node_id="A")]
        edges = [Edge.create(ROOT_ID, "A", edge_id="rA")]
        view = derive_view(nodes, edges, [ROOT_ID])

        assert view.hidden == {"A"}
        assert [n.id for n in view.nodes] == [ROOT_ID]
        assert view.edges == []

    def test_collapsed_leaf_hides_its_outgoing_edges_only(self):
        edge_in = Edge.create("a", "b", edge_id="in")
        edge_out = Edge.create("b", "b", edge_id="self")
        assert is_edge_visible(edge_in, hidden=set(), collapsed={"b"})
        assert not is_edge_visible(edge_out, hidden=set(), collapsed={"b"})

    def test_nothing_collapsed_shows_everything(self):
        nodes = [Node.content(node_id=ROOT_ID), Node.content(node_id="A")]
        edges = [Edge.create(ROOT_ID, "A")]
        view = derive_view(nodes, edges, [])
        assert len(view.nodes) == 2
        assert len(view.edges) == 1
