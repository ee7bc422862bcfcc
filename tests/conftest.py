import random

import pytest

from mindmap.model import Edge, Node, Position
from mindmap.session import EditorSession
from mindmap.storage import MemoryBackend
from mindmap.store import GraphStore


@pytest.fixture
def store():
    """Fresh store holding only the root node."""
    return GraphStore()


@pytest.fixture
def abc_store():
    """root -> a -> b, plus a free node c. Edge ids are e1 and e2."""
    s = GraphStore()
    s.add_node(Node.content(label="A", position=Position(0, 0), node_id="a"))
    s.add_node(Node.content(label="B", position=Position(200, 100), node_id="b"))
    s.add_node(Node.content(label="C", position=Position(400, 0), node_id="c"))
    s.add_edge(Edge.create("root", "a", edge_id="e1"))
    s.add_edge(Edge.create("a", "b", edge_id="e2", label="next"))
    return s


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def session(backend):
    return EditorSession(backend=backend, rng=random.Random(7))
