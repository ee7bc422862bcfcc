"""
Starter templates.

Each template is a small tree hanging off `root`. Applying one replaces the
whole graph and clears the collapse set.
"""

from typing import Callable, Dict, List, Tuple

from mindmap.model import ROOT_ID, SUBJECTS, Edge, Node, Position
from mindmap.store import GraphStore

Graph = Tuple[List[Node], List[Edge]]


def _study(node_id: str, label: str, x: float, y: float, subject: str = "Default", color: str = None) -> Node:
    return Node.content(label=label, subject=subject, color=color or SUBJECTS.get(subject),
                        position=Position(x, y), node_id=node_id)


def _fan_out(children: List[Node]) -> List[Edge]:
    return [Edge.create(ROOT_ID, child.id, edge_id=f"e-{ROOT_ID}-{child.id}") for child in children]


def exam_template() -> Graph:
    children = [
        _study("math", "Math", 60, 260, subject="Math"),
        _study("science", "Science", 250, 260, subject="Science"),
        _study("history", "History", 440, 260, subject="History"),
    ]
    return [_study(ROOT_ID, "Exam Prep", 250, 80)] + children, _fan_out(children)


def research_template() -> Graph:
    labels = [("i", "Introduction"), ("m", "Method"), ("r", "Results"), ("c", "Conclusion")]
    children = [_study(nid, label, 140 + (idx + 1) * 160, 260) for idx, (nid, label) in enumerate(labels)]
    return [_study(ROOT_ID, "Research Paper", 140, 90)] + children, _fan_out(children)


def planner_template() -> Graph:
    children = [
        _study("m", "Morning", 80, 250, color="#6c8cff"),
        _study("n", "Afternoon", 250, 250, color="#64d2b4"),
        _study("e", "Evening", 420, 250, color="#ff9e6e"),
    ]
    return [_study(ROOT_ID, "Today", 250, 90)] + children, _fan_out(children)


TEMPLATES: Dict[str, Callable[[], Graph]] = {
    "exam": exam_template,
    "research": research_template,
    "planner": planner_template,
}


def apply_template(store: GraphStore, name: str) -> None:
    """Replace the store's graph with the named template. Unknown names raise KeyError."""
    if name not in TEMPLATES:
        raise KeyError(f"Unknown template: {name}")
    nodes, edges = TEMPLATES[name]()
    store.replace(nodes, edges, [])
