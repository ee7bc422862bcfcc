"""
Mind map editing engine.

Graph store, collapse visibility, connection tools and waypoint topology
for an interactive mind map editor. The NiceGUI shell lives in app.py.
"""

__version__ = "0.3.0"
