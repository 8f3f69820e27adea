"""
spviz
-----
Step-by-step shortest-path visualizer core: Dijkstra and Bellman–Ford
simulators that record every decision, and a timeline controller that
replays them.

    from spviz.graph import Graph
    from spviz.engine import TimelineController
"""

__version__ = "0.1.0"
