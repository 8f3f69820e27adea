"""
graph/
------
Core data layer.  Public API:

    from spviz.graph import Graph, Node, Edge, EdgeStatus, GraphError
    from spviz.graph import generate_random_graph
"""

from spviz.graph.node     import Node, node_label
from spviz.graph.edge     import Edge, EdgeStatus, edge_key
from spviz.graph.graph    import Graph, GraphError, validate_input
from spviz.graph.generate import GeneratedGraph, generate_random_graph

__all__ = [
    "Node",       "node_label",
    "Edge",       "EdgeStatus",   "edge_key",
    "Graph",      "GraphError",   "validate_input",
    "GeneratedGraph", "generate_random_graph",
]
