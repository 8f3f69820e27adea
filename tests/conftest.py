"""Shared sample graphs for the simulator, timeline and web tests."""

import pytest

from spviz.graph import Graph


def build_graph(node_count, edges):
    """Graph with `node_count` nodes on a row and (source, target, weight) edges in order."""
    g = Graph()
    for i in range(node_count):
        g.add_node(100 + 120 * i, 200)
    for source, target, weight in edges:
        g.add_edge(source, target, weight)
    return g


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def triangle():
    """A->B (1), B->C (2), A->C (5)."""
    return build_graph(3, [(0, 1, 1), (1, 2, 2), (0, 2, 5)])


@pytest.fixture
def negative_cycle():
    """A->B (1), B->C (-3), C->B (1); B->C->B weighs -2."""
    return build_graph(3, [(0, 1, 1), (1, 2, -3), (2, 1, 1)])


@pytest.fixture
def disconnected():
    return build_graph(2, [])


@pytest.fixture
def negative_edge():
    """A->B (-5)."""
    return build_graph(2, [(0, 1, -5)])


@pytest.fixture
def diamond():
    """Two routes to D plus an unreachable E."""
    return build_graph(
        5,
        [(0, 1, 4), (0, 2, 1), (2, 1, 2), (1, 3, 1), (2, 3, 6), (4, 3, 1)],
    )


@pytest.fixture
def empty_graph():
    return Graph()
