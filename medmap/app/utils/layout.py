import math
from collections import Counter
from typing import List, Optional

from ..schemas.graph import GraphData, GraphNode, Position

RADIUS = 250.0


def find_center_node(graph: GraphData) -> Optional[GraphNode]:
    """Returns the node with the most incident edges (first node on ties)."""
    if not graph.nodes:
        return None
    degree = Counter()
    for edge in graph.edges:
        degree[edge.source] += 1
        degree[edge.target] += 1
    best = graph.nodes[0]
    for node in graph.nodes[1:]:
        if degree[node.id] > degree[best.id]:
            best = node
    return best


def has_collapsed_layout(nodes: List[GraphNode]) -> bool:
    if len(nodes) < 2:
        return False
    first = nodes[0].position
    return all(n.position.x == first.x and n.position.y == first.y for n in nodes)


def apply_radial_layout(graph: GraphData, radius: float = RADIUS) -> GraphData:
    """Puts the hub node at the origin and the rest evenly on a circle."""
    center = find_center_node(graph)
    if center is None:
        return graph

    others = [n for n in graph.nodes if n.id != center.id]
    center.position = Position(x=0, y=0)
    for i, node in enumerate(others):
        angle = 2 * math.pi * i / len(others)
        node.position = Position(
            x=round(radius * math.cos(angle), 2),
            y=round(radius * math.sin(angle), 2),
        )
    return graph
