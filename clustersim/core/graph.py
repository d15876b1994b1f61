"""
Graph helpers for density-based extraction.

- minimum_spanning_tree: Prim's algorithm over a dense weight matrix
- UnionFind: disjoint sets with path compression and union by size
"""

from typing import List, Tuple

import numpy as np

MSTEdge = Tuple[int, int, float]


def minimum_spanning_tree(weights: np.ndarray) -> List[MSTEdge]:
    """
    Build a minimum spanning tree with Prim's algorithm starting at node 0.

    Ties are resolved towards the lowest node index when choosing the next
    node to attach, and towards the earliest attached parent, so the tree is
    reproducible for a fixed weight matrix. Infinite weights are allowed and
    produce infinite edges.

    Args:
        weights: Symmetric (N x N) edge weight matrix

    Returns:
        List of (parent, child, weight) edges in attachment order (N - 1 edges)
    """
    n = len(weights)
    if n < 2:
        return []

    in_tree = np.zeros(n, dtype=bool)
    best_weight = np.full(n, np.inf)
    best_parent = np.zeros(n, dtype=np.int64)

    in_tree[0] = True
    best_weight[:] = weights[0]
    best_parent[:] = 0

    edges: List[MSTEdge] = []
    for _ in range(n - 1):
        candidates = np.where(in_tree, np.nan, best_weight)
        # nanargmin returns the first minimum, which is the lowest index
        node = int(np.nanargmin(candidates))
        edges.append((int(best_parent[node]), node, float(best_weight[node])))
        in_tree[node] = True

        closer = (~in_tree) & (weights[node] < best_weight)
        best_weight[closer] = weights[node][closer]
        best_parent[closer] = node

    return edges


class UnionFind:
    """Disjoint-set forest over node indices 0..n-1."""

    def __init__(self, n: int):
        self.parent = np.arange(n, dtype=np.int64)
        self.size = np.ones(n, dtype=np.int64)

    def find(self, node: int) -> int:
        root = node
        while self.parent[root] != root:
            root = int(self.parent[root])

        # Path compression
        while self.parent[node] != root:
            next_node = int(self.parent[node])
            self.parent[node] = root
            node = next_node

        return root

    def union(self, a: int, b: int) -> int:
        """Merge the sets containing a and b, returning the new root."""
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return root_a

        if self.size[root_a] < self.size[root_b]:
            root_a, root_b = root_b, root_a

        self.parent[root_b] = root_a
        self.size[root_a] += self.size[root_b]
        return root_a

    def component_size(self, node: int) -> int:
        return int(self.size[self.find(node)])
