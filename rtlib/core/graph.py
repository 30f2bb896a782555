# SPDX-License-Identifier: MIT
"""Finalized job graphs.

A JobGraph is an immutable snapshot of a root job and everything it
transitively depends on. It is taken before scheduling starts, so the
scheduler works on a fixed shape even if the JobNode objects it was built
from are modified afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from rtlib.core.errors import DependencyCycleError
from rtlib.core.node import JobNode


class JobGraph:
    """The dependency graph below a root job.

    Attributes:
        root: The job the graph was built from.
        nodes: All jobs in the graph, each exactly once, dependencies before
            the jobs that need them.
    """

    def __init__(self, root: JobNode) -> None:
        self.root = root
        order, edges = _collect(root)
        self.nodes: tuple[JobNode, ...] = tuple(order)
        self._dependencies: Mapping[JobNode, tuple[JobNode, ...]] = MappingProxyType(
            edges
        )
        dependents: dict[JobNode, list[JobNode]] = {n: [] for n in order}
        for node in order:
            for dep in edges[node]:
                dependents[dep].append(node)
        self._dependents: Mapping[JobNode, tuple[JobNode, ...]] = MappingProxyType(
            {n: tuple(d) for n, d in dependents.items()}
        )

    def dependencies(self, node: JobNode) -> tuple[JobNode, ...]:
        """Direct dependencies of a job, without duplicates."""
        return self._dependencies[node]

    def dependents(self, node: JobNode) -> tuple[JobNode, ...]:
        """Jobs that directly depend on a job."""
        return self._dependents[node]

    def leaves(self) -> list[JobNode]:
        """Jobs without dependencies."""
        return [n for n in self.nodes if not self._dependencies[n]]

    def __contains__(self, node: object) -> bool:
        return node in self._dependencies

    def __iter__(self) -> Iterator[JobNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"JobGraph(root={self.root!r}, jobs={len(self.nodes)})"


def _collect(
    root: JobNode,
) -> tuple[list[JobNode], dict[JobNode, tuple[JobNode, ...]]]:
    """Walk the graph depth first, returning a post-order and the edge map.

    Raises:
        DependencyCycleError: If a job (indirectly) depends on itself.
    """
    order: list[JobNode] = []
    edges: dict[JobNode, tuple[JobNode, ...]] = {}
    # Jobs on the current DFS path, in order, for cycle reporting.
    path: list[JobNode] = []
    on_path: set[JobNode] = set()

    # Explicit stack of (node, iterator over its deps) to avoid recursion
    # limits on long dependency chains.
    stack: list[tuple[JobNode, Iterator[JobNode]]] = []

    def enter(node: JobNode) -> None:
        deps = tuple(dict.fromkeys(node.dependencies))
        edges[node] = deps
        path.append(node)
        on_path.add(node)
        stack.append((node, iter(deps)))

    enter(root)
    while stack:
        node, deps = stack[-1]
        for dep in deps:
            if dep in on_path:
                start = path.index(dep)
                cycle = [n.description for n in path[start:]] + [dep.description]
                raise DependencyCycleError(cycle)
            if dep not in edges:
                enter(dep)
                break
        else:
            stack.pop()
            path.pop()
            on_path.discard(node)
            order.append(node)

    return order, edges
