# SPDX-License-Identifier: MIT

# JobNode: a unit of work in the library build graph

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path


class JobNode:
    """A job in the build graph.

    A job has a human readable description, an optional result path, the
    jobs that must complete before it and an action to run. A job without
    an action is a pass-through job: it stands for a result that is already
    available (a cached or precompiled library) and succeeds immediately.

    Jobs are compared by identity. The same job reachable through several
    paths is still a single job.
    """

    description: str
    result: Path | None
    dependencies: list[JobNode]
    action: Callable[[], None] | None

    def __init__(
        self,
        description: str,
        *,
        result: Path | str | None = None,
        dependencies: list[JobNode] | None = None,
        action: Callable[[], None] | None = None,
    ) -> None:
        self.description = description
        self.result = Path(result) if result is not None else None
        self.dependencies = list(dependencies or [])
        self.action = action

    @property
    def is_passthrough(self) -> bool:
        return self.action is None

    def depends(self, n: JobNode | list[JobNode]) -> None:
        """Add one or more jobs that must complete before this one."""
        if isinstance(n, JobNode):
            self.dependencies.append(n)
        else:
            self.dependencies.extend(n)

    def run(self) -> None:
        if self.action is not None:
            self.action()

    def __repr__(self) -> str:
        return f"JobNode({self.description!r})"


def passthrough(result: Path | str, description: str | None = None) -> JobNode:
    """Create a job that only carries an already available result."""
    result = Path(result)
    return JobNode(description or f"use {result}", result=result)
