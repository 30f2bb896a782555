# SPDX-License-Identifier: MIT
"""Parallel execution of job graphs.

The scheduler runs the jobs of a JobGraph on a bounded thread pool. A job
is started only after all of its dependencies have completed successfully.
Jobs without a path between them may run concurrently.

When a job fails, no further jobs are started. Jobs that are already
running are allowed to finish (an external compiler process is never
interrupted) and then the first error is raised, wrapped in a JobError.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from rtlib.core.errors import JobError
from rtlib.core.graph import JobGraph
from rtlib.core.node import JobNode

logger = logging.getLogger(__name__)


def default_jobs() -> int:
    """Number of jobs to run in parallel when not specified.

    Uses RTLIB_JOBS if set, otherwise the number of CPUs.
    """
    value = os.environ.get("RTLIB_JOBS")
    if value:
        try:
            jobs = int(value)
        except ValueError:
            logger.warning("Ignoring invalid RTLIB_JOBS=%r", value)
        else:
            if jobs > 0:
                return jobs
            logger.warning("Ignoring non-positive RTLIB_JOBS=%r", value)
    return os.cpu_count() or 1


@dataclass(frozen=True)
class JobRecord:
    """Timing of one executed job.

    Times come from time.monotonic(). Pass-through jobs are recorded with
    equal start and finish times.
    """

    node: JobNode
    start: float
    finish: float
    ok: bool


class Scheduler:
    """Runs job graphs with a bounded number of parallel jobs.

    Attributes:
        jobs: Maximum number of actions running at the same time.
        trace: Records of the jobs executed by the last run(), in completion
            order.
    """

    def __init__(self, jobs: int | None = None) -> None:
        if jobs is not None and jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")
        self.jobs = jobs or default_jobs()
        self.trace: list[JobRecord] = []
        self._trace_lock = threading.Lock()

    def run(self, root: JobNode | JobGraph) -> None:
        """Run a job and everything it depends on.

        Args:
            root: The job to run, or an already finalized graph.

        Raises:
            JobError: If any job failed. The error of the first failed job
                is available as ``__cause__``.
            DependencyCycleError: If the graph contains a cycle.
        """
        graph = root if isinstance(root, JobGraph) else JobGraph(root)
        self.trace = []

        # Number of unfinished dependencies per job.
        waiting = {node: len(graph.dependencies(node)) for node in graph}
        ready = [node for node in graph if waiting[node] == 0]
        running: dict[Future[None], JobNode] = {}
        error: JobError | None = None

        logger.debug("Running %d jobs (%d parallel)", len(graph), self.jobs)

        def complete(node: JobNode) -> None:
            for dependent in graph.dependents(node):
                waiting[dependent] -= 1
                if waiting[dependent] == 0:
                    ready.append(dependent)

        with ThreadPoolExecutor(
            max_workers=self.jobs, thread_name_prefix="rtlib-job"
        ) as executor:
            while ready or running:
                # Start as many ready jobs as there are free workers.
                while ready and error is None:
                    node = ready.pop(0)
                    if node.is_passthrough:
                        now = time.monotonic()
                        self._record(JobRecord(node, now, now, True))
                        complete(node)
                        continue
                    if len(running) >= self.jobs:
                        ready.insert(0, node)
                        break
                    logger.debug("Starting job: %s", node.description)
                    running[executor.submit(self._execute, node)] = node

                if error is not None:
                    ready.clear()
                if not running:
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    node = running.pop(future)
                    exc = future.exception()
                    if exc is None:
                        complete(node)
                        continue
                    if error is None:
                        error = JobError(node.description, exc)
                        error.__cause__ = exc
                        logger.debug(
                            "Job failed, waiting for %d running jobs: %s",
                            len(running),
                            node.description,
                        )
                    else:
                        logger.debug(
                            "Job also failed: %s: %s", node.description, exc
                        )

        if error is not None:
            raise error

    def _execute(self, node: JobNode) -> None:
        start = time.monotonic()
        try:
            node.run()
        except BaseException:
            self._record(JobRecord(node, start, time.monotonic(), False))
            raise
        self._record(JobRecord(node, start, time.monotonic(), True))
        logger.debug("Finished job: %s", node.description)

    def _record(self, record: JobRecord) -> None:
        with self._trace_lock:
            self.trace.append(record)


def run_jobs(root: JobNode | JobGraph, jobs: int | None = None) -> Scheduler:
    """Run a job graph with a fresh scheduler and return the scheduler."""
    scheduler = Scheduler(jobs)
    scheduler.run(root)
    return scheduler
