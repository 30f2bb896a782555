# SPDX-License-Identifier: MIT
"""Tests for rtlib.core.scheduler."""

import threading
import time

import pytest

from rtlib.core.errors import DependencyCycleError, JobError
from rtlib.core.graph import JobGraph
from rtlib.core.node import JobNode, passthrough
from rtlib.core.scheduler import Scheduler, default_jobs, run_jobs


class Recorder:
    """Collects the descriptions of jobs as they run."""

    def __init__(self):
        self.ran = []
        self._lock = threading.Lock()

    def job(self, description, dependencies=None, fail=False):
        def action():
            with self._lock:
                self.ran.append(description)
            if fail:
                raise RuntimeError(f"{description} broke")

        return JobNode(description, dependencies=dependencies, action=action)


def records_by_description(scheduler):
    return {r.node.description: r for r in scheduler.trace}


class TestScheduler:
    def test_invalid_jobs(self):
        with pytest.raises(ValueError):
            Scheduler(0)

    def test_default_jobs(self, monkeypatch):
        monkeypatch.setenv("RTLIB_JOBS", "3")
        assert Scheduler().jobs == 3

    def test_single_job(self):
        rec = Recorder()
        Scheduler(2).run(rec.job("only"))
        assert rec.ran == ["only"]

    def test_dependencies_complete_first(self):
        rec = Recorder()
        base = rec.job("base")
        left = rec.job("left", [base])
        right = rec.job("right", [base])
        top = rec.job("top", [left, right])

        scheduler = Scheduler(4)
        scheduler.run(top)

        records = records_by_description(scheduler)
        for node in (base, left, right, top):
            for dep in node.dependencies:
                dep_record = records[dep.description]
                assert dep_record.finish <= records[node.description].start
        assert all(r.ok for r in scheduler.trace)

    def test_each_action_runs_once(self):
        rec = Recorder()
        base = rec.job("base")
        mids = [rec.job(f"mid{i}", [base]) for i in range(5)]
        top = rec.job("top", mids)

        Scheduler(3).run(top)

        expected = ["base", "top"] + [f"mid{i}" for i in range(5)]
        assert sorted(rec.ran) == sorted(expected)
        assert rec.ran[0] == "base"
        assert rec.ran[-1] == "top"

    def test_runs_graph(self):
        rec = Recorder()
        top = rec.job("top", [rec.job("dep")])
        Scheduler(1).run(JobGraph(top))
        assert rec.ran == ["dep", "top"]

    def test_serial_jobs_do_not_overlap(self):
        rec = Recorder()
        top = rec.job("top", [rec.job(f"leaf{i}") for i in range(4)])
        scheduler = Scheduler(1)
        scheduler.run(top)
        records = sorted(scheduler.trace, key=lambda r: r.start)
        for earlier, later in zip(records, records[1:]):
            assert earlier.finish <= later.start

    def test_parallel_limit(self):
        lock = threading.Lock()
        active = 0
        peak = 0

        def action():
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        leaves = [JobNode(f"leaf{i}", action=action) for i in range(8)]
        Scheduler(2).run(JobNode("top", dependencies=leaves, action=lambda: None))
        assert 1 <= peak <= 2

    def test_passthrough_jobs(self):
        rec = Recorder()
        cached = passthrough("/cache/lib.a", "cached lib")
        top = rec.job("top", [cached])

        scheduler = Scheduler(2)
        scheduler.run(top)

        assert rec.ran == ["top"]
        record = records_by_description(scheduler)["cached lib"]
        assert record.ok
        assert record.start == record.finish

    def test_passthrough_root(self):
        scheduler = run_jobs(passthrough("/cache/lib.a"), jobs=1)
        assert len(scheduler.trace) == 1

    def test_trace_reset(self):
        rec = Recorder()
        scheduler = Scheduler(1)
        scheduler.run(rec.job("first"))
        scheduler.run(rec.job("second"))
        assert [r.node.description for r in scheduler.trace] == ["second"]

    def test_cycle(self):
        a = JobNode("a", action=lambda: None)
        b = JobNode("b", dependencies=[a], action=lambda: None)
        a.depends(b)
        with pytest.raises(DependencyCycleError):
            Scheduler(1).run(b)


class TestFailure:
    def test_dependents_do_not_run(self):
        rec = Recorder()
        broken = rec.job("broken", fail=True)
        middle = rec.job("middle", [broken])
        top = rec.job("top", [middle])

        with pytest.raises(JobError) as exc_info:
            Scheduler(2).run(top)

        assert rec.ran == ["broken"]
        err = exc_info.value
        assert err.description == "broken"
        assert isinstance(err.__cause__, RuntimeError)
        assert err.cause is err.__cause__
        assert str(err) == "broken: broken broke"

    def test_root_failure(self):
        rec = Recorder()
        top = rec.job("top", [rec.job("dep")], fail=True)
        with pytest.raises(JobError, match="^top: "):
            Scheduler(1).run(top)
        assert rec.ran == ["dep", "top"]

    def test_running_jobs_finish_and_no_new_jobs_start(self):
        failed = threading.Event()
        finished = []

        def fail():
            failed.set()
            raise RuntimeError("compile error")

        def slow():
            failed.wait(5)
            time.sleep(0.1)
            finished.append("slow")

        def never():
            finished.append("never")

        a = JobNode("a", action=fail)
        b = JobNode("b", action=slow)
        c = JobNode("c", action=never)
        top = JobNode("top", dependencies=[a, b, c], action=never)

        scheduler = Scheduler(2)
        with pytest.raises(JobError) as exc_info:
            scheduler.run(top)

        assert exc_info.value.description == "a"
        assert finished == ["slow"]
        records = records_by_description(scheduler)
        assert records["a"].ok is False
        assert records["b"].ok is True
        assert "c" not in records

    def test_first_error_wins(self):
        first = threading.Event()

        def fail_first():
            first.set()
            raise RuntimeError("first")

        def fail_second():
            first.wait(5)
            time.sleep(0.1)
            raise RuntimeError("second")

        top = JobNode(
            "top",
            dependencies=[
                JobNode("one", action=fail_first),
                JobNode("two", action=fail_second),
            ],
            action=lambda: None,
        )
        with pytest.raises(JobError) as exc_info:
            Scheduler(2).run(top)
        assert str(exc_info.value.__cause__) == "first"


class TestDefaultJobs:
    def test_env(self, monkeypatch):
        monkeypatch.setenv("RTLIB_JOBS", "5")
        assert default_jobs() == 5

    def test_cpu_count(self, monkeypatch):
        monkeypatch.delenv("RTLIB_JOBS", raising=False)
        monkeypatch.setattr("os.cpu_count", lambda: 7)
        assert default_jobs() == 7

    def test_unknown_cpu_count(self, monkeypatch):
        monkeypatch.delenv("RTLIB_JOBS", raising=False)
        monkeypatch.setattr("os.cpu_count", lambda: None)
        assert default_jobs() == 1

    @pytest.mark.parametrize("value", ["zero", "0", "-2"])
    def test_invalid_env(self, monkeypatch, value):
        monkeypatch.setenv("RTLIB_JOBS", value)
        monkeypatch.setattr("os.cpu_count", lambda: 4)
        assert default_jobs() == 4
