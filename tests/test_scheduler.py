"""Tests for the single-worker run queue."""

from __future__ import annotations

import threading
from typing import List

import pytest

from notespub.models import PipelineState, RunReport, Trigger
from notespub.scheduler import RunQueue, RunRecord, RunStatus


def _report(record: RunRecord, *, error: str | None = None) -> RunReport:
    state = PipelineState.FAILED if error else PipelineState.PUBLISHED
    return RunReport(run_id=record.run_id, trigger=record.trigger, state=state, error=error)


def test_new_trigger_cancels_queued_run_but_not_active_one() -> None:
    started = threading.Event()
    release = threading.Event()
    executed: List[str] = []

    def execute(record: RunRecord) -> RunReport:
        executed.append(record.run_id)
        if len(executed) == 1:
            started.set()
            release.wait(5)
        return _report(record)

    queue = RunQueue(execute)
    try:
        first = queue.submit(Trigger(kind="push", ref="main"))
        assert started.wait(5)

        second = queue.submit(Trigger(kind="push", ref="main"))
        third = queue.submit(Trigger(kind="dispatch"))

        assert second.status is RunStatus.CANCELED
        assert second.wait(0) is True
        assert first.status is RunStatus.RUNNING
        assert queue.active is first
        assert queue.pending is third

        release.set()
        assert queue.wait_idle(5)
    finally:
        release.set()
        queue.shutdown(timeout=5)

    assert first.status is RunStatus.SUCCEEDED
    assert third.status is RunStatus.SUCCEEDED
    assert executed == [first.run_id, third.run_id]
    assert [record.run_id for record in queue.runs()] == [first.run_id, second.run_id, third.run_id]


def test_queued_run_is_replaced_before_worker_starts() -> None:
    executed: List[str] = []

    def execute(record: RunRecord) -> RunReport:
        executed.append(record.run_id)
        return _report(record)

    queue = RunQueue(execute, autostart=False)
    earlier = queue.submit(Trigger(kind="push", ref="main"))
    later = queue.submit(Trigger(kind="push", ref="main"))

    assert earlier.status is RunStatus.CANCELED
    assert "superseded" in (earlier.error or "")

    queue.start()
    try:
        assert later.wait(5)
    finally:
        queue.shutdown(timeout=5)

    assert executed == [later.run_id]
    assert later.status is RunStatus.SUCCEEDED
    assert queue.get(later.run_id) is later


def test_failed_report_marks_run_failed() -> None:
    queue = RunQueue(lambda record: _report(record, error="compile failed: boom"))
    try:
        record = queue.submit(Trigger(kind="dispatch"))
        assert record.wait(5)
    finally:
        queue.shutdown(timeout=5)

    assert record.status is RunStatus.FAILED
    assert record.error == "compile failed: boom"
    assert record.report is not None


def test_crashing_execution_marks_run_failed() -> None:
    def execute(record: RunRecord) -> RunReport:
        raise ValueError("bad config")

    queue = RunQueue(execute)
    try:
        record = queue.submit(Trigger(kind="dispatch"))
        assert record.wait(5)
    finally:
        queue.shutdown(timeout=5)

    assert record.status is RunStatus.FAILED
    assert record.error == "bad config"
    assert record.report is None


def test_submit_after_shutdown_is_rejected() -> None:
    queue = RunQueue(lambda record: _report(record))
    queue.shutdown(timeout=5)

    with pytest.raises(RuntimeError):
        queue.submit(Trigger(kind="dispatch"))
