"""Single-worker run queue enforcing one active publish at a time."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from .logging import get_logger
from .models import RunReport, Trigger


class RunStatus(str, Enum):
    """Queue-level status of a requested run."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


@dataclass
class RunRecord:
    """Bookkeeping for one trigger submitted to the queue."""

    run_id: str
    trigger: Trigger
    status: RunStatus = RunStatus.QUEUED
    report: Optional[RunReport] = None
    error: Optional[str] = None
    done: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    def wait(self, timeout: float | None = None) -> bool:
        return self.done.wait(timeout)


class RunQueue:
    """Runs submitted triggers one at a time.

    At most one run is pending. Submitting while a run is pending cancels the
    pending one; the active run is never interrupted.
    """

    def __init__(
        self,
        execute: Callable[[RunRecord], RunReport],
        *,
        autostart: bool = True,
    ) -> None:
        self._execute = execute
        self._condition = threading.Condition()
        self._records: Dict[str, RunRecord] = {}
        self._pending: Optional[RunRecord] = None
        self._active: Optional[RunRecord] = None
        self._stopped = False
        self._worker: Optional[threading.Thread] = None
        self.logger = get_logger("scheduler")
        if autostart:
            self.start()

    def start(self) -> None:
        with self._condition:
            if self._worker is not None:
                return
            self._worker = threading.Thread(target=self._work, name="notespub-runner", daemon=True)
            self._worker.start()

    def submit(self, trigger: Trigger) -> RunRecord:
        """Queue a run for ``trigger``, canceling any run still waiting to start."""
        record = RunRecord(run_id=uuid.uuid4().hex[:12], trigger=trigger)
        with self._condition:
            if self._stopped:
                raise RuntimeError("Run queue has been shut down")
            superseded = self._pending
            if superseded is not None:
                superseded.status = RunStatus.CANCELED
                superseded.error = f"superseded by run {record.run_id}"
                superseded.done.set()
                self.logger.info("Canceled queued run %s", superseded.run_id)
            self._pending = record
            self._records[record.run_id] = record
            self._condition.notify_all()
        self.logger.info("Queued run %s (%s)", record.run_id, trigger.kind)
        return record

    def get(self, run_id: str) -> Optional[RunRecord]:
        with self._condition:
            return self._records.get(run_id)

    def runs(self) -> List[RunRecord]:
        with self._condition:
            return list(self._records.values())

    @property
    def active(self) -> Optional[RunRecord]:
        with self._condition:
            return self._active

    @property
    def pending(self) -> Optional[RunRecord]:
        with self._condition:
            return self._pending

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until nothing is running or queued."""
        with self._condition:
            return self._condition.wait_for(
                lambda: self._pending is None and self._active is None, timeout
            )

    def shutdown(self, *, timeout: float | None = None) -> None:
        """Stop accepting runs; the worker drains what is already queued."""
        with self._condition:
            self._stopped = True
            self._condition.notify_all()
            worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def _work(self) -> None:
        while True:
            with self._condition:
                while self._pending is None and not self._stopped:
                    self._condition.wait()
                if self._pending is None:
                    return
                record = self._pending
                self._pending = None
                self._active = record
                record.status = RunStatus.RUNNING

            report: Optional[RunReport] = None
            error: Optional[str] = None
            try:
                report = self._execute(record)
            except Exception as exc:
                self.logger.exception("Run %s crashed", record.run_id)
                error = str(exc) or type(exc).__name__

            with self._condition:
                record.report = report
                if report is not None and report.succeeded:
                    record.status = RunStatus.SUCCEEDED
                else:
                    record.status = RunStatus.FAILED
                    record.error = error or (report.error if report is not None else None)
                self._active = None
                record.done.set()
                self._condition.notify_all()
            self.logger.info("Run %s %s", record.run_id, record.status.value)


__all__ = ["RunQueue", "RunRecord", "RunStatus"]
