"""Sequential pipeline runner for the generate/compile/override/publish flow."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from .config import NotesPubConfig, load_config
from .logging import get_logger
from .models import PipelineState, RunReport, StepResult, Trigger
from .steps import RunContext, Step, default_steps


class Orchestrator:
    """Runs pipeline steps in declared order and stops at the first failure."""

    def __init__(
        self,
        steps: Optional[Iterable[Step]] = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.steps: List[Step] = list(steps) if steps is not None else default_steps()
        self.environ = environ
        self.state = PipelineState.IDLE
        self.logger = get_logger("orchestrator")

    def run_path(self, path: str, trigger: Trigger | None = None) -> RunReport:
        """Load configuration for the repository at ``path`` and run the pipeline."""
        repo_path = Path(path).expanduser().resolve()
        config = load_config(repo_path, environ=self.environ)
        return self.run(config, trigger)

    def run(
        self,
        config: NotesPubConfig,
        trigger: Trigger | None = None,
        *,
        run_id: str | None = None,
    ) -> RunReport:
        """Execute every step against ``config`` and return the run report."""
        trigger = trigger or Trigger(kind="dispatch")
        environ = dict(os.environ if self.environ is None else self.environ)
        context = RunContext(config=config, trigger=trigger, environ=environ)
        report = RunReport(run_id=run_id or uuid.uuid4().hex[:12], trigger=trigger)
        self.state = PipelineState.IDLE

        if not self.steps:
            self.logger.warning("No pipeline steps configured; nothing to do")
            return report

        current = context.catalog if self.steps[0].consumes == "catalog" else context.output
        self.logger.info(
            "Starting run %s (%s) for %s", report.run_id, trigger.kind, config.root
        )
        for step in self.steps:
            self.logger.info("Running step %s", step.name)
            try:
                result = step.run(context, current)
            except Exception as exc:
                self.logger.debug("Step %s raised", step.name, exc_info=True)
                result = StepResult(name=step.name, success=False, detail=str(exc) or type(exc).__name__)
            report.steps.append(result)

            if not result.success:
                self.state = PipelineState.FAILED
                report.state = PipelineState.FAILED
                report.error = f"{step.name} failed: {result.detail}"
                self.logger.error("Run %s aborted: %s", report.run_id, report.error)
                return report

            self.state = step.reaches
            report.state = step.reaches
            report.reached.append(step.reaches)
            self.logger.info("Step %s finished: %s", step.name, result.detail)
            if result.output_path is not None:
                current = result.output_path

        self.state = PipelineState.IDLE
        self.logger.info("Run %s completed", report.run_id)
        return report


__all__ = ["Orchestrator"]
