"""Base classes for pipeline steps."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from ..config import NotesPubConfig
from ..models import PipelineState, StepResult, Trigger


class StepError(RuntimeError):
    """Raised when a pipeline step cannot complete."""


@dataclass
class RunContext:
    """Working set handed to every step of a single run."""

    config: NotesPubConfig
    trigger: Trigger
    environ: Mapping[str, str] = field(default_factory=dict)

    @property
    def root(self) -> Path:
        return self.config.root

    @property
    def catalog(self) -> Path:
        return self.config.catalog_path

    @property
    def output(self) -> Path:
        return self.config.output_path


class Step(ABC):
    """Contract for one stage of the generate/compile/override/publish sequence."""

    name: str = "step"
    reaches: PipelineState = PipelineState.IDLE
    consumes: str = "output"

    @abstractmethod
    def run(self, context: RunContext, input_path: Path) -> StepResult:
        """Consume the previous step's output and return this step's result."""
