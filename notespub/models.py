"""Core data models shared across notespub components."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass
class CallToAction:
    """Link rendered as the primary action of a session page."""

    url: str
    purpose: Optional[str] = None
    label: Optional[str] = None


@dataclass
class PageMetadata:
    """Values held in a page's ``@Metadata`` block."""

    title_heading: Optional[str] = None
    page_kind: Optional[str] = None
    call_to_action: Optional[CallToAction] = None
    contributors: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)


@dataclass
class ContentPage:
    """One authored note about a conference session."""

    path: str
    title: str
    metadata: Optional[PageMetadata]
    body: str


@dataclass
class Contributor:
    """GitHub account credited on one or more pages."""

    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass
class MetadataRecord:
    """Contributor attribution resolved for a single page."""

    page: str
    contributors: List[Contributor]
    changed: bool = False


class PipelineState(str, Enum):
    """Lifecycle of a single pipeline run."""

    IDLE = "idle"
    METADATA_GENERATED = "metadata_generated"
    COMPILED = "compiled"
    ASSETS_OVERRIDDEN = "assets_overridden"
    PUBLISHED = "published"
    FAILED = "failed"


@dataclass
class Trigger:
    """Event that requested a pipeline run."""

    kind: str
    ref: Optional[str] = None
    requested_at: datetime = field(default_factory=datetime.now)


@dataclass
class StepResult:
    """Outcome of one pipeline step."""

    name: str
    success: bool
    output_path: Optional[Path] = None
    detail: str = ""


@dataclass
class RunReport:
    """Summary of a complete pipeline run."""

    run_id: str
    trigger: Trigger
    state: PipelineState = PipelineState.IDLE
    steps: List[StepResult] = field(default_factory=list)
    error: Optional[str] = None
    reached: List[PipelineState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.state is not PipelineState.FAILED
