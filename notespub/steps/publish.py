"""Pipeline step that pushes the site to the hosting branch."""

from __future__ import annotations

from pathlib import Path

from ..git.publisher import Publisher
from ..logging import get_logger
from ..models import PipelineState, StepResult
from .base import RunContext, Step, StepError


class PublishStep(Step):
    """Replaces the hosting branch with the compiled site."""

    name = "publish"
    reaches = PipelineState.PUBLISHED

    def __init__(self, publisher: Publisher | None = None) -> None:
        self.publisher = publisher or Publisher()
        self.logger = get_logger("steps.publish")

    def run(self, context: RunContext, input_path: Path) -> StepResult:
        settings = context.config.publish
        folder = context.root / settings.folder
        if folder.resolve() != input_path.resolve():
            raise StepError(
                f"publish.folder ({folder}) does not match the compiled site at {input_path}; "
                "set publish.folder to compiler.output"
            )
        token = context.config.token(context.environ)
        if token is None:
            self.logger.debug(
                "%s is not set; pushing with the remote's own credentials",
                context.config.metadata.token_env,
            )
        pushed = self.publisher.publish_directory(
            context.root,
            input_path,
            branch=settings.branch,
            remote=settings.remote,
            repository_url=settings.repository_url,
            message=settings.commit_message,
            token=token,
        )
        detail = f"pushed to {settings.branch}" if pushed else f"{settings.branch} unchanged"
        return StepResult(name=self.name, success=True, output_path=input_path, detail=detail)
