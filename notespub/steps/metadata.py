"""Pipeline step that refreshes contributor metadata."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..config import NotesPubConfig
from ..logging import get_logger
from ..metadata import GitHubClient, MetadataError, MetadataGenerator
from ..models import PipelineState, StepResult
from .base import RunContext, Step

ClientFactory = Callable[[NotesPubConfig, str], GitHubClient]


def _default_client(config: NotesPubConfig, token: str) -> GitHubClient:
    return GitHubClient(
        config.metadata.repository or "",
        token=token,
        api_url=config.metadata.api_url,
        request_timeout=config.metadata.request_timeout,
    )


class GenerateMetadataStep(Step):
    """Attributes contributors on every page using the hosting API."""

    name = "metadata"
    reaches = PipelineState.METADATA_GENERATED
    consumes = "catalog"

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self.client_factory = client_factory or _default_client
        self.logger = get_logger("steps.metadata")

    def run(self, context: RunContext, input_path: Path) -> StepResult:
        config = context.config
        token = config.token(context.environ)
        if token is None:
            raise MetadataError(
                f"{config.metadata.token_env} is not set; an API token is required to generate metadata"
            )
        if not config.metadata.repository:
            raise MetadataError(
                "No repository configured; set metadata.repository or GITHUB_REPOSITORY"
            )

        generator = MetadataGenerator(
            self.client_factory(config, token),
            contributors_dir=config.metadata.contributors_dir,
            exclude_paths=config.content.exclude_paths,
        )
        records = generator.generate(input_path, repo_root=context.root)
        updated = sum(1 for record in records if record.changed)
        return StepResult(
            name=self.name,
            success=True,
            output_path=input_path,
            detail=f"{len(records)} pages attributed, {updated} updated",
        )
