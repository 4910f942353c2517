"""Pipeline step implementations and selection utilities."""

from __future__ import annotations

from typing import Callable, List, Sequence

from .assets import KNOWN_ISSUE, OverrideAssetsStep
from .base import RunContext, Step, StepError
from .compile import CompileDocumentationStep, build_command
from .metadata import GenerateMetadataStep
from .publish import PublishStep

_BUILTIN_FACTORIES: dict[str, Callable[[], Step]] = {
    "metadata": GenerateMetadataStep,
    "compile": CompileDocumentationStep,
    "assets": OverrideAssetsStep,
    "publish": PublishStep,
}

STEP_ORDER = tuple(_BUILTIN_FACTORIES)


def default_steps(names: Sequence[str] | None = None) -> List[Step]:
    """Return step instances in pipeline order, optionally limited to ``names``."""
    if names is None:
        return [factory() for factory in _BUILTIN_FACTORIES.values()]
    wanted = {name.lower() for name in names}
    unknown = wanted.difference(_BUILTIN_FACTORIES)
    if unknown:
        raise ValueError(f"Unknown pipeline step(s): {', '.join(sorted(unknown))}")
    return [factory() for name, factory in _BUILTIN_FACTORIES.items() if name in wanted]


__all__ = [
    "CompileDocumentationStep",
    "GenerateMetadataStep",
    "KNOWN_ISSUE",
    "OverrideAssetsStep",
    "PublishStep",
    "RunContext",
    "STEP_ORDER",
    "Step",
    "StepError",
    "build_command",
    "default_steps",
]
