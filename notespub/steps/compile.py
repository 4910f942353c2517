"""Pipeline step that drives the external documentation compiler."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List

from ..config import CompilerConfig
from ..logging import get_logger
from ..models import PipelineState, StepResult
from .base import RunContext, Step, StepError


def build_command(compiler: CompilerConfig, output: Path) -> List[str]:
    """Return the compiler command line for ``output``."""
    args = list(compiler.command)
    args.extend(["--allow-writing-to-directory", str(output)])
    args.extend(["generate-documentation", "--target", compiler.target])
    if compiler.disable_indexing:
        args.append("--disable-indexing")
    if compiler.transform_for_static_hosting:
        args.append("--transform-for-static-hosting")
    if compiler.hosting_base_path:
        args.extend(["--hosting-base-path", compiler.hosting_base_path])
    args.extend(["--output-path", str(output)])
    return args


class CompileDocumentationStep(Step):
    """Regenerates the static site tree from the note catalog."""

    name = "compile"
    reaches = PipelineState.COMPILED
    consumes = "catalog"

    def __init__(self, runner: Callable[..., None] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("steps.compile")

    def run(self, context: RunContext, input_path: Path) -> StepResult:
        output = context.output
        if output.exists():
            shutil.rmtree(output)
        command = build_command(context.config.compiler, output)
        self.logger.debug("Compiler command: %s", " ".join(command))

        try:
            self._runner(command, cwd=context.root)
        except FileNotFoundError as exc:
            raise StepError(f"Unable to locate '{command[0]}'; is the compiler toolchain installed?") from exc
        except subprocess.CalledProcessError as exc:
            raise StepError(f"Documentation compiler failed with exit code {exc.returncode}") from exc

        if not output.is_dir():
            raise StepError(f"Documentation compiler produced no output at {output}")
        return StepResult(name=self.name, success=True, output_path=output, detail=str(output))

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> None:
        subprocess.run(list(args), cwd=str(cwd), check=True)
