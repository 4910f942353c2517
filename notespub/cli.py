"""CLI entrypoints for notespub commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging
from .models import Trigger
from .orchestrator import Orchestrator
from .steps import default_steps

_STEP_COMMANDS = {
    "run": None,
    "metadata": ["metadata"],
    "compile": ["compile"],
    "override-assets": ["assets"],
    "publish": ["publish"],
}


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notespub",
        description="Build the session notes site and publish it to the hosting branch.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    helps = {
        "run": "Run the full generate, compile, override and publish pipeline.",
        "metadata": "Refresh contributor metadata for every note.",
        "compile": "Compile the notes into a static documentation site.",
        "override-assets": "Replace generated icons in the compiled site.",
        "publish": "Push the compiled site to the hosting branch.",
    }
    for command, help_text in helps.items():
        sub = subparsers.add_parser(command, help=help_text)
        _add_verbose_option(sub, suppress_default=True)
        _add_path_argument(sub)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Accept push and dispatch events over HTTP and run the pipeline.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for notespub commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.path).expanduser().resolve())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(config, host=args.host, port=args.port)
        return

    steps = default_steps(_STEP_COMMANDS[args.command])
    orchestrator = Orchestrator(steps)
    report = orchestrator.run(config, Trigger(kind="dispatch"))
    if not report.succeeded:
        parser.exit(1, f"notespub {args.command} failed: {report.error}\nRun with --verbose for more details.\n")

    for step in report.steps:
        print(f"{step.name}: {step.detail}")


if __name__ == "__main__":
    main(sys.argv[1:])
