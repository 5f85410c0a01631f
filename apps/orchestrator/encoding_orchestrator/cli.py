"""Command-line entrypoint.

Exit codes:
- 0: success
- 1: configuration or authentication error
- 2: encoding job ended in Error or Canceled
- 3: gave up waiting for the job (timeout or cancellation)
- 4: media service, storage or streaming error
- 130: interrupted
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from pydantic import ValidationError

from encoding_orchestrator.core.config import Settings, load_settings
from encoding_orchestrator.core.logging_safety import configure_logging
from encoding_orchestrator.errors import ConfigurationError, OrchestratorError
from encoding_orchestrator.services.workflow import EncodingWorkflow

logger = logging.getLogger(__name__)

_COMMANDS = ("run", "cleanup")


def _common_options() -> argparse.ArgumentParser:
    # SUPPRESS keeps an option given before the command from being reset by the subparser.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=argparse.SUPPRESS, help="JSON settings file (default: appsettings.json)")
    common.add_argument(
        "--provider",
        choices=["azure", "memory"],
        default=argparse.SUPPRESS,
        help="media service backend",
    )
    common.add_argument("--log-level", default=argparse.SUPPRESS, help="logging level (default from settings)")
    return common


def _build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="encoding-orchestrator",
        description="Upload a media file, encode it with a media service transform and publish it for streaming.",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", parents=[common], help="run the full upload, encode and publish flow")
    run.add_argument("--file", dest="file_to_upload", help="local media file to upload")
    run.add_argument("--transform", dest="transform_name", help="transform name to get or create")
    run.add_argument("--timeout", dest="poll_timeout_seconds", type=float, help="max seconds to wait; 0 waits forever")
    run.add_argument("--poll-interval", dest="poll_interval_seconds", type=float, help="seconds between job polls")

    cleanup = subparsers.add_parser(
        "cleanup",
        parents=[common],
        help="delete a job, assets and an optional content key policy",
    )
    cleanup.add_argument("--transform", dest="transform_name", required=True)
    cleanup.add_argument("--job", dest="job_name", required=True)
    cleanup.add_argument("--asset", dest="asset_names", action="append", default=[])
    cleanup.add_argument("--content-key-policy", dest="content_key_policy_name")
    return parser


def _with_default_command(argv: list[str]) -> list[str]:
    """Prepend ``run`` when no command is named."""
    if any(arg in _COMMANDS for arg in argv) or argv in (["-h"], ["--help"]):
        return argv
    return ["run", *argv]


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if getattr(args, "provider", None):
        overrides["media_provider"] = args.provider
    if getattr(args, "log_level", None):
        overrides["log_level"] = args.log_level
    for name in ("file_to_upload", "transform_name", "poll_timeout_seconds", "poll_interval_seconds"):
        value = getattr(args, name, None)
        if value is not None and args.command == "run":
            overrides[name] = value
    try:
        return load_settings(getattr(args, "config", None), **overrides)
    except ValidationError as exc:
        invalid = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
        raise ConfigurationError("Invalid settings", details={"invalid": invalid}) from exc


def _run(workflow: EncodingWorkflow) -> int:
    result = workflow.run()
    for url in result.playback_urls:
        print(url)
    return 0


def _cleanup(workflow: EncodingWorkflow, args: argparse.Namespace) -> int:
    report = workflow.teardown(
        transform_name=args.transform_name,
        job_name=args.job_name,
        asset_names=args.asset_names,
        content_key_policy_name=args.content_key_policy_name,
    )
    print(f"job {args.job_name}: {'deleted' if report.job_deleted else 'absent'}")
    for name in report.assets_deleted:
        print(f"asset {name}: deleted")
    for name in report.assets_absent:
        print(f"asset {name}: absent")
    if report.content_key_policy_deleted is not None:
        state = "deleted" if report.content_key_policy_deleted else "absent"
        print(f"content key policy {args.content_key_policy_name}: {state}")
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = _build_parser().parse_args(_with_default_command(argv))

    try:
        settings = _settings_from_args(args)
        configure_logging(settings.log_level)
        workflow = EncodingWorkflow.from_settings(settings)
        if args.command == "cleanup":
            return _cleanup(workflow, args)
        return _run(workflow)
    except OrchestratorError as exc:
        logger.error("cli.failed code=%s message=%s", exc.payload.code, exc.payload.message)
        print(exc.payload.model_dump_json(exclude_none=True), file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
