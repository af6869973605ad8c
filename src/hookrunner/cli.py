"""hookrunner CLI entry point.

Ready-made hooks for wiring into Claude Code settings while developing:

Usage:
    hookrunner debug [--log-file PATH] < event.json
    hookrunner inspect < event.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from hookrunner.config import RunnerConfig, load_config
from hookrunner.errors import HookError
from hookrunner.events import (
    NotificationEvent,
    PostToolUseEvent,
    PreToolUseEvent,
    StopEvent,
    classify,
    decode_event,
)
from hookrunner.responses import (
    ExitDirective,
    NotificationResponse,
    PostToolUseResponse,
    PreToolUseResponse,
    StopResponse,
    allow,
    approve,
    continue_stop,
    ok,
)
from hookrunner.runner import HookContext, Runner

logger = logging.getLogger("hookrunner.debug")


def build_debug_runner(config: RunnerConfig) -> Runner:
    """A runner that logs everything it sees and allows every event.

    Errors are logged and exit 0 so the hook never interferes with Claude.
    """

    def log_raw(ctx: HookContext, raw: str) -> ExitDirective | None:
        logger.info("raw payload (%d bytes): %s", len(raw), raw)
        return None

    def log_error(ctx: HookContext, raw: str, error: HookError) -> ExitDirective:
        logger.error("%s error: %s", error.kind.value, error)
        logger.error("payload that caused the error: %s", raw)
        return ExitDirective(exit_code=0)

    def pre_tool_use(ctx: HookContext, event: PreToolUseEvent) -> PreToolUseResponse:
        logger.info("PreToolUse tool=%s session=%s", event.tool_name, event.session_id)
        return approve()

    def post_tool_use(ctx: HookContext, event: PostToolUseEvent) -> PostToolUseResponse:
        logger.info("PostToolUse tool=%s session=%s", event.tool_name, event.session_id)
        return allow()

    def notification(ctx: HookContext, event: NotificationEvent) -> NotificationResponse:
        logger.info("Notification session=%s message=%s", event.session_id, event.message)
        return ok()

    def stop(ctx: HookContext, event: StopEvent) -> StopResponse:
        logger.info(
            "Stop session=%s stop_hook_active=%s transcript_entries=%d",
            event.session_id,
            event.stop_hook_active,
            len(event.transcript),
        )
        return continue_stop()

    return Runner(
        pre_tool_use=pre_tool_use,
        post_tool_use=post_tool_use,
        notification=notification,
        stop=stop,
        raw=log_raw,
        on_error=log_error,
        config=config,
    )


def build_inspect_runner(config: RunnerConfig) -> Runner:
    """A runner that prints the decoded event instead of handling it."""

    def inspect_event(ctx: HookContext, raw: str) -> ExitDirective:
        envelope = classify(raw)
        ctx.event_kind = envelope.kind
        event = decode_event(envelope)
        body = json.dumps(event.model_dump(mode="json"), indent=config.json_indent)
        return ExitDirective(exit_code=0, output=body + "\n")

    return Runner(raw=inspect_event, config=config)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="hookrunner",
        description="hookrunner - Claude Code hook runtime",
    )
    parser.add_argument(
        "--config",
        help="YAML config file (default: $HOOKRUNNER_CONFIG)",
    )
    sub = parser.add_subparsers(dest="command")

    debug_parser = sub.add_parser(
        "debug", help="Log every event and error, allow everything"
    )
    debug_parser.add_argument(
        "--log-file",
        help="Write the log here instead of stderr",
    )

    sub.add_parser("inspect", help="Print the decoded event as JSON")

    args = parser.parse_args(argv)

    if args.command == "debug":
        config = load_config(args.config)
        updates: dict = {"debug": True}
        if args.log_file:
            updates["log_file"] = Path(args.log_file).expanduser()
        build_debug_runner(config.model_copy(update=updates)).run()
    elif args.command == "inspect":
        build_inspect_runner(load_config(args.config)).run()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
