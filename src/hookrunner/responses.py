"""Handler responses and the exit directive they turn into.

Each event kind has its own response model. All fields are optional; a
response with every field unset is *empty* and means "allow silently":
the hook exits 0 and writes nothing. A non-empty response is written to
stdout as an indented JSON document.
"""

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from pydantic import BaseModel, ConfigDict, Field

from hookrunner.errors import EncodeError

logger = logging.getLogger(__name__)

APPROVE = "approve"
BLOCK = "block"


@dataclass(frozen=True)
class ExitDirective:
    """Exit code plus the bytes to write before exiting.

    This is the terminal value of every invocation. Only ``Runner.run``
    turns it into real process output and a real exit.
    """

    exit_code: int = 0
    output: str = ""
    stderr: str = ""

    def write(self, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        """Write output and stderr text to the given streams."""
        stdout = stdout or sys.stdout
        stderr = stderr or sys.stderr
        if self.output:
            stdout.write(self.output)
            stdout.flush()
        if self.stderr:
            stderr.write(self.stderr)
            stderr.flush()


class HookResponse(BaseModel):
    """Base for all response variants.

    Unset means ``None`` or an empty string. Unset fields are left out of
    the JSON body. Subclasses may add fields; extra keyword arguments are
    kept and serialized too.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def is_empty(self) -> bool:
        """Check whether every optional field is unset."""
        values = [getattr(self, name) for name in type(self).model_fields]
        values.extend((self.model_extra or {}).values())
        return all(value is None or value == "" for value in values)

    def to_payload(self) -> dict[str, Any]:
        """Serialize set fields by their wire names."""
        data = self.model_dump(mode="json", by_alias=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None and value != ""
        }


class PreToolUseResponse(HookResponse):
    """Response for PreToolUse events."""

    decision: str | None = None
    continue_: bool | None = Field(default=None, alias="continue")
    stop_reason: str | None = Field(default=None, alias="stopReason")
    reason: str | None = None


class PostToolUseResponse(HookResponse):
    """Response for PostToolUse events."""

    decision: str | None = None
    continue_: bool | None = Field(default=None, alias="continue")
    stop_reason: str | None = Field(default=None, alias="stopReason")
    reason: str | None = None


class NotificationResponse(HookResponse):
    """Response for Notification events."""

    continue_: bool | None = Field(default=None, alias="continue")
    stop_reason: str | None = Field(default=None, alias="stopReason")


class StopResponse(HookResponse):
    """Response for Stop events."""

    decision: str | None = None
    continue_: bool | None = Field(default=None, alias="continue")
    stop_reason: str | None = Field(default=None, alias="stopReason")
    reason: str | None = None


class ErrorResponse:
    """A handler result that reports a failure instead of a decision.

    Any handler may return this in place of its normal response. The
    runner reports it as a HandlerError.
    """

    def __init__(self, error: BaseException | str) -> None:
        self.error = error
        self.message = str(error)

    def __repr__(self) -> str:
        return f"ErrorResponse({self.message!r})"


# PreToolUse helpers


def approve() -> PreToolUseResponse:
    """Approve the tool call."""
    return PreToolUseResponse(decision=APPROVE)


def block(reason: str) -> PreToolUseResponse:
    """Block the tool call; the reason is shown to Claude."""
    return PreToolUseResponse(decision=BLOCK, reason=reason)


def stop_claude(reason: str) -> PreToolUseResponse:
    """Stop Claude entirely before the tool runs."""
    return PreToolUseResponse(continue_=False, stop_reason=reason)


# PostToolUse helpers


def allow() -> PostToolUseResponse:
    return PostToolUseResponse()


def post_block(reason: str) -> PostToolUseResponse:
    return PostToolUseResponse(decision=BLOCK, reason=reason)


def stop_claude_post(reason: str) -> PostToolUseResponse:
    return PostToolUseResponse(continue_=False, stop_reason=reason)


# Notification helpers


def ok() -> NotificationResponse:
    return NotificationResponse()


def stop_from_notification(reason: str) -> NotificationResponse:
    return NotificationResponse(continue_=False, stop_reason=reason)


# Stop helpers


def continue_stop() -> StopResponse:
    """Let Claude stop."""
    return StopResponse()


def block_stop(reason: str) -> StopResponse:
    """Keep Claude going; the reason tells it what to do next."""
    return StopResponse(decision=BLOCK, reason=reason)


def stop_from_stop(reason: str) -> StopResponse:
    return StopResponse(continue_=False, stop_reason=reason)


def error(exc: BaseException | str) -> ErrorResponse:
    """Wrap an error so a handler can return it."""
    return ErrorResponse(exc)


def encode_response(response: HookResponse | None, indent: int = 2) -> ExitDirective:
    """Turn a handler response into an exit directive.

    Args:
        response: The handler's response. None counts as empty.
        indent: JSON indentation for non-empty responses.

    Returns:
        ``ExitDirective(0)`` for an empty response, otherwise exit 0 with
        the JSON body (plus trailing newline) as output.

    Raises:
        EncodeError: If the response cannot be serialized.
    """
    if response is None or response.is_empty():
        logger.debug("empty response, allowing silently")
        return ExitDirective(exit_code=0)

    try:
        payload = response.to_payload()
        body = json.dumps(payload, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"failed to encode response: {exc}") from exc

    logger.debug("encoded %s (%d bytes)", type(response).__name__, len(body))
    return ExitDirective(exit_code=0, output=body + "\n")
