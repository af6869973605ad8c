"""In-process harness for testing hook handlers.

Builds events directly and calls the runner's handlers, so handler logic
can be tested without JSON or a subprocess:

    ```python
    tester = HookTester(Runner(pre_tool_use=check_bash))
    tester.assert_blocks("Bash", {"command": "rm -rf /"}, reason="dangerous command")
    ```

``run_payload`` goes through the full dispatch pipeline instead and
returns the exit directive.
"""

import json
from typing import Any

from pydantic import BaseModel

from hookrunner.events import (
    EventKind,
    HookEvent,
    NotificationEvent,
    PostToolUseEvent,
    PreToolUseEvent,
    StopEvent,
)
from hookrunner.responses import (
    APPROVE,
    BLOCK,
    ExitDirective,
    HookResponse,
    NotificationResponse,
    PostToolUseResponse,
    PreToolUseResponse,
    StopResponse,
)
from hookrunner.runner import HookContext, Runner
from hookrunner.transcript import TranscriptEntry

TEST_SESSION_ID = "test-session"


def _as_data(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


class HookTester:
    """Calls a runner's handlers with synthetic events.

    Every call returns the handler's response, or None if the handler
    returned nothing. A handler that returns an error response raises
    ``HandlerError``; exceptions raised by the handler propagate.
    """

    def __init__(self, runner: Runner) -> None:
        self.runner = runner

    def _invoke(self, event: HookEvent) -> Any:
        if self.runner.handler_for(event) is None:
            raise LookupError(f"{event.kind.value} handler not set")
        ctx = HookContext(config=self.runner.config, event_kind=event.kind)
        return self.runner.invoke(ctx, event)

    def pre_tool_use(
        self, tool_name: str, tool_input: dict[str, Any] | BaseModel | None = None
    ) -> PreToolUseResponse | None:
        event = PreToolUseEvent(
            session_id=TEST_SESSION_ID,
            hook_event_name=EventKind.PRE_TOOL_USE.value,
            tool_name=tool_name,
            tool_input=_as_data(tool_input) or {},
        )
        return self._invoke(event)

    def post_tool_use(
        self,
        tool_name: str,
        tool_input: dict[str, Any] | BaseModel | None = None,
        tool_response: Any = None,
    ) -> PostToolUseResponse | None:
        event = PostToolUseEvent(
            session_id=TEST_SESSION_ID,
            hook_event_name=EventKind.POST_TOOL_USE.value,
            tool_name=tool_name,
            tool_input=_as_data(tool_input) or {},
            tool_response=_as_data(tool_response),
        )
        return self._invoke(event)

    def notification(self, message: str) -> NotificationResponse | None:
        event = NotificationEvent(
            session_id=TEST_SESSION_ID,
            hook_event_name=EventKind.NOTIFICATION.value,
            message=message,
        )
        return self._invoke(event)

    def stop(
        self,
        stop_hook_active: bool = False,
        transcript: list[TranscriptEntry | dict[str, Any]] | None = None,
    ) -> StopResponse | None:
        """Call the Stop handler chosen by ``stop_hook_active``.

        Transcript entries may be given as dicts in the JSONL line format.
        """
        entries = [
            entry
            if isinstance(entry, TranscriptEntry)
            else TranscriptEntry.model_validate(entry)
            for entry in transcript or []
        ]
        event = StopEvent(
            session_id=TEST_SESSION_ID,
            hook_event_name=EventKind.STOP.value,
            stop_hook_active=stop_hook_active,
            transcript=entries,
        )
        return self._invoke(event)

    def run_payload(self, payload: dict[str, Any] | str | bytes) -> ExitDirective:
        """Run a raw payload through the full pipeline."""
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        return self.runner.dispatch(payload)

    # Assertions

    def assert_approves(
        self, tool_name: str, tool_input: dict[str, Any] | BaseModel | None = None
    ) -> None:
        response = self.pre_tool_use(tool_name, tool_input)
        decision = _field(response, "decision")
        assert decision == APPROVE, f"expected approve, got {decision!r}"

    def assert_blocks(
        self,
        tool_name: str,
        tool_input: dict[str, Any] | BaseModel | None = None,
        reason: str | None = None,
    ) -> None:
        response = self.pre_tool_use(tool_name, tool_input)
        _assert_blocked(response, reason)

    def assert_stops_claude(
        self, tool_name: str, tool_input: dict[str, Any] | BaseModel | None = None
    ) -> None:
        response = self.pre_tool_use(tool_name, tool_input)
        assert _field(response, "continue_") is False, "expected continue=false"

    def assert_post_allows(
        self,
        tool_name: str,
        tool_input: dict[str, Any] | BaseModel | None = None,
        tool_response: Any = None,
    ) -> None:
        response = self.post_tool_use(tool_name, tool_input, tool_response)
        decision = _field(response, "decision")
        assert not decision, f"expected allow (empty decision), got {decision!r}"

    def assert_post_blocks(
        self,
        tool_name: str,
        tool_input: dict[str, Any] | BaseModel | None = None,
        tool_response: Any = None,
        reason: str | None = None,
    ) -> None:
        response = self.post_tool_use(tool_name, tool_input, tool_response)
        _assert_blocked(response, reason)

    def assert_notification_ok(self, message: str) -> None:
        response = self.notification(message)
        assert response is None or response.is_empty(), (
            f"expected empty response, got {response.to_payload()}"
        )

    def assert_stop_continues(
        self,
        stop_hook_active: bool = False,
        transcript: list[TranscriptEntry | dict[str, Any]] | None = None,
    ) -> None:
        response = self.stop(stop_hook_active, transcript)
        decision = _field(response, "decision")
        assert not decision, f"expected continue (empty decision), got {decision!r}"

    def assert_stop_blocks(
        self,
        stop_hook_active: bool = False,
        transcript: list[TranscriptEntry | dict[str, Any]] | None = None,
    ) -> None:
        response = self.stop(stop_hook_active, transcript)
        _assert_blocked(response, None)


def _field(response: HookResponse | None, name: str) -> Any:
    return getattr(response, name, None) if response is not None else None


def _assert_blocked(response: HookResponse | None, reason: str | None) -> None:
    decision = _field(response, "decision")
    assert decision == BLOCK, f"expected block, got {decision!r}"
    if reason is not None:
        actual = _field(response, "reason")
        assert actual == reason, f"expected reason {reason!r}, got {actual!r}"
