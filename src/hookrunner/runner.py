"""Event dispatch and error supervision for one hook invocation.

A hook script builds a ``Runner`` with callbacks for the events it cares
about and calls ``run()``:

    ```python
    from hookrunner import Runner, approve, block

    def check_bash(ctx, event):
        if event.tool_name == "Bash" and "rm -rf" in event.tool_input.get("command", ""):
            return block("dangerous command")
        return approve()

    Runner(pre_tool_use=check_bash).run()
    ```

The pipeline is stdin -> raw preprocessor -> classify -> decode ->
(Stop: transcript + handler resolution) -> handler -> response encoding.
``dispatch`` runs that pipeline and always returns an ``ExitDirective``;
only ``run`` writes output and exits the process.
"""

import asyncio
import inspect
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, NoReturn, Protocol, TextIO

from hookrunner.config import RunnerConfig, configure_logging, load_config
from hookrunner.errors import EncodeError, HandlerError, HookError, InputError
from hookrunner.events import (
    EventKind,
    HookEvent,
    NotificationEvent,
    PostToolUseEvent,
    PreToolUseEvent,
    StopEvent,
    classify,
    decode_event,
    peek_event_kind,
)
from hookrunner.responses import (
    ErrorResponse,
    ExitDirective,
    HookResponse,
    NotificationResponse,
    PostToolUseResponse,
    PreToolUseResponse,
    StopResponse,
    encode_response,
)
from hookrunner.stdin import read_stdin
from hookrunner.transcript import load_transcript

logger = logging.getLogger(__name__)

# Exit codes under the default error policy. Stop failures exit 0 so a
# broken hook never keeps Claude from stopping.
DEFAULT_ERROR_EXIT_CODE = 2
STOP_ERROR_EXIT_CODE = 0

RESPONSE_TYPES: dict[EventKind, type[HookResponse]] = {
    EventKind.PRE_TOOL_USE: PreToolUseResponse,
    EventKind.POST_TOOL_USE: PostToolUseResponse,
    EventKind.NOTIFICATION: NotificationResponse,
    EventKind.STOP: StopResponse,
}


@dataclass
class HookContext:
    """Per-invocation context passed to every callback.

    Attributes:
        raw: The stdin payload as text, exactly as received.
        config: The runner's configuration.
        event_kind: The classified kind, once known.
        values: Free for callbacks to share data; the runner never reads it.
    """

    raw: str = ""
    config: RunnerConfig = field(default_factory=RunnerConfig)
    event_kind: EventKind | None = None
    values: dict[str, Any] = field(default_factory=dict)


# A handler takes (ctx, event) and returns the kind's response, an
# ErrorResponse, None, or a coroutine producing one of those.
Handler = Callable[[HookContext, Any], Any]


class RawPreprocessor(Protocol):
    """Sees the raw payload before anything is decoded.

    Returning a directive ends the invocation with it; returning None
    continues with normal processing.
    """

    def __call__(self, ctx: HookContext, raw: str) -> ExitDirective | None:
        ...


class ErrorCallback(Protocol):
    """Offered every error together with the raw payload.

    Returning a directive replaces the default error policy.
    """

    def __call__(
        self, ctx: HookContext, raw: str, error: HookError
    ) -> ExitDirective | None:
        ...


def resolve_stop_handler(
    event: StopEvent,
    stop: Handler | None = None,
    stop_once: Handler | None = None,
) -> Handler | None:
    """Pick the handler for a Stop event.

    ``stop_once`` runs only on the first stop attempt
    (``stop_hook_active`` false) and then takes precedence over ``stop``.
    Every other case falls through to ``stop``. Exactly one handler, or
    None when neither applies.
    """
    if not event.stop_hook_active and stop_once is not None:
        return stop_once
    return stop


def default_error_directive(
    raw: str, error: HookError, kind: EventKind | None = None
) -> ExitDirective:
    """Apply the default error policy.

    The message goes to stderr. The exit code is 2, except for Stop events
    where it is 0. When ``kind`` is unknown it is peeked from the payload.
    """
    if kind is None:
        kind = peek_event_kind(raw)
    code = STOP_ERROR_EXIT_CODE if kind is EventKind.STOP else DEFAULT_ERROR_EXIT_CODE
    return ExitDirective(exit_code=code, stderr=f"{error}\n")


def _call(callback: Callable[..., Any], *args: Any) -> Any:
    result = callback(*args)
    if inspect.iscoroutine(result):
        result = asyncio.run(result)
    return result


@dataclass
class Runner:
    """Callbacks for a single hook binary.

    Every slot is optional. An event whose slot is empty is allowed
    silently.

    Attributes:
        pre_tool_use: Handles PreToolUse events.
        post_tool_use: Handles PostToolUse events.
        notification: Handles Notification events.
        stop: Handles Stop events not claimed by ``stop_once``.
        stop_once: Handles Stop events when ``stop_hook_active`` is false.
        raw: Preprocessor that sees the raw payload first.
        on_error: Error callback; may override the default error policy.
        config: Runner configuration. Loaded from YAML/env when omitted.
    """

    pre_tool_use: Handler | None = None
    post_tool_use: Handler | None = None
    notification: Handler | None = None
    stop: Handler | None = None
    stop_once: Handler | None = None
    raw: RawPreprocessor | None = None
    on_error: ErrorCallback | None = None
    config: RunnerConfig = field(default_factory=load_config)

    def handler_for(self, event: HookEvent) -> Handler | None:
        """Return the callback that should handle ``event``, if any."""
        if isinstance(event, StopEvent):
            return resolve_stop_handler(event, self.stop, self.stop_once)
        if isinstance(event, PreToolUseEvent):
            return self.pre_tool_use
        if isinstance(event, PostToolUseEvent):
            return self.post_tool_use
        if isinstance(event, NotificationEvent):
            return self.notification
        raise TypeError(f"Unknown event type: {type(event)}")

    def invoke(self, ctx: HookContext, event: HookEvent) -> HookResponse | None:
        """Run the handler for an already decoded event.

        Exceptions raised by the handler propagate unchanged.

        Returns:
            The handler's response, or None when no handler applies.

        Raises:
            HandlerError: If the handler returned an ErrorResponse.
            EncodeError: If the handler returned another kind's response.
        """
        handler = self.handler_for(event)
        if handler is None:
            logger.debug("no handler for %s, allowing", event.kind.value)
            return None

        result = _call(handler, ctx, event)

        if isinstance(result, ErrorResponse):
            error = HandlerError(result.message)
            if isinstance(result.error, BaseException):
                raise error from result.error
            raise error

        expected = RESPONSE_TYPES[event.kind]
        if result is not None and not isinstance(result, expected):
            raise EncodeError(
                f"failed to encode response: {event.kind.value} handler returned "
                f"{type(result).__name__}, expected {expected.__name__}"
            )
        return result

    def dispatch(self, raw: bytes | str, ctx: HookContext | None = None) -> ExitDirective:
        """Run the whole pipeline on a payload and return the exit directive.

        Never raises for pipeline failures: every HookError and every
        exception escaping a callback ends up in ``handle_error``.
        """
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        if ctx is None:
            ctx = HookContext(raw=text, config=self.config)

        try:
            return self._process(ctx, text)
        except HookError as exc:
            return self.handle_error(ctx, text, exc)
        except Exception as exc:
            logger.debug("recovered panic from callback", exc_info=True)
            return self.handle_error(ctx, text, HandlerError.from_panic(exc))

    def _process(self, ctx: HookContext, text: str) -> ExitDirective:
        if self.raw is not None:
            directive = self.raw(ctx, text)
            if directive is not None:
                logger.debug(
                    "raw preprocessor returned exit code %d", directive.exit_code
                )
                return directive

        envelope = classify(text)
        ctx.event_kind = envelope.kind
        event = decode_event(envelope)

        if isinstance(event, StopEvent):
            event.transcript = load_transcript(event.transcript_path)

        response = self.invoke(ctx, event)
        return encode_response(response, indent=self.config.json_indent)

    def handle_error(self, ctx: HookContext, raw: str, error: HookError) -> ExitDirective:
        """Resolve an error into an exit directive.

        The error callback is consulted first; a directive it returns is
        used verbatim. Otherwise the default policy applies.
        """
        logger.debug("hook error kind=%s: %s", error.kind.value, error)

        if self.on_error is not None:
            try:
                directive = self.on_error(ctx, raw, error)
            except Exception:
                logger.exception("error callback failed, using default policy")
                directive = None
            if directive is not None:
                return directive

        return default_error_directive(raw, error, ctx.event_kind)

    def execute(self, stdin: BinaryIO | TextIO | None = None) -> ExitDirective:
        """Read the payload from stdin and dispatch it."""
        try:
            raw = read_stdin(stdin, timeout=self.config.stdin_timeout)
        except InputError as exc:
            return self.handle_error(HookContext(config=self.config), "", exc)
        return self.dispatch(raw)

    def run(
        self,
        stdin: BinaryIO | TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> NoReturn:
        """Process one event from stdin, write the result, and exit."""
        configure_logging(self.config)
        directive = self.execute(stdin)
        directive.write(stdout, stderr)
        logger.debug("exiting with code %d", directive.exit_code)
        sys.exit(directive.exit_code)
