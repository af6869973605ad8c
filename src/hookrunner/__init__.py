import logging

from hookrunner.config import RunnerConfig, configure_logging, load_config
from hookrunner.errors import (
    DecodeError,
    DispatchError,
    EncodeError,
    ErrorKind,
    HandlerError,
    HookError,
    InputError,
)
from hookrunner.events import (
    EventEnvelope,
    EventKind,
    HookEvent,
    NotificationEvent,
    PostToolUseEvent,
    PreToolUseEvent,
    StopEvent,
    classify,
    decode_event,
)
from hookrunner.responses import (
    ErrorResponse,
    ExitDirective,
    HookResponse,
    NotificationResponse,
    PostToolUseResponse,
    PreToolUseResponse,
    StopResponse,
    allow,
    approve,
    block,
    block_stop,
    continue_stop,
    encode_response,
    error,
    ok,
    post_block,
    stop_claude,
    stop_claude_post,
    stop_from_notification,
    stop_from_stop,
)
from hookrunner.runner import (
    ErrorCallback,
    HookContext,
    RawPreprocessor,
    Runner,
    default_error_directive,
    resolve_stop_handler,
)
from hookrunner.transcript import (
    Transcript,
    TranscriptEntry,
    load_transcript,
    read_transcript,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Runner
    "Runner",
    "HookContext",
    "RawPreprocessor",
    "ErrorCallback",
    "resolve_stop_handler",
    "default_error_directive",
    # Config
    "RunnerConfig",
    "load_config",
    "configure_logging",
    # Errors
    "HookError",
    "ErrorKind",
    "InputError",
    "DecodeError",
    "DispatchError",
    "HandlerError",
    "EncodeError",
    # Events
    "EventKind",
    "EventEnvelope",
    "HookEvent",
    "PreToolUseEvent",
    "PostToolUseEvent",
    "NotificationEvent",
    "StopEvent",
    "classify",
    "decode_event",
    # Responses
    "ExitDirective",
    "HookResponse",
    "PreToolUseResponse",
    "PostToolUseResponse",
    "NotificationResponse",
    "StopResponse",
    "ErrorResponse",
    "encode_response",
    # Response helpers
    "approve",
    "block",
    "stop_claude",
    "allow",
    "post_block",
    "stop_claude_post",
    "ok",
    "stop_from_notification",
    "continue_stop",
    "block_stop",
    "stop_from_stop",
    "error",
    # Transcript
    "TranscriptEntry",
    "Transcript",
    "read_transcript",
    "load_transcript",
]
