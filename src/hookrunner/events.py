"""Hook event models and the classifier/decoder for raw stdin payloads.

Claude Code sends one JSON object per hook invocation. The
``hook_event_name`` field names the event kind; everything else is
kind-specific:

- PreToolUse: tool_name, tool_input
- PostToolUse: tool_name, tool_input, tool_response
- Notification: notification_message (or message)
- Stop: stop_hook_active, transcript_path

Classification and decoding are split: ``classify`` validates the
discriminator on the generic object, ``decode_event`` turns the envelope
into the typed event for that kind.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from hookrunner import tools
from hookrunner.errors import DecodeError, DispatchError
from hookrunner.transcript import TranscriptEntry

logger = logging.getLogger(__name__)

EVENT_NAME_FIELD = "hook_event_name"

ModelT = TypeVar("ModelT", bound=BaseModel)


class EventKind(str, Enum):
    """The closed set of event kinds a runner dispatches."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    NOTIFICATION = "Notification"
    STOP = "Stop"


class HookEvent(BaseModel):
    """Fields shared by every hook event."""

    model_config = ConfigDict(strict=True, extra="ignore")

    kind: ClassVar[EventKind]
    # Fields the runner sets after decoding; never read from stdin.
    filled_by_runner: ClassVar[frozenset[str]] = frozenset()

    session_id: str = ""
    transcript_path: str = ""
    cwd: str = ""
    hook_event_name: str = ""


def _validate_payload(model: type[ModelT], data: Any, what: str) -> ModelT:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise DecodeError(f"failed to parse {what} as {model.__name__}: {exc}") from exc


class ToolEvent(HookEvent):
    """Base for events that carry a tool call."""

    tool_name: str = ""
    tool_input: dict[str, Any] = Field(default_factory=dict)

    def is_mcp_tool(self) -> bool:
        return tools.is_mcp_tool(self.tool_name)

    def mcp_tool_name(self) -> str:
        """Full MCP tool name, or an empty string for built-in tools."""
        return self.tool_name if self.is_mcp_tool() else ""

    def tool_input_as(self, model: type[ModelT]) -> ModelT:
        """Decode ``tool_input`` into a tool input model.

        Raises:
            DecodeError: If the input does not fit the model.
        """
        return _validate_payload(model, self.tool_input, "tool_input")

    def parsed_tool_input(self) -> tools.ToolModel | dict[str, Any]:
        """Decode ``tool_input`` with the model registered for ``tool_name``."""
        model = tools.TOOL_INPUTS.get(self.tool_name)
        if model is None:
            return self.tool_input
        return self.tool_input_as(model)

    def as_mcp_tool(self) -> tools.MCPTool:
        """Split an MCP tool call into server, tool and raw input.

        Raises:
            DecodeError: If ``tool_name`` is not a valid MCP tool name.
        """
        try:
            server, name = tools.parse_mcp_tool_name(self.tool_name)
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
        return tools.MCPTool(mcp_name=server, tool_name=name, raw_input=self.tool_input)


class PreToolUseEvent(ToolEvent):
    """Sent before Claude runs a tool."""

    kind: ClassVar[EventKind] = EventKind.PRE_TOOL_USE


class PostToolUseEvent(ToolEvent):
    """Sent after a tool has run."""

    kind: ClassVar[EventKind] = EventKind.POST_TOOL_USE

    tool_response: Any = None

    def tool_response_as(self, model: type[ModelT]) -> ModelT:
        """Decode ``tool_response`` into a tool output model.

        Raises:
            DecodeError: If the response does not fit the model.
        """
        return _validate_payload(model, self.tool_response, "tool_response")

    def response_as_mcp_tool(self) -> tools.MCPToolOutput:
        try:
            server, name = tools.parse_mcp_tool_name(self.tool_name)
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
        return tools.MCPToolOutput(
            mcp_name=server, tool_name=name, raw_output=self.tool_response
        )


class NotificationEvent(HookEvent):
    """An advisory notice from Claude Code."""

    kind: ClassVar[EventKind] = EventKind.NOTIFICATION

    message: str = Field(
        default="",
        validation_alias=AliasChoices("notification_message", "message"),
    )


class StopEvent(HookEvent):
    """Claude is about to stop.

    ``transcript`` is filled by the runner from ``transcript_path`` and is
    never None; it is empty when there is no transcript to read.
    """

    kind: ClassVar[EventKind] = EventKind.STOP
    filled_by_runner: ClassVar[frozenset[str]] = frozenset({"transcript"})

    stop_hook_active: bool = False
    transcript: list[TranscriptEntry] = Field(default_factory=list)


EVENT_MODELS: dict[EventKind, type[HookEvent]] = {
    model.kind: model
    for model in (PreToolUseEvent, PostToolUseEvent, NotificationEvent, StopEvent)
}


@dataclass
class EventEnvelope:
    """A classified payload: the event kind plus the still-generic object."""

    kind: EventKind
    payload: dict[str, Any]


def classify(raw: str) -> EventEnvelope:
    """Parse raw stdin text and determine the event kind.

    Raises:
        DecodeError: If the text is not a JSON object.
        DispatchError: If ``hook_event_name`` is missing, not a string, or
            not one of the known kinds.
    """
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise DecodeError(f"failed to decode stdin: {exc}") from exc

    if not isinstance(payload, dict):
        raise DecodeError(
            f"failed to decode stdin: expected a JSON object, got {type(payload).__name__}"
        )

    name = payload.get(EVENT_NAME_FIELD)
    if not isinstance(name, str):
        raise DispatchError(f"missing or invalid {EVENT_NAME_FIELD} field")

    try:
        kind = EventKind(name)
    except ValueError:
        raise DispatchError(f"unknown event type: {name}") from None

    logger.debug("classified event kind=%s", kind.value)
    return EventEnvelope(kind=kind, payload=payload)


def decode_event(envelope: EventEnvelope) -> HookEvent:
    """Decode a classified payload into the typed event for its kind.

    The generic object is re-serialized and validated in JSON mode so that
    the typed model sees exactly what arrived on stdin. A ``null`` value
    leaves the field at its default, and fields the runner fills in are
    never taken from the payload.

    Raises:
        DecodeError: If the payload does not fit the kind's model.
    """
    model = EVENT_MODELS[envelope.kind]
    payload = {
        key: value
        for key, value in envelope.payload.items()
        if value is not None and key not in model.filled_by_runner
    }
    try:
        return model.model_validate_json(json.dumps(payload))
    except (ValidationError, RecursionError) as exc:
        raise DecodeError(f"failed to parse {model.__name__}: {exc}") from exc


def peek_event_kind(raw: str) -> EventKind | None:
    """Best-effort lookup of the event kind. Never raises."""
    try:
        return classify(raw).kind
    except (DecodeError, DispatchError):
        return None
