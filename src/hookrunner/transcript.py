"""Loader and models for Claude Code JSONL transcript files.

Claude Code writes session transcripts as JSONL with entries containing:
- type: "user", "assistant", "summary", etc.
- message: The message body (shape depends on type)
- uuid / parentUuid: Entry identifiers for threading
- sessionId: The session identifier

Stop events reference this file through ``transcript_path``. The
transcript is enrichment, not required input, so loading is best-effort:
blank and malformed lines are skipped and a missing file yields an empty
transcript.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hookrunner.errors import DecodeError, InputError

logger = logging.getLogger(__name__)


class Usage(BaseModel):
    """Token usage reported on an assistant message."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    service_tier: str = ""


class ContentBlock(BaseModel):
    """A content block: text, thinking, tool_use or tool_result."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str = ""
    id: str = ""
    name: str = ""
    input: Any = None
    tool_use_id: str = ""
    content: Any = None
    is_error: bool = False


class UserMessage(BaseModel):
    """Message body of a user entry. Content is a string or a list of blocks."""

    model_config = ConfigDict(extra="allow")

    role: str = "user"
    content: str | list[ContentBlock] = ""

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return "\n".join(block.text for block in self.content if block.type == "text")


class AssistantMessage(BaseModel):
    """Message body of an assistant entry."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    type: str = ""
    role: str = "assistant"
    model: str = ""
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    stop_sequence: str | None = None
    usage: Usage = Field(default_factory=Usage)


class TranscriptEntry(BaseModel):
    """A single line of the transcript.

    ``message`` is kept as raw JSON data; use ``get_user_message`` or
    ``get_assistant_message`` to decode it according to ``type``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    parent_uuid: str | None = Field(default=None, alias="parentUuid")
    uuid: str = ""
    is_sidechain: bool = Field(default=False, alias="isSidechain")
    user_type: str = Field(default="", alias="userType")
    cwd: str = ""
    session_id: str = Field(default="", alias="sessionId")
    version: str = ""
    type: str = ""
    message: Any = None
    timestamp: datetime | None = None
    request_id: str = Field(default="", alias="requestId")
    is_meta: bool = Field(default=False, alias="isMeta")
    tool_use_result: Any = Field(default=None, alias="toolUseResult")
    is_api_error_message: bool = Field(default=False, alias="isApiErrorMessage")

    def is_user_message(self) -> bool:
        return self.type == "user"

    def is_assistant_message(self) -> bool:
        return self.type == "assistant"

    def get_user_message(self) -> UserMessage | None:
        """Decode ``message`` as a user message.

        Returns:
            The decoded message, or None if this is not a user entry.

        Raises:
            DecodeError: If the message body is malformed.
        """
        if not self.is_user_message():
            return None
        return _decode_message(UserMessage, self.message)

    def get_assistant_message(self) -> AssistantMessage | None:
        """Decode ``message`` as an assistant message.

        Returns:
            The decoded message, or None if this is not an assistant entry.

        Raises:
            DecodeError: If the message body is malformed.
        """
        if not self.is_assistant_message():
            return None
        return _decode_message(AssistantMessage, self.message)


def _decode_message(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise DecodeError(f"failed to parse transcript message: {exc}") from exc


def read_transcript(path: str | Path) -> list[TranscriptEntry]:
    """Read a JSONL transcript file.

    Each line is parsed on its own. Blank lines and lines that fail to
    parse are skipped so that one bad line never loses the rest.

    Args:
        path: Path to the JSONL transcript file.

    Returns:
        The parsed entries in file order.

    Raises:
        InputError: If the file cannot be opened or read.
    """
    entries: list[TranscriptEntry] = []
    skipped = 0
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(TranscriptEntry.model_validate_json(line))
                except ValidationError:
                    skipped += 1
    except OSError as exc:
        raise InputError(f"failed to open transcript file: {exc}") from exc

    logger.debug(
        "read transcript path=%s entries=%d skipped=%d", path, len(entries), skipped
    )
    return entries


def load_transcript(path: str | Path | None) -> list[TranscriptEntry]:
    """Load a transcript for a Stop event. Never fails.

    Returns an empty list when no path is given or the file cannot be read.
    """
    if not path:
        return []
    try:
        return read_transcript(path)
    except InputError as exc:
        logger.debug("transcript unavailable: %s", exc)
        return []


class Transcript:
    """Turn-level helpers over a list of transcript entries.

    A turn starts at the most recent user entry; everything the assistant
    produced after it belongs to the current turn.
    """

    def __init__(self, entries: list[TranscriptEntry]) -> None:
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[TranscriptEntry]:
        return self._entries

    def last_user_index(self) -> int:
        """Find the index of the last user entry.

        Returns:
            Index of the last user entry, or -1 if not found.
        """
        for i in range(len(self._entries) - 1, -1, -1):
            if self._entries[i].is_user_message():
                return i
        return -1

    def _assistant_blocks_since_last_user(self) -> list[ContentBlock]:
        blocks: list[ContentBlock] = []
        for entry in self._entries[self.last_user_index() + 1 :]:
            if not entry.is_assistant_message():
                continue
            try:
                message = entry.get_assistant_message()
            except DecodeError:
                continue
            if message is not None:
                blocks.extend(message.content)
        return blocks

    def assistant_texts_since_last_user(self) -> list[str]:
        """Collect non-empty text blocks the assistant wrote in the current turn."""
        return [
            block.text
            for block in self._assistant_blocks_since_last_user()
            if block.type == "text" and block.text
        ]

    def tool_uses_since_last_user(self) -> list[ContentBlock]:
        """Collect tool_use blocks from the current turn."""
        return [
            block
            for block in self._assistant_blocks_since_last_user()
            if block.type == "tool_use"
        ]
