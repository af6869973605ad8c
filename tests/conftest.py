import json
import os
from pathlib import Path
from typing import Any, Callable

import pytest

from hookrunner.config import RunnerConfig
from hookrunner.runner import Runner


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep HOOKRUNNER_* variables and a stray .env file out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("HOOKRUNNER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config() -> RunnerConfig:
    """Provide a default runner configuration."""
    return RunnerConfig()


@pytest.fixture
def make_runner(config: RunnerConfig) -> Callable[..., Runner]:
    """Build runners that never read config from the environment."""

    def factory(**slots: Any) -> Runner:
        return Runner(config=config, **slots)

    return factory


@pytest.fixture
def pre_tool_use_payload() -> str:
    """Provide a PreToolUse payload for a Bash call."""
    return json.dumps(
        {
            "session_id": "sess-1",
            "transcript_path": "",
            "hook_event_name": "PreToolUse",
            "tool_name": "Bash",
            "tool_input": {"command": "ls"},
        }
    )


@pytest.fixture
def post_tool_use_payload() -> str:
    """Provide a PostToolUse payload for a Bash call."""
    return json.dumps(
        {
            "session_id": "sess-1",
            "hook_event_name": "PostToolUse",
            "tool_name": "Bash",
            "tool_input": {"command": "ls"},
            "tool_response": {"output": "README.md\n", "exit_code": 0},
        }
    )


@pytest.fixture
def notification_payload() -> str:
    """Provide a Notification payload."""
    return json.dumps(
        {
            "session_id": "sess-1",
            "hook_event_name": "Notification",
            "notification_message": "Claude needs your permission",
        }
    )


@pytest.fixture
def stop_payload() -> Callable[..., str]:
    """Build Stop payloads."""

    def factory(stop_hook_active: bool = False, transcript_path: str = "") -> str:
        return json.dumps(
            {
                "session_id": "sess-1",
                "hook_event_name": "Stop",
                "stop_hook_active": stop_hook_active,
                "transcript_path": transcript_path,
            }
        )

    return factory


@pytest.fixture
def transcript_lines() -> list[dict[str, Any]]:
    """Provide a short conversation in JSONL line format."""
    return [
        {
            "type": "user",
            "uuid": "u1",
            "sessionId": "sess-1",
            "message": {"role": "user", "content": "Fix the failing test"},
        },
        {
            "type": "assistant",
            "uuid": "a1",
            "parentUuid": "u1",
            "sessionId": "sess-1",
            "message": {
                "id": "msg_1",
                "role": "assistant",
                "model": "claude",
                "content": [
                    {"type": "text", "text": "Looking at the test."},
                    {
                        "type": "tool_use",
                        "id": "toolu_1",
                        "name": "Read",
                        "input": {"file_path": "/tmp/test_x.py"},
                    },
                ],
            },
        },
        {
            "type": "assistant",
            "uuid": "a2",
            "parentUuid": "a1",
            "sessionId": "sess-1",
            "message": {
                "role": "assistant",
                "content": [{"type": "text", "text": "Fixed."}],
            },
        },
    ]


@pytest.fixture
def transcript_file(tmp_path: Path, transcript_lines: list[dict[str, Any]]) -> Path:
    """Write the sample conversation to a JSONL file."""
    path = tmp_path / "transcript.jsonl"
    path.write_text("\n".join(json.dumps(line) for line in transcript_lines) + "\n")
    return path
