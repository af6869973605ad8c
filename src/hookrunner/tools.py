"""Typed payloads for Claude Code's built-in tools.

PreToolUse and PostToolUse events carry ``tool_input`` (and, after the
call, ``tool_response``) as free-form JSON. The models here give those
payloads a shape; ``parse_tool_input`` picks the model by tool name.

MCP tools are named ``mcp__<server>__<tool>`` and have no fixed schema,
so they are exposed as ``MCPTool`` / ``MCPToolOutput`` wrappers around the
raw payload.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MCP_PREFIX = "mcp__"


class ToolModel(BaseModel):
    """Base for tool payloads. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")


# Tool inputs


class BashInput(ToolModel):
    command: str
    timeout: int | None = Field(default=None, le=600000)
    description: str = ""


class EditInput(ToolModel):
    file_path: str
    old_string: str
    new_string: str
    replace_all: bool = False


class EditEntry(ToolModel):
    """A single edit operation in MultiEdit."""

    old_string: str
    new_string: str
    replace_all: bool = False


class MultiEditInput(ToolModel):
    file_path: str
    edits: list[EditEntry] = Field(min_length=1)


class WriteInput(ToolModel):
    file_path: str
    content: str


class ReadInput(ToolModel):
    file_path: str
    limit: int | None = None
    offset: int | None = None


class GlobInput(ToolModel):
    pattern: str
    path: str = ""


class GrepInput(ToolModel):
    pattern: str
    path: str = ""
    include: str = ""


class LSInput(ToolModel):
    path: str
    ignore: list[str] = Field(default_factory=list)


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TodoItem(ToolModel):
    content: str = Field(min_length=1)
    status: TodoStatus
    priority: TodoPriority
    id: str


class TodoWriteInput(ToolModel):
    todos: list[TodoItem] = Field(min_length=1)


class TodoReadInput(ToolModel):
    pass


class NotebookReadInput(ToolModel):
    notebook_path: str
    cell_id: str = ""


class NotebookEditInput(ToolModel):
    notebook_path: str
    new_source: str
    cell_id: str = ""
    cell_type: Literal["code", "markdown"] | None = None
    edit_mode: Literal["replace", "insert", "delete"] | None = None


class WebFetchInput(ToolModel):
    url: str
    prompt: str


class WebSearchInput(ToolModel):
    query: str = Field(min_length=2)
    allowed_domains: list[str] = Field(default_factory=list)
    blocked_domains: list[str] = Field(default_factory=list)


class TaskInput(ToolModel):
    description: str
    prompt: str


class ExitPlanModeInput(ToolModel):
    plan: str


# Tool outputs


class BashOutput(ToolModel):
    output: str = ""
    exit_code: int = 0


class EditOutput(ToolModel):
    success: bool = False


class ReadOutput(ToolModel):
    content: str = ""


class GlobOutput(ToolModel):
    files: list[str] = Field(default_factory=list)


class GrepOutput(ToolModel):
    files: list[str] = Field(default_factory=list)


class FileInfo(ToolModel):
    name: str
    is_dir: bool = False
    size: int = 0


class LSOutput(ToolModel):
    files: list[FileInfo] = Field(default_factory=list)


# MCP tools


class MCPTool(BaseModel):
    """An MCP tool call split into server and tool names."""

    mcp_name: str
    tool_name: str
    raw_input: Any = None


class MCPToolOutput(BaseModel):
    """Output from an MCP tool call."""

    mcp_name: str
    tool_name: str
    raw_output: Any = None


TOOL_INPUTS: dict[str, type[ToolModel]] = {
    "Bash": BashInput,
    "Edit": EditInput,
    "MultiEdit": MultiEditInput,
    "Write": WriteInput,
    "Read": ReadInput,
    "Glob": GlobInput,
    "Grep": GrepInput,
    "LS": LSInput,
    "TodoWrite": TodoWriteInput,
    "TodoRead": TodoReadInput,
    "NotebookRead": NotebookReadInput,
    "NotebookEdit": NotebookEditInput,
    "WebFetch": WebFetchInput,
    "WebSearch": WebSearchInput,
    "Task": TaskInput,
    "ExitPlanMode": ExitPlanModeInput,
}

TOOL_OUTPUTS: dict[str, type[ToolModel]] = {
    "Bash": BashOutput,
    "Edit": EditOutput,
    "Read": ReadOutput,
    "Glob": GlobOutput,
    "Grep": GrepOutput,
    "LS": LSOutput,
}


def is_mcp_tool(tool_name: str) -> bool:
    """Check whether a tool name follows the ``mcp__<server>__<tool>`` form."""
    return tool_name.startswith(MCP_PREFIX)


def parse_mcp_tool_name(tool_name: str) -> tuple[str, str]:
    """Split an MCP tool name into (server, tool).

    The tool part may itself contain ``__``.

    Raises:
        ValueError: If the name is not an MCP tool name.
    """
    if not is_mcp_tool(tool_name):
        raise ValueError(f"not an MCP tool: {tool_name}")

    parts = tool_name.split("__", 2)
    if len(parts) < 3 or not parts[1] or not parts[2]:
        raise ValueError(f"invalid MCP tool name format: {tool_name}")
    return parts[1], parts[2]


def parse_tool_input(tool_name: str, data: Any) -> ToolModel | Any:
    """Validate a tool input against the model registered for the tool.

    Tools without a registered model (MCP tools, newer built-ins) get the
    raw payload back unchanged.

    Raises:
        pydantic.ValidationError: If the payload does not fit the model.
    """
    model = TOOL_INPUTS.get(tool_name)
    if model is None:
        return data
    return model.model_validate(data if data is not None else {})


def parse_tool_output(tool_name: str, data: Any) -> ToolModel | Any:
    """Validate a tool response against the model registered for the tool."""
    model = TOOL_OUTPUTS.get(tool_name)
    if model is None:
        return data
    return model.model_validate(data if data is not None else {})
