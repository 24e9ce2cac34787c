"""MCP server exposing Azure DevOps operations as tools.

Every tool call goes through ``call_tool``: arguments are checked, a fresh
connection is opened, the arguments are validated against the tool's request
model, and the operation runs. Results come back as pretty-printed JSON.
Failures come back as a normal text result prefixed with their category
("Validation Error: ...", "Not Found: ..."); no exception crosses the
protocol boundary.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from azure.devops.connection import Connection
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolRequest, CallToolResult, ServerResult, TextContent, Tool
from msrest.serialization import Model, last_restapi_key_transformer
from pydantic import BaseModel, ValidationError

from azure_devops_mcp import __version__, projects, pullrequests, repositories
from azure_devops_mcp.comments import comment_tree_to_dict
from azure_devops_mcp.config import AzureDevOpsConfig, load_config
from azure_devops_mcp.connection import get_connection
from azure_devops_mcp.errors import format_error, validation_error
from azure_devops_mcp.schemas import (
    CreatePRCommentRequest,
    GetProjectRequest,
    GetPRFilesRequest,
    GetPullRequestRequest,
    GetRepositoryRequest,
    ListPRCommentsRequest,
    ListProjectsRequest,
    ListPullRequestsRequest,
    ListRepositoriesRequest,
    ReconstructedComment,
    ReplyToPRCommentRequest,
    ToolRequest,
    UpdatePRCommentRequest,
    UpdatePRThreadStatusRequest,
)
from azure_devops_mcp.utils.logging import get_logger

# ============================================================================
# Tool Table
# ============================================================================


@dataclass(frozen=True)
class ToolDefinition:
    """A tool name bound to its request model and operation."""

    name: str
    description: str
    request_model: type[ToolRequest]
    operation: Callable[[Connection, Any], Awaitable[Any]]

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.request_model.model_json_schema(by_alias=True),
        )


TOOL_DEFINITIONS: list[ToolDefinition] = [
    # Project tools
    ToolDefinition(
        "list_projects",
        "List all projects in the Azure DevOps organization",
        ListProjectsRequest,
        projects.list_projects,
    ),
    ToolDefinition(
        "get_project",
        "Get details of a specific project",
        GetProjectRequest,
        projects.get_project,
    ),
    # Repository tools
    ToolDefinition(
        "get_repository",
        "Get details of a specific repository",
        GetRepositoryRequest,
        repositories.get_repository,
    ),
    ToolDefinition(
        "list_repositories",
        "List repositories in a project",
        ListRepositoriesRequest,
        repositories.list_repositories,
    ),
    # Pull request tools
    ToolDefinition(
        "get_pull_request",
        "Get details of a specific pull request",
        GetPullRequestRequest,
        pullrequests.get_pull_request,
    ),
    ToolDefinition(
        "list_pull_requests",
        "List pull requests in a repository",
        ListPullRequestsRequest,
        pullrequests.list_pull_requests,
    ),
    ToolDefinition(
        "list_pr_comments",
        "List all comments in a pull request",
        ListPRCommentsRequest,
        pullrequests.list_pr_comments,
    ),
    ToolDefinition(
        "update_pr_comment",
        "Update an existing pull request comment",
        UpdatePRCommentRequest,
        pullrequests.update_pr_comment,
    ),
    ToolDefinition(
        "update_pr_thread_status",
        "Update the status of a pull request thread",
        UpdatePRThreadStatusRequest,
        pullrequests.update_pr_thread_status,
    ),
    ToolDefinition(
        "create_pr_comment",
        "Create a new comment in a pull request",
        CreatePRCommentRequest,
        pullrequests.create_pr_comment,
    ),
    ToolDefinition(
        "reply_to_pr_comment",
        "Reply to an existing comment in a pull request thread",
        ReplyToPRCommentRequest,
        pullrequests.reply_to_pr_comment,
    ),
    ToolDefinition(
        "get_pr_files",
        "Get files changed in a pull request",
        GetPRFilesRequest,
        pullrequests.get_pr_files,
    ),
]

TOOLS: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}


# ============================================================================
# Configuration
# ============================================================================

_config: AzureDevOpsConfig | None = None


def configure(config: AzureDevOpsConfig | None) -> None:
    """Set the configuration used by every tool call (None re-reads the environment)."""
    global _config
    _config = config


def get_config() -> AzureDevOpsConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


# ============================================================================
# Serialization
# ============================================================================


def to_jsonable(value: Any) -> Any:
    """Convert operation results to plain JSON data.

    SDK models keep their REST (camelCase) keys; pydantic models use their
    aliases and drop unset optional fields. Comment trees are walked with an
    explicit stack since reply chains have no depth bound.
    """
    if isinstance(value, ReconstructedComment):
        return comment_tree_to_dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Model):
        return value.as_dict(key_transformer=last_restapi_key_transformer)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


_END = object()


def dump_json(value: Any, indent: int = 2) -> str:
    """Same text as ``json.dumps(value, indent=indent, default=str)``, without recursion.

    ``json.dumps`` descends one stack frame per nesting level and fails on
    long reply chains. Containers are tracked on an explicit stack instead;
    scalars and keys still go through ``json.dumps``.
    """
    chunks: list[str] = []
    # [items iterator, closing bracket, is object, items written]
    stack: list[list[Any]] = []

    def write(item: Any) -> None:
        if isinstance(item, dict):
            if not item:
                chunks.append("{}")
                return
            chunks.append("{")
            stack.append([iter(item.items()), "}", True, 0])
        elif isinstance(item, (list, tuple)):
            if not item:
                chunks.append("[]")
                return
            chunks.append("[")
            stack.append([iter(item), "]", False, 0])
        else:
            chunks.append(json.dumps(item, default=str))

    write(value)
    while stack:
        frame = stack[-1]
        items, closer, is_object, written = frame
        entry = next(items, _END)
        if entry is _END:
            stack.pop()
            chunks.append("\n" + " " * (indent * len(stack)) + closer)
            continue

        chunks.append(("," if written else "") + "\n" + " " * (indent * len(stack)))
        frame[3] = written + 1
        if is_object:
            key, entry = entry
            chunks.append(json.dumps(key if isinstance(key, str) else str(key)) + ": ")
        write(entry)

    return "".join(chunks)


def serialize_result(value: Any) -> str:
    return dump_json(to_jsonable(value), indent=2)


def parse_arguments(request_model: type[ToolRequest], arguments: Any) -> ToolRequest:
    """Validate raw tool arguments.

    Raises:
        AzureDevOpsError: VALIDATION kind with pydantic's field-level details
    """
    try:
        return request_model.model_validate(arguments)
    except ValidationError as e:
        raise validation_error(f"Invalid input: {e}") from e


# ============================================================================
# MCP Server
# ============================================================================


mcp = Server("azure-devops-mcp", version=__version__)


@mcp.list_tools()
async def list_tools() -> list[Tool]:
    """List all available MCP tools."""
    return [tool.to_tool() for tool in TOOL_DEFINITIONS]


# Arguments are validated here against the request models, so the SDK's own
# input-schema check is switched off to keep error formatting in one place.
@mcp.call_tool(validate_input=False)
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle MCP tool calls."""
    logger = get_logger()
    try:
        if arguments is None:
            raise validation_error("Arguments are required")

        connection = await get_connection(get_config())

        tool = TOOLS.get(name)
        if tool is None:
            raise ValueError(f"Unknown tool: {name}")

        req = parse_arguments(tool.request_model, arguments)
        logger.debug(f"Dispatching {name}", component="Server")
        result = await tool.operation(connection, req)
        return [TextContent(type="text", text=serialize_result(result))]
    except Exception as e:
        logger.exception(f"Error handling tool call {name}", e)
        return [TextContent(type="text", text=format_error(e))]


_dispatch_call_tool_request = mcp.request_handlers[CallToolRequest]


async def handle_call_tool_request(req: CallToolRequest) -> ServerResult:
    """Protocol handler for tools/call.

    The SDK handler turns absent arguments into ``{}``, so a request without
    arguments is sent to ``call_tool`` here with ``None`` instead.
    """
    if req.params.arguments is None:
        content = await call_tool(req.params.name, None)
        return ServerResult(CallToolResult(content=content))
    return await _dispatch_call_tool_request(req)


mcp.request_handlers[CallToolRequest] = handle_call_tool_request


# ============================================================================
# Main Entry Point
# ============================================================================


async def main() -> None:
    """Run the MCP server over stdio."""
    async with stdio_server() as (read_stream, write_stream):
        await mcp.run(read_stream, write_stream, mcp.create_initialization_options())


def run_server(config: AzureDevOpsConfig | None = None) -> None:
    """Synchronous entry point for running the server."""
    if config is not None:
        configure(config)
    get_logger().info(f"Azure DevOps MCP server {__version__} running on stdio", component="Server")
    asyncio.run(main())


if __name__ == "__main__":
    run_server()
